from typing import Any


def ok(data: Any = None, message: str | None = None) -> dict:
    out: dict = {"success": True}
    if data is not None:
        out["data"] = data
    if message:
        out["message"] = message
    return out


def failure(error: str) -> dict:
    return {"success": False, "error": error}
