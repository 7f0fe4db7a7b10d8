import base64
import secrets
from datetime import datetime, timedelta, timezone

from blinky.utils.constants import DEVICE_TOKEN_BYTES, OTP_DIGITS, SHORT_CODE_LENGTH

def utcnow() -> datetime:
    return datetime.now(timezone.utc)

def as_utc(value: datetime) -> datetime:
    # SQLite hands timestamps back naive; everything we store is UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)

def expires_in(now: datetime, *, minutes: int = 0, days: int = 0) -> datetime:
    return now + timedelta(minutes=minutes, days=days)

def new_otp_code() -> str:
    # uniform draw over the whole digit space, zero-padded
    return f"{secrets.randbelow(10 ** OTP_DIGITS):0{OTP_DIGITS}d}"

def new_device_token() -> str:
    return secrets.token_hex(DEVICE_TOKEN_BYTES)

def new_short_code() -> str:
    raw = base64.urlsafe_b64encode(secrets.token_bytes(6)).decode("ascii")
    return raw[:SHORT_CODE_LENGTH]
