import asyncio
import threading

from blinky.services import auth_flow
from blinky.services.passwords import hash_password, verify_password


def _record_thread(monkeypatch, name, real):
    threads = []

    def spy(*args, **kwargs):
        threads.append(threading.get_ident())
        return real(*args, **kwargs)

    monkeypatch.setattr(auth_flow, name, spy)
    return threads


def _run_on_loop(coro_fn):
    """Runs the coroutine and returns (loop thread id, result)."""

    async def main():
        return threading.get_ident(), await coro_fn()

    return asyncio.run(main())


def test_signup_hashes_off_the_event_loop(db, notifier, monkeypatch):
    threads = _record_thread(monkeypatch, "hash_password", hash_password)

    loop_thread, out = _run_on_loop(
        lambda: auth_flow.signup(db, notifier, email="Ann@Blinky.io", password="secret123", name="Ann")
    )

    assert out["requires2FA"] is True
    assert out["email"] == "ann@blinky.io"
    assert len(threads) == 1
    assert threads[0] != loop_thread
    assert len(notifier.sent) == 1


def test_login_verifies_password_off_the_event_loop(db, notifier, signer, make_user, monkeypatch):
    make_user()
    threads = _record_thread(monkeypatch, "verify_password", verify_password)

    loop_thread, out = _run_on_loop(
        lambda: auth_flow.login(db, signer, notifier, email="ann@blinky.io", password="secret123")
    )

    assert out["requires2FA"] is True
    assert len(threads) == 1
    assert threads[0] != loop_thread
