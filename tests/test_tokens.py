import re
from datetime import datetime, timedelta, timezone

from blinky.services import tokens


def test_otp_code_is_six_digits():
    for _ in range(50):
        code = tokens.new_otp_code()
        assert re.fullmatch(r"\d{6}", code)


def test_otp_code_is_zero_padded(monkeypatch):
    monkeypatch.setattr(tokens.secrets, "randbelow", lambda n: 42)
    assert tokens.new_otp_code() == "000042"


def test_otp_code_draws_over_full_range(monkeypatch):
    seen = []
    monkeypatch.setattr(tokens.secrets, "randbelow", lambda n: seen.append(n) or n - 1)
    assert tokens.new_otp_code() == "999999"
    assert seen == [1_000_000]


def test_device_token_is_32_bytes_hex():
    t = tokens.new_device_token()
    assert re.fullmatch(r"[0-9a-f]{64}", t)
    assert t != tokens.new_device_token()


def test_short_code_is_seven_urlsafe_chars():
    code = tokens.new_short_code()
    assert re.fullmatch(r"[A-Za-z0-9_-]{7}", code)


def test_as_utc_treats_naive_values_as_utc():
    naive = datetime(2026, 1, 1, 12, 0)
    assert tokens.as_utc(naive) == datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)

    plus2 = datetime(2026, 1, 1, 14, 0, tzinfo=timezone(timedelta(hours=2)))
    assert tokens.as_utc(plus2) == datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)
