import uuid
from datetime import timedelta

import jwt
import pytest

from blinky.services.errors import InternalError, Unauthorized
from blinky.services.sessions import SessionSigner
from blinky.services.tokens import utcnow
from conftest import SECRET


def test_issue_contains_subject_and_thirty_day_expiry(signer):
    user_id = uuid.uuid4()
    now = utcnow()
    token = signer.issue(user_id, now=now)

    claims = jwt.decode(token, SECRET, algorithms=["HS256"])
    assert claims["sub"] == str(user_id)
    assert claims["exp"] - claims["iat"] == int(timedelta(days=30).total_seconds())


def test_decode_returns_user_id(signer):
    user_id = uuid.uuid4()
    assert signer.decode(signer.issue(user_id)) == user_id


def test_decode_rejects_expired_token(signer):
    token = signer.issue(uuid.uuid4(), now=utcnow() - timedelta(days=31))
    with pytest.raises(Unauthorized, match="Token expired"):
        signer.decode(token)


def test_decode_rejects_foreign_signature(signer):
    other = SessionSigner("another-secret-key-with-enough-length-for-hs256")
    with pytest.raises(Unauthorized, match="Invalid token"):
        signer.decode(other.issue(uuid.uuid4()))


def test_decode_rejects_garbage(signer):
    with pytest.raises(Unauthorized):
        signer.decode("not-a-jwt")


def test_decode_rejects_non_uuid_subject(signer):
    token = jwt.encode({"sub": "42", "exp": utcnow() + timedelta(days=1)}, SECRET, algorithm="HS256")
    with pytest.raises(Unauthorized, match="claims"):
        signer.decode(token)


def test_signer_requires_secret():
    with pytest.raises(ValueError):
        SessionSigner("")


def test_signing_failure_is_internal_error():
    broken = SessionSigner(SECRET, algorithm="NOPE")
    with pytest.raises(InternalError, match="Failed to create token"):
        broken.issue(uuid.uuid4())
