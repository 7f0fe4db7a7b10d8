from __future__ import annotations

from datetime import datetime

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from blinky.models.device_session import DeviceSession
from blinky.utils.constants import DEVICE_SESSION_TTL_DAYS
from .tokens import as_utc, expires_in, utcnow


def is_trusted(db: Session, user_id, device_token: str | None, *, now: datetime | None = None) -> bool:
    if not device_token:
        return False

    now = now or utcnow()
    sess = db.execute(
        select(DeviceSession).where(
            DeviceSession.user_id == user_id,
            DeviceSession.device_token == device_token,
        )
    ).scalars().first()
    if not sess:
        return False
    return now < as_utc(sess.expires_at)


def remember_device(db: Session, user_id, device_token: str, *, now: datetime | None = None) -> DeviceSession:
    """(Re)bind ``device_token`` to ``user_id`` for the next week.

    The token is unique across all users, so any earlier row holding it is
    dropped first, whoever owned it.
    """
    now = now or utcnow()

    db.execute(delete(DeviceSession).where(DeviceSession.device_token == device_token))

    sess = DeviceSession(
        user_id=user_id,
        device_token=device_token,
        created_at=now,
        expires_at=expires_in(now, days=DEVICE_SESSION_TTL_DAYS),
    )
    db.add(sess)
    db.commit()
    return sess
