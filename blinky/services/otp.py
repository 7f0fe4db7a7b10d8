"""One-time codes proving possession of the account email.

Issuing a code burns every earlier unused code of the same user, so at most
one code is usable at verification time. A code verifies at most once.
"""
from __future__ import annotations

import logging
from datetime import datetime

from fastapi.concurrency import run_in_threadpool
from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from blinky.models.otp import Otp
from blinky.models.user import User
from blinky.utils.constants import OTP_MAX_ATTEMPTS, OTP_TTL_MINUTES
from .errors import DeliveryError, Unauthorized
from .mailer import EmailSender, NotificationError
from .tokens import as_utc, expires_in, new_otp_code, utcnow

logger = logging.getLogger(__name__)


def is_expired(otp: Otp, now: datetime) -> bool:
    return now > as_utc(otp.expires_at)


def invalidate_unused(db: Session, user_id) -> int:
    res = db.execute(
        update(Otp)
        .where(Otp.user_id == user_id, Otp.used == False)  # noqa
        .values(used=True)
    )
    db.commit()
    return res.rowcount


def create_otp(db: Session, user: User, *, now: datetime | None = None) -> Otp:
    now = now or utcnow()

    try:
        invalidate_unused(db, user.id)
    except SQLAlchemyError:
        # older codes may stay usable until they expire; not worth failing the login for
        db.rollback()
        logger.exception("failed to invalidate previous otps for user %s", user.id)

    otp = Otp(
        user_id=user.id,
        code=new_otp_code(),
        used=False,
        attempts=0,
        created_at=now,
        expires_at=expires_in(now, minutes=OTP_TTL_MINUTES),
    )
    db.add(otp)
    db.commit()
    db.refresh(otp)
    return otp


async def issue_otp(
    db: Session,
    user: User,
    notifier: EmailSender,
    *,
    now: datetime | None = None,
    failure_message: str | None = None,
) -> Otp:
    """Store a fresh code for ``user`` and email it.

    The stored code is not rolled back when delivery fails; the caller only
    learns that the email never left.
    """
    otp = await run_in_threadpool(create_otp, db, user, now=now)
    try:
        await notifier.send_otp(user.email, user.name, otp.code)
    except NotificationError as e:
        logger.error("otp delivery failed for user %s: %s", user.id, e)
        raise DeliveryError(failure_message) from e
    return otp


def find_unused(db: Session, user_id, code: str) -> Otp | None:
    q = (
        select(Otp)
        .where(Otp.user_id == user_id, Otp.code == code, Otp.used == False)  # noqa
        .order_by(Otp.created_at.desc(), Otp.id.desc())
        .limit(1)
    )
    return db.execute(q).scalars().first()


def latest_pending(db: Session, user_id, *, now: datetime) -> Otp | None:
    q = (
        select(Otp)
        .where(Otp.user_id == user_id, Otp.used == False)  # noqa
        .order_by(Otp.created_at.desc(), Otp.id.desc())
        .limit(1)
    )
    otp = db.execute(q).scalars().first()
    if otp is None or is_expired(otp, now):
        return None
    return otp


def _count_failed_attempt(db: Session, user_id, *, now: datetime) -> bool:
    """Returns True when the pending code was burned by this attempt."""
    pending = latest_pending(db, user_id, now=now)
    if pending is None:
        return False

    pending.attempts += 1
    burned = pending.attempts >= OTP_MAX_ATTEMPTS
    if burned:
        pending.used = True
    db.commit()
    return burned


def consume_otp(db: Session, user: User, code: str, *, now: datetime | None = None) -> Otp:
    now = now or utcnow()

    otp = find_unused(db, user.id, code)
    if otp is None:
        if _count_failed_attempt(db, user.id, now=now):
            raise Unauthorized("Too many attempts. Please request a new code.")
        raise Unauthorized("Invalid verification code")

    # an expired code is left unused; only a successful check marks it
    if is_expired(otp, now):
        raise Unauthorized("Verification code has expired")

    otp.used = True
    db.commit()
    return otp
