"""Signup, login and 2FA verification.

    Unauthenticated -> CredentialsChecked -> DeviceTrusted -> SessionIssued
                                          -> DeviceUntrusted -> OTPPending
    OTPPending -> OTPVerified -> SessionIssued

Signup always goes through 2FA. Emails are compared lower-cased.
"""
from __future__ import annotations

import logging

from fastapi.concurrency import run_in_threadpool
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from blinky.models.user import User
from blinky.utils.constants import ROLE_USER
from .device_trust import is_trusted, remember_device
from .errors import Conflict, InternalError, Unauthorized
from .mailer import EmailSender
from .otp import consume_otp, issue_otp
from .passwords import burn_verify_time, hash_password, verify_password
from .sessions import SessionSigner
from .tokens import new_device_token

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"


def normalize_email(email: str) -> str:
    return email.strip().lower()


def find_user_by_email(db: Session, email: str) -> User | None:
    return db.execute(select(User).where(User.email == normalize_email(email))).scalars().first()


def two_factor_required(user: User, message: str, *, include_name: bool = False) -> dict:
    out = {"requires2FA": True, "email": user.email, "message": message}
    if include_name:
        out["name"] = user.name
    return out


def session_payload(user: User, token: str, device_token: str | None) -> dict:
    out = {
        "id": str(user.id),
        "name": user.name,
        "email": user.email,
        "token": token,
        "role": user.role,
    }
    if device_token:
        out["deviceToken"] = device_token
    return out


def create_user(db: Session, *, email: str, password: str, name: str) -> User:
    email = normalize_email(email)

    if find_user_by_email(db, email):
        raise Conflict("User with this email already exists")

    try:
        password_hash = hash_password(password)
    except (ValueError, TypeError) as e:
        raise InternalError("Failed to hash the password") from e

    user = User(email=email, password_hash=password_hash, name=name, role=ROLE_USER)
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        # lost the race against a concurrent signup for the same email
        db.rollback()
        raise Conflict("User with this email already exists")
    except SQLAlchemyError as e:
        db.rollback()
        raise InternalError("Failed to create user") from e
    db.refresh(user)
    logger.info("user %s signed up", user.id)
    return user


def check_credentials(db: Session, email: str, password: str) -> User:
    user = find_user_by_email(db, email)
    if not user:
        burn_verify_time()
        raise Unauthorized(INVALID_CREDENTIALS)
    if not verify_password(password, user.password_hash):
        raise Unauthorized(INVALID_CREDENTIALS)
    return user


async def signup(db: Session, notifier: EmailSender, *, email: str, password: str, name: str) -> dict:
    user = await run_in_threadpool(create_user, db, email=email, password=password, name=name)

    # a brand new account has no trusted device yet
    await issue_otp(
        db,
        user,
        notifier,
        failure_message="Account created but failed to send verification email. Please try logging in.",
    )
    return two_factor_required(user, "Account created! Verification code sent to your email", include_name=True)


async def login(
    db: Session,
    signer: SessionSigner,
    notifier: EmailSender,
    *,
    email: str,
    password: str,
    device_token: str | None = None,
) -> dict:
    user = await run_in_threadpool(check_credentials, db, email, password)

    if await run_in_threadpool(is_trusted, db, user.id, device_token):
        logger.info("user %s logged in from a trusted device", user.id)
        return session_payload(user, signer.issue(user.id), device_token)

    await issue_otp(db, user, notifier)
    return two_factor_required(user, "Verification code sent to your email")


def verify_2fa(
    db: Session,
    signer: SessionSigner,
    *,
    email: str,
    code: str,
    device_token: str | None = None,
) -> dict:
    user = find_user_by_email(db, email)
    if not user:
        raise Unauthorized("Invalid verification attempt")

    consume_otp(db, user, code)
    token = signer.issue(user.id)

    device_token = device_token or new_device_token()
    try:
        remember_device(db, user.id, device_token)
    except SQLAlchemyError:
        # the user already holds a valid JWT; they will just see 2FA again next time
        db.rollback()
        logger.warning("failed to store device session for user %s", user.id, exc_info=True)

    logger.info("user %s completed 2fa", user.id)
    return session_payload(user, token, device_token)
