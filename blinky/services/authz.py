from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime

from fastapi import Depends, Request
from sqlalchemy.orm import Session as DbSession

from blinky.database import get_db
from blinky.models.user import User
from .errors import Unauthorized
from .mailer import EmailSender
from .sessions import SessionSigner


@dataclass(frozen=True)
class Principal:
    """The authenticated caller, handed to handlers that require a bearer token."""

    id: uuid.UUID
    email: str
    name: str
    role: str
    created_at: datetime | None

    @classmethod
    def from_user(cls, user: User) -> "Principal":
        return cls(id=user.id, email=user.email, name=user.name, role=user.role, created_at=user.created_at)


def get_signer(req: Request) -> SessionSigner:
    return req.app.state.signer


def get_notifier(req: Request) -> EmailSender:
    return req.app.state.notifier


def bearer_token(req: Request) -> str:
    header = req.headers.get("authorization")
    if not header:
        raise Unauthorized("Unauthorized - No token provided")

    scheme, _, token = header.partition(" ")
    if scheme != "Bearer" or not token.strip():
        raise Unauthorized("Unauthorized - Invalid token format. Use 'Bearer <token>'")
    return token.strip()


def get_principal(
    req: Request,
    db: DbSession = Depends(get_db),
    signer: SessionSigner = Depends(get_signer),
) -> Principal:
    user_id = signer.decode(bearer_token(req))

    user = db.get(User, user_id)
    if not user:
        raise Unauthorized("Unauthorized - User not found")
    return Principal.from_user(user)
