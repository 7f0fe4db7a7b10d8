from __future__ import annotations

import logging
from urllib.parse import urlencode, urlsplit

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from blinky.models.link import Link
from blinky.utils.constants import FAVICON_SERVICE
from .errors import Conflict, Forbidden, NotFound
from .tokens import new_short_code, utcnow

logger = logging.getLogger(__name__)


def favicon_url(original_url: str) -> str:
    try:
        host = urlsplit(original_url).netloc
    except ValueError:
        return ""
    if not host:
        return ""
    return f"{FAVICON_SERVICE}?{urlencode({'domain': host, 'sz': 128})}"


def list_links(db: Session, user_id) -> list[Link]:
    q = select(Link).where(Link.user_id == user_id).order_by(Link.created_at.desc(), Link.id.desc())
    return list(db.execute(q).scalars().all())


def create_link(db: Session, user_id, original_url: str, custom_code: str | None = None) -> Link:
    short_code = custom_code or new_short_code()

    exists = db.execute(select(Link.id).where(Link.short_code == short_code)).first()
    if exists:
        raise Conflict("Short code already exists")

    link = Link(
        short_code=short_code,
        original_url=original_url,
        favicon=favicon_url(original_url),
        clicks=0,
        user_id=user_id,
    )
    db.add(link)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise Conflict("Short code already exists")
    db.refresh(link)
    return link


def get_owned_link(db: Session, link_id: int, user_id, *, action: str = "access") -> Link:
    link = db.get(Link, link_id)
    if not link:
        raise NotFound("Link not found")
    if link.user_id != user_id:
        raise Forbidden(f"You don't have permission to {action} this link")
    return link


def delete_link(db: Session, link_id: int, user_id) -> None:
    link = get_owned_link(db, link_id, user_id, action="delete")
    db.delete(link)
    db.commit()
    logger.info("link %s deleted by user %s", link_id, user_id)


def resolve_short_code(db: Session, short_code: str) -> Link:
    """Look up ``short_code`` and count the click."""
    link = db.execute(select(Link).where(Link.short_code == short_code)).scalars().first()
    if not link:
        raise NotFound("Link not found")

    db.execute(
        update(Link)
        .where(Link.id == link.id)
        .values(clicks=Link.clicks + 1, last_clicked_at=utcnow())
        .execution_options(synchronize_session=False)
    )
    db.commit()
    db.refresh(link)
    return link
