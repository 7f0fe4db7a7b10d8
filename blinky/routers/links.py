from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from blinky.database import get_db
from blinky.schemas.link import LinkCreate, LinkOut, LinkStatsOut
from blinky.services import links
from blinky.services.authz import Principal, get_principal
from blinky.utils.responses import ok

router = APIRouter(prefix="/api/v1/links", tags=["links"])


def _out(link) -> dict:
    return LinkOut.model_validate(link).model_dump(mode="json", by_alias=True)


@router.get("")
def list_links(principal: Principal = Depends(get_principal), db: Session = Depends(get_db)):
    return ok([_out(link) for link in links.list_links(db, principal.id)])


@router.post("", status_code=201)
def create_link(payload: LinkCreate, principal: Principal = Depends(get_principal), db: Session = Depends(get_db)):
    link = links.create_link(db, principal.id, payload.original_url, payload.custom_code)
    return ok(_out(link))


@router.delete("/{link_id}")
def delete_link(link_id: int, principal: Principal = Depends(get_principal), db: Session = Depends(get_db)):
    links.delete_link(db, link_id, principal.id)
    return ok(message="Link deleted successfully")


@router.get("/{link_id}/stats")
def link_stats(link_id: int, principal: Principal = Depends(get_principal), db: Session = Depends(get_db)):
    link = links.get_owned_link(db, link_id, principal.id, action="view stats for")
    stats = LinkStatsOut(clicks=link.clicks, last_clicked=link.last_clicked_at)
    return ok(stats.model_dump(mode="json", by_alias=True))
