from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from blinky.database import get_db
from blinky.services.links import resolve_short_code
from blinky.utils.responses import ok

router = APIRouter(tags=["redirect"])

# Public; the frontend turns this into the actual browser redirect.
@router.get("/r/{short_code}")
def redirect_link(short_code: str, db: Session = Depends(get_db)):
    link = resolve_short_code(db, short_code)
    return ok({"originalUrl": link.original_url})
