from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session as DbSession

from blinky.database import get_db
from blinky.schemas.auth import LoginIn, SignupIn, Verify2FAIn
from blinky.services import auth_flow
from blinky.services.authz import Principal, get_notifier, get_principal, get_signer
from blinky.services.mailer import EmailSender
from blinky.services.sessions import SessionSigner
from blinky.utils.responses import ok

router = APIRouter(prefix="/api/v1/users", tags=["users"])


@router.post("", status_code=201)
async def signup(
    payload: SignupIn,
    db: DbSession = Depends(get_db),
    notifier: EmailSender = Depends(get_notifier),
):
    data = await auth_flow.signup(db, notifier, email=payload.email, password=payload.password, name=payload.name)
    return ok(data)


@router.post("/login")
async def login(
    payload: LoginIn,
    db: DbSession = Depends(get_db),
    signer: SessionSigner = Depends(get_signer),
    notifier: EmailSender = Depends(get_notifier),
):
    data = await auth_flow.login(
        db,
        signer,
        notifier,
        email=payload.email,
        password=payload.password,
        device_token=payload.device_token,
    )
    return ok(data)


@router.post("/verify-2fa")
def verify_2fa(
    payload: Verify2FAIn,
    db: DbSession = Depends(get_db),
    signer: SessionSigner = Depends(get_signer),
):
    data = auth_flow.verify_2fa(db, signer, email=payload.email, code=payload.code, device_token=payload.device_token)
    return ok(data)


@router.get("/me")
def me(principal: Principal = Depends(get_principal)):
    return ok({
        "id": str(principal.id),
        "name": principal.name,
        "email": principal.email,
        "role": principal.role,
        "createdAt": principal.created_at.isoformat() if principal.created_at else None,
    })
