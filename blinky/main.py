import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from blinky.config import Settings, configure_logging, load_settings
from blinky.database import Base, configure_engine
from blinky.routers import links, redirect, users
from blinky.services.errors import InternalError, ServiceError, ValidationError
from blinky.services.mailer import EmailSender
from blinky.services.sessions import SessionSigner
from blinky.utils.responses import failure
import blinky.models  # noqa: F401  (registers tables on Base.metadata)

logger = logging.getLogger(__name__)


def _validation_message(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return "Invalid input: " + "; ".join(parts)


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or load_settings()
    configure_logging(settings.log_level)

    engine = configure_engine(settings.database_url)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if settings.auto_migrate:
            logger.info("running database migrations")
            Base.metadata.create_all(engine)
        yield

    app = FastAPI(title="Blinky", lifespan=lifespan)

    app.state.settings = settings
    app.state.signer = SessionSigner(settings.secret_key, algorithm=settings.jwt_algorithm)
    app.state.notifier = EmailSender(settings.resend_api_key, settings.resend_from)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(ServiceError)
    async def handle_service_error(request: Request, exc: ServiceError):
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return JSONResponse(status_code=exc.status_code, content=failure(exc.message))

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError):
        err = ValidationError(_validation_message(exc))
        return JSONResponse(status_code=err.status_code, content=failure(err.message))

    @app.exception_handler(SQLAlchemyError)
    async def handle_db_error(request: Request, exc: SQLAlchemyError):
        logger.exception("database error on %s %s", request.method, request.url.path, exc_info=exc)
        err = InternalError("Database error")
        return JSONResponse(status_code=err.status_code, content=failure(err.message))

    app.include_router(users.router)
    app.include_router(links.router)
    app.include_router(redirect.router)

    @app.get("/health")
    def health_check():
        return {"message": "API is running"}

    return app


app = create_app()
