import os

# Settings are read when blinky.main is imported
os.environ.setdefault("SECRET_KEY", "test-secret-key-with-enough-length-for-hs256")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("AUTO_MIGRATE", "false")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, func, select
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import blinky.models  # noqa: F401
from blinky.config import Settings
from blinky.database import Base, get_db
from blinky.main import create_app
from blinky.models.otp import Otp
from blinky.models.user import User
from blinky.services.mailer import NotificationError
from blinky.services.passwords import hash_password
from blinky.services.sessions import SessionSigner

SECRET = "test-secret-key-with-enough-length-for-hs256"


class FakeNotifier:
    """Records codes instead of emailing them."""

    def __init__(self):
        self.sent = []
        self.fail = False

    async def send_otp(self, to: str, name: str, code: str) -> None:
        if self.fail:
            raise NotificationError("resend API error: status 503")
        self.sent.append({"to": to, "name": name, "code": code})

    @property
    def last_code(self) -> str:
        return self.sent[-1]["code"]


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture
def db(session_factory):
    s = session_factory()
    yield s
    s.close()


@pytest.fixture
def notifier():
    return FakeNotifier()


@pytest.fixture
def signer():
    return SessionSigner(SECRET)


@pytest.fixture
def app(session_factory, notifier, signer):
    app = create_app(Settings(secret_key=SECRET, database_url="sqlite://", auto_migrate=False))

    def override_get_db():
        s = session_factory()
        try:
            yield s
        finally:
            s.close()

    app.dependency_overrides[get_db] = override_get_db
    app.state.notifier = notifier
    app.state.signer = signer
    return app


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def make_user(db):
    def _make(email="ann@blinky.io", password="secret123", name="Ann", role="user"):
        user = User(email=email, password_hash=hash_password(password), name=name, role=role)
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


def otp_rows(db, user_id):
    db.expire_all()
    return db.execute(select(Otp).where(Otp.user_id == user_id).order_by(Otp.id)).scalars().all()


def count_otps(db) -> int:
    db.expire_all()
    return db.execute(select(func.count(Otp.id))).scalar_one()
