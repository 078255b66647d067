import os

# Settings are read at import time, so they must be in place first.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["RATE_LIMIT_MAX"] = "1000"
os.environ.pop("SMTP_HOST", None)

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from agriloop import database, deps, models, security
from agriloop.main import app


class RecordingMailer:
    def __init__(self):
        self.sent = []
        self.fail = False

    def send(self, to, subject, html):
        if self.fail:
            from agriloop.errors import MailDeliveryError
            raise MailDeliveryError("Error during signup. Please try again.")
        self.sent.append({"to": to, "subject": subject, "html": html})


@pytest.fixture
def engine():
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    database.init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def mailer():
    return RecordingMailer()


@pytest.fixture
def client(session_factory, mailer):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[deps.get_db] = override_get_db
    app.dependency_overrides[deps.get_mailer] = lambda: mailer
    deps.RATE_LIMIT_STORE.clear()
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make(role=models.RoleEnum.seller, verified=True, password="secret123", **fields):
        counter["n"] += 1
        n = counter["n"]
        user = models.User(
            username=fields.pop("username", f"user{n}"),
            full_name=fields.pop("full_name", f"User {n}"),
            email=fields.pop("email", f"user{n}@example.com"),
            password_hash=security.hash_password(password),
            role=role,
            verified=verified,
            **fields,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture
def seller(make_user):
    return make_user(models.RoleEnum.seller)


@pytest.fixture
def buyer(make_user):
    return make_user(models.RoleEnum.buyer)


def auth(user):
    return {"Authorization": f"Bearer {security.make_access_token(user.id)}"}
