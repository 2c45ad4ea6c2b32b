import os

# Settings are read at import time, so configure the environment first.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["OPENAI_API_KEY"] = ""
os.environ["SEED_ON_STARTUP"] = "false"
os.environ["PRICING_REGION"] = "US"
os.environ["APP_SECRET_KEY"] = "test-secret"

from contextlib import contextmanager  # noqa: E402
from datetime import datetime, timedelta, timezone  # noqa: E402
from typing import Dict, Iterable, Optional  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import event  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402
from sqlmodel import Session, SQLModel, create_engine  # noqa: E402

from main import app  # noqa: E402
from storefront.api.deps import get_current_hour  # noqa: E402
from storefront.core.security import create_access_token, hash_password  # noqa: E402
from storefront.database import get_session  # noqa: E402
from storefront.models import Product, User, UserPreference, UserProfile  # noqa: E402

DAYTIME_HOUR = 12


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture()
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture()
def clock():
    """Mutable local hour seen by the pricing endpoint."""
    return {"hour": DAYTIME_HOUR}


@pytest.fixture()
def client(engine, clock):
    def _get_session():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = _get_session
    app.dependency_overrides[get_current_hour] = lambda: clock["hour"]
    yield TestClient(app, raise_server_exceptions=False)
    app.dependency_overrides.clear()


@pytest.fixture()
def make_product(session):
    counter = {"n": 0}
    base_time = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def _make(**fields) -> Product:
        counter["n"] += 1
        data = {
            "name": f"Product {counter['n']}",
            "price": 10.0,
            "category": "Electronics",
            "brand": "Acme",
            "created_at": base_time + timedelta(minutes=counter["n"]),
        }
        data.update(fields)
        product = Product(**data)
        session.add(product)
        session.commit()
        session.refresh(product)
        return product

    return _make


@pytest.fixture()
def make_user(session):
    counter = {"n": 0}

    def _make(
        loyalty_tier: str = "bronze",
        accessibility_needs: Iterable[str] = (),
        with_preferences: bool = True,
        password: str = "correct-horse",
        email: Optional[str] = None,
        **preference_fields,
    ) -> User:
        counter["n"] += 1
        user = User(
            email=email or f"shopper{counter['n']}@example.com",
            name=f"Shopper {counter['n']}",
            password_hash=hash_password(password),
            loyalty_tier=loyalty_tier,
            accessibility_needs=list(accessibility_needs),
        )
        session.add(user)
        session.flush()
        session.add(UserProfile(user_id=user.id))
        if with_preferences:
            session.add(UserPreference(user_id=user.id, **preference_fields))
        session.commit()
        session.refresh(user)
        return user

    return _make


@pytest.fixture()
def competing_insert(engine):
    """
    Simulate a concurrent request: the first time any session is about to
    flush a new object of the given row's type, `row` is committed from a
    separate session first.
    """

    @contextmanager
    def _competing(row):
        fired = []

        def _insert_first(db, flush_context, instances):
            if fired or not any(type(obj) is type(row) for obj in db.new):
                return
            fired.append(True)
            with Session(engine) as other:
                other.add(row)
                other.commit()

        event.listen(Session, "before_flush", _insert_first)
        try:
            yield
        finally:
            event.remove(Session, "before_flush", _insert_first)

    return _competing


def auth_headers(user: User) -> Dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}
