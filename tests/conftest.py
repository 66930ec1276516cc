"""Shared pytest fixtures: a throwaway SQLite database per test."""
from __future__ import annotations

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session

from app.db.session import build_engine, create_db_and_tables, get_session
from app.main import app
from app.models.catalog import AddOn, Product, Promotion
from app.models.user import User
from app.services.auth import AuthService

PASSWORD = "s3cret-pass"


@pytest.fixture()
def engine(tmp_path):
    """File-backed so that separate sessions (and threads) see one database."""
    engine = build_engine(f"sqlite:///{tmp_path / 'test.db'}")
    create_db_and_tables(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture()
def catalog(session: Session) -> dict:
    """Product 1, product 2, add-on 5 and promotion 9 with known stock."""
    items = {
        "cappuccino": Product(id=1, name="Cappuccino", price=Decimal("3.50"), stock_quantity=10),
        "espresso": Product(id=2, name="Espresso", price=Decimal("2.50"), stock_quantity=5),
        "extra_shot": AddOn(id=5, name="Extra Shot", price=Decimal("0.75"), stock_quantity=10),
        "combo": Promotion(id=9, name="Breakfast Combo", price=Decimal("5.50"), stock_quantity=2),
    }
    for item in items.values():
        session.add(item)
    session.commit()
    return items


def make_user(session: Session, email: str, is_superuser: bool = False) -> User:
    user = User(
        name=email.split("@")[0],
        email=email,
        password_hash=AuthService(session).get_password_hash(PASSWORD),
        is_superuser=is_superuser,
    )
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


@pytest.fixture()
def user(session: Session) -> User:
    return make_user(session, "ana@example.com")


@pytest.fixture()
def admin(session: Session) -> User:
    return make_user(session, "boss@example.com", is_superuser=True)


def stock_of(engine, model, item_id: int) -> int:
    with Session(engine) as fresh:
        return fresh.get(model, item_id).stock_quantity


@pytest.fixture()
def client(engine):
    """TestClient wired to the test database; lifespan is not run."""

    def override_get_session():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def login(client: TestClient, email: str, password: str = PASSWORD) -> dict:
    resp = client.post("/api/v1/auth/token", data={"username": email, "password": password})
    assert resp.status_code == 200, resp.text
    return {"Authorization": f"Bearer {resp.json()['access_token']}"}
