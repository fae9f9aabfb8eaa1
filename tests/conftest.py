# POS API Test Suite - Shared Configuration and Fixtures
#
# This module provides:
# - Test database provisioning (ephemeral SQLite file per test run)
# - Table cleanup between tests
# - Admin / cashier users with bearer tokens
# - Authenticated TestClient fixtures and response helpers

import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Generator

# Settings are read at import time, so the environment must be ready first
TEST_DIR = Path(tempfile.mkdtemp(prefix="pos-api-tests-"))
TEST_DB_PATH = TEST_DIR / "test.db"
os.environ["DB_URL"] = f"sqlite+aiosqlite:///{TEST_DB_PATH}"
os.environ["JWT_SECRET"] = "test-secret-key"
os.environ["BUSINESS_TIMEZONE"] = "UTC"
os.environ["STOCK_UNDERFLOW_POLICY"] = "clamp"
os.environ["FONNTE_TOKEN"] = ""
os.environ["NOTIFY_TARGET"] = ""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session

from pos_api.main import app
from pos_api.core.db.base import Base
from pos_api.modules.users.auth import AuthService
from pos_api.modules.users.models import Role, User

sync_engine = create_engine(f"sqlite:///{TEST_DB_PATH}")
Base.metadata.create_all(sync_engine)

DEFAULT_PASSWORD = "password123"


# =============================================================================
# DATABASE
# =============================================================================

@pytest.fixture(autouse=True)
def clean_database() -> Generator[None, None, None]:
    """Every test starts from empty tables."""
    with sync_engine.begin() as conn:
        for table in reversed(Base.metadata.sorted_tables):
            conn.execute(table.delete())
    yield


def create_user(username: str, role: Role, name: str = "") -> Dict[str, Any]:
    """Insert a user directly and return its id, username and role."""
    with Session(sync_engine) as session:
        user = User(
            username=username,
            password=AuthService.get_password_hash(DEFAULT_PASSWORD),
            name=name or username.title(),
            role=role,
        )
        session.add(user)
        session.commit()
        return {"id": user.id, "username": user.username, "role": role.value}


def token_for(user: Dict[str, Any]) -> str:
    return AuthService.create_access_token(
        {"sub": user["username"], "user_id": user["id"], "role": user["role"]}
    )


# =============================================================================
# USERS & CLIENTS
# =============================================================================

@pytest.fixture
def admin_user() -> Dict[str, Any]:
    return create_user("admin", Role.ADMIN, "Store Admin")


@pytest.fixture
def cashier_user() -> Dict[str, Any]:
    return create_user("cashier", Role.CASHIER, "Front Cashier")


@pytest.fixture
def client() -> Generator[TestClient, None, None]:
    """Unauthenticated client."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def admin_client(admin_user) -> Generator[TestClient, None, None]:
    with TestClient(app) as test_client:
        test_client.headers.update({"Authorization": f"Bearer {token_for(admin_user)}"})
        yield test_client


@pytest.fixture
def cashier_client(cashier_user) -> Generator[TestClient, None, None]:
    with TestClient(app) as test_client:
        test_client.headers.update({"Authorization": f"Bearer {token_for(cashier_user)}"})
        yield test_client


# =============================================================================
# HELPERS
# =============================================================================

def data_of(response) -> Any:
    """Unwrap the {"success": true, "data": ...} envelope."""
    body = response.json()
    assert body.get("success") is True, f"Expected success envelope, got {body}"
    return body["data"]


def make_item(
    client: TestClient,
    name: str = "Kopi Susu",
    price: int = 20000,
    buy_price: int = 12000,
    stock: int = 10,
) -> Dict[str, Any]:
    response = client.post(
        "/api/items",
        json={"name": name, "price": price, "buy_price": buy_price, "stock": stock},
    )
    assert response.status_code == 201, response.text
    return data_of(response)


def make_transaction(client: TestClient, **payload) -> Dict[str, Any]:
    response = client.post("/api/transactions", json=payload)
    assert response.status_code == 201, response.text
    return data_of(response)
