"""
Shared fixtures for the storefront test suite.

Environment is set before any project import: the JWT handler and the admin
key are read once at import time.
"""
import os

os.environ["JWT_SECRET_KEY"] = "test-jwt-secret"
os.environ["INTERNAL_API_KEY"] = "test-admin-key"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["METRICS_ENABLED"] = "false"

import itertools
from typing import List

import pytest
from fastapi.testclient import TestClient

from main import create_app
from services.auth_service.models import User
from services.auth_service.repository import UserRepository
from services.cart_service.models import CartItem
from services.cart_service.repository import CartRepository
from services.order_service.domain import ShippingAddress
from services.payment_service.gateway import GatewayError, GatewayOrder
from services.product_service.models import Product
from services.product_service.repository import ProductRepository
from shared.config.database import Database
from shared.config.settings import Settings

GATEWAY_KEY_ID = "rzp_test_key"
GATEWAY_SECRET = "rzp_test_secret"
ADMIN_HEADERS = {"X-Internal-API-Key": "test-admin-key"}


# ============================================================================
# Fakes
# ============================================================================


class FakeGateway:
    """In-memory stand-in for RazorpayGateway."""

    key_id = GATEWAY_KEY_ID

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.calls: List[dict] = []
        self._ids = itertools.count(1)

    async def create_order(self, amount, currency, receipt, notes):
        self.calls.append({"amount": amount, "currency": currency, "receipt": receipt, "notes": notes})
        if self.fail:
            raise GatewayError("gateway down")
        return GatewayOrder(
            id=f"order_test_{next(self._ids)}",
            amount=amount,
            currency=currency,
            receipt=receipt,
            status="created",
        )


def make_address(**overrides) -> ShippingAddress:
    values = {
        "street": "12 MG Road",
        "city": "Bengaluru",
        "state": "Karnataka",
        "pincode": "560001",
        "phone": "9876543210",
    }
    values.update(overrides)
    return ShippingAddress(**values)


# ============================================================================
# Database fixtures
# ============================================================================


@pytest.fixture
def settings():
    return Settings(
        database_url="sqlite+aiosqlite://",
        razorpay_key_id=GATEWAY_KEY_ID,
        razorpay_key_secret=GATEWAY_SECRET,
        metrics_enabled=False,
    )


@pytest.fixture
async def database():
    database = Database("sqlite+aiosqlite://")
    await database.create_all()
    yield database
    await database.dispose()


@pytest.fixture
async def db(database):
    async with database.sessionmaker() as session:
        yield session


@pytest.fixture
async def user(db):
    return await UserRepository.create(
        db, User(name="Asha", email="asha@example.com", hashed_password="not-a-real-hash")
    )


@pytest.fixture
def make_product(db):
    async def _make(name="Leather Belt", price=500, discount=0, in_stock=True, category="Belts"):
        return await ProductRepository.create_product(
            db,
            Product(
                name=name,
                category=category,
                description=f"{name} description",
                features=["handmade"],
                price=price,
                discount=discount,
                in_stock=in_stock,
                image_url=f"https://cdn.example.com/{name.replace(' ', '-').lower()}.jpg",
            ),
        )

    return _make


@pytest.fixture
def add_to_cart(db):
    async def _add(user_id, product_id, quantity=1):
        await CartRepository.add_item(db, CartItem(user_id=user_id, product_id=product_id, quantity=quantity))
        await db.commit()

    return _add


# ============================================================================
# HTTP fixtures
# ============================================================================


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def client(settings, gateway):
    app = create_app(settings, gateway=gateway)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def register_user(client):
    def _register(email="shopper@example.com", password="secret123", name="Shopper"):
        resp = client.post("/api/v1/auth/register", json={"name": name, "email": email, "password": password})
        assert resp.status_code == 201, resp.text
        login = client.post("/api/v1/auth/login", json={"email": email, "password": password})
        assert login.status_code == 200, login.text
        token = login.json()["data"]["access_token"]
        return {"Authorization": f"Bearer {token}"}

    return _register


@pytest.fixture
def create_product(client):
    def _create(name="Leather Belt", price=500, discount=0, in_stock=True, category="Belts"):
        resp = client.post(
            "/api/v1/products",
            headers=ADMIN_HEADERS,
            json={
                "name": name,
                "category": category,
                "description": f"{name} description",
                "features": ["handmade"],
                "price": price,
                "discount": discount,
                "in_stock": in_stock,
                "image_url": "https://cdn.example.com/item.jpg",
            },
        )
        assert resp.status_code == 201, resp.text
        return resp.json()["data"]

    return _create
