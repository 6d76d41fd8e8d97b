"""
apidoc — Test Configuration (conftest.py)
==========================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.
Who:   Used by all test files in the tests/ directory.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── copyright:          A fully populated DocumentCopyright
    ├── make_handler:       Factory for HandlerDescriptors without an app
    ├── counting_registry:  Registry double that counts enumerations
    ├── doc_settings:       Settings for the sample shop API
    ├── shop_app:           FastAPI app documenting the sample routers
    └── test_client:        HTTPX AsyncClient bound to shop_app

Sample API (registered in this order):
    users_router   UserController methods: GET /users, GET /users/{user_id},
                   DELETE /users/{user_id} (ignored by rule)
    orders_router  GET /orders (Orders, index 3), POST /orders (Orders +
                   Billing, index 2)
    misc_router    HTML page, /internal/stats (ignored by rule), a hidden route
"""

import os
import threading
import time
from typing import Callable, List, Optional

import pytest
import pytest_asyncio
from fastapi import APIRouter, Header, Path, Query
from fastapi.responses import HTMLResponse
from httpx import ASGITransport, AsyncClient
from pydantic import BaseModel, Field


# ══════════════════════════════════════════════════════════════════════════
# Environment Setup
# ══════════════════════════════════════════════════════════════════════════

# Override settings for testing BEFORE any apidoc imports
os.environ["LOG_LEVEL"] = "WARNING"  # Reduce noise during tests
os.environ["DOMAIN"] = ""

from apidoc.config import Settings  # noqa: E402
from apidoc.metadata import api_group, api_ignore, api_method, api_responses  # noqa: E402
from apidoc.registry import HandlerDescriptor, RouteRegistry  # noqa: E402
from apidoc.schemas.document import DocumentCopyright, ResponseCode  # noqa: E402
from apidoc.services.params import ParamExtractor  # noqa: E402
from apidoc.services.returns import ReturnExtractor, ReturnShape  # noqa: E402


# ══════════════════════════════════════════════════════════════════════════
# Sample API
# ══════════════════════════════════════════════════════════════════════════

class UserOut(BaseModel):
    id: int = Field(description="User id", examples=[7])
    name: str = Field(description="Display name", examples=["Ada"])
    tags: List[str] = []


class OrderLine(BaseModel):
    sku: str = Field(description="Stock keeping unit", examples=["SKU-1"])
    quantity: int = Field(default=1, ge=1)


class OrderIn(BaseModel):
    sku: str = Field(description="Stock keeping unit", examples=["SKU-1"])
    quantity: int = Field(default=1, ge=1, description="Units to order")


class OrderOut(BaseModel):
    id: int = Field(description="Order number", examples=[1001])
    status: str = "open"
    lines: List[OrderLine] = Field(description="Ordered items")


class UserController:
    @api_method(title="Get user", desc="Look a user up by id", index=2)
    @api_responses((200, "found"), (404, "no such user"))
    def get_user(self, user_id: int = Path(description="User id")) -> UserOut:
        return UserOut(id=user_id, name="Ada")

    @api_method(title="List users", index=1)
    def list_users(self, limit: int = Query(default=20, ge=1, description="Page size")) -> List[UserOut]:
        return []

    def delete_user(self, user_id: int) -> dict:
        return {"deleted": user_id}


users = UserController()

users_router = APIRouter()
users_router.add_api_route("/users/{user_id}", users.get_user, methods=["GET"], response_model=UserOut)
users_router.add_api_route("/users", users.list_users, methods=["GET"], response_model=List[UserOut])
users_router.add_api_route("/users/{user_id}", users.delete_user, methods=["DELETE"])


orders_router = APIRouter()


@orders_router.get("/orders", response_model=List[OrderOut], summary="List orders")
@api_group("Orders", index=3)
def list_orders(status: Optional[str] = Query(default=None, description="Filter by status")):
    return []


@orders_router.post("/orders", response_model=OrderOut, status_code=201)
@api_group("Orders", "Billing", index=2)
@api_method(title="Create order", index=1, comment_in_return_example=False)
@api_responses((201, "created"), (409, "duplicate order"))
def create_order(order: OrderIn, x_client: str = Header(default="web")):
    return OrderOut(id=1001, lines=[OrderLine(sku=order.sku, quantity=order.quantity)])


misc_router = APIRouter()


@misc_router.get("/page", response_class=HTMLResponse)
def page():
    return "<h1>hello</h1>"


@misc_router.get("/internal/stats")
def internal_stats() -> dict:
    return {"requests": 0}


@misc_router.get("/secret")
@api_ignore()
def secret() -> dict:
    return {}


# ══════════════════════════════════════════════════════════════════════════
# Test Doubles
# ══════════════════════════════════════════════════════════════════════════

class CountingRegistry(RouteRegistry):
    """Returns a fixed handler list; counts calls and can fail or stall on demand."""

    def __init__(self, handlers: Optional[List[HandlerDescriptor]] = None, delay: float = 0.0):
        self._handlers = list(handlers or [])
        self.delay = delay
        self.calls = 0
        self.fail_next = 0
        self._lock = threading.Lock()

    def handlers(self) -> List[HandlerDescriptor]:
        with self._lock:
            self.calls += 1
            failing = self.fail_next > 0
            if failing:
                self.fail_next -= 1
        if self.delay:
            time.sleep(self.delay)
        if failing:
            raise RuntimeError("registry unavailable")
        return list(self._handlers)


class StubParamExtractor(ParamExtractor):
    """No parameters; raises for URLs listed in `broken`."""

    def __init__(self, broken: tuple = ()):
        self.broken = broken

    def extract(self, handler):
        if any(url in self.broken for url in handler.urls):
            raise ValueError(f"cannot inspect {handler.urls}")
        return []


class StubReturnExtractor(ReturnExtractor):
    def extract(self, handler, record_level):
        return ReturnShape(example_json='{"ok": true}')


# ══════════════════════════════════════════════════════════════════════════
# Function-Scoped Fixtures (created fresh for each test)
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def copyright():
    """A copyright block with every field set to something recognizable."""
    return DocumentCopyright(
        title="Shop API",
        team="platform",
        version="2.1.0",
        copyright="(c) Shop",
        online=False,
        ignore_url_set=frozenset(),
        global_response=(ResponseCode(code=200, msg="ok"), ResponseCode(code=500, msg="error")),
        return_record_level=False,
        comment_in_return_example=True,
    )


@pytest.fixture
def make_handler() -> Callable[..., HandlerDescriptor]:
    """
    Factory for HandlerDescriptors that are not backed by a FastAPI route.

    Usage:
        handler = make_handler("/users", owner_name="UserController")
    """
    def factory(
        *urls: str,
        methods=("GET",),
        endpoint=None,
        owner=None,
        owner_name: str = "UserController",
        returns_body: bool = True,
    ) -> HandlerDescriptor:
        if endpoint is None:
            def endpoint():
                return {}
        return HandlerDescriptor(
            urls=tuple(urls) or ("/users",),
            methods=tuple(methods),
            endpoint=endpoint,
            owner=owner,
            owner_name=owner_name,
            returns_body=returns_body,
        )
    return factory


@pytest.fixture
def counting_registry():
    return CountingRegistry()


@pytest.fixture
def doc_settings():
    """Settings for the sample API: two ignore rules and a fixed public domain."""
    return Settings(
        doc_title="Shop API",
        doc_team="platform",
        doc_version="2.1.0",
        doc_copyright="(c) Shop",
        doc_ignore_urls="/users/*|delete, /internal/*",
        doc_global_response=[ResponseCode(code=200, msg="ok")],
        domain="http://docs.example.com/",
    )


@pytest.fixture
def app_factory():
    """Builds a fresh app documenting the sample routers with the given settings."""
    from apidoc.main import create_app

    def factory(app_settings: Settings):
        return create_app(app_settings, routers=[users_router, orders_router, misc_router])
    return factory


@pytest.fixture
def shop_app(app_factory, doc_settings):
    return app_factory(doc_settings)


@pytest_asyncio.fixture
async def test_client(shop_app):
    """
    Provides an async HTTP test client for endpoint testing.

    What:    HTTPX AsyncClient configured to talk to the sample app.
    How:     Uses ASGITransport to route requests directly to the app.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=shop_app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
