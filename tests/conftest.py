"""Shared fixtures: an in-memory catalog API and an HTTP client for the app."""

import json
import re
from collections.abc import AsyncGenerator
from typing import Any

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from roastah.api.deps import get_client, get_surface
from roastah.core.product_cache import ProductCache
from roastah.main import app
from roastah.services.catalog_client import CatalogClient, Credentials
from roastah.services.edit_surface import ProductEditSurface

_PRODUCT_PATH = re.compile(r"/api/roaster/products/(\d+)(/state|/tags)?")


class FakeCatalog:
    """Minimal stand-in for the marketplace catalog API."""

    def __init__(self) -> None:
        self.products: dict[int, dict[str, Any]] = {}
        self.requests: list[httpx.Request] = []
        self.session_expired = False
        self.reject_state_with: int | None = None
        self.reject_tags_with: int | None = None
        self.fail_with: int | None = None
        self.plain_text_replies = False
        self.users: dict[str, str] = {"connect.sid=seller-1": "user-1"}
        self._next_id = 1

    def add(self, **overrides: Any) -> dict[str, Any]:
        product = {
            "id": self._next_id,
            "roasterId": 7,
            "name": "Ethiopia Yirgacheffe",
            "description": "Floral and bright",
            "price": "18.50",
            "stockQuantity": 12,
            "origin": "Ethiopia",
            "roastLevel": "light",
            "process": "washed",
            "altitude": "2000m",
            "varietal": "Heirloom",
            "tastingNotes": "jasmine, bergamot",
            "images": [],
            "state": "draft",
            "isUnlisted": False,
            "isPreorder": False,
            "isPrivate": False,
            "isOutOfStock": False,
            "isScheduled": False,
            "isActive": True,
        }
        product.update(overrides)
        self.products[product["id"]] = product
        self._next_id = max(self._next_id, product["id"]) + 1
        return product

    def count(self, method: str, path: str) -> int:
        return sum(
            1 for r in self.requests if r.method == method and r.url.path == path
        )

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)

        authenticated = request.headers.get("authorization") or request.headers.get("cookie")
        if self.session_expired or not authenticated:
            return httpx.Response(401, json={"message": "Unauthorized"})
        if self.fail_with is not None:
            return httpx.Response(self.fail_with, json={"message": "Catalog failure"})

        path = request.url.path
        if path == "/api/auth/user":
            user_id = self.users.get(request.headers.get("cookie", ""))
            if user_id is None:
                return httpx.Response(401, json={"message": "Not authenticated"})
            return httpx.Response(200, json={"id": user_id, "role": "roaster"})

        if path == "/api/roaster/products" and request.method == "GET":
            return httpx.Response(200, json=list(self.products.values()))

        match = _PRODUCT_PATH.fullmatch(path)
        if match is None:
            return httpx.Response(404, json={"message": "Not found"})

        product_id = int(match.group(1))
        suffix = match.group(2)
        product = self.products.get(product_id)
        if product is None:
            return httpx.Response(404, json={"message": "Product not found"})

        body = json.loads(request.content) if request.content else {}

        if suffix == "/state":
            if self.reject_state_with is not None:
                return httpx.Response(
                    self.reject_state_with, json={"message": "State change not allowed"}
                )
            product["state"] = body["state"]
            if self.plain_text_replies:
                return httpx.Response(200, text="OK")
            return httpx.Response(200, json=product)

        if suffix == "/tags":
            if self.reject_tags_with is not None:
                return httpx.Response(
                    self.reject_tags_with, json={"message": "No valid tag updates provided"}
                )
            product.update(body)
            return httpx.Response(200, json=product)

        if request.method == "GET":
            return httpx.Response(200, json=product)
        if request.method == "PATCH":
            product.update(body)
            return httpx.Response(200, json=product)
        if request.method == "DELETE":
            del self.products[product_id]
            return httpx.Response(200, json={"message": "Product deleted"})

        return httpx.Response(405, json={"message": "Method not allowed"})


@pytest.fixture
def fake_catalog() -> FakeCatalog:
    return FakeCatalog()


@pytest.fixture
def catalog_client(fake_catalog: FakeCatalog) -> CatalogClient:
    return CatalogClient(
        base_url="http://catalog.test",
        timeout=5.0,
        transport=httpx.MockTransport(fake_catalog.handler),
    )


@pytest.fixture
def product_cache() -> ProductCache:
    return ProductCache(ttl_seconds=60)


@pytest.fixture
def edit_surface(catalog_client: CatalogClient, product_cache: ProductCache) -> ProductEditSurface:
    return ProductEditSurface(client=catalog_client, cache=product_cache)


@pytest.fixture
def credentials() -> Credentials:
    return Credentials(cookie="connect.sid=seller-1")


@pytest.fixture
def seller_headers() -> dict[str, str]:
    return {"Cookie": "connect.sid=seller-1"}


@pytest_asyncio.fixture
async def client(
    edit_surface: ProductEditSurface, catalog_client: CatalogClient
) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client for the app, wired to the fake catalog."""
    app.dependency_overrides[get_surface] = lambda: edit_surface
    app.dependency_overrides[get_client] = lambda: catalog_client
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
