"""Tests for the catalog client."""

import json
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from roastah.core.product_state import ProductState, ProductTag
from roastah.errors import (
    AuthenticationRequiredError,
    CatalogUnavailableError,
    ProductNotFoundError,
    TagToggleRejectedError,
    TransitionRejectedError,
)
from roastah.services.catalog_client import CatalogClient, Credentials, get_catalog_client


class TestCredentials:
    """Tests for forwarded credentials."""

    def test_headers(self):
        creds = Credentials(authorization="Bearer abc", cookie="connect.sid=xyz")

        assert creds.headers() == {
            "Authorization": "Bearer abc",
            "Cookie": "connect.sid=xyz",
        }

    def test_empty_headers(self):
        assert Credentials().headers() == {}

    def test_scope_is_stable_and_distinct(self):
        a = Credentials(cookie="connect.sid=a")

        assert a.scope == Credentials(cookie="connect.sid=a").scope
        assert a.scope != Credentials(cookie="connect.sid=b").scope
        assert "connect.sid" not in a.scope


class TestCatalogClient:
    """Tests for CatalogClient against the fake catalog."""

    @pytest.mark.asyncio
    async def test_fetch_product(self, fake_catalog, catalog_client, credentials):
        fake_catalog.add(id=3, state="published", isPreorder=True)

        product = await catalog_client.fetch_product(3, credentials)

        assert product.id == 3
        assert product.state == ProductState.PUBLISHED
        assert product.is_preorder is True
        request = fake_catalog.requests[-1]
        assert request.headers["cookie"] == "connect.sid=seller-1"

    @pytest.mark.asyncio
    async def test_fetch_missing_product(self, catalog_client, credentials):
        with pytest.raises(ProductNotFoundError):
            await catalog_client.fetch_product(99, credentials)

    @pytest.mark.asyncio
    async def test_list_products(self, fake_catalog, catalog_client, credentials):
        fake_catalog.add(id=1)
        fake_catalog.add(id=2, state="archived")

        products = await catalog_client.list_products(credentials)

        assert [p.id for p in products] == [1, 2]
        assert products[1].state == ProductState.ARCHIVED

    @pytest.mark.asyncio
    async def test_transition_state_sends_state_body(
        self, fake_catalog, catalog_client, credentials
    ):
        fake_catalog.add(id=1)

        product = await catalog_client.transition_state(
            1, ProductState.PENDING_REVIEW, credentials
        )

        assert product.state == ProductState.PENDING_REVIEW
        request = fake_catalog.requests[-1]
        assert request.method == "PATCH"
        assert request.url.path == "/api/roaster/products/1/state"
        assert json.loads(request.content) == {"state": "pending_review"}

    @pytest.mark.asyncio
    async def test_transition_rejected(self, fake_catalog, catalog_client, credentials):
        fake_catalog.add(id=1)
        fake_catalog.reject_state_with = 400

        with pytest.raises(TransitionRejectedError, match="State change not allowed"):
            await catalog_client.transition_state(1, ProductState.PUBLISHED, credentials)

    @pytest.mark.asyncio
    async def test_toggle_tag_sends_single_tag(self, fake_catalog, catalog_client, credentials):
        fake_catalog.add(id=1)

        product = await catalog_client.toggle_tag(
            1, ProductTag.IS_OUT_OF_STOCK, True, credentials
        )

        assert product.is_out_of_stock is True
        request = fake_catalog.requests[-1]
        assert request.url.path == "/api/roaster/products/1/tags"
        assert json.loads(request.content) == {"isOutOfStock": True}

    @pytest.mark.asyncio
    async def test_toggle_tag_rejected(self, fake_catalog, catalog_client, credentials):
        fake_catalog.add(id=1)
        fake_catalog.reject_tags_with = 400

        with pytest.raises(TagToggleRejectedError):
            await catalog_client.toggle_tag(1, ProductTag.IS_PRIVATE, True, credentials)

    @pytest.mark.asyncio
    async def test_update_fields(self, fake_catalog, catalog_client, credentials):
        fake_catalog.add(id=1)

        product = await catalog_client.update_fields(
            1, {"name": "Kenya AA", "price": "20.00"}, credentials
        )

        assert product.name == "Kenya AA"
        assert str(product.price) == "20.00"

    @pytest.mark.asyncio
    async def test_delete_product(self, fake_catalog, catalog_client, credentials):
        fake_catalog.add(id=1)

        await catalog_client.delete_product(1, credentials)

        assert 1 not in fake_catalog.products

    @pytest.mark.asyncio
    async def test_expired_session(self, fake_catalog, catalog_client, credentials):
        fake_catalog.add(id=1)
        fake_catalog.session_expired = True

        with patch("roastah.config.settings.login_url", "/api/login"):
            with pytest.raises(AuthenticationRequiredError) as exc_info:
                await catalog_client.fetch_product(1, credentials)

        assert exc_info.value.login_url == "/api/login"

    @pytest.mark.asyncio
    async def test_server_error(self, fake_catalog, catalog_client, credentials):
        fake_catalog.add(id=1)
        fake_catalog.fail_with = 500

        with pytest.raises(CatalogUnavailableError, match="500"):
            await catalog_client.transition_state(1, ProductState.PUBLISHED, credentials)

    @pytest.mark.asyncio
    async def test_malformed_product(self, catalog_client, credentials):
        mock_response = MagicMock()
        mock_response.status_code = 200
        mock_response.content = b"{}"
        mock_response.raise_for_status = MagicMock()
        mock_response.json = MagicMock(return_value={"id": 1, "state": "sold"})

        with patch.object(catalog_client, "_get_client") as mock_get_client:
            mock_http_client = AsyncMock()
            mock_http_client.request = AsyncMock(return_value=mock_response)
            mock_get_client.return_value = mock_http_client

            with pytest.raises(CatalogUnavailableError, match="malformed"):
                await catalog_client.fetch_product(1, credentials)

    @pytest.mark.asyncio
    async def test_non_json_success_body(self, fake_catalog, catalog_client, credentials):
        fake_catalog.add(id=1)
        fake_catalog.plain_text_replies = True

        with pytest.raises(CatalogUnavailableError, match="malformed body"):
            await catalog_client.transition_state(1, ProductState.PENDING_REVIEW, credentials)

        assert fake_catalog.products[1]["state"] == "pending_review"

    @pytest.mark.asyncio
    async def test_fetch_current_user(self, fake_catalog, catalog_client, credentials):
        user = await catalog_client.fetch_current_user(credentials)

        assert user.id == "user-1"
        assert user.role == "roaster"
        assert fake_catalog.requests[-1].url.path == "/api/auth/user"

    @pytest.mark.asyncio
    async def test_fetch_current_user_unknown_session(self, catalog_client):
        with pytest.raises(AuthenticationRequiredError):
            await catalog_client.fetch_current_user(Credentials(cookie="connect.sid=gone"))

    @pytest.mark.asyncio
    async def test_numeric_user_id(self, catalog_client, credentials):
        mock_response = MagicMock()
        mock_response.status_code = 200
        mock_response.content = b"{}"
        mock_response.raise_for_status = MagicMock()
        mock_response.json = MagicMock(return_value={"id": 12, "email": "a@b.c"})

        with patch.object(catalog_client, "_get_client") as mock_get_client:
            mock_http_client = AsyncMock()
            mock_http_client.request = AsyncMock(return_value=mock_response)
            mock_get_client.return_value = mock_http_client

            user = await catalog_client.fetch_current_user(credentials)

        assert user.id == "12"

    @pytest.mark.asyncio
    async def test_connection_error(self, catalog_client, credentials):
        with patch.object(catalog_client, "_get_client") as mock_get_client:
            mock_http_client = AsyncMock()
            mock_http_client.request = AsyncMock(
                side_effect=httpx.ConnectError("Connection refused")
            )
            mock_get_client.return_value = mock_http_client

            with pytest.raises(CatalogUnavailableError, match="unreachable"):
                await catalog_client.fetch_product(1, credentials)

    @pytest.mark.asyncio
    async def test_close(self, catalog_client, credentials, fake_catalog):
        fake_catalog.add(id=1)
        await catalog_client.fetch_product(1, credentials)
        assert catalog_client._client is not None

        await catalog_client.close()

        assert catalog_client._client is None


def test_get_catalog_client_singleton():
    assert get_catalog_client() is get_catalog_client()
