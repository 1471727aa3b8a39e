"""Catalog Client - HTTP client for the marketplace catalog API.

The catalog API is the system of record for products: it owns the
lifecycle state and tag flags. This client forwards the seller's own
credentials on every call and maps HTTP failures onto domain errors.
"""

import hashlib
from dataclasses import dataclass
from typing import Any

import httpx
from pydantic import ValidationError

from roastah.config import settings
from roastah.core.product_state import ProductState, ProductTag
from roastah.errors import (
    AuthenticationRequiredError,
    CatalogUnavailableError,
    ProductNotFoundError,
    RoastahError,
    TagToggleRejectedError,
    TransitionRejectedError,
)
from roastah.infra.logging import get_logger
from roastah.schemas.product import ProductRecord
from roastah.schemas.user import SessionUser

logger = get_logger(__name__)

PRODUCTS_PATH = "/api/roaster/products"
CURRENT_USER_PATH = "/api/auth/user"

_REJECTION_STATUSES = frozenset({400, 409, 422})


@dataclass(frozen=True)
class Credentials:
    """Seller credentials forwarded to the catalog API."""

    authorization: str | None = None
    cookie: str | None = None

    def headers(self) -> dict[str, str]:
        headers: dict[str, str] = {}
        if self.authorization:
            headers["Authorization"] = self.authorization
        if self.cookie:
            headers["Cookie"] = self.cookie
        return headers

    @property
    def scope(self) -> str:
        """Stable, non-reversible key identifying the seller session."""
        raw = f"{self.authorization or ''}|{self.cookie or ''}"
        return hashlib.sha256(raw.encode()).hexdigest()[:16]


class CatalogClient:
    """HTTP client for the catalog API."""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize catalog client.

        Args:
            base_url: Catalog base URL (defaults to settings)
            timeout: Request timeout in seconds (defaults to settings)
            transport: Optional httpx transport, mainly for tests
        """
        self.base_url = base_url or settings.catalog_api_url
        self.timeout = timeout if timeout is not None else settings.catalog_timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                headers={"Content-Type": "application/json"},
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def fetch_current_user(self, credentials: Credentials) -> SessionUser:
        """Resolve the user behind the forwarded session."""
        data = await self._request("GET", CURRENT_USER_PATH, credentials)
        try:
            return SessionUser.model_validate(data)
        except ValidationError as e:
            logger.error("Catalog returned malformed user", errors=e.errors(include_url=False))
            raise CatalogUnavailableError("Catalog returned a malformed user") from e

    async def fetch_product(self, product_id: int, credentials: Credentials) -> ProductRecord:
        """Fetch one of the seller's products."""
        data = await self._request(
            "GET", f"{PRODUCTS_PATH}/{product_id}", credentials, product_id=product_id
        )
        return self._parse_product(data, product_id)

    async def list_products(self, credentials: Credentials) -> list[ProductRecord]:
        """Fetch all products of the seller."""
        data = await self._request("GET", PRODUCTS_PATH, credentials)
        if not isinstance(data, list):
            raise CatalogUnavailableError("Catalog returned a malformed product list")
        return [
            self._parse_product(item, item.get("id", 0) if isinstance(item, dict) else 0)
            for item in data
        ]

    async def transition_state(
        self,
        product_id: int,
        state: ProductState,
        credentials: Credentials,
    ) -> ProductRecord:
        """Ask the catalog to move a product to ``state``.

        Raises:
            TransitionRejectedError: If the catalog refuses the change
        """
        data = await self._request(
            "PATCH",
            f"{PRODUCTS_PATH}/{product_id}/state",
            credentials,
            json={"state": state.value},
            product_id=product_id,
            rejected=TransitionRejectedError,
        )
        return self._parse_product(data, product_id)

    async def toggle_tag(
        self,
        product_id: int,
        tag: ProductTag,
        value: bool,
        credentials: Credentials,
    ) -> ProductRecord:
        """Set a single tag flag.

        Raises:
            TagToggleRejectedError: If the catalog refuses the change
        """
        data = await self._request(
            "PATCH",
            f"{PRODUCTS_PATH}/{product_id}/tags",
            credentials,
            json={tag.value: value},
            product_id=product_id,
            rejected=TagToggleRejectedError,
        )
        return self._parse_product(data, product_id)

    async def update_fields(
        self,
        product_id: int,
        fields: dict[str, Any],
        credentials: Credentials,
    ) -> ProductRecord:
        """Patch seller-editable fields."""
        data = await self._request(
            "PATCH",
            f"{PRODUCTS_PATH}/{product_id}",
            credentials,
            json=fields,
            product_id=product_id,
        )
        return self._parse_product(data, product_id)

    async def delete_product(self, product_id: int, credentials: Credentials) -> None:
        """Hard-delete a product. Irreversible."""
        await self._request(
            "DELETE", f"{PRODUCTS_PATH}/{product_id}", credentials, product_id=product_id
        )

    async def _request(
        self,
        method: str,
        path: str,
        credentials: Credentials,
        json: dict[str, Any] | None = None,
        product_id: int | None = None,
        rejected: type[RoastahError] | None = None,
    ) -> Any:
        """Send a request and map failures onto domain errors.

        Returns:
            Decoded JSON body (None for empty bodies)
        """
        client = await self._get_client()

        try:
            response = await client.request(
                method,
                path,
                json=json,
                headers=credentials.headers(),
            )
            response.raise_for_status()

        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            message = _error_message(e.response)
            logger.warning(
                "Catalog returned error",
                method=method,
                path=path,
                status_code=status_code,
                response_text=e.response.text[:500],
            )
            if status_code in (401, 403):
                raise AuthenticationRequiredError(settings.login_url) from e
            if status_code == 404 and product_id is not None:
                raise ProductNotFoundError(product_id) from e
            if rejected is not None and status_code in _REJECTION_STATUSES:
                raise rejected(message) from e
            raise CatalogUnavailableError(
                f"Catalog request failed ({status_code}): {message}"
            ) from e

        except httpx.HTTPError as e:
            logger.error(
                "Failed to reach catalog",
                method=method,
                path=path,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise CatalogUnavailableError(f"Catalog unreachable: {e}") from e

        logger.debug(
            "Catalog request completed",
            method=method,
            path=path,
            status_code=response.status_code,
        )

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            logger.error(
                "Catalog returned a non-JSON body",
                method=method,
                path=path,
                status_code=response.status_code,
                response_text=response.text[:200],
            )
            raise CatalogUnavailableError("Catalog returned a malformed body") from e

    def _parse_product(self, data: Any, product_id: int) -> ProductRecord:
        """Validate a product payload from the catalog."""
        try:
            return ProductRecord.model_validate(data)
        except ValidationError as e:
            logger.error(
                "Catalog returned malformed product",
                product_id=product_id,
                errors=e.errors(include_url=False),
            )
            raise CatalogUnavailableError(
                f"Catalog returned a malformed product {product_id}"
            ) from e


def _error_message(response: httpx.Response) -> str:
    """Best-effort extraction of the catalog's error message."""
    try:
        body = response.json()
    except ValueError:
        return response.text[:200] or response.reason_phrase
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return response.reason_phrase


# Singleton instance
_catalog_client: CatalogClient | None = None


def get_catalog_client() -> CatalogClient:
    """Get catalog client singleton."""
    global _catalog_client
    if _catalog_client is None:
        _catalog_client = CatalogClient()
    return _catalog_client
