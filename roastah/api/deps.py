"""FastAPI dependencies for dependency injection.

Provides:
- Seller credentials forwarded to the catalog API
- Session user resolved by the catalog API
- Product edit surface
- UI preference store
"""

from typing import Annotated

from fastapi import Depends, Header

from roastah.config import settings
from roastah.core.preferences import PreferenceStore, get_preference_store
from roastah.errors import AuthenticationRequiredError
from roastah.infra.logging import get_logger
from roastah.schemas.user import SessionUser
from roastah.services.catalog_client import CatalogClient, Credentials, get_catalog_client
from roastah.services.edit_surface import ProductEditSurface, get_edit_surface

logger = get_logger(__name__)


async def get_credentials(
    authorization: Annotated[str | None, Header()] = None,
    cookie: Annotated[str | None, Header()] = None,
) -> Credentials:
    """Collect the seller's session credentials from the request.

    Raises:
        AuthenticationRequiredError: If the request carries no credentials
    """
    if not authorization and not cookie:
        logger.info("Request without credentials")
        raise AuthenticationRequiredError(settings.login_url)
    return Credentials(authorization=authorization, cookie=cookie)


async def get_client() -> CatalogClient:
    """Get catalog client dependency."""
    return get_catalog_client()


async def get_current_user(
    credentials: Annotated[Credentials, Depends(get_credentials)],
    client: Annotated[CatalogClient, Depends(get_client)],
) -> SessionUser:
    """Resolve the session user; an expired session raises AuthenticationRequiredError."""
    return await client.fetch_current_user(credentials)


async def get_surface() -> ProductEditSurface:
    """Get edit surface dependency."""
    return get_edit_surface()


async def get_preferences() -> PreferenceStore:
    """Get preference store dependency."""
    return get_preference_store()


# Type aliases for cleaner annotations
SellerCredentials = Annotated[Credentials, Depends(get_credentials)]
CurrentUser = Annotated[SessionUser, Depends(get_current_user)]
EditSurface = Annotated[ProductEditSurface, Depends(get_surface)]
Preferences = Annotated[PreferenceStore, Depends(get_preferences)]
