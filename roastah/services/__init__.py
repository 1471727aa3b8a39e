"""Business logic services."""

from roastah.services.catalog_client import CatalogClient, Credentials, get_catalog_client
from roastah.services.edit_surface import ProductEditSurface, get_edit_surface

__all__ = [
    "CatalogClient",
    "Credentials",
    "get_catalog_client",
    "ProductEditSurface",
    "get_edit_surface",
]
