"""Core module - product lifecycle view-model, product cache, UI preferences."""

from roastah.core.preferences import PreferenceStore, get_preference_store
from roastah.core.product_state import ProductState, ProductTag

__all__ = [
    "PreferenceStore",
    "get_preference_store",
    "ProductState",
    "ProductTag",
]
