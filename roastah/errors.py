"""Domain errors raised by the edit surface and the catalog client.

Each error carries the HTTP status the API layer answers with.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from roastah.core.product_state import ProductState


class RoastahError(Exception):
    """Base class for recoverable, per-action failures."""

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ProductNotFoundError(RoastahError):
    status_code = 404

    def __init__(self, product_id: int) -> None:
        super().__init__(f"Product {product_id} not found")
        self.product_id = product_id


class InvalidTransitionError(RoastahError):
    """Requested state is not reachable from the current state."""

    status_code = 409

    def __init__(self, current: ProductState, target: ProductState) -> None:
        super().__init__(f"Cannot move product from {current} to {target}")
        self.current = current
        self.target = target


class TransitionRejectedError(RoastahError):
    """The catalog refused a state change the local table allowed."""

    status_code = 409


class TagToggleRejectedError(RoastahError):
    status_code = 409


class ProductLockedError(RoastahError):
    """Fields and tags are read-only in the product's current state."""

    status_code = 409

    def __init__(self, product_id: int, state: ProductState) -> None:
        super().__init__(f"Product {product_id} is not editable while {state}")
        self.product_id = product_id
        self.state = state


class ProductNotDeletableError(RoastahError):
    status_code = 409

    def __init__(self, product_id: int, state: ProductState) -> None:
        super().__init__(f"Product {product_id} cannot be deleted while {state}")
        self.product_id = product_id
        self.state = state


class ConfirmationRequiredError(RoastahError):
    """Irreversible action attempted without explicit confirmation."""

    status_code = 428


class ControlBusyError(RoastahError):
    """A request from the same control is still in flight."""

    status_code = 429

    def __init__(self, product_id: int, control: str) -> None:
        super().__init__(f"'{control}' for product {product_id} is already in progress")
        self.product_id = product_id
        self.control = control


class AuthenticationRequiredError(RoastahError):
    """The seller's session is missing or expired."""

    status_code = 401

    def __init__(self, login_url: str) -> None:
        super().__init__("Session expired, please log in again")
        self.login_url = login_url


class CatalogUnavailableError(RoastahError):
    """The catalog API failed or could not be reached."""

    status_code = 502


class InvalidPreferenceError(RoastahError):
    status_code = 422


__all__ = [
    "RoastahError",
    "ProductNotFoundError",
    "InvalidTransitionError",
    "TransitionRejectedError",
    "TagToggleRejectedError",
    "ProductLockedError",
    "ProductNotDeletableError",
    "ConfirmationRequiredError",
    "ControlBusyError",
    "AuthenticationRequiredError",
    "CatalogUnavailableError",
    "InvalidPreferenceError",
]
