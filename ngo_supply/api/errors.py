# ngo_supply/api/errors.py
"""Exception hierarchy shared by the routing core, the HTTP routes and the
Socket.IO handlers.

Validation and upstream errors carry a human-readable message that is shown
to the user as-is; the contract errors (EmptyRouteSet, IndexOutOfRange) mean
the caller used the routing core incorrectly.
"""

from typing import Any, Optional


class SupplyRoutingError(Exception):
    """Base class for every error raised by this package."""

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message or self.__class__.__doc__ or ""


class ValidationError(SupplyRoutingError):
    """Invalid user input."""


class IncompleteSelection(ValidationError):
    """Please select items and calculate route."""


class MixedWarehouseSelection(ValidationError):
    """All requested items must come from the same warehouse."""


class UpstreamProviderError(SupplyRoutingError):
    """The directions or places provider failed."""

    def __init__(self, message: str = "", detail: Optional[Any] = None):
        super().__init__(message)
        self.detail = detail


class BackendError(SupplyRoutingError):
    """The backend persistence API rejected a request or could not be reached."""

    def __init__(self, message: str = "", status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class MalformedPolyline(SupplyRoutingError, ValueError):
    """Encoded polyline is structurally invalid."""


class InvalidLegData(SupplyRoutingError, ValueError):
    """Directions leg is missing distance or duration values."""


class RouteSelectionError(SupplyRoutingError):
    """Route selection API used outside its contract."""


class EmptyRouteSet(RouteSelectionError):
    """No routes to rank or display."""


class IndexOutOfRange(RouteSelectionError, IndexError):
    """Route index is not a position in the current route set."""


__all__ = [
    "SupplyRoutingError",
    "ValidationError",
    "IncompleteSelection",
    "MixedWarehouseSelection",
    "UpstreamProviderError",
    "BackendError",
    "MalformedPolyline",
    "InvalidLegData",
    "RouteSelectionError",
    "EmptyRouteSet",
    "IndexOutOfRange",
]
