"""Python client for the DeFactuur invoicing API."""

from defactuur.core.errors import (
    ApiError,
    AuthenticationFailed,
    DeFactuurConnectionError,
    DeFactuurError,
    InvalidArgument,
    InvalidResponse,
    InvalidValue,
    UnsupportedMethod,
    ValidationError,
)
from defactuur.models import (
    Address,
    Client,
    Invoice,
    Item,
    Mail,
    Payment,
    Product,
    State,
)
from defactuur.services import DeFactuurClient
from defactuur.version import __version__

__all__ = [
    "__version__",
    "DeFactuurClient",
    "Address",
    "Client",
    "Invoice",
    "Item",
    "Mail",
    "Payment",
    "Product",
    "State",
    "DeFactuurError",
    "ApiError",
    "AuthenticationFailed",
    "DeFactuurConnectionError",
    "InvalidArgument",
    "InvalidResponse",
    "InvalidValue",
    "UnsupportedMethod",
    "ValidationError",
]
