"""DeFactuur domain entities and value objects."""

from defactuur.models.base import Entity
from defactuur.models.client import Address, Client
from defactuur.models.invoice import Invoice, Item, Mail, Payment
from defactuur.models.product import Product
from defactuur.models.state import State

__all__ = [
    "Entity",
    "Address",
    "Client",
    "Invoice",
    "Item",
    "Mail",
    "Payment",
    "Product",
    "State",
]
