"""DeFactuur API services."""

from defactuur.services.defactuur_client import DeFactuurClient

__all__ = ["DeFactuurClient"]
