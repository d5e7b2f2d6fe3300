"""Shared behaviour for DeFactuur domain entities.

Entities are pydantic models whose fields are the explicit mapping from
wire keys to typed attributes. Hydration ignores unknown keys and treats a
null value like an absent key, so defaults stay in place.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError

from defactuur.core.errors import InvalidResponse

EntityT = TypeVar("EntityT", bound="Entity")


def compact(data: Dict[str, Any]) -> Dict[str, Any]:
    """Drop keys whose value is None."""
    return {key: value for key, value in data.items() if value is not None}


def format_date(value: Optional[datetime]) -> Optional[str]:
    """Render a datetime as the ``YYYY-MM-DD`` form the API accepts."""
    if value is None:
        return None
    return value.strftime("%Y-%m-%d")


def format_datetime(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    return value.isoformat()


def split_addresses(value: Any) -> Any:
    """Accept e-mail addresses as a list or as a comma separated string."""
    if isinstance(value, str):
        return [part.strip() for part in value.split(",") if part.strip()]
    return value


class Entity(BaseModel):
    """Base class for all DeFactuur domain entities."""

    model_config = ConfigDict(extra="ignore", arbitrary_types_allowed=True)

    @model_validator(mode="before")
    @classmethod
    def drop_nulls(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return compact(data)
        return data

    @field_validator("*", mode="after")
    @classmethod
    def assume_utc(cls, value: Any) -> Any:
        # Naive values are read as UTC, like Unix timestamps
        if isinstance(value, datetime) and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @classmethod
    def from_raw_data(cls: type[EntityT], data: Dict[str, Any]) -> EntityT:
        """Build an entity from a decoded JSON mapping.

        Raises:
            InvalidResponse: If a value cannot be read as its field's type
        """
        try:
            return cls.model_validate(data)
        except PydanticValidationError as e:
            raise InvalidResponse(f"Invalid {cls.__name__} data: {e}") from e

    @classmethod
    def from_raw_list(cls: type[EntityT], rows: Optional[List[Dict[str, Any]]]) -> List[EntityT]:
        """Build a list of entities from a decoded JSON array."""
        return [cls.from_raw_data(row) for row in rows or []]

    def to_payload(self, for_api: bool = False) -> Dict[str, Any]:
        """Convert the entity into nested plain data.

        Every entity overrides this: which fields the API accepts differs
        per resource, so there is no generic shape.

        Args:
            for_api: Shape the result for a create/update request: server
                assigned fields are left out and null fields dropped.
        """
        raise NotImplementedError(f"{type(self).__name__} must implement to_payload")
