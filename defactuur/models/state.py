"""Invoice state value object."""

from defactuur.core.errors import InvalidValue


class State:
    """Closed set of invoice states: created, sent or paid.

    Instances are immutable and compare by value.
    """

    CREATED = "created"
    SENT = "sent"
    PAID = "paid"

    ALLOWED_VALUES = (CREATED, SENT, PAID)

    __slots__ = ("_value",)

    def __init__(self, value: str):
        if value not in self.ALLOWED_VALUES:
            raise InvalidValue(f"Invalid state: {value!r}")
        object.__setattr__(self, "_value", value)

    def __setattr__(self, name, value):
        raise AttributeError("State is immutable")

    @property
    def value(self) -> str:
        return self._value

    def __str__(self) -> str:
        return self._value

    def __repr__(self) -> str:
        return f"State({self._value!r})"

    def __eq__(self, other) -> bool:
        if isinstance(other, State):
            return self._value == other._value
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._value)

    @classmethod
    def created(cls) -> "State":
        return cls(cls.CREATED)

    @classmethod
    def sent(cls) -> "State":
        return cls(cls.SENT)

    @classmethod
    def paid(cls) -> "State":
        return cls(cls.PAID)
