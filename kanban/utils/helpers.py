"""Small helpers shared by the service layer."""

from typing import Any


def enum_value(value: Any) -> Any:
    """Return ``value.value`` for enum members, anything else unchanged."""
    return getattr(value, "value", value)
