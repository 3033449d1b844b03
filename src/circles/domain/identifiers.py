"""Opaque UUID identifiers for circles and users."""

import uuid
from dataclasses import dataclass, field

from circles.domain.errors import InvalidIdentifier

UUID_TEXT_LENGTH = 36


def _validate_uuid_text(value: str, label: str) -> None:
    if not value:
        raise InvalidIdentifier(f"{label} cannot be empty.", field=label, value=value)
    if not isinstance(value, str) or len(value) != UUID_TEXT_LENGTH:
        raise InvalidIdentifier(f"Invalid {label} format.", field=label, value=value)
    try:
        parsed = uuid.UUID(value)
    except ValueError:
        raise InvalidIdentifier(
            f"Invalid {label} format.", field=label, value=value
        ) from None
    # uuid.UUID drops hyphens and braces before parsing; require 8-4-4-4-12.
    if str(parsed) != value.lower():
        raise InvalidIdentifier(f"Invalid {label} format.", field=label, value=value)


@dataclass(frozen=True)
class CircleID:
    """Identifier of a Circle. Equal when the textual values are equal."""

    value: str = field(default_factory=lambda: str(uuid.uuid4()))

    def __post_init__(self):
        _validate_uuid_text(self.value, "circle ID")

    @classmethod
    def generate(cls) -> "CircleID":
        return cls()

    @classmethod
    def reconstruct(cls, value: str) -> "CircleID":
        """Rebuild from stored text. Raises InvalidIdentifier on bad input."""
        return cls(value=value)

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class UserID:
    """Identifier of a User. Same contract as CircleID."""

    value: str = field(default_factory=lambda: str(uuid.uuid4()))

    def __post_init__(self):
        _validate_uuid_text(self.value, "user ID")

    @classmethod
    def generate(cls) -> "UserID":
        return cls()

    @classmethod
    def reconstruct(cls, value: str) -> "UserID":
        """Rebuild from stored text. Raises InvalidIdentifier on bad input."""
        return cls(value=value)

    def __str__(self) -> str:
        return self.value
