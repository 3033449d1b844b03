"""Value objects: CircleName, FullName, Email. Immutable and self-validating."""

import re
from dataclasses import dataclass

from circles.domain.errors import InvalidCircleName, InvalidEmail, InvalidFullName

CIRCLE_NAME_MIN_LENGTH = 3
CIRCLE_NAME_MAX_LENGTH = 50
NAME_PART_MAX_LENGTH = 50

_EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")


@dataclass(frozen=True)
class CircleName:
    """
    Name of a circle. Surrounding whitespace is dropped and the length
    bounds apply to what remains.
    """

    value: str

    def __post_init__(self):
        name = (self.value or "").strip()
        if not name:
            raise InvalidCircleName(
                "Circle name cannot be empty.", field="name", value=self.value
            )
        if len(name) > CIRCLE_NAME_MAX_LENGTH:
            raise InvalidCircleName(
                f"Circle name cannot exceed {CIRCLE_NAME_MAX_LENGTH} characters.",
                field="name",
                value=self.value,
            )
        if len(name) < CIRCLE_NAME_MIN_LENGTH:
            raise InvalidCircleName(
                f"Circle name must be at least {CIRCLE_NAME_MIN_LENGTH} characters.",
                field="name",
                value=self.value,
            )
        object.__setattr__(self, "value", name)

    def __str__(self) -> str:
        return self.value


def _clean_name_part(value: str, label: str) -> str:
    part = (value or "").strip()
    if not part:
        raise InvalidFullName(f"{label} cannot be empty.", field=label, value=value)
    if len(part) > NAME_PART_MAX_LENGTH:
        raise InvalidFullName(
            f"{label} cannot exceed {NAME_PART_MAX_LENGTH} characters.",
            field=label,
            value=value,
        )
    return part


@dataclass(frozen=True)
class FullName:
    """First and last name of a user, both required."""

    first_name: str
    last_name: str

    def __post_init__(self):
        object.__setattr__(
            self, "first_name", _clean_name_part(self.first_name, "first name")
        )
        object.__setattr__(
            self, "last_name", _clean_name_part(self.last_name, "last name")
        )

    def __str__(self) -> str:
        return f"{self.first_name} {self.last_name}"


@dataclass(frozen=True)
class Email:
    value: str

    def __post_init__(self):
        if not self.value:
            raise InvalidEmail("Email cannot be empty.", field="email", value=self.value)
        if not isinstance(self.value, str) or not _EMAIL_PATTERN.fullmatch(self.value):
            raise InvalidEmail(
                f"Invalid email format: {self.value}", field="email", value=self.value
            )

    def __str__(self) -> str:
        return self.value
