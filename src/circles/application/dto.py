"""Outcome values returned by use cases. Failures expose a kind instead of raising."""

from dataclasses import dataclass
from datetime import datetime
from typing import ClassVar

from circles.domain import Circle, DomainError, ErrorKind, User

# --- failures ---


@dataclass(frozen=True)
class Invalid:
    """Input was rejected by an identifier or value object."""

    kind: ClassVar[ErrorKind] = ErrorKind.VALIDATION

    reason: str
    field: str | None = None
    value: str | None = None

    @classmethod
    def from_error(cls, error: DomainError) -> "Invalid":
        value = None if error.value is None else str(error.value)
        return cls(reason=error.message, field=error.field, value=value)


@dataclass(frozen=True)
class NotFound:
    kind: ClassVar[ErrorKind] = ErrorKind.NOT_FOUND

    entity: str
    identifier: str


@dataclass(frozen=True)
class Duplicate:
    """Another aggregate already uses this name."""

    kind: ClassVar[ErrorKind] = ErrorKind.CONFLICT

    entity: str
    name: str
    existing_id: str | None = None


@dataclass(frozen=True)
class CircleFull:
    kind: ClassVar[ErrorKind] = ErrorKind.CAPACITY

    circle_id: str
    max_participants: int
    total_participants: int


@dataclass(frozen=True)
class OwnerCannotBeMember:
    kind: ClassVar[ErrorKind] = ErrorKind.RULE_VIOLATION

    circle_id: str
    user_id: str


# --- circles ---


@dataclass(frozen=True)
class CircleCreated:
    circle_id: str
    name: str


@dataclass(frozen=True)
class CircleDetails:
    circle_id: str
    name: str
    owner_id: str
    member_ids: tuple[str, ...]
    total_participants: int
    max_participants: int
    available_slots: int
    created_at: datetime


@dataclass(frozen=True)
class CircleSummary:
    circle_id: str
    name: str
    owner_id: str
    member_count: int
    total_participants: int
    created_at: datetime

    @classmethod
    def from_circle(cls, circle: Circle) -> "CircleSummary":
        return cls(
            circle_id=circle.id.value,
            name=circle.name.value,
            owner_id=circle.owner_id.value,
            member_count=circle.member_count,
            total_participants=circle.total_participants,
            created_at=circle.created_at,
        )


@dataclass(frozen=True)
class MemberAdded:
    circle_id: str
    user_id: str
    available_slots: int
    already_member: bool = False


@dataclass(frozen=True)
class MemberRemoved:
    circle_id: str
    user_id: str
    was_member: bool


@dataclass(frozen=True)
class CircleRenamed:
    circle_id: str
    name: str


@dataclass(frozen=True)
class CircleDeleted:
    circle_id: str


# --- users ---


@dataclass(frozen=True)
class UserCreated:
    user_id: str


@dataclass(frozen=True)
class UserDetails:
    user_id: str
    first_name: str
    last_name: str
    email: str
    is_premium: bool

    @classmethod
    def from_user(cls, user: User) -> "UserDetails":
        return cls(
            user_id=user.id.value,
            first_name=user.name.first_name,
            last_name=user.name.last_name,
            email=user.email.value,
            is_premium=user.is_premium,
        )


@dataclass(frozen=True)
class UserDeleted:
    user_id: str
