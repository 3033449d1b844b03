"""Domain entities: User, Circle, and the CircleMembers read model."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from circles.domain.errors import MembershipError
from circles.domain.identifiers import CircleID, UserID
from circles.domain.value_objects import CircleName, Email, FullName

if TYPE_CHECKING:
    from circles.domain.specifications import CircleMemberLimitSpecification


def _utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


@dataclass(eq=False)
class User:
    """
    A person who can own or join circles.
    Circles only read id, name and the premium flag.
    """

    name: FullName
    email: Email
    is_premium: bool = False
    id: UserID = field(default_factory=UserID.generate)

    def change_name(self, name: FullName) -> None:
        self.name = name

    def change_email(self, email: Email) -> None:
        self.email = email

    def change_premium(self, is_premium: bool) -> None:
        self.is_premium = bool(is_premium)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, User):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)


class Circle:
    """
    Aggregate root for a membership group.

    Holds only user identifiers. The owner is never stored as a member, so
    total participants is always 1 + member count. Capacity is decided by a
    CircleMemberLimitSpecification, never by the circle itself.
    """

    def __init__(
        self,
        id: CircleID,
        name: CircleName,
        owner_id: UserID,
        member_ids: list[UserID] | tuple[UserID, ...] = (),
        created_at: datetime | None = None,
    ) -> None:
        self._id = id
        self._name = name
        self._owner_id = owner_id
        self._member_ids: list[UserID] = list(member_ids)
        self._created_at = _utc(created_at or datetime.now(timezone.utc))

    @classmethod
    def create(cls, name: CircleName, owner_id: UserID) -> Circle:
        """New circle with a fresh id, no members and the current time."""
        return cls(CircleID.generate(), name, owner_id)

    @classmethod
    def reconstruct(
        cls,
        id: CircleID,
        name: CircleName,
        owner_id: UserID,
        member_ids: list[UserID] | tuple[UserID, ...],
        created_at: datetime,
    ) -> Circle:
        """Rebuild a stored circle. Member order is kept as given."""
        return cls(id, name, owner_id, member_ids, created_at)

    @property
    def id(self) -> CircleID:
        return self._id

    @property
    def name(self) -> CircleName:
        return self._name

    @property
    def owner_id(self) -> UserID:
        return self._owner_id

    @property
    def created_at(self) -> datetime:
        return self._created_at

    @property
    def member_ids(self) -> tuple[UserID, ...]:
        """Snapshot of member ids in insertion order."""
        return tuple(self._member_ids)

    @property
    def member_count(self) -> int:
        return len(self._member_ids)

    @property
    def total_participants(self) -> int:
        return 1 + len(self._member_ids)

    def change_name(self, name: CircleName) -> None:
        self._name = name

    def add_member(self, user_id: UserID) -> None:
        """
        Append a member. Capacity must already have been checked by the caller;
        the circle only refuses the owner and ids it already holds.
        """
        if user_id is None:
            raise MembershipError("Member id is required.", field="user_id")
        if self.is_owner(user_id):
            raise MembershipError(
                "Owner cannot be a member.", field="user_id", value=str(user_id)
            )
        if self.is_member(user_id):
            raise MembershipError(
                "User is already a member.", field="user_id", value=str(user_id)
            )
        self._member_ids.append(user_id)

    def remove_member(self, user_id: UserID) -> bool:
        """Remove the first matching member. Returns False when it was not a member."""
        for i, member_id in enumerate(self._member_ids):
            if member_id == user_id:
                del self._member_ids[i]
                return True
        return False

    def is_member(self, user_id: UserID | None) -> bool:
        if user_id is None:
            return False
        return any(member_id == user_id for member_id in self._member_ids)

    def is_owner(self, user_id: UserID | None) -> bool:
        if user_id is None or self._owner_id is None:
            return False
        return self._owner_id == user_id

    def can_add_member(
        self,
        circle_members: CircleMembers,
        specification: CircleMemberLimitSpecification,
    ) -> bool:
        return specification.is_satisfied_by(circle_members)

    def is_full(
        self,
        circle_members: CircleMembers,
        specification: CircleMemberLimitSpecification,
    ) -> bool:
        return not self.can_add_member(circle_members, specification)

    def available_slots(
        self,
        circle_members: CircleMembers,
        specification: CircleMemberLimitSpecification,
    ) -> int:
        return specification.available_slots(circle_members)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Circle):
            return NotImplemented
        return self._id == other._id

    def __hash__(self) -> int:
        return hash(self._id)

    def __repr__(self) -> str:
        return (
            f"Circle(id={self._id.value!r}, name={self._name.value!r}, "
            f"members={len(self._member_ids)})"
        )


@dataclass(frozen=True)
class CircleMembers:
    """
    Owner and member Users of one circle, loaded for a single policy check.
    Missing users may appear as None and are simply not counted as premium.
    """

    owner: User | None
    members: tuple[User | None, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "members", tuple(self.members))

    def count_premium_members(self) -> int:
        count = 0
        if self.owner is not None and self.owner.is_premium:
            count += 1
        for member in self.members:
            if member is not None and member.is_premium:
                count += 1
        return count

    @property
    def member_count(self) -> int:
        return len(self.members)

    @property
    def total_participants(self) -> int:
        return 1 + len(self.members)
