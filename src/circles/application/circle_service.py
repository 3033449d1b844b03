"""Circle use cases: create, inspect, rename, delete, membership and recommendations."""

import logging
from collections.abc import Callable
from datetime import datetime, timezone

from circles.application.dto import (
    CircleCreated,
    CircleDeleted,
    CircleDetails,
    CircleFull,
    CircleRenamed,
    CircleSummary,
    Duplicate,
    Invalid,
    MemberAdded,
    MemberRemoved,
    NotFound,
    OwnerCannotBeMember,
)
from circles.application.existence import CircleExistenceService
from circles.application.ports import CircleRepository, UserRepository
from circles.domain import (
    CapacityLimits,
    Circle,
    CircleID,
    CircleMemberService,
    CircleMembers,
    CircleName,
    CircleNameConflict,
    RecommendationRules,
    RecommendedCircleSpecification,
    UserID,
    ValidationError,
)

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CircleService:
    """Loads circles and their users, applies the domain rules, then saves."""

    def __init__(
        self,
        circle_repository: CircleRepository,
        user_repository: UserRepository,
        *,
        limits: CapacityLimits | None = None,
        rules: RecommendationRules | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._circles = circle_repository
        self._users = user_repository
        self._existence = CircleExistenceService(circle_repository)
        self._members = CircleMemberService(limits)
        self._rules = rules or RecommendationRules()
        self._clock = clock or _utcnow

    def create_circle(
        self, name: str, owner_id: str
    ) -> CircleCreated | Invalid | NotFound | Duplicate:
        try:
            circle_name = CircleName(name)
            owner_uid = UserID.reconstruct(owner_id)
        except ValidationError as e:
            return Invalid.from_error(e)

        if self._users.find_by_id(owner_uid) is None:
            return NotFound(entity="user", identifier=owner_uid.value)

        circle = Circle.create(circle_name, owner_uid)
        conflict = self._existence.find_conflict(circle)
        if conflict is not None:
            return Duplicate(
                entity="circle", name=circle_name.value, existing_id=conflict.id.value
            )
        try:
            self._circles.save(circle)
        except CircleNameConflict:
            # Lost a race with a concurrent create of the same name.
            return self._name_taken(circle_name)

        logger.info("Circle %s created by %s", circle.id, owner_uid)
        return CircleCreated(circle_id=circle.id.value, name=circle.name.value)

    def get_circle(self, circle_id: str) -> CircleDetails | Invalid | NotFound:
        loaded = self._load_circle(circle_id)
        if not isinstance(loaded, Circle):
            return loaded
        circle = loaded
        circle_members = self._load_circle_members(circle)
        if isinstance(circle_members, NotFound):
            return circle_members
        return CircleDetails(
            circle_id=circle.id.value,
            name=circle.name.value,
            owner_id=circle.owner_id.value,
            member_ids=tuple(m.value for m in circle.member_ids),
            total_participants=circle.total_participants,
            max_participants=self._members.get_max_limit(circle_members),
            available_slots=self._members.get_available_slots(circle_members),
            created_at=circle.created_at,
        )

    def list_circles(self) -> list[CircleSummary]:
        return [CircleSummary.from_circle(c) for c in self._circles.find_all()]

    def add_member(
        self, circle_id: str, user_id: str
    ) -> MemberAdded | Invalid | NotFound | OwnerCannotBeMember | CircleFull:
        """Add a user to a circle if the premium-aware capacity allows one more."""
        try:
            cid = CircleID.reconstruct(circle_id)
            uid = UserID.reconstruct(user_id)
        except ValidationError as e:
            return Invalid.from_error(e)

        circle = self._circles.find_by_id(cid)
        if circle is None:
            return NotFound(entity="circle", identifier=cid.value)
        user = self._users.find_by_id(uid)
        if user is None:
            return NotFound(entity="user", identifier=uid.value)

        if circle.is_owner(uid):
            return OwnerCannotBeMember(circle_id=cid.value, user_id=uid.value)

        circle_members = self._load_circle_members(circle)
        if isinstance(circle_members, NotFound):
            return circle_members

        if circle.is_member(uid):
            return MemberAdded(
                circle_id=cid.value,
                user_id=uid.value,
                available_slots=self._members.get_available_slots(circle_members),
                already_member=True,
            )

        if not self._members.can_add_member(circle_members):
            max_limit = self._members.get_max_limit(circle_members)
            logger.info(
                "Circle %s is full (%d/%d), rejected %s",
                cid,
                circle_members.total_participants,
                max_limit,
                uid,
            )
            return CircleFull(
                circle_id=cid.value,
                max_participants=max_limit,
                total_participants=circle_members.total_participants,
            )

        circle.add_member(uid)
        self._circles.save(circle)
        logger.info("User %s joined circle %s", uid, cid)

        # The new member may lift the circle into the premium tier.
        after = CircleMembers(
            owner=circle_members.owner, members=circle_members.members + (user,)
        )
        return MemberAdded(
            circle_id=cid.value,
            user_id=uid.value,
            available_slots=self._members.get_available_slots(after),
        )

    def remove_member(
        self, circle_id: str, user_id: str
    ) -> MemberRemoved | Invalid | NotFound:
        try:
            uid = UserID.reconstruct(user_id)
        except ValidationError as e:
            return Invalid.from_error(e)
        loaded = self._load_circle(circle_id)
        if not isinstance(loaded, Circle):
            return loaded
        circle = loaded

        removed = circle.remove_member(uid)
        if removed:
            self._circles.save(circle)
            logger.info("User %s left circle %s", uid, circle.id)
        return MemberRemoved(
            circle_id=circle.id.value, user_id=uid.value, was_member=removed
        )

    def rename_circle(
        self, circle_id: str, name: str
    ) -> CircleRenamed | Invalid | NotFound | Duplicate:
        try:
            new_name = CircleName(name)
        except ValidationError as e:
            return Invalid.from_error(e)
        loaded = self._load_circle(circle_id)
        if not isinstance(loaded, Circle):
            return loaded
        circle = loaded

        circle.change_name(new_name)
        conflict = self._existence.find_conflict(circle)
        if conflict is not None:
            return Duplicate(
                entity="circle", name=new_name.value, existing_id=conflict.id.value
            )
        try:
            self._circles.save(circle)
        except CircleNameConflict:
            return self._name_taken(new_name)
        logger.info("Circle %s renamed to %r", circle.id, new_name.value)
        return CircleRenamed(circle_id=circle.id.value, name=new_name.value)

    def delete_circle(self, circle_id: str) -> CircleDeleted | Invalid | NotFound:
        loaded = self._load_circle(circle_id)
        if not isinstance(loaded, Circle):
            return loaded
        self._circles.delete(loaded.id)
        logger.info("Circle %s deleted", loaded.id)
        return CircleDeleted(circle_id=loaded.id.value)

    def list_recommended_circles(
        self, now: datetime | None = None
    ) -> list[CircleSummary]:
        """Recently created circles with enough participants, relative to now."""
        specification = RecommendedCircleSpecification(
            now or self._clock(), self._rules
        )
        circles = self._circles.find_by_specification(specification)
        return [CircleSummary.from_circle(c) for c in circles]

    def _name_taken(self, name: CircleName) -> Duplicate:
        existing = self._circles.find_by_name(name)
        return Duplicate(
            entity="circle",
            name=name.value,
            existing_id=existing.id.value if existing is not None else None,
        )

    def _load_circle(self, circle_id: str) -> Circle | Invalid | NotFound:
        try:
            cid = CircleID.reconstruct(circle_id)
        except ValidationError as e:
            return Invalid.from_error(e)
        circle = self._circles.find_by_id(cid)
        if circle is None:
            return NotFound(entity="circle", identifier=cid.value)
        return circle

    def _load_circle_members(self, circle: Circle) -> CircleMembers | NotFound:
        """Owner plus member Users. A member whose user is gone stays as None
        so the participant count still matches the circle."""
        owner = self._users.find_by_id(circle.owner_id)
        if owner is None:
            return NotFound(entity="user", identifier=circle.owner_id.value)
        members = tuple(self._users.find_by_id(mid) for mid in circle.member_ids)
        return CircleMembers(owner=owner, members=members)
