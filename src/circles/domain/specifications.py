"""Business rules as specification objects: member capacity and recommendation."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Protocol

from dateutil.relativedelta import relativedelta

from circles.domain.entities import Circle, CircleMembers

BASIC_MEMBER_LIMIT = 30
PREMIUM_MEMBER_LIMIT = 50
PREMIUM_MEMBER_THRESHOLD = 10
MIN_PARTICIPANTS_FOR_RECOMMENDATION = 10


class CircleSpecification(Protocol):
    """Predicate over a Circle. Repositories may push known ones down to the store."""

    def is_satisfied_by(self, circle: Circle) -> bool: ...


@dataclass(frozen=True)
class CapacityLimits:
    """
    Participant limits (owner included) for a circle.
    premium_limit applies once premium_threshold participants are premium.
    """

    basic_limit: int = BASIC_MEMBER_LIMIT
    premium_limit: int = PREMIUM_MEMBER_LIMIT
    premium_threshold: int = PREMIUM_MEMBER_THRESHOLD


class CircleMemberLimitSpecification:
    """Is there room for one more participant, given the premium tier?"""

    def __init__(self, limits: CapacityLimits | None = None) -> None:
        self.limits = limits or CapacityLimits()

    def max_limit(self, circle_members: CircleMembers) -> int:
        if circle_members.count_premium_members() >= self.limits.premium_threshold:
            return self.limits.premium_limit
        return self.limits.basic_limit

    def is_satisfied_by(self, circle_members: CircleMembers) -> bool:
        # Evaluated before the candidate is added: room for exactly one more.
        return circle_members.total_participants < self.max_limit(circle_members)

    def available_slots(self, circle_members: CircleMembers) -> int:
        return self.max_limit(circle_members) - circle_members.total_participants


@dataclass(frozen=True)
class RecommendationRules:
    min_participants: int = MIN_PARTICIPANTS_FOR_RECOMMENDATION
    window: relativedelta = field(default_factory=lambda: relativedelta(months=1))


class RecommendedCircleSpecification:
    """
    Circles created within the recommendation window before base_time that
    already have enough participants.

    The window is calendar based: one month before March 31 is the last day
    of February.
    """

    def __init__(
        self,
        base_time: datetime,
        rules: RecommendationRules | None = None,
    ) -> None:
        if base_time.tzinfo is None:
            base_time = base_time.replace(tzinfo=timezone.utc)
        self.base_time = base_time
        self.rules = rules or RecommendationRules()

    @property
    def created_after(self) -> datetime:
        return self.base_time - self.rules.window

    def is_satisfied_by(self, circle: Circle) -> bool:
        return self._is_recently_created(circle) and self._has_enough_members(circle)

    def __call__(self, circle: Circle) -> bool:
        return self.is_satisfied_by(circle)

    def _is_recently_created(self, circle: Circle) -> bool:
        return circle.created_at > self.created_after

    def _has_enough_members(self, circle: Circle) -> bool:
        return circle.total_participants >= self.rules.min_participants
