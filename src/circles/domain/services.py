"""Stateless domain services over the capacity and recommendation rules."""

from datetime import datetime

from circles.domain.entities import Circle, CircleMembers
from circles.domain.specifications import (
    CapacityLimits,
    CircleMemberLimitSpecification,
    RecommendationRules,
    RecommendedCircleSpecification,
)


class CircleMemberService:
    """Capacity questions asked by use cases before changing membership."""

    def __init__(self, limits: CapacityLimits | None = None) -> None:
        self.specification = CircleMemberLimitSpecification(limits)

    def get_max_limit(self, circle_members: CircleMembers) -> int:
        return self.specification.max_limit(circle_members)

    def can_add_member(self, circle_members: CircleMembers) -> bool:
        return self.specification.is_satisfied_by(circle_members)

    def get_available_slots(self, circle_members: CircleMembers) -> int:
        return self.specification.available_slots(circle_members)


class CircleRecommendationService:
    """Decides which circles to surface, relative to a fixed reference time."""

    def __init__(
        self,
        base_time: datetime,
        rules: RecommendationRules | None = None,
    ) -> None:
        self.specification = RecommendedCircleSpecification(base_time, rules)

    def is_recommended(self, circle: Circle) -> bool:
        return self.specification.is_satisfied_by(circle)

    def filter(self, circles: list[Circle]) -> list[Circle]:
        return [c for c in circles if self.is_recommended(c)]
