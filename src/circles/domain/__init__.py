"""Domain layer: identifiers, value objects, entities and rules. No dependencies on outer layers."""

from circles.domain.entities import Circle, CircleMembers, User
from circles.domain.errors import (
    CircleNameConflict,
    DomainError,
    ErrorKind,
    InvalidCircleName,
    InvalidEmail,
    InvalidFullName,
    InvalidIdentifier,
    MembershipError,
    ValidationError,
)
from circles.domain.identifiers import CircleID, UserID
from circles.domain.services import CircleMemberService, CircleRecommendationService
from circles.domain.specifications import (
    CapacityLimits,
    CircleMemberLimitSpecification,
    CircleSpecification,
    RecommendationRules,
    RecommendedCircleSpecification,
)
from circles.domain.value_objects import CircleName, Email, FullName

__all__ = [
    "CapacityLimits",
    "Circle",
    "CircleID",
    "CircleMemberLimitSpecification",
    "CircleMemberService",
    "CircleMembers",
    "CircleName",
    "CircleNameConflict",
    "CircleRecommendationService",
    "CircleSpecification",
    "DomainError",
    "Email",
    "ErrorKind",
    "FullName",
    "InvalidCircleName",
    "InvalidEmail",
    "InvalidFullName",
    "InvalidIdentifier",
    "MembershipError",
    "RecommendationRules",
    "RecommendedCircleSpecification",
    "User",
    "UserID",
    "ValidationError",
]
