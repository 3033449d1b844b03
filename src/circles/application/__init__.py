"""Application layer: use cases, ports, and DTOs. Depends only on domain."""

from circles.application.circle_service import CircleService
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
    UserCreated,
    UserDeleted,
    UserDetails,
)
from circles.application.existence import CircleExistenceService, UserExistenceService
from circles.application.ports import CircleRepository, UserRepository
from circles.application.user_service import UserService

__all__ = [
    "CircleCreated",
    "CircleDeleted",
    "CircleDetails",
    "CircleExistenceService",
    "CircleFull",
    "CircleRenamed",
    "CircleRepository",
    "CircleService",
    "CircleSummary",
    "Duplicate",
    "Invalid",
    "MemberAdded",
    "MemberRemoved",
    "NotFound",
    "OwnerCannotBeMember",
    "UserCreated",
    "UserDeleted",
    "UserDetails",
    "UserExistenceService",
    "UserRepository",
    "UserService",
]
