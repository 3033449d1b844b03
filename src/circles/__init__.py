"""
Circles core: clean-architecture layout.

- domain: identifiers, value objects, entities (User, Circle, CircleMembers),
  capacity and recommendation rules. No outer dependencies.
- application: use cases (CircleService, UserService), ports, outcome DTOs.
- infrastructure: adapters (in-memory and Neo4j repositories).
"""

from circles.application import (
    CircleFull,
    CircleRepository,
    CircleService,
    Duplicate,
    Invalid,
    NotFound,
    OwnerCannotBeMember,
    UserRepository,
    UserService,
)
from circles.domain import (
    CapacityLimits,
    Circle,
    CircleID,
    CircleMembers,
    CircleName,
    Email,
    ErrorKind,
    FullName,
    RecommendationRules,
    User,
    UserID,
)
from circles.infrastructure import (
    InMemoryCircleRepository,
    InMemoryUserRepository,
    Neo4jCircleRepository,
    Neo4jUserRepository,
)

__all__ = [
    "CapacityLimits",
    "Circle",
    "CircleFull",
    "CircleID",
    "CircleMembers",
    "CircleName",
    "CircleRepository",
    "CircleService",
    "Duplicate",
    "Email",
    "ErrorKind",
    "FullName",
    "InMemoryCircleRepository",
    "InMemoryUserRepository",
    "Invalid",
    "Neo4jCircleRepository",
    "Neo4jUserRepository",
    "NotFound",
    "OwnerCannotBeMember",
    "RecommendationRules",
    "User",
    "UserID",
    "UserRepository",
    "UserService",
]
