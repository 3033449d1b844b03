"""Infrastructure layer: concrete implementations of application ports."""

from circles.infrastructure.memory_repository import (
    InMemoryCircleRepository,
    InMemoryUserRepository,
    ReadWriteLock,
)
from circles.infrastructure.persistence.neo4j_repository import (
    Neo4jCircleRepository,
    Neo4jUserRepository,
    ensure_constraints,
)

__all__ = [
    "InMemoryCircleRepository",
    "InMemoryUserRepository",
    "Neo4jCircleRepository",
    "Neo4jUserRepository",
    "ReadWriteLock",
    "ensure_constraints",
]
