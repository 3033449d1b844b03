"""Neo4j implementations of CircleRepository and UserRepository.

Graph: (:User {id, first_name, last_name, email, is_premium}) and
(:Circle {id, name, owner_id, member_ids, created_at}). A circle keeps its
members as an ordered list of user ids, so one SET replaces the whole
membership and readers never see a partial update.
"""

import logging
from collections.abc import Callable
from datetime import datetime, timezone

from neo4j.exceptions import ConstraintError

from circles.domain import (
    Circle,
    CircleID,
    CircleName,
    CircleNameConflict,
    Email,
    FullName,
    RecommendedCircleSpecification,
    User,
    UserID,
)

logger = logging.getLogger(__name__)

_CONSTRAINT_QUERIES = (
    """
    CREATE CONSTRAINT circle_id_unique IF NOT EXISTS
    FOR (c:Circle) REQUIRE c.id IS UNIQUE
    """,
    """
    CREATE CONSTRAINT circle_name_unique IF NOT EXISTS
    FOR (c:Circle) REQUIRE c.name IS UNIQUE
    """,
    """
    CREATE CONSTRAINT user_id_unique IF NOT EXISTS
    FOR (u:User) REQUIRE u.id IS UNIQUE
    """,
)

_SAVE_CIRCLE_QUERY = """
MERGE (c:Circle {id: $id})
SET c.name = $name,
    c.owner_id = $owner_id,
    c.member_ids = $member_ids,
    c.created_at = $created_at
"""

_RECOMMENDED_CIRCLES_QUERY = """
MATCH (c:Circle)
WHERE datetime(c.created_at) > datetime($created_after)
  AND 1 + size(coalesce(c.member_ids, [])) >= $min_participants
RETURN c
ORDER BY c.created_at
"""


def ensure_constraints(driver) -> None:
    """Create uniqueness constraints (circle id and name, user id) if missing."""
    with driver.session() as session:
        for query in _CONSTRAINT_QUERIES:
            session.run(query)


def _datetime_to_iso(dt: datetime) -> str:
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).isoformat()


def _iso_to_datetime(s: str) -> datetime:
    return datetime.fromisoformat(s.replace("Z", "+00:00"))


def _save_circle_tx(tx, params: dict) -> None:
    tx.run(_SAVE_CIRCLE_QUERY, **params)


class Neo4jCircleRepository:
    """Stores circles as :Circle nodes. Member ids are weak references to users."""

    def __init__(self, driver: object) -> None:
        self._driver = driver

    def find_by_id(self, circle_id: CircleID) -> Circle | None:
        with self._driver.session() as session:
            result = session.run(
                "MATCH (c:Circle {id: $id}) RETURN c", id=circle_id.value
            )
            record = result.single()
        if not record:
            return None
        return _record_to_circle(record)

    def find_by_name(self, name: CircleName) -> Circle | None:
        with self._driver.session() as session:
            result = session.run(
                "MATCH (c:Circle {name: $name}) RETURN c LIMIT 1", name=name.value
            )
            record = result.single()
        if not record:
            return None
        return _record_to_circle(record)

    def find_all(self) -> list[Circle]:
        with self._driver.session() as session:
            result = session.run("MATCH (c:Circle) RETURN c ORDER BY c.created_at")
            return [_record_to_circle(rec) for rec in result]

    def find_by_specification(
        self, specification: Callable[[Circle], bool]
    ) -> list[Circle]:
        """Recommendation rules run in Cypher; any other predicate filters find_all()."""
        if isinstance(specification, RecommendedCircleSpecification):
            with self._driver.session() as session:
                result = session.run(
                    _RECOMMENDED_CIRCLES_QUERY,
                    created_after=_datetime_to_iso(specification.created_after),
                    min_participants=specification.rules.min_participants,
                )
                return [_record_to_circle(rec) for rec in result]
        return [c for c in self.find_all() if specification(c)]

    def save(self, circle: Circle) -> None:
        params = {
            "id": circle.id.value,
            "name": circle.name.value,
            "owner_id": circle.owner_id.value,
            "member_ids": [m.value for m in circle.member_ids],
            "created_at": _datetime_to_iso(circle.created_at),
        }
        try:
            with self._driver.session() as session:
                session.execute_write(_save_circle_tx, params)
        except ConstraintError as e:
            raise CircleNameConflict(
                "Circle name already exists.", field="name", value=circle.name.value
            ) from e
        logger.debug("Saved circle %s with %d members", circle.id, circle.member_count)

    def delete(self, circle_id: CircleID) -> None:
        with self._driver.session() as session:
            session.run("MATCH (c:Circle {id: $id}) DETACH DELETE c", id=circle_id.value)


class Neo4jUserRepository:
    def __init__(self, driver: object) -> None:
        self._driver = driver

    def find_by_id(self, user_id: UserID) -> User | None:
        with self._driver.session() as session:
            result = session.run("MATCH (u:User {id: $id}) RETURN u", id=user_id.value)
            record = result.single()
        if not record:
            return None
        return _record_to_user(record)

    def find_by_name(self, name: FullName) -> User | None:
        with self._driver.session() as session:
            result = session.run(
                """
                MATCH (u:User {first_name: $first_name, last_name: $last_name})
                RETURN u
                LIMIT 1
                """,
                first_name=name.first_name,
                last_name=name.last_name,
            )
            record = result.single()
        if not record:
            return None
        return _record_to_user(record)

    def save(self, user: User) -> None:
        with self._driver.session() as session:
            session.run(
                """
                MERGE (u:User {id: $id})
                SET u.first_name = $first_name,
                    u.last_name = $last_name,
                    u.email = $email,
                    u.is_premium = $is_premium
                """,
                id=user.id.value,
                first_name=user.name.first_name,
                last_name=user.name.last_name,
                email=user.email.value,
                is_premium=user.is_premium,
            )
        logger.debug("Saved user %s", user.id)

    def delete(self, user_id: UserID) -> None:
        with self._driver.session() as session:
            session.run("MATCH (u:User {id: $id}) DETACH DELETE u", id=user_id.value)


def _record_to_circle(record) -> Circle:
    c = record["c"]
    return Circle.reconstruct(
        id=CircleID.reconstruct(c["id"]),
        name=CircleName(c["name"]),
        owner_id=UserID.reconstruct(c["owner_id"]),
        member_ids=[UserID.reconstruct(m) for m in (c.get("member_ids") or [])],
        created_at=_iso_to_datetime(c["created_at"]),
    )


def _record_to_user(record) -> User:
    u = record["u"]
    return User(
        id=UserID.reconstruct(u["id"]),
        name=FullName(u["first_name"], u["last_name"]),
        email=Email(u["email"]),
        is_premium=bool(u.get("is_premium") or False),
    )
