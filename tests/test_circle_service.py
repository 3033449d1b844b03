"""Unit tests for CircleService and CircleExistenceService. In-memory repositories only."""

from datetime import datetime, timedelta, timezone

from circles.application import (
    CircleCreated,
    CircleDeleted,
    CircleDetails,
    CircleExistenceService,
    CircleFull,
    CircleRenamed,
    CircleService,
    Duplicate,
    Invalid,
    MemberAdded,
    MemberRemoved,
    NotFound,
    OwnerCannotBeMember,
)
from circles.domain import (
    CapacityLimits,
    Circle,
    CircleID,
    CircleName,
    CircleNameConflict,
    Email,
    ErrorKind,
    FullName,
    User,
    UserID,
)
from circles.infrastructure import InMemoryCircleRepository, InMemoryUserRepository

NOW = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)


class _Env:
    def __init__(self, limits: CapacityLimits | None = None) -> None:
        self.circles = InMemoryCircleRepository()
        self.users = InMemoryUserRepository()
        self.service = CircleService(
            self.circles, self.users, limits=limits, clock=lambda: NOW
        )
        self._n = 0

    def user(self, premium: bool = False) -> str:
        self._n += 1
        user = User(
            name=FullName(f"User{self._n}", "Tester"),
            email=Email(f"user{self._n}@example.com"),
            is_premium=premium,
        )
        self.users.save(user)
        return user.id.value

    def circle(self, name: str = "Chess Club", owner_premium: bool = False) -> str:
        created = self.service.create_circle(name, self.user(owner_premium))
        assert isinstance(created, CircleCreated)
        return created.circle_id


# --- create ---


def test_create_circle_stores_it() -> None:
    env = _Env()
    owner_id = env.user()
    result = env.service.create_circle("  Chess Club ", owner_id)
    assert isinstance(result, CircleCreated)
    assert result.name == "Chess Club"

    details = env.service.get_circle(result.circle_id)
    assert isinstance(details, CircleDetails)
    assert details.owner_id == owner_id
    assert details.member_ids == ()
    assert details.total_participants == 1
    assert details.max_participants == 30
    assert details.available_slots == 29


def test_create_circle_invalid_name_or_owner() -> None:
    env = _Env()
    r = env.service.create_circle("ab", env.user())
    assert isinstance(r, Invalid)
    assert r.kind is ErrorKind.VALIDATION
    assert r.field == "name"

    r2 = env.service.create_circle("Chess Club", "not-a-uuid")
    assert isinstance(r2, Invalid)
    assert r2.value == "not-a-uuid"


def test_create_circle_unknown_owner() -> None:
    env = _Env()
    missing = UserID.generate().value
    r = env.service.create_circle("Chess Club", missing)
    assert isinstance(r, NotFound)
    assert r.entity == "user"
    assert r.identifier == missing
    assert env.circles.count() == 0


def test_create_circle_duplicate_name() -> None:
    env = _Env()
    existing_id = env.circle("Chess Club")
    r = env.service.create_circle("Chess Club", env.user())
    assert isinstance(r, Duplicate)
    assert r.kind is ErrorKind.CONFLICT
    assert r.existing_id == existing_id
    assert env.circles.count() == 1


# --- existence ---


def test_existence_same_name_other_circle_exists() -> None:
    repo = InMemoryCircleRepository()
    existing = Circle.create(CircleName("Chess Club"), UserID.generate())
    repo.save(existing)
    service = CircleExistenceService(repo)

    candidate = Circle.create(CircleName("Chess Club"), UserID.generate())
    assert service.exists(candidate) is True
    assert service.exists(existing) is False
    assert service.exists(None) is False
    assert service.exists(Circle.create(CircleName("Go Club"), UserID.generate())) is False
    assert service.find_conflict(candidate) == existing
    assert service.find_conflict(existing) is None


def test_repository_refuses_duplicate_name_on_save() -> None:
    repo = InMemoryCircleRepository()
    repo.save(Circle.create(CircleName("Chess Club"), UserID.generate()))
    other = Circle.create(CircleName("Chess Club"), UserID.generate())
    try:
        repo.save(other)
    except CircleNameConflict as e:
        assert e.kind is ErrorKind.CONFLICT
    else:
        raise AssertionError("expected CircleNameConflict")



class _StaleNameLookup(InMemoryCircleRepository):
    """Misses the first name lookup, as a concurrent create would."""

    def __init__(self) -> None:
        super().__init__()
        self.misses = 0

    def find_by_name(self, name):
        if self.misses:
            self.misses -= 1
            return None
        return super().find_by_name(name)


def test_create_circle_losing_save_race_reports_winner() -> None:
    circles = _StaleNameLookup()
    users = InMemoryUserRepository()
    service = CircleService(circles, users, clock=lambda: NOW)
    owner = User(name=FullName("Ada", "Lovelace"), email=Email("ada@example.com"))
    users.save(owner)
    winner = service.create_circle("Chess Club", owner.id.value)
    assert isinstance(winner, CircleCreated)

    circles.misses = 1
    r = service.create_circle("Chess Club", owner.id.value)
    assert isinstance(r, Duplicate)
    assert r.existing_id == winner.circle_id
    assert circles.count() == 1

# --- get ---


def test_get_circle_not_found_and_invalid() -> None:
    env = _Env()
    assert isinstance(env.service.get_circle(""), Invalid)
    r = env.service.get_circle(CircleID.generate().value)
    assert isinstance(r, NotFound)
    assert r.entity == "circle"


def test_list_circles() -> None:
    env = _Env()
    env.circle("Chess Club")
    env.circle("Go Club")
    names = sorted(s.name for s in env.service.list_circles())
    assert names == ["Chess Club", "Go Club"]


# --- add member ---


def test_add_member() -> None:
    env = _Env()
    circle_id = env.circle()
    user_id = env.user()
    r = env.service.add_member(circle_id, user_id)
    assert isinstance(r, MemberAdded)
    assert r.already_member is False
    assert r.available_slots == 28

    details = env.service.get_circle(circle_id)
    assert details.member_ids == (user_id,)
    assert details.total_participants == 2


def test_add_existing_member_is_idempotent() -> None:
    env = _Env()
    circle_id = env.circle()
    user_id = env.user()
    env.service.add_member(circle_id, user_id)
    r = env.service.add_member(circle_id, user_id)
    assert isinstance(r, MemberAdded)
    assert r.already_member is True
    assert env.service.get_circle(circle_id).total_participants == 2


def test_owner_cannot_be_member() -> None:
    env = _Env()
    owner_id = env.user()
    created = env.service.create_circle("Chess Club", owner_id)
    r = env.service.add_member(created.circle_id, owner_id)
    assert isinstance(r, OwnerCannotBeMember)
    assert r.kind is ErrorKind.RULE_VIOLATION


def test_add_member_unknown_circle_or_user() -> None:
    env = _Env()
    circle_id = env.circle()
    r = env.service.add_member(CircleID.generate().value, env.user())
    assert isinstance(r, NotFound) and r.entity == "circle"
    r2 = env.service.add_member(circle_id, UserID.generate().value)
    assert isinstance(r2, NotFound) and r2.entity == "user"
    assert isinstance(env.service.add_member(circle_id, "bad"), Invalid)


def test_basic_circle_fills_at_thirty() -> None:
    env = _Env()
    circle_id = env.circle()
    for _ in range(29):
        assert isinstance(env.service.add_member(circle_id, env.user()), MemberAdded)
    details = env.service.get_circle(circle_id)
    assert details.total_participants == 30
    assert details.available_slots == 0

    r = env.service.add_member(circle_id, env.user())
    assert isinstance(r, CircleFull)
    assert r.kind is ErrorKind.CAPACITY
    assert r.max_participants == 30
    assert r.total_participants == 30
    assert env.service.get_circle(circle_id).total_participants == 30


def test_premium_members_raise_the_limit() -> None:
    env = _Env()
    circle_id = env.circle()
    for _ in range(9):
        env.service.add_member(circle_id, env.user(premium=True))
    details = env.service.get_circle(circle_id)
    assert details.max_participants == 30
    assert details.available_slots == 20

    r = env.service.add_member(circle_id, env.user(premium=True))
    assert isinstance(r, MemberAdded)
    assert r.available_slots == 39
    details = env.service.get_circle(circle_id)
    assert details.max_participants == 50
    assert details.available_slots == 39


def test_limit_never_exceeded_with_custom_tiers() -> None:
    env = _Env(CapacityLimits(basic_limit=3, premium_limit=4, premium_threshold=2))
    circle_id = env.circle(owner_premium=True)
    assert isinstance(env.service.add_member(circle_id, env.user()), MemberAdded)
    assert isinstance(env.service.add_member(circle_id, env.user()), MemberAdded)
    assert isinstance(env.service.add_member(circle_id, env.user()), CircleFull)
    assert env.service.get_circle(circle_id).total_participants == 3


def test_deleted_member_user_still_takes_a_slot() -> None:
    env = _Env()
    circle_id = env.circle()
    user_id = env.user()
    env.service.add_member(circle_id, user_id)
    env.users.delete(UserID.reconstruct(user_id))
    details = env.service.get_circle(circle_id)
    assert details.total_participants == 2
    assert details.available_slots == 28


# --- remove member ---


def test_remove_member() -> None:
    env = _Env()
    circle_id = env.circle()
    user_id = env.user()
    env.service.add_member(circle_id, user_id)
    r = env.service.remove_member(circle_id, user_id)
    assert isinstance(r, MemberRemoved)
    assert r.was_member is True
    assert env.service.get_circle(circle_id).member_ids == ()

    again = env.service.remove_member(circle_id, user_id)
    assert isinstance(again, MemberRemoved)
    assert again.was_member is False


def test_remove_member_unknown_circle() -> None:
    env = _Env()
    r = env.service.remove_member(CircleID.generate().value, UserID.generate().value)
    assert isinstance(r, NotFound)


# --- rename / delete ---


def test_rename_circle() -> None:
    env = _Env()
    circle_id = env.circle("Chess Club")
    r = env.service.rename_circle(circle_id, "Go Club")
    assert isinstance(r, CircleRenamed)
    assert env.service.get_circle(circle_id).name == "Go Club"


def test_rename_to_own_name_is_allowed() -> None:
    env = _Env()
    circle_id = env.circle("Chess Club")
    assert isinstance(env.service.rename_circle(circle_id, "Chess Club"), CircleRenamed)


def test_rename_to_taken_name_is_duplicate() -> None:
    env = _Env()
    chess_id = env.circle("Chess Club")
    circle_id = env.circle("Go Club")
    r = env.service.rename_circle(circle_id, "Chess Club")
    assert isinstance(r, Duplicate)
    assert r.existing_id == chess_id
    assert env.service.get_circle(circle_id).name == "Go Club"


def test_delete_circle() -> None:
    env = _Env()
    circle_id = env.circle()
    assert isinstance(env.service.delete_circle(circle_id), CircleDeleted)
    assert isinstance(env.service.get_circle(circle_id), NotFound)
    assert isinstance(env.service.delete_circle(circle_id), NotFound)


# --- recommendations ---


def _stored_circle(env: _Env, name: str, created_at: datetime, participants: int) -> str:
    circle = Circle.reconstruct(
        CircleID.generate(),
        CircleName(name),
        UserID.reconstruct(env.user()),
        [UserID.reconstruct(env.user()) for _ in range(participants - 1)],
        created_at,
    )
    env.circles.save(circle)
    return circle.id.value


def test_list_recommended_circles() -> None:
    env = _Env()
    fresh = _stored_circle(env, "Fresh Big", NOW - timedelta(days=5), 12)
    _stored_circle(env, "Fresh Small", NOW - timedelta(days=5), 9)
    _stored_circle(env, "Old Big", NOW - timedelta(days=70), 15)

    recommended = env.service.list_recommended_circles()
    assert [s.circle_id for s in recommended] == [fresh]
    assert recommended[0].total_participants == 12
    assert recommended[0].member_count == 11


def test_recommendation_reference_time_is_injectable() -> None:
    env = _Env()
    _stored_circle(env, "Fresh Big", NOW - timedelta(days=5), 12)
    later = NOW + timedelta(days=60)
    assert env.service.list_recommended_circles(now=later) == []
