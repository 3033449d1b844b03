"""In-memory implementations of CircleRepository and UserRepository (no DB).

Both keep insertion order and hand out copies, so nothing a caller does to a
loaded aggregate reaches the store before save().
"""

import copy
import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager

from circles.domain import (
    Circle,
    CircleID,
    CircleName,
    CircleNameConflict,
    FullName,
    User,
    UserID,
)


class ReadWriteLock:
    """Many concurrent readers or one writer."""

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writing = False

    @contextmanager
    def read(self) -> Iterator[None]:
        with self._cond:
            while self._writing:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @contextmanager
    def write(self) -> Iterator[None]:
        with self._cond:
            while self._writing or self._readers:
                self._cond.wait()
            self._writing = True
        try:
            yield
        finally:
            with self._cond:
                self._writing = False
                self._cond.notify_all()


class InMemoryCircleRepository:
    """Stores circles in memory. Names are unique, as with the Neo4j constraint."""

    def __init__(self) -> None:
        self._by_id: dict[str, Circle] = {}
        self._lock = ReadWriteLock()

    def find_by_id(self, circle_id: CircleID) -> Circle | None:
        with self._lock.read():
            circle = self._by_id.get(circle_id.value)
            return copy.deepcopy(circle) if circle is not None else None

    def find_by_name(self, name: CircleName) -> Circle | None:
        with self._lock.read():
            for circle in self._by_id.values():
                if circle.name == name:
                    return copy.deepcopy(circle)
        return None

    def find_all(self) -> list[Circle]:
        with self._lock.read():
            return [copy.deepcopy(c) for c in self._by_id.values()]

    def find_by_specification(
        self, specification: Callable[[Circle], bool]
    ) -> list[Circle]:
        with self._lock.read():
            return [copy.deepcopy(c) for c in self._by_id.values() if specification(c)]

    def save(self, circle: Circle) -> None:
        with self._lock.write():
            for other in self._by_id.values():
                if other.name == circle.name and other.id != circle.id:
                    raise CircleNameConflict(
                        "Circle name already exists.",
                        field="name",
                        value=circle.name.value,
                    )
            self._by_id[circle.id.value] = copy.deepcopy(circle)

    def delete(self, circle_id: CircleID) -> None:
        with self._lock.write():
            self._by_id.pop(circle_id.value, None)

    def count(self) -> int:
        with self._lock.read():
            return len(self._by_id)


class InMemoryUserRepository:
    """Stores users in memory. Order preserved by insertion."""

    def __init__(self) -> None:
        self._by_id: dict[str, User] = {}
        self._lock = ReadWriteLock()

    def find_by_id(self, user_id: UserID) -> User | None:
        with self._lock.read():
            user = self._by_id.get(user_id.value)
            return copy.deepcopy(user) if user is not None else None

    def find_by_name(self, name: FullName) -> User | None:
        with self._lock.read():
            for user in self._by_id.values():
                if user.name == name:
                    return copy.deepcopy(user)
        return None

    def save(self, user: User) -> None:
        with self._lock.write():
            self._by_id[user.id.value] = copy.deepcopy(user)

    def delete(self, user_id: UserID) -> None:
        with self._lock.write():
            self._by_id.pop(user_id.value, None)

    def count(self) -> int:
        with self._lock.read():
            return len(self._by_id)
