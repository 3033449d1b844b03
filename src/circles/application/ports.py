"""Application ports (interfaces). Implemented by infrastructure adapters."""

from collections.abc import Callable
from typing import Protocol

from circles.domain import Circle, CircleID, CircleName, FullName, User, UserID


class CircleRepository(Protocol):
    """Persists and queries Circle aggregates. Absence is None, never an exception."""

    def find_by_id(self, circle_id: CircleID) -> Circle | None:
        """Return the circle with the given id, or None."""
        ...

    def find_by_name(self, name: CircleName) -> Circle | None:
        """Return the circle with the given name, or None."""
        ...

    def find_all(self) -> list[Circle]:
        """Return every stored circle."""
        ...

    def find_by_specification(
        self, specification: Callable[[Circle], bool]
    ) -> list[Circle]:
        """Return circles accepted by the predicate. Must match filtering find_all()."""
        ...

    def save(self, circle: Circle) -> None:
        """Insert or replace the circle and its full member list atomically.
        Raises CircleNameConflict when the store enforces unique names."""
        ...

    def delete(self, circle_id: CircleID) -> None:
        """Remove the circle. Unknown ids are ignored."""
        ...


class UserRepository(Protocol):
    """Persists and queries User aggregates."""

    def find_by_id(self, user_id: UserID) -> User | None:
        ...

    def find_by_name(self, name: FullName) -> User | None:
        ...

    def save(self, user: User) -> None:
        ...

    def delete(self, user_id: UserID) -> None:
        ...
