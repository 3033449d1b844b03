"""Name uniqueness checks for circles and users. Advisory: they do not lock the store."""

from circles.application.ports import CircleRepository, UserRepository
from circles.domain import Circle, User


class CircleExistenceService:
    def __init__(self, circle_repository: CircleRepository) -> None:
        self._circles = circle_repository

    def find_conflict(self, circle: Circle | None) -> Circle | None:
        """The *other* circle already using this circle's name, if any."""
        if circle is None:
            return None
        found = self._circles.find_by_name(circle.name)
        # Same circle: renaming in place is not a duplicate.
        if found is None or found.id == circle.id:
            return None
        return found

    def exists(self, circle: Circle | None) -> bool:
        return self.find_conflict(circle) is not None


class UserExistenceService:
    def __init__(self, user_repository: UserRepository) -> None:
        self._users = user_repository

    def find_conflict(self, user: User | None) -> User | None:
        """The different user that already has this user's full name, if any."""
        if user is None:
            return None
        found = self._users.find_by_name(user.name)
        if found is None or found.id == user.id:
            return None
        return found

    def exists(self, user: User | None) -> bool:
        return self.find_conflict(user) is not None
