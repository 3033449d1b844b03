"""User lifecycle: create, read, update, delete."""

import logging

from circles.application.dto import (
    Duplicate,
    Invalid,
    NotFound,
    UserCreated,
    UserDeleted,
    UserDetails,
)
from circles.application.existence import UserExistenceService
from circles.application.ports import UserRepository
from circles.domain import Email, FullName, User, UserID, ValidationError

logger = logging.getLogger(__name__)


class UserService:
    def __init__(self, user_repository: UserRepository) -> None:
        self._users = user_repository
        self._existence = UserExistenceService(user_repository)

    def create_user(
        self,
        first_name: str,
        last_name: str,
        email: str,
        is_premium: bool = False,
    ) -> UserCreated | Invalid | Duplicate:
        """Register a user. Full names are unique."""
        try:
            name = FullName(first_name, last_name)
            address = Email(email)
        except ValidationError as e:
            return Invalid.from_error(e)

        user = User(name=name, email=address, is_premium=is_premium)
        conflict = self._existence.find_conflict(user)
        if conflict is not None:
            return Duplicate(entity="user", name=str(name), existing_id=conflict.id.value)

        self._users.save(user)
        logger.info("User %s created (premium=%s)", user.id, user.is_premium)
        return UserCreated(user_id=user.id.value)

    def get_user(self, user_id: str) -> UserDetails | Invalid | NotFound:
        loaded = self._load_user(user_id)
        if not isinstance(loaded, User):
            return loaded
        return UserDetails.from_user(loaded)

    def update_user(
        self,
        user_id: str,
        *,
        first_name: str | None = None,
        last_name: str | None = None,
        email: str | None = None,
        is_premium: bool | None = None,
    ) -> UserDetails | Invalid | NotFound | Duplicate:
        """Apply the given fields. The name changes only when both parts are given."""
        loaded = self._load_user(user_id)
        if not isinstance(loaded, User):
            return loaded
        user = loaded

        try:
            if first_name is not None and last_name is not None:
                user.change_name(FullName(first_name, last_name))
                conflict = self._existence.find_conflict(user)
                if conflict is not None:
                    return Duplicate(
                        entity="user", name=str(user.name), existing_id=conflict.id.value
                    )
            if email is not None:
                user.change_email(Email(email))
        except ValidationError as e:
            return Invalid.from_error(e)
        if is_premium is not None:
            user.change_premium(is_premium)

        self._users.save(user)
        logger.info("User %s updated", user.id)
        return UserDetails.from_user(user)

    def delete_user(self, user_id: str) -> UserDeleted | Invalid | NotFound:
        loaded = self._load_user(user_id)
        if not isinstance(loaded, User):
            return loaded
        self._users.delete(loaded.id)
        logger.info("User %s deleted", loaded.id)
        return UserDeleted(user_id=loaded.id.value)

    def _load_user(self, user_id: str) -> User | Invalid | NotFound:
        try:
            uid = UserID.reconstruct(user_id)
        except ValidationError as e:
            return Invalid.from_error(e)
        user = self._users.find_by_id(uid)
        if user is None:
            return NotFound(entity="user", identifier=uid.value)
        return user
