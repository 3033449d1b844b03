"""Typed domain errors. Each carries a kind so callers never match on message text."""

from enum import Enum


class ErrorKind(str, Enum):
    """Classification attached to every failure the core can report."""

    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    CAPACITY = "capacity"
    RULE_VIOLATION = "rule_violation"


class DomainError(Exception):
    """Base for errors raised by domain objects."""

    kind: ErrorKind = ErrorKind.RULE_VIOLATION

    def __init__(
        self,
        message: str,
        *,
        field: str | None = None,
        value: object = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.field = field
        self.value = value


class ValidationError(DomainError, ValueError):
    """Input rejected while building an identifier or value object."""

    kind = ErrorKind.VALIDATION


class InvalidIdentifier(ValidationError):
    pass


class InvalidCircleName(ValidationError):
    pass


class InvalidFullName(ValidationError):
    pass


class InvalidEmail(ValidationError):
    pass


class MembershipError(DomainError):
    """Circle refused a membership change (owner as member, duplicate member)."""

    kind = ErrorKind.RULE_VIOLATION


class CircleNameConflict(DomainError):
    """Store refused a circle because another one already has its name."""

    kind = ErrorKind.CONFLICT
