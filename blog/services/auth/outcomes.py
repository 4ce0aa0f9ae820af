"""Typed results for authentication and registration."""
from dataclasses import dataclass
from typing import Union

from blog.models.user import User


@dataclass(frozen=True)
class Authenticated:
    user: User


@dataclass(frozen=True)
class Rejected:
    # Internal only; never shown to the client
    reason: str


@dataclass(frozen=True)
class Errored:
    cause: Exception


AuthOutcome = Union[Authenticated, Rejected, Errored]


@dataclass(frozen=True)
class Registered:
    user: User


@dataclass(frozen=True)
class RegistrationRejected:
    reason: str


RegistrationOutcome = Union[Registered, RegistrationRejected]

USER_NOT_FOUND = "user_not_found"
BAD_PASSWORD = "bad_password"
PASSWORDS_MISMATCH = "passwords_mismatch"
EMAIL_EXISTS = "email_exists"
MISSING_FIELDS = "missing_fields"
PASSWORD_TOO_LONG = "password_too_long"
