"""Registration and login flows for Bandboard accounts.

Both flows are framework-agnostic: handlers pass in the submitted form values
and translate the outcome (a user id, a :class:`ValidationError` or an
:class:`AuthenticationError`) into a rendered page or a redirect. Store and
hashing calls block, so they run in a worker thread and are awaited.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional

import anyio
from email_validator import EmailNotValidError, validate_email

from .config import RegistrationFields
from .database import Database, DuplicateEmailError
from .models import NewUser
from .passwords import PasswordHasher

logger = logging.getLogger("bandboard.auth")

PASSWORD_MIN_LENGTH = 6

INVALID_EMAIL = "Invalid email address!"
EMAIL_IN_USE = "This E-mail already in use!"
USERNAME_EMPTY = "Username is Empty!"
PASSWORD_TOO_SHORT = f"The password must be of minimum length {PASSWORD_MIN_LENGTH} characters"
FIRST_NAME_REQUIRED = "First name is required"
LAST_NAME_REQUIRED = "Last name is required"
UNKNOWN_EMAIL = "Invalid Email Address!"
PASSWORD_EMPTY = "Password is empty!"
INVALID_PASSWORD = "Invalid Password!"


class ValidationError(Exception):
    """Client-fixable form errors, reported together."""

    def __init__(self, messages: List[str], old_data: Optional[Dict[str, str]] = None) -> None:
        super().__init__("; ".join(messages))
        self.messages = messages
        self.old_data = old_data or {}


class AuthenticationError(Exception):
    """The submitted password does not match the stored hash."""

    def __init__(self, message: str = INVALID_PASSWORD) -> None:
        super().__init__(message)
        self.message = message


def _is_valid_email(value: str) -> bool:
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError:
        return False
    return True


@dataclass(frozen=True)
class RegistrationForm:
    user_name: str
    user_pass: str
    user_email: str
    first_name: str = ""
    last_name: str = ""

    @classmethod
    def from_mapping(cls, data: Mapping[str, object]) -> "RegistrationForm":
        """Build a form from raw submitted values, trimming everything but the email."""

        def _text(key: str) -> str:
            value = data.get(key)
            return str(value).strip() if value is not None else ""

        raw_email = data.get("user_email")
        return cls(
            user_name=_text("user_name"),
            user_pass=_text("user_pass"),
            user_email=str(raw_email) if raw_email is not None else "",
            first_name=_text("first_name"),
            last_name=_text("last_name"),
        )

    def old_data(self) -> Dict[str, str]:
        return {
            "user_name": self.user_name,
            "user_email": self.user_email,
            "first_name": self.first_name,
            "last_name": self.last_name,
        }


@dataclass(frozen=True)
class LoginForm:
    user_email: str
    user_pass: str

    @classmethod
    def from_mapping(cls, data: Mapping[str, object]) -> "LoginForm":
        raw_email = data.get("user_email")
        raw_pass = data.get("user_pass")
        return cls(
            user_email=str(raw_email) if raw_email is not None else "",
            user_pass=str(raw_pass).strip() if raw_pass is not None else "",
        )


class RegistrationFlow:
    """Validate a registration form, hash the password and persist the user."""

    def __init__(
        self,
        database: Database,
        hasher: PasswordHasher,
        fields: RegistrationFields = RegistrationFields(),
    ) -> None:
        self._database = database
        self._hasher = hasher
        self._fields = fields

    @property
    def fields(self) -> RegistrationFields:
        return self._fields

    async def validate(self, form: RegistrationForm) -> List[str]:
        """Return every validation failure for ``form``, in field order."""

        errors: List[str] = []
        if not _is_valid_email(form.user_email):
            errors.append(INVALID_EMAIL)
        elif await anyio.to_thread.run_sync(self._database.email_exists, form.user_email):
            errors.append(EMAIL_IN_USE)
        if not form.user_name:
            errors.append(USERNAME_EMPTY)
        if len(form.user_pass) < PASSWORD_MIN_LENGTH:
            errors.append(PASSWORD_TOO_SHORT)
        if self._fields.require_first_name and not form.first_name:
            errors.append(FIRST_NAME_REQUIRED)
        if self._fields.require_last_name and not form.last_name:
            errors.append(LAST_NAME_REQUIRED)
        return errors

    async def register(self, form: RegistrationForm) -> int:
        """Create the account and return its id.

        Raises :class:`ValidationError` when the form is rejected. The insert is
        the final step, so a hashing failure never leaves a partial row behind.
        """

        errors = await self.validate(form)
        if errors:
            raise ValidationError(errors, form.old_data())

        password_hash = await anyio.to_thread.run_sync(self._hasher.hash, form.user_pass)
        new_user = NewUser(
            name=form.user_name,
            email=form.user_email,
            password_hash=password_hash,
            first_name=form.first_name or None,
            last_name=form.last_name or None,
        )
        try:
            user_id = await anyio.to_thread.run_sync(self._database.insert_user, new_user)
        except DuplicateEmailError as exc:
            # Another registration won the race between the check and the insert.
            raise ValidationError([EMAIL_IN_USE], form.old_data()) from exc

        logger.info("Registered user #%s", user_id)
        return user_id


class LoginFlow:
    """Verify submitted credentials and return the matching user id."""

    def __init__(self, database: Database, hasher: PasswordHasher) -> None:
        self._database = database
        self._hasher = hasher

    async def validate(self, form: LoginForm) -> List[str]:
        errors: List[str] = []
        matches = await anyio.to_thread.run_sync(self._database.count_users_by_email, form.user_email)
        if matches != 1:
            errors.append(UNKNOWN_EMAIL)
        if not form.user_pass:
            errors.append(PASSWORD_EMPTY)
        return errors

    async def authenticate(self, form: LoginForm) -> int:
        errors = await self.validate(form)
        if errors:
            raise ValidationError(errors)

        user = await anyio.to_thread.run_sync(self._database.find_user_by_email, form.user_email)
        if user is None:
            raise ValidationError([UNKNOWN_EMAIL])

        matched = await anyio.to_thread.run_sync(self._hasher.verify, form.user_pass, user.password_hash)
        if not matched:
            logger.info("Rejected password for user #%s", user.id)
            raise AuthenticationError()

        logger.info("User #%s logged in", user.id)
        return user.id


__all__ = [
    "AuthenticationError",
    "LoginFlow",
    "LoginForm",
    "PASSWORD_MIN_LENGTH",
    "RegistrationFlow",
    "RegistrationForm",
    "ValidationError",
]
