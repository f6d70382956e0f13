"""
User entity: the validated, normalized in-memory form of one account.

The entity is built in two places: when a credential record is loaded from the
store (User.from_record) and when a new account is registered. In both cases
construction either yields a fully valid object or raises a single
DomainValidationError listing every rule the input broke, in field order.

Normalization applied at construction:
  - username / email: trimmed and lower-cased
  - first_name / last_name: trimmed

The password field holds a bcrypt hash, never plaintext. Hashing happens in
the auth service before the entity is built; the entity only checks that the
value has the shape of a bcrypt hash.

Entities are frozen. An "update" is a new entity built with replace(), which
re-runs the full validation.
"""

import dataclasses
import enum
import re
import unicodedata
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable

from app.exceptions import DomainValidationError


class Role(str, enum.Enum):
    """
    Access level of an account.

    Inherits from str so the value serializes naturally to JSON and into
    JWT claims.
    """
    USER = "user"       # Default for every self-registered account
    ADMIN = "admin"     # Can list all users
    GUEST = "guest"     # Read-only / limited access


USERNAME_MAX = 30
EMAIL_MAX = 254
NAME_MAX = 100

USERNAME_RE = re.compile(r"^[a-z0-9](?:[._-]?[a-z0-9]){2,29}$")
EMAIL_RE = re.compile(r"^[A-Z0-9._%+-]+@[A-Z0-9.-]+\.[A-Z]{2,}$", re.IGNORECASE)
BCRYPT_RE = re.compile(r"^\$2[aby]\$\d{2}\$[./A-Za-z0-9]{53}$")

_NAME_PUNCTUATION = frozenset(" '-")


# ---------------------------------------------------------------------------
# Field rules
# ---------------------------------------------------------------------------
# Each rule looks at the raw input and returns an issue string or None.
# Within a field only the first failing check is reported; across fields
# every rule runs, so the caller sees all problems at once.


def _clean(value: Any, lower: bool = False) -> str:
    if not isinstance(value, str):
        return ""
    value = value.strip()
    return value.lower() if lower else value


def _is_name(value: str) -> bool:
    # Letter first, then letters, combining marks, spaces, hyphens, apostrophes
    if not value[0].isalpha():
        return False
    return all(
        ch.isalpha()
        or unicodedata.category(ch).startswith("M")
        or ch in _NAME_PUNCTUATION
        for ch in value[1:]
    )


def _check_username(fields: dict) -> str | None:
    username = _clean(fields.get("username"), lower=True)
    if not username:
        return "'username' is required"
    if len(username) > USERNAME_MAX:
        return f"'username' must be <= {USERNAME_MAX} characters"
    if not USERNAME_RE.fullmatch(username):
        return (
            "'username' must start with a letter/number, be 3-30 chars, "
            "and may contain single '.', '_' or '-' between alphanumerics"
        )
    return None


def _check_email(fields: dict) -> str | None:
    email = _clean(fields.get("email"), lower=True)
    if not email:
        return "'email' is required"
    if len(email) > EMAIL_MAX:
        return f"'email' must be <= {EMAIL_MAX} characters"
    if not EMAIL_RE.fullmatch(email):
        return "'email' must be a valid email address"
    return None


def _name_rule(key: str, label: str) -> Callable[[dict], str | None]:
    def check(fields: dict) -> str | None:
        name = _clean(fields.get(key))
        if not name:
            return f"'{label}' is required"
        if len(name) > NAME_MAX:
            return f"'{label}' must be <= {NAME_MAX} characters"
        if not _is_name(name):
            return (
                f"'{label}' must start with a letter and contain only letters, "
                "spaces, hyphens, or apostrophes"
            )
        return None

    return check


def _check_role(fields: dict) -> str | None:
    try:
        Role(fields.get("role"))
    except ValueError:
        allowed = ", ".join(role.value for role in Role)
        return f"'role' must be one of: {allowed}"
    return None


def _check_password(fields: dict) -> str | None:
    password = fields.get("password")
    if not isinstance(password, str) or not BCRYPT_RE.fullmatch(password):
        return "'password' must be a valid bcrypt hash at the model layer"
    return None


def _timestamp_rule(key: str, label: str) -> Callable[[dict], str | None]:
    def check(fields: dict) -> str | None:
        value = fields.get(key)
        if value is not None and not isinstance(value, datetime):
            return f"'{label}' must be a Date"
        return None

    return check


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; treat them as UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _check_timestamp_order(fields: dict) -> str | None:
    created_at = fields.get("created_at")
    updated_at = fields.get("updated_at")
    if isinstance(created_at, datetime) and isinstance(updated_at, datetime):
        if _as_utc(updated_at) < _as_utc(created_at):
            return "'updatedAt' must be greater than or equal to 'createdAt'"
    return None


USER_RULES: tuple[Callable[[dict], str | None], ...] = (
    _check_username,
    _check_email,
    _name_rule("first_name", "firstName"),
    _name_rule("last_name", "lastName"),
    _check_role,
    _check_password,
    _timestamp_rule("created_at", "createdAt"),
    _timestamp_rule("updated_at", "updatedAt"),
    _check_timestamp_order,
)


def validate_user_fields(fields: dict) -> list[str]:
    """
    Run every rule against a plain record of raw user fields.

    Returns:
        The ordered list of issues; empty when the record is valid.
    """
    issues = []
    for rule in USER_RULES:
        issue = rule(fields)
        if issue is not None:
            issues.append(issue)
    return issues


# ---------------------------------------------------------------------------
# Entity
# ---------------------------------------------------------------------------

@dataclass(frozen=True, eq=False, kw_only=True)
class User:
    """
    A validated user account.

    Equality is structural over (username, email, role) only: two entities
    with different ids, names, passwords or timestamps still compare equal.
    """

    username: str
    first_name: str
    last_name: str
    email: str
    password: str = dataclasses.field(repr=False)
    role: Role = Role.USER
    id: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def __post_init__(self):
        issues = validate_user_fields(
            {field.name: getattr(self, field.name) for field in dataclasses.fields(self)}
        )
        if issues:
            raise DomainValidationError(issues)

        # Frozen dataclass: normalization has to go through object.__setattr__
        object.__setattr__(self, "username", _clean(self.username, lower=True))
        object.__setattr__(self, "email", _clean(self.email, lower=True))
        object.__setattr__(self, "first_name", _clean(self.first_name))
        object.__setattr__(self, "last_name", _clean(self.last_name))
        object.__setattr__(self, "role", Role(self.role))

    @classmethod
    def from_record(cls, record) -> "User":
        """Build an entity from a persisted credential record (UserRecord)."""
        return cls(
            id=record.id,
            username=record.username,
            first_name=record.first_name,
            last_name=record.last_name,
            email=record.email,
            password=record.password,
            role=record.role,
            created_at=record.created_at,
            updated_at=record.updated_at,
        )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def replace(self, **changes) -> "User":
        """Return a new, fully re-validated entity with the given fields changed."""
        return dataclasses.replace(self, **changes)

    def to_dto(self) -> dict:
        """
        Externally-safe projection of the entity.

        This is the only sanctioned way to serialize a User: the password
        hash is never part of it.
        """
        return {
            "id": self.id,
            "username": self.username,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "email": self.email,
            "role": self.role.value,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, User):
            return NotImplemented
        return (
            self.username == other.username
            and self.email == other.email
            and self.role == other.role
        )

    def __hash__(self) -> int:
        return hash((self.username, self.email, self.role))
