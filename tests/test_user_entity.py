"""
Tests for the User entity (validation, normalization, DTO, equality).

These tests verify:
  - Valid input is normalized (trim, lower-case) and exposed read-only
  - to_dto() never contains the password hash and is stable across calls
  - Equality only looks at username, email and role
  - Every violated rule is reported together, in field order
  - Field-level messages for username, email, names, role, password, dates
"""

import dataclasses
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest

from app.domain.user import Role, User, validate_user_fields
from app.exceptions import DomainValidationError


VALID_BCRYPT = "$2b$12$C6UzMDM.H6dfI/f/IKcEe.O28JtFf5o9jJ8m9C2Ck8xqJjUwG7E7a"
OTHER_BCRYPT = "$2a$10$abcdefghijklmnopqrstuuABCDEFGHIJKLMNOPQRSTUVWXYZ01234"

NOW = datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)
LATER = NOW + timedelta(seconds=1)


def make_fields(**overrides) -> dict:
    fields = {
        "id": 1,
        "username": "Amar",
        "first_name": " Amar ",
        "last_name": "  Mahmuljin",
        "email": "  AMAR@example.com ",
        "password": VALID_BCRYPT,
        "role": Role.ADMIN,
        "created_at": NOW,
        "updated_at": LATER,
    }
    fields.update(overrides)
    return fields


def make_user(**overrides) -> User:
    return User(**make_fields(**overrides))


def issues_of(**overrides) -> list[str]:
    with pytest.raises(DomainValidationError) as exc_info:
        make_user(**overrides)
    return exc_info.value.issues


# ---------------------------------------------------------------------------
# Happy paths
# ---------------------------------------------------------------------------

class TestConstruction:
    """Valid input produces a normalized, immutable entity."""

    def test_fields_are_normalized(self):
        user = make_user()
        assert user.id == 1
        assert user.username == "amar"
        assert user.email == "amar@example.com"
        assert user.first_name == "Amar"
        assert user.last_name == "Mahmuljin"
        assert user.role is Role.ADMIN
        assert user.created_at == NOW
        assert user.updated_at == LATER
        assert user.full_name == "Amar Mahmuljin"

    def test_role_accepts_plain_string(self):
        assert make_user(role="guest").role is Role.GUEST

    def test_entity_is_immutable(self):
        user = make_user()
        with pytest.raises(dataclasses.FrozenInstanceError):
            user.username = "someone"

    def test_replace_builds_new_validated_entity(self):
        user = make_user()
        renamed = user.replace(first_name="  Amra ")
        assert renamed.first_name == "Amra"
        assert user.first_name == "Amar"

        with pytest.raises(DomainValidationError):
            user.replace(email="nope")

    def test_timestamps_are_optional(self):
        user = make_user(id=None, created_at=None, updated_at=None)
        assert user.id is None
        assert user.created_at is None

    def test_accented_and_hyphenated_names(self):
        user = make_user(first_name="Zoë-Anne", last_name="O'Brien de la Cruz")
        assert user.first_name == "Zoë-Anne"

    def test_combining_marks_in_names(self):
        # "e" followed by COMBINING ACUTE ACCENT
        user = make_user(first_name="Rene\u0301")
        assert user.first_name == "Rene\u0301"

    def test_username_with_single_separators(self):
        assert make_user(username="amar.m_k-1").username == "amar.m_k-1"

    def test_from_record(self):
        record = SimpleNamespace(**make_fields(id=7, role=Role.USER))
        user = User.from_record(record)
        assert user.id == 7
        assert user.username == "amar"
        assert user.role is Role.USER

    def test_naive_and_aware_timestamps_compare(self):
        naive_created = datetime(2025, 1, 1, 11, 0)
        user = make_user(created_at=naive_created, updated_at=NOW)
        assert user.updated_at == NOW

    def test_password_hidden_from_repr(self):
        assert VALID_BCRYPT not in repr(make_user())


class TestDTO:
    """to_dto() is the only serialization path and never carries secrets."""

    def test_dto_excludes_password(self):
        dto = make_user().to_dto()
        assert "password" not in dto
        assert VALID_BCRYPT not in dto.values()
        assert dto == {
            "id": 1,
            "username": "amar",
            "first_name": "Amar",
            "last_name": "Mahmuljin",
            "email": "amar@example.com",
            "role": "admin",
            "created_at": NOW,
            "updated_at": LATER,
        }

    def test_dto_is_idempotent(self):
        user = make_user()
        assert user.to_dto() == user.to_dto()

    def test_record_round_trip_gives_same_dto(self):
        user = make_user()
        reloaded = User.from_record(SimpleNamespace(**dataclasses.asdict(user)))
        assert reloaded.to_dto() == user.to_dto()


class TestEquality:
    """Equality is structural over username, email and role."""

    def test_equal_ignores_id_names_password_and_timestamps(self):
        u1 = make_user(id=1)
        u2 = make_user(
            id=2,
            first_name="Other",
            last_name="Person",
            password=OTHER_BCRYPT,
            created_at=LATER,
            updated_at=LATER + timedelta(seconds=1),
        )
        assert u1 == u2
        assert u2 == u1
        assert hash(u1) == hash(u2)

    def test_reflexive(self):
        user = make_user()
        assert user == user

    def test_normalization_applies_before_comparison(self):
        assert make_user(username="AMAR", email="Amar@Example.com") == make_user()

    @pytest.mark.parametrize(
        "overrides",
        [
            {"username": "else"},
            {"email": "b@example.com"},
            {"role": Role.USER},
        ],
    )
    def test_not_equal_when_key_field_differs(self, overrides):
        assert make_user() != make_user(**overrides)

    def test_not_equal_to_other_types(self):
        assert make_user() != "amar"


# ---------------------------------------------------------------------------
# Unhappy paths
# ---------------------------------------------------------------------------

class TestAggregatedValidation:
    """All violated rules are collected into one error."""

    def test_three_issues_in_field_order(self):
        issues = issues_of(username="", email="not-an-email", role="superuser")
        assert issues == [
            "'username' is required",
            "'email' must be a valid email address",
            "'role' must be one of: user, admin, guest",
        ]

    def test_every_field_invalid(self):
        issues = issues_of(
            username=None,
            email=None,
            first_name="",
            last_name="   ",
            role=None,
            password="plaintext",
            created_at="yesterday",
            updated_at=12345,
        )
        assert len(issues) == 8
        assert issues[0].startswith("'username'")
        assert issues[-1] == "'updatedAt' must be a Date"

    def test_message_joins_issues(self):
        with pytest.raises(DomainValidationError) as exc_info:
            make_user(username="", email="")
        assert str(exc_info.value) == "'username' is required; 'email' is required"

    def test_validate_user_fields_on_plain_record(self):
        assert validate_user_fields(make_fields()) == []


class TestFieldRules:
    """One rule at a time."""

    def test_username_leading_separator(self):
        issues = issues_of(username=".amar")
        assert len(issues) == 1
        assert issues[0].startswith("'username' must start with a letter/number")

    def test_username_double_separator(self):
        assert issues_of(username="am..ar")[0].startswith("'username' must start with")

    def test_username_too_short(self):
        assert issues_of(username="am")[0].startswith("'username' must start with")

    def test_username_too_long(self):
        assert issues_of(username="a" * 31) == ["'username' must be <= 30 characters"]

    def test_email_too_long(self):
        email = "a" * 250 + "@x.io"
        assert issues_of(email=email) == ["'email' must be <= 254 characters"]

    def test_email_missing_tld(self):
        assert issues_of(email="amar@example") == ["'email' must be a valid email address"]

    def test_first_name_required(self):
        assert issues_of(first_name="  ") == ["'firstName' is required"]

    def test_last_name_too_long(self):
        assert issues_of(last_name="a" * 101) == ["'lastName' must be <= 100 characters"]

    def test_name_must_start_with_letter(self):
        assert issues_of(first_name="-Amar") == [
            "'firstName' must start with a letter and contain only letters, "
            "spaces, hyphens, or apostrophes"
        ]

    def test_name_rejects_digits(self):
        assert issues_of(last_name="Mahmuljin2")[0].startswith("'lastName' must start with a letter")

    def test_role_outside_set(self):
        assert issues_of(role="root") == ["'role' must be one of: user, admin, guest"]

    def test_role_is_case_sensitive(self):
        assert issues_of(role="ADMIN") == ["'role' must be one of: user, admin, guest"]

    @pytest.mark.parametrize(
        "password",
        [
            "VeryS3cure1!",
            "",
            None,
            "$2x$12$C6UzMDM.H6dfI/f/IKcEe.O28JtFf5o9jJ8m9C2Ck8xqJjUwG7E7a",
            VALID_BCRYPT[:-1],
            VALID_BCRYPT + "\n",
        ],
    )
    def test_password_must_be_bcrypt_hash(self, password):
        assert issues_of(password=password) == [
            "'password' must be a valid bcrypt hash at the model layer"
        ]

    def test_created_at_must_be_datetime(self):
        assert issues_of(created_at="2025-01-01") == ["'createdAt' must be a Date"]

    def test_updated_before_created(self):
        issues = issues_of(created_at=LATER, updated_at=NOW)
        assert issues == ["'updatedAt' must be greater than or equal to 'createdAt'"]

    def test_equal_timestamps_allowed(self):
        assert make_user(created_at=NOW, updated_at=NOW).updated_at == NOW
