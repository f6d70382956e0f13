"""
UserRecord model — the persisted credential record.

This is the storage shape of a User: username, bcrypt password hash, names,
email, role and audit timestamps. It is owned by the database layer; the rest
of the application works with the validated domain entity (app.domain.user.User)
built from it via User.from_record().

Username and email are both unique and indexed: they are the two lookup keys
used by login and by the duplicate checks during registration. Values are
stored already normalized (lower-cased) by the entity.
"""

from datetime import datetime, timezone

from sqlalchemy import String, DateTime, Enum, Integer
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base
from app.domain.user import Role


class UserRecord(Base):
    __tablename__ = "users"

    # Integer primary key assigned by the database on insert
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    username: Mapped[str] = mapped_column(
        String(30),
        unique=True,
        nullable=False,
        index=True,
    )

    email: Mapped[str] = mapped_column(
        String(254),
        unique=True,
        nullable=False,
        index=True,
    )

    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)

    # bcrypt hash of the password (never store plaintext!)
    password: Mapped[str] = mapped_column(String(60), nullable=False)

    # Defaults to USER, the only role self-registration can produce
    role: Mapped[Role] = mapped_column(
        Enum(Role),
        default=Role.USER,
        nullable=False,
    )

    # Audit timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
