"""
User model for customers and administrators.

Passwords are stored exactly as given. Hashing is the job of the caller's
authentication layer, never of this package.
"""

import enum
from typing import Union

from sqlalchemy import Column, Enum, Index, String, func
from sqlalchemy.orm import validates

from smartorder.core.exceptions import InvalidEntityError
from smartorder.models.base import (
    Base,
    CreatedAtMixin,
    IntegerIdMixin,
    ModelMixin,
    require_text,
)


class Role(str, enum.Enum):
    """Access role of a user."""

    ADMIN = "ADMIN"
    CUSTOMER = "CUSTOMER"


def parse_role(value: Union[Role, str]) -> Role:
    """
    Resolve a Role member or a role name given in any case.

    Raises:
        InvalidEntityError: If the value names no role
    """
    if isinstance(value, Role):
        return value
    try:
        return Role(str(value).upper())
    except ValueError as exc:
        raise InvalidEntityError(f"Unknown role: {value!r}") from exc


class User(Base, IntegerIdMixin, CreatedAtMixin, ModelMixin):
    """
    Application user.

    Attributes:
        id: Integer primary key (from IntegerIdMixin)
        name: Display name
        email: Login e-mail, unique regardless of case
        password: Stored credential (already encoded by the caller)
        role: Role.ADMIN or Role.CUSTOMER
        phone: Optional phone number
        created_at: When the user was first saved (from CreatedAtMixin)

    Security considerations:
        - Never log or expose password
        - to_dict() and repr() leave it out
    """

    __tablename__ = "users"

    __immutable_columns__ = ("id", "created_at")
    __secret_columns__ = ("password",)

    name = Column(
        String(100),
        nullable=False,
        doc="Display name"
    )

    email = Column(
        String(255),
        nullable=False,
        doc="Login e-mail (unique, case-insensitive)"
    )

    password = Column(
        String(255),
        nullable=False,
        doc="Stored credential (never log)"
    )

    role = Column(
        Enum(Role, name="user_role", native_enum=False, length=20),
        nullable=False,
        default=Role.CUSTOMER,
        doc="ADMIN or CUSTOMER"
    )

    phone = Column(
        String(30),
        nullable=True,
        doc="Optional phone number"
    )

    __table_args__ = (
        Index("uq_users_email_lower", func.lower(email), unique=True),
        Index("idx_users_role", "role"),
    )

    @validates("name", "email")
    def _validate_required_text(self, key: str, value: str) -> str:
        return require_text(key, value)

    @validates("role")
    def _validate_role(self, key: str, value: Union[Role, str]) -> Role:
        return parse_role(value)
