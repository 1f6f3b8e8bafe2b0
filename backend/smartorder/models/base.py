"""
Base models and mixins for SQLAlchemy ORM.

Provides the declarative base, mixins for surrogate keys and creation
timestamps, the exact-decimal column type, and common model utilities.
"""

from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Optional

from sqlalchemy import BigInteger, Column, DateTime, Integer, Numeric
from sqlalchemy.orm import declarative_base
from sqlalchemy.types import TypeDecorator

from smartorder.core.exceptions import InvalidEntityError


# SQLAlchemy declarative base for all ORM models
Base = declarative_base()


def utc_now() -> datetime:
    """
    Get current UTC timestamp.

    Returns:
        Timezone-aware datetime in UTC
    """
    return datetime.now(timezone.utc)


class IntegerIdMixin:
    """
    Mixin that adds an auto-generated integer primary key.

    Attributes:
        id: Surrogate key assigned by the backend on insert
    """

    id = Column(
        Integer,
        primary_key=True,
        autoincrement=True,
        doc="Surrogate primary key"
    )


class CreatedAtMixin:
    """
    Mixin that adds an immutable created_at column.

    The value is assigned in Python when the row is first flushed, so it is
    populated on the instance as soon as the insert returns. Stores never
    copy it during updates.

    Attributes:
        created_at: UTC timestamp when record was created (immutable)
    """

    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
        doc="UTC timestamp when record was created"
    )


class Money(TypeDecorator):
    """
    Fixed-precision decimal column with two fractional digits.

    PostgreSQL stores it as NUMERIC(12, 2). SQLite has no exact decimal
    storage, so there the value is kept as an integer count of cents, which
    keeps comparisons and ordering exact on both backends.
    """

    impl = Numeric
    cache_ok = True

    SCALE = 2
    QUANTUM = Decimal(1).scaleb(-SCALE)

    def load_dialect_impl(self, dialect):  # noqa: ANN001
        if dialect.name == "sqlite":
            return dialect.type_descriptor(BigInteger())
        return dialect.type_descriptor(Numeric(12, self.SCALE, asdecimal=True))

    def process_bind_param(self, value: Any, dialect) -> Any:  # noqa: ANN001
        if value is None:
            return None
        amount = to_decimal(value).quantize(self.QUANTUM, rounding=ROUND_HALF_UP)
        if dialect.name == "sqlite":
            return int(amount.scaleb(self.SCALE))
        return amount

    def process_result_value(self, value: Any, dialect) -> Optional[Decimal]:  # noqa: ANN001
        if value is None:
            return None
        if dialect.name == "sqlite":
            return Decimal(int(value)).scaleb(-self.SCALE).quantize(self.QUANTUM)
        return to_decimal(value).quantize(self.QUANTUM)


def to_decimal(value: Any) -> Decimal:
    """
    Coerce a price-like value to Decimal.

    Floats go through their string form so 199.99 stays 199.99.

    Raises:
        InvalidEntityError: If the value is not numeric
    """
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise InvalidEntityError(f"Not a decimal amount: {value!r}")
    if isinstance(value, (int, float, str)):
        try:
            amount = Decimal(str(value).strip())
        except ArithmeticError as exc:
            raise InvalidEntityError(f"Not a decimal amount: {value!r}") from exc
        if not amount.is_finite():
            raise InvalidEntityError(f"Not a finite amount: {value!r}")
        return amount
    raise InvalidEntityError(f"Not a decimal amount: {value!r}")


def require_text(field: str, value: Any) -> Any:
    """
    Validate that a required text field is set and not blank.

    Raises:
        InvalidEntityError: If the value is None or whitespace only
    """
    if value is None or not str(value).strip():
        raise InvalidEntityError(f"{field} must not be blank")
    return value


class ModelMixin:
    """
    Mixin providing common model utilities.

    Adds helper methods for serialization, representation, and the column
    bookkeeping stores need for updates.
    """

    # Columns a save-with-id never overwrites
    __immutable_columns__: tuple = ("id",)

    # Columns left out of to_dict() and repr()
    __secret_columns__: tuple = ()

    @classmethod
    def mutable_columns(cls) -> list[Column]:
        """Columns an update copies onto the stored row."""
        return [
            column
            for column in cls.__table__.columns
            if column.key not in cls.__immutable_columns__
        ]

    @classmethod
    def mutable_column_names(cls) -> list[str]:
        """Names of the columns an update copies onto the stored row."""
        return [column.key for column in cls.mutable_columns()]

    def to_dict(self) -> dict[str, Any]:
        """
        Convert model instance to dictionary.

        Returns:
            Dictionary with all column values except secrets

        Note:
            Only includes columns, not joined rows.
        """
        return {
            column.key: getattr(self, column.key)
            for column in self.__table__.columns
            if column.key not in self.__secret_columns__
        }

    def __repr__(self) -> str:
        """
        String representation of model instance.

        Returns:
            String like "ModelName(id=1, name='value')"
        """
        attrs = ", ".join(
            f"{key}={value!r}"
            for key, value in self.to_dict().items()
            if key in ["id", "name", "email"]  # Key identifying fields
        )
        return f"{self.__class__.__name__}({attrs})"
