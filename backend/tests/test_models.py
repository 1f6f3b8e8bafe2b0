"""
Tests for model invariants and the Money column type.

These run without a database: validators fire on attribute assignment and
the column type is exercised directly against dialect objects.
"""

from decimal import Decimal

import pytest
from sqlalchemy.dialects import postgresql, sqlite

from smartorder.core.exceptions import InvalidEntityError, SmartOrderError
from smartorder.models import Category, Money, Product, Role, User
from smartorder.models.user import parse_role


class TestProductValidation:
    """Product attribute invariants."""

    @pytest.mark.parametrize("price", ["199.99", 199.99, Decimal("199.99")])
    def test_price_coerced_to_decimal(self, price):
        """Test strings, floats and Decimals all become Decimal('199.99')."""
        product = Product(name="Budget Smartphone", price=price, category_id=1)

        assert product.price == Decimal("199.99")
        assert isinstance(product.price, Decimal)

    def test_price_beyond_cents_rejected(self):
        """Test a price with sub-cent digits is refused instead of rounded later."""
        with pytest.raises(InvalidEntityError) as exc_info:
            Product(name="Gadget", price=Decimal("19.999"), category_id=1)

        assert "two decimal places" in str(exc_info.value)

    @pytest.mark.parametrize("price", ["19.990", Decimal("19.9"), 19.9, 20])
    def test_price_normalized_to_cents(self, price):
        """Test prices exact to the cent keep their value with scale 2."""
        product = Product(name="Gadget", price=price, category_id=1)

        assert product.price == Decimal(str(price))
        assert product.price.as_tuple().exponent == -2

    def test_negative_price_rejected(self):
        """Test a negative price raises before reaching the database."""
        with pytest.raises(InvalidEntityError) as exc_info:
            Product(name="Refund", price=Decimal("-0.01"), category_id=1)

        assert "price" in str(exc_info.value)

    @pytest.mark.parametrize("price", ["abc", "NaN", True, None])
    def test_non_numeric_price_rejected(self, price):
        """Test values that are not finite amounts are rejected."""
        with pytest.raises(InvalidEntityError):
            Product(name="Broken", price=price, category_id=1)

    def test_negative_stock_rejected(self):
        """Test stock_quantity cannot go below zero."""
        product = Product(name="Jeans", price="49.99", category_id=1, stock_quantity=3)

        with pytest.raises(InvalidEntityError):
            product.stock_quantity = -1

        assert product.stock_quantity == 3

    def test_blank_name_rejected(self):
        """Test whitespace-only names are rejected."""
        with pytest.raises(InvalidEntityError):
            Product(name="   ", price="1.00", category_id=1)

    def test_invalid_entity_error_is_value_error(self):
        """Test callers can catch invariant failures as ValueError."""
        assert issubclass(InvalidEntityError, ValueError)
        assert issubclass(InvalidEntityError, SmartOrderError)


class TestUserModel:
    """User role handling and secret fields."""

    def test_role_from_name(self):
        """Test role names map onto Role members."""
        user = User(name="Admin", email="admin@email.com", password="x", role="admin")

        assert user.role is Role.ADMIN

    def test_parse_role_any_case(self):
        """Test parse_role accepts members and names in any case."""
        assert parse_role(Role.ADMIN) is Role.ADMIN
        assert parse_role("customer") is Role.CUSTOMER

        with pytest.raises(InvalidEntityError):
            parse_role("guest")

    def test_unknown_role_rejected(self):
        """Test an unknown role name raises InvalidEntityError."""
        with pytest.raises(InvalidEntityError) as exc_info:
            User(name="Guest", email="guest@email.com", password="x", role="GUEST")

        assert "GUEST" in str(exc_info.value)

    def test_password_hidden_from_dict_and_repr(self):
        """Test the stored credential never shows up in to_dict() or repr()."""
        user = User(name="Kauan", email="kauan@email.com", password="senha123", role=Role.CUSTOMER)

        assert "password" not in user.to_dict()
        assert "senha123" not in repr(user)
        assert "kauan@email.com" in repr(user)

    def test_created_at_is_immutable_column(self):
        """Test updates never copy id or created_at."""
        mutable = User.mutable_column_names()

        assert "created_at" not in mutable
        assert "id" not in mutable
        assert set(mutable) == {"name", "email", "password", "role", "phone"}


class TestCategoryModel:
    """Category helpers."""

    def test_to_dict(self):
        """Test to_dict lists every column."""
        category = Category(name="Beverages", description="Drinks")

        assert category.to_dict() == {"id": None, "name": "Beverages", "description": "Drinks"}

    def test_mutable_columns_exclude_id(self):
        """Test only name and description are copied on update."""
        assert Category.mutable_column_names() == ["name", "description"]


class TestMoneyType:
    """Exact decimal storage on both dialects."""

    def test_sqlite_stores_integer_cents(self):
        """Test SQLite binds Decimal('199.99') as 19999 and reads it back."""
        money = Money()
        dialect = sqlite.dialect()

        bound = money.process_bind_param(Decimal("199.99"), dialect)
        restored = money.process_result_value(bound, dialect)

        assert bound == 19999
        assert restored == Decimal("199.99")

    def test_postgresql_keeps_decimal(self):
        """Test PostgreSQL binds a quantized Decimal."""
        money = Money()
        dialect = postgresql.dialect()

        bound = money.process_bind_param("10", dialect)

        assert bound == Decimal("10.00")
        assert str(bound) == "10.00"

    def test_rounds_half_up_to_cents(self):
        """Test extra precision is rounded to two places."""
        money = Money()

        assert money.process_bind_param(Decimal("0.005"), sqlite.dialect()) == 1
        assert money.process_bind_param(Decimal("0.004"), sqlite.dialect()) == 0

    def test_none_passes_through(self):
        """Test NULL stays NULL in both directions."""
        money = Money()

        assert money.process_bind_param(None, sqlite.dialect()) is None
        assert money.process_result_value(None, sqlite.dialect()) is None
