"""
SQLAlchemy ORM models for SmartOrder.

This module exports all database models and the declarative base.
Import models from this module to ensure they're registered with SQLAlchemy.
"""

from smartorder.models.base import (
    Base,
    IntegerIdMixin,
    CreatedAtMixin,
    ModelMixin,
    Money,
)
from smartorder.models.category import Category
from smartorder.models.product import Product
from smartorder.models.user import Role, User

# Export all models
__all__ = [
    # Base classes
    "Base",
    "IntegerIdMixin",
    "CreatedAtMixin",
    "ModelMixin",
    "Money",
    # Models
    "Category",
    "Product",
    "Role",
    "User",
]
