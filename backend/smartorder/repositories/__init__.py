"""
Store layer for data access.

Provides one store per entity following the Repository pattern,
isolating database access from the calling service layer.
"""

from smartorder.repositories.base import BaseStore
from smartorder.repositories.category import CategoryStore
from smartorder.repositories.product import ProductStore
from smartorder.repositories.user import UserStore

__all__ = [
    "BaseStore",
    "CategoryStore",
    "ProductStore",
    "UserStore",
]
