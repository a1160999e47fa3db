"""
Repository layer for data access abstraction.

This package contains repository classes that encapsulate database queries
and provide a clean interface for data access operations.
"""

from .base_repository import BaseRepository
from .product_repository import ProductRepository
from .user_repository import UserRepository
from .activity_repository import ActivityRepository

__all__ = [
    "BaseRepository",
    "ProductRepository",
    "UserRepository",
    "ActivityRepository",
]
