"""
Persistence adapters.

These modules encapsulate how user accounts are stored and retrieved (MongoDB).
Services depend on the repository rather than touching the collection.
"""

from .user_repository import UserRepository

__all__ = ["UserRepository"]
