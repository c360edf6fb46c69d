"""Database helpers (client/collection export)."""

from .client import create_client, get_users_collection

__all__ = ["create_client", "get_users_collection"]
