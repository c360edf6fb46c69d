"""High-level data access helpers backed by a MongoDB collection."""
from __future__ import annotations

from typing import Any, Optional

from bson import ObjectId
from pymongo import ReturnDocument
from pymongo.collection import Collection


class UserRepository:
    """CRUD helpers wrapping the users collection. One driver call per method."""

    def __init__(self, collection: Collection) -> None:
        self.collection = collection

    def insert_user(self, document: dict[str, Any]) -> ObjectId:
        result = self.collection.insert_one(dict(document))
        return result.inserted_id

    def list_users(self) -> list[dict[str, Any]]:
        return list(self.collection.find())

    def get_user(self, user_id: ObjectId) -> Optional[dict[str, Any]]:
        return self.collection.find_one({"_id": user_id})

    def update_user(self, user_id: ObjectId, values: dict[str, Any]) -> Optional[dict[str, Any]]:
        """Apply a $set of ``values``; returns the document after the update, or None."""
        return self.collection.find_one_and_update(
            {"_id": user_id},
            {"$set": dict(values)},
            return_document=ReturnDocument.AFTER,
        )

    def delete_user(self, user_id: ObjectId) -> int:
        result = self.collection.delete_one({"_id": user_id})
        return result.deleted_count

    def delete_all_users(self) -> int:
        result = self.collection.delete_many({})
        return result.deleted_count
