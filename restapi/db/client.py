"""Client/collection helpers for the MongoDB backend."""
from __future__ import annotations

from pymongo import MongoClient
from pymongo.collection import Collection

from restapi.core.config import Settings, get_settings


def create_client(settings: Settings | None = None) -> MongoClient:
    settings = settings or get_settings()
    uri = (settings.mongo_uri or "").strip()
    if not uri:
        raise RuntimeError("MONGO_URI must be configured to use the MongoDB backend.")
    # MongoClient connects lazily and pools connections; one per process.
    return MongoClient(uri, serverSelectionTimeoutMS=settings.mongo_timeout_ms, tz_aware=True)


def get_users_collection(client: MongoClient, settings: Settings | None = None) -> Collection:
    settings = settings or get_settings()
    return client[settings.mongo_db_name][settings.mongo_collection]
