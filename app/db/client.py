# app/db/client.py
from typing import Optional

from pymongo import MongoClient

from app.core import config
from app.core.logger import logger

_client: Optional[MongoClient] = None


def get_db():
    """Doctor account store. The client is created on first use."""
    global _client
    if _client is None:
        if not config.MONGO_URI:
            raise ValueError("MONGO_URI is not set in the environment")
        _client = MongoClient(config.MONGO_URI)
        logger.info(f"MongoDB client created for database {config.MONGO_DB_NAME}")
    return _client[config.MONGO_DB_NAME]
