# storage_mongo.py
# Mirrors committed election events into a MongoDB collection.
import logging
from typing import Any, Dict, List

from pymongo import ASCENDING, DESCENDING, MongoClient
from pymongo.errors import DuplicateKeyError

from .events import Event

logger = logging.getLogger(__name__)


class MongoEventSink:
    def __init__(self, collection):
        """
        Args:
            collection: pymongo collection the events are written to
        """
        self.collection = collection
        # seq is unique so a replayed event is never stored twice
        self.collection.create_index([("seq", ASCENDING)], unique=True)

    @classmethod
    def connect(cls, uri: str, db_name: str, collection_name: str = "logs") -> "MongoEventSink":
        try:
            client = MongoClient(uri)
            client.server_info()
            logger.info(f"Connected to MongoDB, database: {db_name}")
        except Exception as e:
            logger.error(f"Failed to connect to MongoDB: {e}")
            raise
        sink = cls(client[db_name][collection_name])
        sink.client = client
        return sink

    def publish(self, event: Event) -> bool:
        """
        Store one committed event.

        Returns:
            True if stored, False if an event with the same seq already exists
        """
        try:
            result = self.collection.insert_one(event.model_dump())
            return result.acknowledged
        except DuplicateKeyError:
            logger.warning(f"Event {event.seq} already stored")
            return False

    def last_seq(self) -> int:
        """Highest seq already stored, 0 for an empty collection."""
        doc = self.collection.find_one({}, {"seq": 1, "_id": 0}, sort=[("seq", DESCENDING)])
        return doc["seq"] if doc else 0

    def list_events(self, since: int = 0) -> List[Dict[str, Any]]:
        cursor = self.collection.find({"seq": {"$gt": since}}, {"_id": 0}).sort("seq", ASCENDING)
        return list(cursor)

    def close(self):
        client = getattr(self, "client", None)
        if client is not None:
            client.close()
            logger.info("MongoDB connection closed")
