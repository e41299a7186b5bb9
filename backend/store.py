"""
MongoDB snapshot store.

One document per program, keyed by `key`; the engine snapshot is kept
under `snapshot` exactly as EngineSnapshot.to_dict() produced it.
"""

from typing import Any, Dict, Optional

from models.engine_api import SnapshotDocument


class MongoSnapshotStore:
    def __init__(self, collection, key: str):
        self.collection = collection
        self.key = key

    async def load(self) -> Optional[Dict[str, Any]]:
        doc = await self.collection.find_one({"key": self.key}, {"_id": 0})
        if not doc:
            return None
        return SnapshotDocument.model_validate(doc).snapshot

    async def save(self, snapshot: Dict[str, Any]) -> None:
        document = SnapshotDocument(key=self.key, snapshot=snapshot)
        await self.collection.update_one(
            {"key": self.key},
            {"$set": document.model_dump()},
            upsert=True,
        )
