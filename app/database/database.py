from pymongo import AsyncMongoClient, ASCENDING
from pymongo.server_api import ServerApi
from bson import ObjectId
from fastapi import Request
from typing import Any, Dict, List, Optional
from app.config import get_settings
from app.logger import logger

"""
Document store access for the tutor booking API.
Wraps the tutors, bookings and users collections of a MongoDB database
behind a small asynchronous facade used by the routers.
"""

TUTORS = "tutors"
BOOKINGS = "bookings"
USERS = "users"

# Fields copied from the tutor onto each booking in the joined listing
BOOKING_TUTOR_FIELDS = ("tutorName", "language", "price", "image")

def create_client(uri: Optional[str] = None) -> AsyncMongoClient:
    """Create the process-wide client. Pinned to Stable API version 1."""
    return AsyncMongoClient(
        uri or get_settings().mongo_connection_uri(),
        server_api=ServerApi("1", strict=True, deprecation_errors=True),
    )

class RecordStore:
    """
    Thin pass-through over the document database.

    Every method issues a single store operation. Errors raised by the
    driver (pymongo.errors.PyMongoError) are propagated to the caller.
    """

    def __init__(self, database):
        self.database = database

    def collection(self, name: str):
        return self.database[name]

    async def insert_one(self, collection: str, document: Dict[str, Any]) -> ObjectId:
        result = await self.collection(collection).insert_one(document)
        return result.inserted_id

    async def find_many(self, collection: str, query: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        cursor = self.collection(collection).find(query or {})
        return await cursor.to_list(length=None)

    async def find_one(self, collection: str, query: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        return await self.collection(collection).find_one(query)

    async def find_by_id(self, collection: str, record_id: ObjectId) -> Optional[Dict[str, Any]]:
        return await self.find_one(collection, {"_id": record_id})

    async def set_fields(self, collection: str, record_id: ObjectId, fields: Dict[str, Any]):
        """Merge fields into the record. Returns the driver's UpdateResult."""
        return await self.update_where(collection, {"_id": record_id}, {"$set": fields})

    async def increment(self, collection: str, record_id: ObjectId, field: str, amount: int = 1):
        return await self.update_where(collection, {"_id": record_id}, {"$inc": {field: amount}})

    async def update_where(self, collection: str, query: Dict[str, Any], update: Dict[str, Any]):
        return await self.collection(collection).update_one(query, update)

    async def delete_by_id(self, collection: str, record_id: ObjectId) -> int:
        result = await self.collection(collection).delete_one({"_id": record_id})
        return result.deleted_count

    async def count(self, collection: str, query: Optional[Dict[str, Any]] = None) -> int:
        return await self.collection(collection).count_documents(query or {})

    async def bookings_with_tutor(self, email: str) -> List[Dict[str, Any]]:
        """
        Bookings made by email, each joined with its tutor's details.

        The unwind drops bookings whose tutor no longer exists.
        """
        projection = {
            "_id": 1,
            "tutorId": 1,
            "userEmail": 1,
            "bookedAt": 1,
            "reviewed": 1,
            "createdAt": 1,
        }
        projection.update({field: f"$tutor.{field}" for field in BOOKING_TUTOR_FIELDS})
        pipeline = [
            {"$match": {"userEmail": email}},
            {"$lookup": {
                "from": TUTORS,
                "localField": "tutorId",
                "foreignField": "_id",
                "as": "tutor",
            }},
            {"$unwind": "$tutor"},
            {"$project": projection},
        ]
        cursor = await self.collection(BOOKINGS).aggregate(pipeline)
        return await cursor.to_list(length=None)

    async def ensure_indexes(self):
        await self.collection(USERS).create_index([("email", ASCENDING)], unique=True)
        logger.info("Unique index on users.email ensured")

    async def ping(self) -> bool:
        await self.database.command("ping")
        return True

def get_store(request: Request) -> RecordStore:
    """Dependency returning the store opened by the startup event hook."""
    return request.app.state.store
