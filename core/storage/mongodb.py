"""
MongoDB storage backend implementation.

Provides MongoDB implementations for:
- User repository ("users" collection)
- Post repository ("posts" collection)

Documents use the same camelCase field names as the existing
lost-and-found database, so data written by earlier deployments
stays readable.
"""

import re
from typing import Any, Optional

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING, ReturnDocument
from pymongo.errors import DuplicateKeyError

from core.exceptions import DuplicateEmailError
from core.logging import get_logger
from core.storage.base import (
    POST_UPDATABLE_FIELDS,
    BasePostRepository,
    BaseUserRepository,
    PostFilter,
    PostPage,
    PostRecord,
    UserRecord,
    utcnow,
)


logger = get_logger(__name__)


# record attribute -> document field
USER_FIELDS = {
    "name": "name",
    "email": "email",
    "password_hash": "password",
    "srn": "srn",
    "created_at": "createdAt",
    "updated_at": "updatedAt",
}

POST_FIELDS = {
    "title": "title",
    "description": "description",
    "location": "location",
    "current_location": "currentLocation",
    "contact_info": "contactInfo",
    "type": "type",
    "image_url": "imageUrl",
    "user_id": "userId",
    "created_at": "createdAt",
    "updated_at": "updatedAt",
}


def to_object_id(value: str) -> Optional[ObjectId]:
    """Parse an id string, returning None when it is not a valid ObjectId."""
    if isinstance(value, ObjectId):
        return value
    if not ObjectId.is_valid(value):
        return None
    return ObjectId(value)


def user_to_document(record: UserRecord) -> dict[str, Any]:
    doc: dict[str, Any] = {"_id": ObjectId(record.id)}
    for attr, key in USER_FIELDS.items():
        doc[key] = getattr(record, attr)
    return doc


def user_from_document(doc: dict[str, Any]) -> UserRecord:
    data: dict[str, Any] = {"id": str(doc["_id"])}
    for attr, key in USER_FIELDS.items():
        if doc.get(key) is not None:
            data[attr] = doc[key]
    return UserRecord.from_dict(data)


def post_to_document(record: PostRecord) -> dict[str, Any]:
    doc: dict[str, Any] = {"_id": ObjectId(record.id)}
    for attr, key in POST_FIELDS.items():
        value = getattr(record, attr)
        if attr == "user_id":
            value = to_object_id(value) or value
        if value is None:
            # Optional fields are left out, as the original schema did
            continue
        doc[key] = value
    return doc


def post_from_document(doc: dict[str, Any]) -> PostRecord:
    data: dict[str, Any] = {"id": str(doc["_id"])}
    for attr, key in POST_FIELDS.items():
        if key in doc:
            data[attr] = doc[key]
    data["user_id"] = str(data.get("user_id", ""))
    for attr in ("created_at", "updated_at"):
        if data.get(attr) is None:
            data.pop(attr, None)
    return PostRecord.from_dict(data)


class MongoDBUserRepository(BaseUserRepository):
    """
    MongoDB-based user repository.

    A unique index on email backs the duplicate-registration check.
    """

    COLLECTION_NAME = "users"

    def __init__(self, database: AsyncIOMotorDatabase):
        self._db = database

    @property
    def _collection(self):
        return self._db[self.COLLECTION_NAME]

    async def setup(self) -> None:
        """Create indexes."""
        await self._collection.create_index("email", unique=True)
        logger.info(
            "MongoDB user repository initialized",
            collection=self.COLLECTION_NAME,
        )

    async def create(self, record: UserRecord) -> UserRecord:
        try:
            await self._collection.insert_one(user_to_document(record))
        except DuplicateKeyError:
            raise DuplicateEmailError()

        logger.debug("User created", user_id=record.id)
        return record

    async def get(self, user_id: str) -> Optional[UserRecord]:
        oid = to_object_id(user_id)
        if oid is None:
            return None
        doc = await self._collection.find_one({"_id": oid})
        if doc is None:
            return None
        return user_from_document(doc)

    async def get_by_email(self, email: str) -> Optional[UserRecord]:
        doc = await self._collection.find_one({"email": email})
        if doc is None:
            return None
        return user_from_document(doc)

    async def count(self) -> int:
        return await self._collection.count_documents({})

    async def clear(self) -> None:
        await self._collection.delete_many({})

    async def close(self) -> None:
        # The client is owned by MongoDBConnection
        pass


class MongoDBPostRepository(BasePostRepository):
    """MongoDB-based post repository."""

    COLLECTION_NAME = "posts"

    def __init__(self, database: AsyncIOMotorDatabase):
        self._db = database

    @property
    def _collection(self):
        return self._db[self.COLLECTION_NAME]

    async def setup(self) -> None:
        """Create indexes for the feed query."""
        await self._collection.create_index(
            [("type", ASCENDING), ("createdAt", DESCENDING)],
            name="idx_type_created",
        )
        await self._collection.create_index([("createdAt", DESCENDING)])
        await self._collection.create_index("userId")

        logger.info(
            "MongoDB post repository initialized",
            collection=self.COLLECTION_NAME,
        )

    @staticmethod
    def _build_query(post_filter: PostFilter) -> dict[str, Any]:
        query: dict[str, Any] = {}
        if post_filter.type:
            query["type"] = post_filter.type
        if post_filter.location:
            query["location"] = {
                "$regex": re.escape(post_filter.location),
                "$options": "i",
            }
        return query

    async def create(self, record: PostRecord) -> PostRecord:
        await self._collection.insert_one(post_to_document(record))
        logger.debug("Post created", post_id=record.id, user_id=record.user_id)
        return record

    async def get(self, post_id: str) -> Optional[PostRecord]:
        oid = to_object_id(post_id)
        if oid is None:
            return None
        doc = await self._collection.find_one({"_id": oid})
        if doc is None:
            return None
        return post_from_document(doc)

    async def list(self, post_filter: PostFilter, page: int, limit: int) -> PostPage:
        query = self._build_query(post_filter)
        skip = (page - 1) * limit

        cursor = (
            self._collection.find(query)
            .sort([("createdAt", DESCENDING), ("_id", DESCENDING)])
            .skip(skip)
            .limit(limit)
        )
        docs = await cursor.to_list(length=limit)
        total = await self._collection.count_documents(query)

        return PostPage(
            posts=[post_from_document(doc) for doc in docs],
            total_posts=total,
            current_page=page,
            limit=limit,
        )

    async def update(self, post_id: str, fields: dict[str, Any]) -> Optional[PostRecord]:
        oid = to_object_id(post_id)
        if oid is None:
            return None

        update_fields: dict[str, Any] = {"updatedAt": utcnow()}
        for attr, value in fields.items():
            if attr in POST_UPDATABLE_FIELDS:
                update_fields[POST_FIELDS[attr]] = value

        doc = await self._collection.find_one_and_update(
            {"_id": oid},
            {"$set": update_fields},
            return_document=ReturnDocument.AFTER,
        )
        if doc is None:
            return None
        return post_from_document(doc)

    async def delete(self, post_id: str) -> Optional[PostRecord]:
        oid = to_object_id(post_id)
        if oid is None:
            return None
        doc = await self._collection.find_one_and_delete({"_id": oid})
        if doc is None:
            return None
        return post_from_document(doc)

    async def count(self, **criteria: Any) -> int:
        query: dict[str, Any] = {}
        for attr, expected in criteria.items():
            key = POST_FIELDS.get(attr, attr)
            if expected is None:
                query[key] = {"$in": [None, ""]}
            else:
                query[key] = expected
        return await self._collection.count_documents(query)

    async def clear(self) -> None:
        await self._collection.delete_many({})

    async def close(self) -> None:
        pass


class MongoDBConnection:
    """
    Owns the motor client shared by both repositories.

    setup() pings the server so an unreachable database is detected
    at startup rather than on the first request.
    """

    def __init__(
        self,
        connection_string: str,
        database_name: str = "lost_and_found",
        timeout_ms: int = 5000,
    ):
        """
        Args:
            connection_string: MongoDB connection URI
            database_name: Database name
            timeout_ms: Server selection timeout for the startup ping
        """
        self._connection_string = connection_string
        self._database_name = database_name
        self._timeout_ms = timeout_ms
        self._client: Optional[AsyncIOMotorClient] = None
        self._db: Optional[AsyncIOMotorDatabase] = None

    @property
    def database(self) -> AsyncIOMotorDatabase:
        if self._db is None:
            raise RuntimeError(
                "Connection not initialized. Call setup() first."
            )
        return self._db

    async def setup(self) -> None:
        """Connect and verify the server is reachable."""
        self._client = AsyncIOMotorClient(
            self._connection_string,
            serverSelectionTimeoutMS=self._timeout_ms,
            tz_aware=True,
        )
        try:
            await self._client.admin.command("ping")
        except Exception:
            self._client.close()
            self._client = None
            raise

        self._db = self._client[self._database_name]
        logger.info(
            "Connected to MongoDB",
            database=self._database_name,
        )

    async def list_collections(self) -> list[str]:
        return await self.database.list_collection_names()

    async def close(self) -> None:
        """Close MongoDB connection."""
        if self._client is not None:
            self._client.close()
            self._client = None
            self._db = None
        logger.info("MongoDB connection closed")
