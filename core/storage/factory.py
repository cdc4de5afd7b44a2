"""
Storage factory for creating storage backend instances.

This module provides factory functions to create the appropriate
storage implementations based on configuration, including the
fallback to the in-memory store when MongoDB is unreachable.
"""

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Optional

from pymongo.errors import PyMongoError

from core.logging import get_logger
from core.storage.base import BasePostRepository, BaseUserRepository


if TYPE_CHECKING:
    from core.config import Settings
    from core.storage.mongodb import MongoDBConnection


logger = get_logger(__name__)


class StorageBackend(str, Enum):
    """Supported storage backends."""
    MONGODB = "mongodb"
    MEMORY = "memory"


@dataclass
class Repositories:
    """The repositories the board runs against, plus what backs them."""
    users: BaseUserRepository
    posts: BasePostRepository
    backend: StorageBackend
    connection: Optional["MongoDBConnection"] = None
    fallback: bool = False

    async def close(self) -> None:
        await self.users.close()
        await self.posts.close()
        if self.connection is not None:
            await self.connection.close()


def get_storage_backend(settings: "Settings") -> StorageBackend:
    """
    Determine which storage backend to use based on settings.

    Args:
        settings: Application settings

    Returns:
        The configured storage backend
    """
    backend_str = settings.storage_backend.lower()

    try:
        return StorageBackend(backend_str)
    except ValueError:
        raise ValueError(
            f"Unsupported storage backend: {backend_str}. "
            f"Supported backends: {[b.value for b in StorageBackend]}"
        )


async def create_memory_repositories(seed: bool = False, fallback: bool = False) -> Repositories:
    """Create and initialize in-memory repositories, optionally seeded."""
    from core.storage.memory import InMemoryPostRepository, InMemoryUserRepository
    from core.storage.sample_data import seed_sample_data

    users = InMemoryUserRepository()
    posts = InMemoryPostRepository()
    await users.setup()
    await posts.setup()

    if seed:
        await seed_sample_data(users, posts)

    return Repositories(
        users=users,
        posts=posts,
        backend=StorageBackend.MEMORY,
        fallback=fallback,
    )


async def create_mongodb_repositories(settings: "Settings") -> Repositories:
    """
    Connect to MongoDB and initialize both repositories.

    Raises:
        PyMongoError: the server could not be reached
    """
    from core.storage.mongodb import (
        MongoDBConnection,
        MongoDBPostRepository,
        MongoDBUserRepository,
    )

    logger.info(
        "Creating MongoDB repositories",
        database=settings.mongodb_database,
    )
    connection = MongoDBConnection(
        connection_string=settings.mongodb_url,
        database_name=settings.mongodb_database,
        timeout_ms=settings.mongodb_timeout_ms,
    )
    await connection.setup()

    users = MongoDBUserRepository(connection.database)
    posts = MongoDBPostRepository(connection.database)
    try:
        await users.setup()
        await posts.setup()
    except PyMongoError:
        await connection.close()
        raise

    return Repositories(
        users=users,
        posts=posts,
        backend=StorageBackend.MONGODB,
        connection=connection,
    )


async def create_repositories(settings: "Settings") -> Repositories:
    """
    Create initialized repositories based on settings.

    With the MongoDB backend, an unreachable server falls back to the
    in-memory store when STORAGE_FALLBACK_TO_MEMORY is on; otherwise
    the connection error propagates.

    Args:
        settings: Application settings

    Returns:
        Ready-to-use repositories
    """
    backend = get_storage_backend(settings)

    if backend == StorageBackend.MEMORY:
        logger.info("Creating in-memory repositories")
        return await create_memory_repositories(seed=settings.seed_sample_data)

    try:
        return await create_mongodb_repositories(settings)
    except PyMongoError as e:
        if not settings.storage_fallback_to_memory:
            raise
        logger.warning(
            "MongoDB unreachable, falling back to in-memory store",
            error=str(e),
        )
        return await create_memory_repositories(
            seed=settings.seed_sample_data,
            fallback=True,
        )
