"""
Storage abstraction layer.

Provides pluggable storage backends for:
- User accounts
- Lost/Found posts

Supported backends:
- MongoDB (default)
- In-memory (fallback when MongoDB is unreachable, and for tests)
"""

from core.storage.base import (
    BasePostRepository,
    BaseUserRepository,
    PostFilter,
    PostPage,
    PostRecord,
    UserRecord,
)
from core.storage.factory import (
    Repositories,
    StorageBackend,
    create_memory_repositories,
    create_mongodb_repositories,
    create_repositories,
    get_storage_backend,
)

__all__ = [
    # Records
    "PostFilter",
    "PostPage",
    "PostRecord",
    "UserRecord",
    # Abstract interfaces
    "BasePostRepository",
    "BaseUserRepository",
    # Factory functions
    "Repositories",
    "StorageBackend",
    "create_memory_repositories",
    "create_mongodb_repositories",
    "create_repositories",
    "get_storage_backend",
]
