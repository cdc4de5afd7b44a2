"""
Abstract base classes for storage backends.

This module defines the contracts that all storage implementations must follow,
enabling the board to run against MongoDB or the in-memory fallback
interchangeably.
"""

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional

from bson import ObjectId


# Fields a post update may touch
POST_UPDATABLE_FIELDS = (
    "title",
    "description",
    "location",
    "current_location",
    "contact_info",
    "type",
    "image_url",
)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_object_id() -> str:
    """Generate a MongoDB-compatible ObjectId string."""
    return str(ObjectId())


@dataclass
class UserRecord:
    """Stored user account. The password is only ever kept hashed."""
    name: str
    email: str
    password_hash: str
    srn: Optional[str] = None
    id: str = field(default_factory=new_object_id)
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "password_hash": self.password_hash,
            "srn": self.srn,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "UserRecord":
        """Create from dictionary."""
        return cls(
            id=str(data["id"]),
            name=data["name"],
            email=data["email"],
            password_hash=data["password_hash"],
            srn=data.get("srn"),
            created_at=data.get("created_at", utcnow()),
            updated_at=data.get("updated_at", utcnow()),
        )


@dataclass
class PostRecord:
    """A single Lost or Found item post."""
    title: str
    description: str
    location: str
    contact_info: str
    type: str
    user_id: str
    current_location: Optional[str] = None
    image_url: Optional[str] = None
    id: str = field(default_factory=new_object_id)
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "location": self.location,
            "current_location": self.current_location,
            "contact_info": self.contact_info,
            "type": self.type,
            "image_url": self.image_url,
            "user_id": self.user_id,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PostRecord":
        """Create from dictionary."""
        return cls(
            id=str(data["id"]),
            title=data["title"],
            description=data["description"],
            location=data["location"],
            current_location=data.get("current_location"),
            contact_info=data["contact_info"],
            type=data["type"],
            image_url=data.get("image_url"),
            user_id=str(data["user_id"]),
            created_at=data.get("created_at", utcnow()),
            updated_at=data.get("updated_at", utcnow()),
        )


@dataclass
class PostFilter:
    """Feed filter. Empty values mean "no constraint"."""
    type: Optional[str] = None
    location: Optional[str] = None


@dataclass
class PostPage:
    """One page of the post feed."""
    posts: list[PostRecord]
    total_posts: int
    current_page: int
    limit: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total_posts / self.limit)


class BaseUserRepository(ABC):
    """Abstract base class for user account storage."""

    @abstractmethod
    async def setup(self) -> None:
        """
        Initialize the storage (connect, create collections/indexes).

        This should be idempotent.
        """
        pass

    @abstractmethod
    async def create(self, record: UserRecord) -> UserRecord:
        """
        Store a new user.

        Raises DuplicateEmailError if the email is already registered.
        """
        pass

    @abstractmethod
    async def get(self, user_id: str) -> Optional[UserRecord]:
        """Get a user by id. Malformed ids return None."""
        pass

    @abstractmethod
    async def get_by_email(self, email: str) -> Optional[UserRecord]:
        pass

    @abstractmethod
    async def count(self) -> int:
        pass

    @abstractmethod
    async def clear(self) -> None:
        """Remove every user."""
        pass

    @abstractmethod
    async def close(self) -> None:
        """Clean up resources."""
        pass


class BasePostRepository(ABC):
    """Abstract base class for post storage."""

    @abstractmethod
    async def setup(self) -> None:
        """
        Initialize the storage (connect, create collections/indexes).

        This should be idempotent.
        """
        pass

    @abstractmethod
    async def create(self, record: PostRecord) -> PostRecord:
        pass

    @abstractmethod
    async def get(self, post_id: str) -> Optional[PostRecord]:
        """Get a post by id. Malformed ids return None."""
        pass

    @abstractmethod
    async def list(self, post_filter: PostFilter, page: int, limit: int) -> PostPage:
        """
        Get one page of posts matching the filter.

        Type matches exactly, location matches as a case-insensitive
        substring. Newest posts come first.
        """
        pass

    @abstractmethod
    async def update(self, post_id: str, fields: dict[str, Any]) -> Optional[PostRecord]:
        """
        Update specific fields of a post.

        Only keys in POST_UPDATABLE_FIELDS are applied.
        Returns the updated post, or None if it does not exist.
        """
        pass

    @abstractmethod
    async def delete(self, post_id: str) -> Optional[PostRecord]:
        """Delete a post, returning the removed record or None."""
        pass

    @abstractmethod
    async def count(self, **criteria: Any) -> int:
        """
        Count posts whose fields equal the given values.

        A criterion of None counts posts where that field is missing/empty.
        """
        pass

    @abstractmethod
    async def clear(self) -> None:
        """Remove every post."""
        pass

    @abstractmethod
    async def close(self) -> None:
        """Clean up resources."""
        pass
