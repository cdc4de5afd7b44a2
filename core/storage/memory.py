"""
In-memory storage backend implementation.

Mirrors the MongoDB repositories using plain lists. Used when
MongoDB is unreachable at startup, and for tests. Data is lost
on restart.
"""

from dataclasses import replace
from typing import Any, Optional

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


class InMemoryUserRepository(BaseUserRepository):
    """User storage backed by a list with linear scans."""

    def __init__(self) -> None:
        self._users: list[UserRecord] = []

    async def setup(self) -> None:
        logger.info("In-memory user repository initialized")

    async def create(self, record: UserRecord) -> UserRecord:
        if await self.get_by_email(record.email) is not None:
            raise DuplicateEmailError()
        self._users.append(record)
        return replace(record)

    async def get(self, user_id: str) -> Optional[UserRecord]:
        for user in self._users:
            if user.id == str(user_id):
                return replace(user)
        return None

    async def get_by_email(self, email: str) -> Optional[UserRecord]:
        for user in self._users:
            if user.email == email:
                return replace(user)
        return None

    async def count(self) -> int:
        return len(self._users)

    async def clear(self) -> None:
        self._users.clear()

    async def close(self) -> None:
        logger.info("In-memory user repository closed")


class InMemoryPostRepository(BasePostRepository):
    """Post storage backed by a list with linear scans."""

    def __init__(self) -> None:
        self._posts: list[PostRecord] = []

    async def setup(self) -> None:
        logger.info("In-memory post repository initialized")

    def _index_of(self, post_id: str) -> int:
        for index, post in enumerate(self._posts):
            if post.id == str(post_id):
                return index
        return -1

    async def create(self, record: PostRecord) -> PostRecord:
        self._posts.append(record)
        return replace(record)

    async def get(self, post_id: str) -> Optional[PostRecord]:
        index = self._index_of(post_id)
        if index == -1:
            return None
        return replace(self._posts[index])

    async def list(self, post_filter: PostFilter, page: int, limit: int) -> PostPage:
        matches = self._posts
        if post_filter.type:
            matches = [post for post in matches if post.type == post_filter.type]
        if post_filter.location:
            needle = post_filter.location.lower()
            matches = [post for post in matches if needle in post.location.lower()]

        # Stable sort keeps insertion order for equal timestamps, reversed
        ordered = sorted(
            enumerate(matches),
            key=lambda item: (item[1].created_at, item[0]),
            reverse=True,
        )
        start = (page - 1) * limit
        window = [replace(post) for _, post in ordered[start:start + limit]]

        return PostPage(
            posts=window,
            total_posts=len(matches),
            current_page=page,
            limit=limit,
        )

    async def update(self, post_id: str, fields: dict[str, Any]) -> Optional[PostRecord]:
        index = self._index_of(post_id)
        if index == -1:
            return None

        changes = {key: value for key, value in fields.items() if key in POST_UPDATABLE_FIELDS}
        self._posts[index] = replace(self._posts[index], **changes, updated_at=utcnow())
        return replace(self._posts[index])

    async def delete(self, post_id: str) -> Optional[PostRecord]:
        index = self._index_of(post_id)
        if index == -1:
            return None
        return self._posts.pop(index)

    async def count(self, **criteria: Any) -> int:
        def matches(post: PostRecord) -> bool:
            for key, expected in criteria.items():
                value = getattr(post, key, None)
                if expected is None:
                    if value not in (None, ""):
                        return False
                elif value != expected:
                    return False
            return True

        return sum(1 for post in self._posts if matches(post))

    async def clear(self) -> None:
        self._posts.clear()

    async def close(self) -> None:
        logger.info("In-memory post repository closed")
