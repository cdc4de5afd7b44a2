"""
Lost-and-found board manager.

Bridges the API layer and the storage repositories: owns the storage
lifecycle and enforces the board's rules (unique emails, password
checks, post ownership).
"""

import asyncio
from dataclasses import dataclass
from typing import Any, Optional

from core.config import settings
from core.exceptions import (
    DuplicateEmailError,
    InvalidCredentialsError,
    NotPostOwnerError,
    PostNotFoundError,
)
from core.logging import get_logger
from core.security import create_access_token, get_password_hash, verify_password
from core.storage import (
    PostFilter,
    PostPage,
    PostRecord,
    Repositories,
    UserRecord,
    create_repositories,
)
from core.uploads import ImageStore


logger = get_logger(__name__)


async def _run_blocking(func, *args):
    # Runs in the default executor so bcrypt does not block the loop
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, func, *args)


@dataclass
class AuthResult:
    """A user together with a freshly issued access token."""
    user: UserRecord
    token: str


class LostFoundBoard:
    """
    Board lifecycle manager.

    - Register users and log them in
    - Browse, create, update and delete posts
    - Report which storage backend is in use

    Works against the abstract repository interfaces, so the same
    rules apply whether MongoDB or the in-memory fallback is active.
    """

    def __init__(
        self,
        image_store: Optional[ImageStore] = None,
        repositories: Optional[Repositories] = None,
    ):
        """
        Args:
            image_store: where uploaded images go (default from settings)
            repositories: already initialized repositories (default created
                from settings in initialize())
        """
        self.image_store = image_store or ImageStore(
            upload_dir=settings.upload_dir,
            url_prefix=settings.upload_url_prefix,
            max_bytes=settings.max_upload_bytes,
        )
        self._repos = repositories
        self._initialized = repositories is not None

    async def initialize(self) -> None:
        """Create the storage backend, falling back to memory if needed."""
        if self._initialized:
            return

        logger.info(
            "Initializing board",
            storage_backend=settings.storage_backend,
        )

        self._repos = await create_repositories(settings)
        self.image_store.ensure_directory()

        self._initialized = True
        logger.info(
            "Board initialized",
            storage_backend=self._repos.backend.value,
            fallback=self._repos.fallback,
        )

    async def shutdown(self) -> None:
        logger.info("Shutting down board")

        if self._repos is not None:
            await self._repos.close()

        self._initialized = False
        logger.info("Board shut down")

    @property
    def repositories(self) -> Repositories:
        self._ensure_initialized()
        return self._repos

    def storage_status(self) -> dict[str, Any]:
        """Which backend serves requests, for the health endpoint."""
        if not self._initialized:
            return {"database": "disconnected", "backend": None}

        if self._repos.connection is not None:
            database = "connected"
        elif self._repos.fallback:
            database = "fallback"
        else:
            database = "memory"

        return {"database": database, "backend": self._repos.backend.value}

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    async def register(
        self,
        name: str,
        email: str,
        password: str,
        srn: Optional[str] = None,
    ) -> AuthResult:
        """Create an account and return it with a token."""
        self._ensure_initialized()
        email = email.strip().lower()

        if await self._repos.users.get_by_email(email) is not None:
            logger.info("Registration rejected, email exists", email=email)
            raise DuplicateEmailError()

        password_hash = await _run_blocking(get_password_hash, password)
        user = await self._repos.users.create(
            UserRecord(
                name=name,
                email=email,
                password_hash=password_hash,
                srn=srn,
            )
        )

        logger.info("User registered", user_id=user.id, email=user.email)
        return AuthResult(user=user, token=self._issue_token(user))

    async def login(self, email: str, password: str) -> AuthResult:
        self._ensure_initialized()

        user = await self._repos.users.get_by_email(email.strip().lower())
        if user is None or not await _run_blocking(verify_password, password, user.password_hash):
            logger.info("Login rejected", email=email)
            raise InvalidCredentialsError()

        logger.info("User logged in", user_id=user.id)
        return AuthResult(user=user, token=self._issue_token(user))

    @staticmethod
    def _issue_token(user: UserRecord) -> str:
        return create_access_token(user.id, user.name, user.email)

    # ------------------------------------------------------------------
    # Posts
    # ------------------------------------------------------------------

    async def list_posts(
        self,
        post_type: Optional[str] = None,
        location: Optional[str] = None,
        page: int = 1,
        limit: int = 10,
    ) -> PostPage:
        """Get one page of the feed, newest first."""
        self._ensure_initialized()
        return await self._repos.posts.list(
            PostFilter(type=post_type or None, location=location or None),
            page=page,
            limit=limit,
        )

    async def get_post(self, post_id: str) -> PostRecord:
        self._ensure_initialized()

        post = await self._repos.posts.get(post_id)
        if post is None:
            raise PostNotFoundError()
        return post

    async def create_post(
        self,
        user_id: str,
        fields: dict[str, Any],
        image: Any = None,
    ) -> PostRecord:
        """
        Create a post owned by user_id.

        An image that cannot be written to disk is dropped and the post
        is created without one; a non-image upload is rejected.
        """
        self._ensure_initialized()

        image_url = await self._store_image(image) if image is not None else None

        post = await self._repos.posts.create(
            PostRecord(
                title=fields["title"],
                description=fields["description"],
                location=fields["location"],
                current_location=fields.get("current_location"),
                contact_info=fields["contact_info"],
                type=fields["type"],
                image_url=image_url,
                user_id=user_id,
            )
        )

        logger.info("Post created", post_id=post.id, user_id=user_id, type=post.type)
        return post

    async def update_post(
        self,
        user_id: str,
        post_id: str,
        fields: dict[str, Any],
        image: Any = None,
    ) -> PostRecord:
        """Apply the provided fields. Only the owner may update."""
        self._ensure_initialized()

        post = await self._get_owned_post(user_id, post_id, action="update")

        changes = {key: value for key, value in fields.items() if value is not None}
        if image is not None:
            image_url = await self._store_image(image)
            if image_url is not None:
                changes["image_url"] = image_url

        updated = await self._repos.posts.update(post_id, changes)
        if updated is None:
            await self._discard_image(changes.get("image_url"))
            raise PostNotFoundError("Failed to update post.")

        if "image_url" in changes and post.image_url != updated.image_url:
            await self._discard_image(post.image_url)

        logger.info(
            "Post updated",
            post_id=post_id,
            user_id=user_id,
            fields=sorted(changes),
        )
        return updated

    async def delete_post(self, user_id: str, post_id: str) -> None:
        """Delete a post. Only the owner may delete."""
        self._ensure_initialized()

        post = await self._get_owned_post(user_id, post_id, action="delete")
        await self._repos.posts.delete(post_id)
        await self._discard_image(post.image_url)

        logger.info("Post deleted", post_id=post_id, user_id=user_id)

    async def _get_owned_post(self, user_id: str, post_id: str, action: str) -> PostRecord:
        post = await self._repos.posts.get(post_id)
        if post is None:
            raise PostNotFoundError()

        if str(post.user_id) != str(user_id):
            logger.warning(
                "Ownership check failed",
                post_id=post_id,
                user_id=user_id,
                action=action,
            )
            raise NotPostOwnerError(f"Not authorized to {action} this post.")
        return post

    async def _store_image(self, image: Any) -> Optional[str]:
        try:
            return await self.image_store.save(image)
        except OSError as e:
            logger.error("Image upload failed", error=str(e), exc_info=True)
            return None

    async def _discard_image(self, image_url: Optional[str]) -> None:
        try:
            await self.image_store.delete(image_url)
        except OSError as e:
            logger.warning("Could not remove image", image_url=image_url, error=str(e))

    def _ensure_initialized(self) -> None:
        if not self._initialized:
            raise RuntimeError(
                "Board not initialized. Call initialize() first."
            )
