"""
FastAPI dependencies for dependency injection.

Provides the board singleton and the authenticated caller to route handlers.
"""

from dataclasses import dataclass
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from core.exceptions import AuthenticationError
from core.security import decode_access_token
from manager.board import LostFoundBoard


# Global singleton (set during app lifespan)
_board: Optional[LostFoundBoard] = None

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass
class CurrentUser:
    """Identity carried by a verified bearer token."""
    id: str
    name: Optional[str] = None
    email: Optional[str] = None


def set_board(board: Optional[LostFoundBoard]) -> None:
    """Set the global board instance."""
    global _board
    _board = board


async def get_board() -> LostFoundBoard:
    """
    Dependency that provides the board.

    Usage:
        @router.get("/posts")
        async def list_posts(board: LostFoundBoard = Depends(get_board)):
            ...
    """
    if _board is None:
        raise RuntimeError("Board not initialized")
    return _board


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> CurrentUser:
    """
    Dependency that verifies the bearer token.

    Raises AuthenticationError (401) when the header is missing or the
    token does not verify.
    """
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Access denied. No token provided.")

    payload = decode_access_token(credentials.credentials)
    return CurrentUser(
        id=payload["id"],
        name=payload.get("name"),
        email=payload.get("email"),
    )
