"""
Pydantic schemas for API request/response validation.
"""

from api.schemas.post import (
    MessageResponse,
    PostListResponse,
    PostResponse,
    PostType,
)
from api.schemas.user import (
    AuthResponse,
    LoginRequest,
    ProfileResponse,
    RegisterRequest,
)

__all__ = [
    "AuthResponse",
    "LoginRequest",
    "MessageResponse",
    "PostListResponse",
    "PostResponse",
    "PostType",
    "ProfileResponse",
    "RegisterRequest",
]
