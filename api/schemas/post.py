"""
Post-related response schemas.

Field names serialize in camelCase and the id as "_id", matching
the document shape browser clients already consume.
"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from core.storage import PostPage, PostRecord


PostType = Literal["Lost", "Found"]


class PostResponse(BaseModel):
    """A single post."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str = Field(..., alias="_id")
    title: str
    description: str
    location: str
    current_location: Optional[str] = None
    contact_info: str
    type: PostType
    image_url: Optional[str] = None
    user_id: str
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_record(cls, record: PostRecord) -> "PostResponse":
        return cls.model_validate(record.to_dict())


class PostListResponse(BaseModel):
    """One page of the post feed."""

    posts: list[PostResponse] = Field(default_factory=list)
    total_pages: int
    current_page: int
    total_posts: int

    @classmethod
    def from_page(cls, page: PostPage) -> "PostListResponse":
        return cls(
            posts=[PostResponse.from_record(post) for post in page.posts],
            total_pages=page.total_pages,
            current_page=page.current_page,
            total_posts=page.total_posts,
        )

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "examples": [
                {
                    "posts": [
                        {
                            "_id": "665f1c2a9b1e8a3d4c5b6a79",
                            "title": "Found Wallet",
                            "description": "Found a black leather wallet near the cafeteria.",
                            "location": "Cafeteria, PESU",
                            "currentLocation": "I am keeping it at the reception",
                            "contactInfo": "Email: test@pesu.edu",
                            "type": "Found",
                            "imageUrl": "/uploads/3f2a9c.jpg",
                            "userId": "665f1c2a9b1e8a3d4c5b6a77",
                            "createdAt": "2024-05-18T10:00:00Z",
                            "updatedAt": "2024-05-18T10:00:00Z",
                        }
                    ],
                    "totalPages": 1,
                    "currentPage": 1,
                    "totalPosts": 1,
                }
            ]
        },
    )


class MessageResponse(BaseModel):
    message: str
