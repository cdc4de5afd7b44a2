"""
Post endpoints.

Provides CRUD operations for lost/found posts:
- GET /api/posts - Paginated, filterable feed
- GET /api/posts/{post_id} - Single post
- POST /api/posts - Create post (multipart, optional image)
- PUT /api/posts/{post_id} - Update own post (multipart, optional image)
- DELETE /api/posts/{post_id} - Delete own post
"""

from typing import Any, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile

from api.dependencies import CurrentUser, get_board, get_current_user
from api.schemas.post import MessageResponse, PostListResponse, PostResponse, PostType
from core.exceptions import BoardError, InvalidInputError
from core.logging import get_logger
from manager.board import LostFoundBoard


logger = get_logger(__name__)
router = APIRouter(prefix="/api/posts", tags=["Posts"])

REQUIRED_TEXT_FIELDS = ("title", "description", "location", "contact_info")


def _clean_fields(fields: dict[str, Any], required: bool) -> dict[str, Any]:
    """
    Trim text fields and reject blank values for the required ones.

    Fields left as None are "not provided" and pass through untouched.
    """
    cleaned: dict[str, Any] = {}
    for key, value in fields.items():
        if isinstance(value, str):
            value = value.strip()
        if key in REQUIRED_TEXT_FIELDS and (value == "" or (required and value is None)):
            label = key.replace("_", " ").capitalize()
            raise InvalidInputError(f"{label} is required")
        cleaned[key] = value
    return cleaned


def _image_or_none(image: Optional[UploadFile]) -> Optional[UploadFile]:
    # Browsers send an empty part when no file is chosen
    if image is None or not image.filename:
        return None
    return image


@router.get("", response_model=PostListResponse)
async def list_posts(
    type: Optional[str] = Query(default=None, description="Lost or Found"),
    location: Optional[str] = Query(default=None, description="Case-insensitive substring"),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    board: LostFoundBoard = Depends(get_board),
) -> PostListResponse:
    """
    Browse posts, newest first.

    The type filter is case-insensitive ("lost" matches "Lost").
    """
    post_type = type.strip().capitalize() if type and type.strip() else None

    try:
        result = await board.list_posts(
            post_type=post_type,
            location=location.strip() if location else None,
            page=page,
            limit=limit,
        )
    except Exception as e:
        logger.error("Failed to list posts", error=str(e), exc_info=True)
        raise HTTPException(status_code=500, detail="Server error")

    return PostListResponse.from_page(result)


@router.get("/{post_id}", response_model=PostResponse)
async def get_post(
    post_id: str,
    board: LostFoundBoard = Depends(get_board),
) -> PostResponse:
    """Get a single post. Unknown or malformed ids answer 404."""
    post = await board.get_post(post_id)
    return PostResponse.from_record(post)


@router.post("", response_model=PostResponse, status_code=201)
async def create_post(
    title: str = Form(...),
    description: str = Form(...),
    location: str = Form(...),
    contact_info: str = Form(..., alias="contactInfo"),
    type: PostType = Form(...),
    current_location: Optional[str] = Form(default=None, alias="currentLocation"),
    image: Optional[UploadFile] = File(default=None),
    user: CurrentUser = Depends(get_current_user),
    board: LostFoundBoard = Depends(get_board),
) -> PostResponse:
    """Create a post owned by the caller."""
    fields = _clean_fields(
        {
            "title": title,
            "description": description,
            "location": location,
            "contact_info": contact_info,
            "type": type,
            "current_location": current_location,
        },
        required=True,
    )
    if not fields["current_location"]:
        fields["current_location"] = None

    try:
        post = await board.create_post(user.id, fields, image=_image_or_none(image))
    except BoardError:
        raise
    except Exception as e:
        logger.error("Create post error", user_id=user.id, error=str(e), exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to create post: {e}")

    return PostResponse.from_record(post)


@router.put("/{post_id}", response_model=PostResponse)
async def update_post(
    post_id: str,
    title: Optional[str] = Form(default=None),
    description: Optional[str] = Form(default=None),
    location: Optional[str] = Form(default=None),
    contact_info: Optional[str] = Form(default=None, alias="contactInfo"),
    type: Optional[PostType] = Form(default=None),
    current_location: Optional[str] = Form(default=None, alias="currentLocation"),
    image: Optional[UploadFile] = File(default=None),
    user: CurrentUser = Depends(get_current_user),
    board: LostFoundBoard = Depends(get_board),
) -> PostResponse:
    """
    Update a post the caller owns.

    Only the provided fields change; a new image replaces the old one.
    """
    fields = _clean_fields(
        {
            "title": title,
            "description": description,
            "location": location,
            "contact_info": contact_info,
            "type": type,
            "current_location": current_location,
        },
        required=False,
    )

    try:
        post = await board.update_post(user.id, post_id, fields, image=_image_or_none(image))
    except BoardError:
        raise
    except Exception as e:
        logger.error("Update post error", post_id=post_id, error=str(e), exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to update post: {e}")

    return PostResponse.from_record(post)


@router.delete("/{post_id}", response_model=MessageResponse)
async def delete_post(
    post_id: str,
    user: CurrentUser = Depends(get_current_user),
    board: LostFoundBoard = Depends(get_board),
) -> MessageResponse:
    """Delete a post the caller owns."""
    try:
        await board.delete_post(user.id, post_id)
    except BoardError:
        raise
    except Exception as e:
        logger.error("Delete post error", post_id=post_id, error=str(e), exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to delete post: {e}")

    return MessageResponse(message="Post deleted successfully.")
