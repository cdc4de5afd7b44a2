"""
Tests for the in-memory repositories.

These mirror what the MongoDB repositories do, so the board behaves
the same when it falls back to memory.
"""

from datetime import timedelta

import pytest

from core.exceptions import DuplicateEmailError
from core.storage import PostFilter, PostRecord, UserRecord
from core.storage.base import utcnow


def make_post(index: int, post_type: str = "Lost", location: str = "EC Block", user_id: str = "u1", **extra):
    stamp = utcnow() + timedelta(seconds=index)
    return PostRecord(
        title=f"Item {index}",
        description="Blue bottle",
        location=location,
        contact_info="call me",
        type=post_type,
        user_id=user_id,
        created_at=stamp,
        updated_at=stamp,
        **extra,
    )


@pytest.mark.asyncio
async def test_user_create_and_lookup(users):
    """Users can be found by email and by id."""
    user = await users.create(UserRecord(name="Asha", email="asha@pesu.edu", password_hash="x"))

    assert (await users.get_by_email("asha@pesu.edu")).id == user.id
    assert (await users.get(user.id)).name == "Asha"
    assert await users.count() == 1


@pytest.mark.asyncio
async def test_user_duplicate_email_rejected(users):
    await users.create(UserRecord(name="A", email="dup@pesu.edu", password_hash="x"))

    with pytest.raises(DuplicateEmailError):
        await users.create(UserRecord(name="B", email="dup@pesu.edu", password_hash="y"))

    assert await users.count() == 1


@pytest.mark.asyncio
async def test_unknown_ids_return_none(users, posts):
    assert await users.get("not-an-id") is None
    assert await posts.get("665f1c2a9b1e8a3d4c5b6a79") is None
    assert await posts.update("nope", {"title": "x"}) is None
    assert await posts.delete("nope") is None


@pytest.mark.asyncio
async def test_pagination_is_bounded(posts):
    """Pages slice the feed without overlap and the last page is short."""
    for i in range(12):
        await posts.create(make_post(i))

    first = await posts.list(PostFilter(), page=1, limit=5)
    last = await posts.list(PostFilter(), page=3, limit=5)
    beyond = await posts.list(PostFilter(), page=4, limit=5)

    assert len(first.posts) == 5
    assert len(last.posts) == 2
    assert beyond.posts == []
    assert first.total_posts == 12
    assert first.total_pages == 3
    assert last.current_page == 3


@pytest.mark.asyncio
async def test_feed_is_newest_first(posts):
    for i in range(3):
        await posts.create(make_post(i))

    page = await posts.list(PostFilter(), page=1, limit=10)

    assert [p.title for p in page.posts] == ["Item 2", "Item 1", "Item 0"]


@pytest.mark.asyncio
async def test_filter_by_type(posts):
    await posts.create(make_post(0, "Lost"))
    await posts.create(make_post(1, "Found"))
    await posts.create(make_post(2, "Found"))

    page = await posts.list(PostFilter(type="Found"), page=1, limit=10)

    assert page.total_posts == 2
    assert all(p.type == "Found" for p in page.posts)


@pytest.mark.asyncio
async def test_filter_by_location_is_case_insensitive_substring(posts):
    await posts.create(make_post(0, location="Cafeteria, PESU"))
    await posts.create(make_post(1, location="EC Block, PESU"))

    page = await posts.list(PostFilter(location="cafe"), page=1, limit=10)

    assert [p.location for p in page.posts] == ["Cafeteria, PESU"]


@pytest.mark.asyncio
async def test_update_applies_only_given_fields(posts):
    post = await posts.create(make_post(0))

    updated = await posts.update(post.id, {"title": "Renamed", "user_id": "someone-else"})

    assert updated.title == "Renamed"
    assert updated.description == post.description
    # Ownership is not an updatable field
    assert updated.user_id == post.user_id
    assert updated.updated_at >= post.updated_at


@pytest.mark.asyncio
async def test_stored_records_are_not_aliased(posts):
    """Mutating a returned record must not change the stored one."""
    post = await posts.create(make_post(0))
    fetched = await posts.get(post.id)
    fetched.title = "mutated"

    assert (await posts.get(post.id)).title == "Item 0"


@pytest.mark.asyncio
async def test_delete_returns_removed_post(posts):
    post = await posts.create(make_post(0))

    removed = await posts.delete(post.id)

    assert removed.id == post.id
    assert await posts.get(post.id) is None


@pytest.mark.asyncio
async def test_count_by_criteria(posts):
    await posts.create(make_post(0, "Lost"))
    await posts.create(make_post(1, "Found", current_location="Reception"))

    assert await posts.count() == 2
    assert await posts.count(type="Lost") == 1
    assert await posts.count(current_location=None) == 1
