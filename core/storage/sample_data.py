"""
Sample user and posts used to seed a fresh store.

The in-memory backend is seeded at startup (when SEED_SAMPLE_DATA is on),
and scripts/init_db.py uses the same data for MongoDB.
"""

from datetime import timedelta

from core.logging import get_logger
from core.security import get_password_hash
from core.storage.base import BasePostRepository, BaseUserRepository, PostRecord, UserRecord, utcnow


logger = get_logger(__name__)


SAMPLE_USER = {
    "name": "Test User",
    "email": "test@pesu.edu",
    "password": "password123",
    "srn": "PES1UG123456",
}

SAMPLE_POSTS = [
    {
        "title": "Lost iPhone 13",
        "description": "I lost my iPhone 13 Pro Max in the EC Block. It has a blue case with my ID inside.",
        "location": "EC Block, PESU",
        "contact_info": "Email: test@pesu.edu or call: 123-456-7890",
        "type": "Lost",
        "image_url": "https://res.cloudinary.com/dzldppgax/image/upload/v1716060345/lost-and-found/phone_sample.jpg",
    },
    {
        "title": "Found Wallet",
        "description": "Found a black leather wallet near the cafeteria.",
        "location": "Cafeteria, PESU",
        "current_location": "I am keeping it at the reception",
        "contact_info": "Email: test@pesu.edu",
        "type": "Found",
        "image_url": "https://res.cloudinary.com/dzldppgax/image/upload/v1716060345/lost-and-found/wallet_sample.jpg",
    },
]


async def seed_sample_data(
    users: BaseUserRepository,
    posts: BasePostRepository,
) -> tuple[UserRecord, list[PostRecord]]:
    """Create the sample user and its posts. Returns what was created."""
    user = await users.create(
        UserRecord(
            name=SAMPLE_USER["name"],
            email=SAMPLE_USER["email"],
            password_hash=get_password_hash(SAMPLE_USER["password"]),
            srn=SAMPLE_USER["srn"],
        )
    )

    created: list[PostRecord] = []
    base_time = utcnow()
    for offset, data in enumerate(SAMPLE_POSTS):
        # Later samples are newer, so the feed shows them first
        stamp = base_time + timedelta(seconds=offset)
        record = PostRecord(user_id=user.id, created_at=stamp, updated_at=stamp, **data)
        created.append(await posts.create(record))

    logger.info(
        "Sample data seeded",
        user_email=user.email,
        posts=len(created),
    )
    return user, created
