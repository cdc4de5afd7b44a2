"""
Database initialization script.

Clears existing users and posts, then seeds the sample user
(test@pesu.edu / password123) and two sample posts.

Usage:
    python -m scripts.init_db
"""

import asyncio
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from core.config import settings
from core.storage import create_mongodb_repositories
from core.storage.sample_data import seed_sample_data


async def init_database():
    """Reset the MongoDB collections and insert sample data."""

    print(f"Connecting to MongoDB...")
    print(f"Database: {settings.mongodb_database}")

    repos = await create_mongodb_repositories(settings)
    try:
        print("Clearing existing data")
        await repos.users.clear()
        await repos.posts.clear()

        user, posts = await seed_sample_data(repos.users, repos.posts)
        print(f"Created test user: {user.email}")
        print(f"Created {len(posts)} sample posts")

        print("Database initialized successfully")

    except Exception as e:
        print(f"Error initializing database: {e}")
        raise

    finally:
        await repos.close()
        print("Disconnected from MongoDB")


if __name__ == "__main__":
    asyncio.run(init_database())
