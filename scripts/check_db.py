"""
Database check script.

Tests the MongoDB connection, lists collections and reports post
data quality (missing fields, Lost/Found distribution).

Usage:
    python -m scripts.check_db
"""

import asyncio
import sys
from pathlib import Path
from typing import Any, Optional

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from pymongo.errors import PyMongoError

from core.config import settings
from core.storage import BasePostRepository, create_mongodb_repositories


CHECKED_FIELDS = ("title", "description", "type", "location")


async def collect_post_report(posts: BasePostRepository) -> dict[str, Any]:
    """Count posts, posts missing required fields, and posts per type."""
    missing = {}
    for field in CHECKED_FIELDS:
        missing[field] = await posts.count(**{field: None})

    return {
        "total": await posts.count(),
        "missing_fields": missing,
        "without_user": await posts.count(user_id=None),
        "types": {
            "lost": await posts.count(type="Lost"),
            "found": await posts.count(type="Found"),
        },
    }


def print_report(report: dict[str, Any]) -> None:
    print(f"Total posts in database: {report['total']}")

    print("\nData quality check:")
    for field, count in report["missing_fields"].items():
        print(f"Posts with missing {field}: {count}")
    print(f"Posts without user reference: {report['without_user']}")

    print("\nPost types:")
    print(f"Lost items: {report['types']['lost']}")
    print(f"Found items: {report['types']['found']}")


async def check_database() -> Optional[dict[str, Any]]:
    """Run the connection test and the post report. Returns None on failure."""

    print("Connecting to MongoDB...")
    try:
        repos = await create_mongodb_repositories(settings)
    except PyMongoError as e:
        print(f"MongoDB connection error: {e}")
        return None

    try:
        print("MongoDB connection successful")

        print("Collections:")
        for name in await repos.connection.list_collections():
            print(f"- {name}")

        report = await collect_post_report(repos.posts)
        print_report(report)
        return report

    finally:
        await repos.close()


if __name__ == "__main__":
    result = asyncio.run(check_database())

    print("\nCheck completed")
    if result and result["total"] > 0:
        print("Database contains valid posts")
    else:
        print("No posts found or database issue detected")

    sys.exit(0 if result is not None else 1)
