"""
Health check endpoints.

Provides endpoints for monitoring and load balancer health checks.
"""

from fastapi import APIRouter, Depends

from api.dependencies import get_board
from core.logging import get_logger
from manager.board import LostFoundBoard


logger = get_logger(__name__)
router = APIRouter(tags=["Health"])


@router.get("/health")
async def health_check(board: LostFoundBoard = Depends(get_board)) -> dict:
    """
    Basic health check.

    Returns 200 if the service is running, along with the storage state:
    "connected" (MongoDB), "fallback" (MongoDB unreachable, serving from
    memory) or "memory" (configured in-memory backend).
    """
    status = board.storage_status()
    return {
        "status": "ok",
        "service": "lost-and-found",
        "database": status["database"],
        "backend": status["backend"],
    }
