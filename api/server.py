"""
FastAPI application entry point.

Sets up the application with:
- Lifespan management (startup/shutdown)
- Route registration
- Middleware configuration
- Error handling
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.dependencies import set_board
from api.routes import health_router, posts_router, users_router
from core.config import settings
from core.exceptions import BoardError
from core.logging import configure_logging, get_logger
from core.uploads import ImageStore
from manager.board import LostFoundBoard


logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan manager.

    - Startup: create the board (which connects storage, falling back
      to memory when MongoDB is unreachable)
    - Shutdown: close storage connections
    """
    configure_logging()

    logger.info(
        "Starting lost-and-found service...",
        storage_backend=settings.storage_backend,
    )

    board = LostFoundBoard(image_store=app.state.image_store)
    await board.initialize()
    set_board(board)

    logger.info(
        "Lost-and-found service started",
        host=settings.server_host,
        port=settings.server_port,
        **board.storage_status(),
    )

    yield

    logger.info("Shutting down lost-and-found service...")
    await board.shutdown()
    set_board(None)
    logger.info("Lost-and-found service stopped")


def _validation_message(exc: RequestValidationError) -> str:
    """First validation error as a plain sentence."""
    errors = exc.errors()
    if not errors:
        return "Invalid request"

    first = errors[0]
    message = str(first.get("msg", "Invalid request")).removeprefix("Value error, ")
    location = [str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path")]
    if location and first.get("type") != "value_error":
        return f"{'.'.join(location)}: {message}"
    return message


def create_app() -> FastAPI:
    """
    Application factory.

    Creates and configures the FastAPI application.
    """
    app = FastAPI(
        title="Lost & Found Board",
        description=(
            "Campus lost-and-found posting board.\n\n"
            "Register, log in, and post Lost or Found items with an optional image."
        ),
        version="0.1.0",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    image_store = ImageStore(
        upload_dir=settings.upload_dir,
        url_prefix=settings.upload_url_prefix,
        max_bytes=settings.max_upload_bytes,
    )
    image_store.ensure_directory()
    app.state.image_store = image_store
    app.mount(
        settings.upload_url_prefix,
        StaticFiles(directory=settings.upload_dir),
        name="uploads",
    )

    app.include_router(health_router)
    app.include_router(users_router)
    app.include_router(posts_router)

    @app.exception_handler(BoardError)
    async def board_error_handler(request: Request, exc: BoardError):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.message},
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=400,
            content={"error": _validation_message(exc)},
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error(
            "Unhandled exception",
            path=request.url.path,
            method=request.method,
            error=str(exc),
            exc_info=True,
        )
        return JSONResponse(
            status_code=500,
            content={
                "error": str(exc) if settings.debug else "Server error",
            },
        )

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "api.server:app",
        host=settings.server_host,
        port=settings.server_port,
        reload=settings.debug,
    )
