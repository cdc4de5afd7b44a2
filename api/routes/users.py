"""
User account endpoints.

- POST /api/users/register - Create an account
- POST /api/users/login - Exchange credentials for a token
- GET /api/users/profile - Identity of the token holder
"""

from fastapi import APIRouter, Depends, HTTPException

from api.dependencies import CurrentUser, get_board, get_current_user
from api.schemas.user import AuthResponse, LoginRequest, ProfileResponse, RegisterRequest
from core.exceptions import BoardError
from core.logging import get_logger
from manager.board import AuthResult, LostFoundBoard


logger = get_logger(__name__)
router = APIRouter(prefix="/api/users", tags=["Users"])


def _auth_response(result: AuthResult) -> AuthResponse:
    return AuthResponse(
        id=result.user.id,
        name=result.user.name,
        email=result.user.email,
        srn=result.user.srn,
        token=result.token,
    )


@router.post("/register", response_model=AuthResponse, status_code=201)
async def register(
    request: RegisterRequest,
    board: LostFoundBoard = Depends(get_board),
) -> AuthResponse:
    """
    Create an account.

    Rejects an email that is already registered (400).
    """
    try:
        result = await board.register(
            name=request.name,
            email=request.email,
            password=request.password,
            srn=request.srn,
        )
    except BoardError:
        raise
    except Exception as e:
        logger.error("Registration error", error=str(e), exc_info=True)
        raise HTTPException(
            status_code=500,
            detail="Server error during registration",
        )

    return _auth_response(result)


@router.post("/login", response_model=AuthResponse)
async def login(
    request: LoginRequest,
    board: LostFoundBoard = Depends(get_board),
) -> AuthResponse:
    """Log in with email and password. Wrong credentials answer 401."""
    try:
        result = await board.login(request.email, request.password)
    except BoardError:
        raise
    except Exception as e:
        logger.error("Login error", error=str(e), exc_info=True)
        raise HTTPException(
            status_code=500,
            detail="Server error during login",
        )

    return _auth_response(result)


@router.get("/profile", response_model=ProfileResponse)
async def profile(user: CurrentUser = Depends(get_current_user)) -> ProfileResponse:
    """Return the caller's identity straight from the token."""
    return ProfileResponse(id=user.id, name=user.name, email=user.email)
