import logging

from fastapi import APIRouter, Depends, HTTPException, status
from motor.motor_asyncio import AsyncIOMotorDatabase

from magicstream.api.deps import get_db
from magicstream.data_access.mongo_client import UserRepository
from magicstream.models.auth import AuthResponse, UserLogin
from magicstream.models.user import UserCreate, UserRead
from magicstream.services.auth_service import AuthService, AuthServiceError

logger = logging.getLogger(__name__)
router = APIRouter()

# --- Dependencies ---
def get_auth_service(db: AsyncIOMotorDatabase = Depends(get_db)) -> AuthService:
    return AuthService(repository=UserRepository(db))

@router.post(
    "/register",
    response_model=UserRead,
    status_code=status.HTTP_201_CREATED,
    summary="Register New User",
    description="Registers a new user account.",
    responses={
        409: {"description": "User with this email already exists"},
        422: {"description": "Invalid input data"},
        500: {"description": "Internal server error during registration"},
    }
)
async def register_user(
    user_in: UserCreate,
    auth_service: AuthService = Depends(get_auth_service),
):
    try:
        return await auth_service.register_user(user_in)
    except AuthServiceError as e:
        logger.warning(f"Registration failed: {e.message} (Status Code: {e.status_code})")
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        logger.error(f"Unexpected error during /register endpoint: {e}", exc_info=True)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="An internal error occurred.")


@router.post(
    "/login",
    response_model=AuthResponse,
    summary="User Login",
    description="Authenticates a user with email and password, returning JWT tokens and user info.",
    responses={
        401: {"description": "Invalid email or password"},
        422: {"description": "Invalid input data"},
        500: {"description": "Internal server error during login"},
    }
)
async def login_user(
    login_data: UserLogin,
    auth_service: AuthService = Depends(get_auth_service),
):
    """
    Handles user login using email and password.
    """
    try:
        return await auth_service.login_user(login_data)
    except AuthServiceError as e:
        logger.warning(f"Login failed: {e.message} (Status Code: {e.status_code})")
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        logger.error(f"Unexpected error during /login endpoint: {e}", exc_info=True)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="An internal error occurred.")
