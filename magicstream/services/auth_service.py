import logging
import uuid
from datetime import datetime, timezone

from fastapi import status
from starlette.concurrency import run_in_threadpool

from magicstream.core.security import hash_password, issue_tokens, verify_password
from magicstream.data_access.mongo_client import DuplicateDocumentError, UserRepository
from magicstream.models.auth import AuthResponse, UserLogin
from magicstream.models.user import UserCreate, UserInDB, UserRead

logger = logging.getLogger(__name__)

class AuthServiceError(Exception):
    """Custom exception for Auth service errors."""
    def __init__(self, message: str, status_code: int = status.HTTP_400_BAD_REQUEST):
        self.message = message
        self.status_code = status_code
        super().__init__(message)

class AuthService:
    def __init__(self, repository: UserRepository):
        self.repository = repository

    async def register_user(self, user_data: UserCreate) -> UserRead:
        """Registers a new user, storing only a bcrypt hash of the password."""
        email = user_data.email.lower()
        logger.info(f"Attempting to register user: {email}")

        if await self.repository.find_by_email(email) is not None:
            logger.warning(f"Registration rejected, email already in use: {email}")
            raise AuthServiceError("User already exists", status.HTTP_409_CONFLICT)

        now = datetime.now(timezone.utc)
        user = UserInDB(
            **user_data.model_dump(exclude={"password", "email"}),
            email=email,
            user_id=uuid.uuid4().hex,
            password_hash=await run_in_threadpool(hash_password, user_data.password),
            created_at=now,
            updated_at=now,
        )
        user_doc = user.model_dump(mode="json")
        # Keep timestamps as BSON dates
        user_doc["created_at"] = now
        user_doc["updated_at"] = now
        try:
            await self.repository.insert(user_doc)
        except DuplicateDocumentError:
            # Lost a race with a concurrent registration
            raise AuthServiceError("User already exists", status.HTTP_409_CONFLICT)

        logger.info(f"Successfully registered user: {user.user_id} ({email})")
        return user.to_read()

    async def login_user(self, login_data: UserLogin) -> AuthResponse:
        """Checks email/password and issues an access/refresh token pair."""
        email = login_data.email.lower()
        logger.info(f"Attempting login for user: {email}")

        user_doc = await self.repository.find_by_email(email)
        password_ok = user_doc is not None and await run_in_threadpool(
            verify_password, login_data.password, user_doc.get("password_hash", "")
        )
        if not password_ok:
            logger.warning(f"Login failed for {email}")
            raise AuthServiceError("Invalid email or password", status.HTTP_401_UNAUTHORIZED)

        user = UserInDB.model_validate({k: v for k, v in user_doc.items() if k != "_id"}).to_read()
        logger.info(f"Successfully logged in user: {user.user_id} ({user.email})")
        return AuthResponse(session=issue_tokens(user), user=user)
