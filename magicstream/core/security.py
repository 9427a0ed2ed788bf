# JWT issuing/verification, password hashing and the auth gate
# magicstream/core/security.py

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Coroutine, Dict, Optional

import bcrypt
from fastapi import Depends, HTTPException, Request, Response, status
from fastapi.routing import APIRoute
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from jose.exceptions import ExpiredSignatureError, JWTClaimsError
from pydantic import ValidationError

from magicstream.core.config import settings
from magicstream.models.auth import TokenClaims, TokenData
from magicstream.models.user import UserRead

logger = logging.getLogger(__name__)

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"

# Scheme for extracting "Bearer <token>" from Authorization header
# auto_error=False means we handle the error manually if token is missing/malformed
token_bearer_scheme = HTTPBearer(auto_error=False)

# --- Custom Exceptions ---
class CredentialsException(HTTPException):
    def __init__(self, detail: str = "Could not validate credentials", status_code: int = status.HTTP_401_UNAUTHORIZED):
        super().__init__(
            status_code=status_code,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )

class TokenExpiredException(CredentialsException):
    def __init__(self, detail: str = "Token has expired"):
        super().__init__(detail=detail)

class InvalidTokenException(CredentialsException):
    def __init__(self, detail: str = "Invalid token signature or format"):
        super().__init__(detail=detail)

class InvalidClaimsException(CredentialsException):
    def __init__(self, detail: str = "Invalid token claims"):
        super().__init__(detail=detail)

class MissingTokenException(CredentialsException):
    def __init__(self, detail: str = "Authentication token missing"):
        super().__init__(detail=detail)


# --- Password Hashing ---

def hash_password(password: str) -> str:
    """Returns the bcrypt hash of a password as a str suitable for storage."""
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")

def verify_password(password: str, password_hash: str) -> bool:
    """Checks a plain password against a stored bcrypt hash."""
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Malformed stored hash or over-long password
        logger.warning("Password verification failed: unusable hash or password.")
        return False


# --- Token Issuing ---

def _encode_token(user: UserRead, token_type: str, key: str, lifetime: timedelta) -> str:
    now = datetime.now(timezone.utc)
    claims = {
        "sub": user.user_id,
        "email": user.email,
        "first_name": user.first_name,
        "last_name": user.last_name,
        "role": user.role.value,
        "type": token_type,
        "iat": now,
        "exp": now + lifetime,
    }
    return jwt.encode(claims, key, algorithm=settings.JWT_ALGORITHM)

def create_access_token(user: UserRead) -> str:
    return _encode_token(
        user,
        ACCESS_TOKEN_TYPE,
        settings.SECRET_KEY.get_secret_value(),
        timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
    )

def create_refresh_token(user: UserRead) -> str:
    return _encode_token(
        user,
        REFRESH_TOKEN_TYPE,
        settings.SECRET_REFRESH_KEY.get_secret_value(),
        timedelta(minutes=settings.REFRESH_TOKEN_EXPIRE_MINUTES),
    )

def issue_tokens(user: UserRead) -> TokenData:
    """Issues the access/refresh token pair returned at login."""
    return TokenData(
        access_token=create_access_token(user),
        refresh_token=create_refresh_token(user),
        token_type="bearer",
        expires_in=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
    )


# --- Core Verification Logic ---

def decode_access_token(token: str) -> TokenClaims:
    """
    Verifies an access token and returns its claims.

    Raises:
        TokenExpiredException: If the token signature has expired.
        InvalidClaimsException: If the claims are missing, malformed or not an access token.
        InvalidTokenException: If the token signature or format is invalid.
    """
    try:
        payload: Dict[str, Any] = jwt.decode(
            token,
            settings.SECRET_KEY.get_secret_value(),
            algorithms=[settings.JWT_ALGORITHM],
            options={
                "verify_signature": True,
                "verify_exp": True,
                "require_exp": True,
                "require_sub": True,
            }
        )
    except ExpiredSignatureError:
        logger.warning("Authentication attempt failed: Token expired.")
        raise TokenExpiredException()
    except JWTClaimsError as e:
        logger.warning(f"Authentication attempt failed: Invalid claims - {e}")
        raise InvalidClaimsException(detail=f"Invalid token claims: {e}")
    except JWTError as e:
        logger.warning(f"Authentication attempt failed: Invalid token format or signature - {e}")
        raise InvalidTokenException(detail=f"Invalid token: {e}")

    if payload.get("type") != ACCESS_TOKEN_TYPE:
        logger.warning(f"Authentication attempt failed: token type is {payload.get('type')!r}, not access.")
        raise InvalidClaimsException(detail="Token is not an access token")

    try:
        return TokenClaims.model_validate(payload)
    except ValidationError as e:
        logger.warning(f"Authentication attempt failed: malformed claims - {e.error_count()} error(s)")
        raise InvalidClaimsException()


# --- Auth Gate ---

async def require_authenticated_user(
    request: Request,
    auth_credentials: Optional[HTTPAuthorizationCredentials] = Depends(token_bearer_scheme),
) -> TokenClaims:
    """
    Gate for the protected route group.

    Rejects the request with 401 unless it carries a valid bearer access token.
    On success the verified claims are stored on ``request.state.user`` and the
    request proceeds unchanged to its handler. A request already admitted by
    AuthGatedRoute is not checked twice.
    """
    claims = getattr(request.state, "user", None)
    if claims is not None:
        return claims

    if auth_credentials is None or not auth_credentials.credentials:
        logger.warning("Authentication attempt failed: No token provided in Authorization header.")
        raise MissingTokenException()

    claims = decode_access_token(auth_credentials.credentials)
    request.state.user = claims
    logger.debug(f"Authenticated user {claims.sub} ({claims.role.value}) for {request.url.path}")
    return claims


async def get_current_user(request: Request) -> TokenClaims:
    """Returns the claims the gate attached to the request."""
    claims = getattr(request.state, "user", None)
    if claims is None:
        # Route was mounted outside the protected group
        raise CredentialsException()
    return claims


class AuthGatedRoute(APIRoute):
    """
    Route class that runs the auth gate before FastAPI reads the request body.

    Unauthenticated requests get 401 whatever their body holds, including
    bodies that are not JSON at all.
    """
    def get_route_handler(self) -> Callable[[Request], Coroutine[Any, Any, Response]]:
        route_handler = super().get_route_handler()

        async def gated_route_handler(request: Request) -> Response:
            await require_authenticated_user(request, await token_bearer_scheme(request))
            return await route_handler(request)

        return gated_route_handler
