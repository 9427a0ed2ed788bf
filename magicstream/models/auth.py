from pydantic import BaseModel, EmailStr

from magicstream.models.user import Role, UserRead

class UserLogin(BaseModel):
    """Data required for user login"""
    email: EmailStr
    password: str

class TokenData(BaseModel):
    """Signed tokens handed out at login"""
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int

class AuthResponse(BaseModel):
    """Response containing token data and user info after successful login"""
    session: TokenData
    user: UserRead

class TokenClaims(BaseModel):
    """Verified claims of an access token, attached to request.state.user by the auth gate"""
    sub: str
    email: EmailStr
    first_name: str
    last_name: str
    role: Role
    type: str
