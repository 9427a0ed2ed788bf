# magicstream/models/user.py

from datetime import datetime
from enum import Enum
from typing import List

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from magicstream.models.movie import Genre


class Role(str, Enum):
    """Roles a user account can hold."""
    ADMIN = "ADMIN"
    USER = "USER"


# --- Base Model ---
class UserBase(BaseModel):
    """Profile fields shared by every user representation."""
    first_name: str = Field(..., min_length=2, max_length=100, description="User's first name.")
    last_name: str = Field(..., min_length=2, max_length=100, description="User's last name.")
    email: EmailStr = Field(..., description="User's email address, unique per account.")
    role: Role = Field(Role.USER, description="Role assigned to the user.")
    favourite_genres: List[Genre] = Field(default_factory=list, description="Genres the user likes.")


class UserCreate(UserBase):
    """Data required to register a new user"""
    password: str = Field(..., min_length=6, description="User password (min 6 characters)")

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, v: str) -> str:
        # bcrypt only accepts up to 72 bytes
        if len(v.encode("utf-8")) > 72:
            raise ValueError("password must be at most 72 bytes")
        return v


# --- Model for API Responses ---
class UserRead(UserBase):
    """User data returned in responses, never includes the password hash."""
    user_id: str = Field(..., description="Public identifier, also the 'sub' claim of issued tokens.")
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


# --- Model for Internal Use ---
class UserInDB(UserRead):
    """User document as stored in the 'users' collection."""
    password_hash: str

    def to_read(self) -> UserRead:
        return UserRead.model_validate(self.model_dump(exclude={"password_hash"}))
