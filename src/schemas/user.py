"""User schema definitions.

This module defines the User data model and the request/response bodies of
the authentication endpoints.
"""

import secrets
from datetime import datetime
from typing import List, Literal, Optional

import pytz
from pydantic import BaseModel, EmailStr, Field, constr


class User(BaseModel):
    user_id: str = Field(
        description="The unique identifier for the user.",
        default_factory=lambda: secrets.token_hex(12),
    )
    name: str = Field(description="Display name.")
    email: str = Field(description="Unique email address.")
    password_hash: Optional[str] = Field(
        default=None,
        description="Bcrypt hash; only set for provider 'local'.",
    )
    role: Literal["user", "admin"] = "user"
    provider: Literal["local", "github"] = "local"
    github_id: Optional[str] = None
    avatar: Optional[str] = None
    token_id: Optional[str] = Field(
        default=None,
        description="Identifier of the single live session token.",
    )
    created_at: str = Field(
        default_factory=lambda: datetime.now(pytz.utc).isoformat()
    )
    updated_at: str = Field(
        default_factory=lambda: datetime.now(pytz.utc).isoformat()
    )


class UserInfo(BaseModel):
    """Public view of a user, never carrying credentials."""

    id: str
    name: str
    email: str
    role: str
    provider: str
    avatar: Optional[str] = None

    @classmethod
    def from_user(cls, user: User) -> "UserInfo":
        return cls(
            id=user.user_id,
            name=user.name,
            email=user.email,
            role=user.role,
            provider=user.provider,
            avatar=user.avatar,
        )


class RegisterRequest(BaseModel):
    name: constr(strip_whitespace=True, min_length=1)
    email: EmailStr
    password: str = Field(min_length=1)


class LoginRequest(BaseModel):
    email: str
    password: str


class LoginResponse(BaseModel):
    user: UserInfo
    token: str


class GitHubTokenRequest(BaseModel):
    code: str = Field(min_length=1, description="GitHub OAuth authorization code")


class GitHubTokenResponse(BaseModel):
    access_token: str
    user: UserInfo


class CurrentUserResponse(BaseModel):
    user: UserInfo


class UserListResponse(BaseModel):
    users: List[UserInfo]
