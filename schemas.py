"""
Database Schemas

MongoDB collection schemas and API request/response models, all Pydantic.
Collection schemas map to these collections:
- User -> "users"
- Post -> "posts"
- Comment -> "comments"
- Like -> "likes"
- RefreshToken -> "refresh_tokens"
"""

from datetime import datetime
from typing import List, Optional

from bson import ObjectId
from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from text_utils import normalize_tags


# Collections

class User(BaseModel):
    """
    Users collection schema
    Collection name: "users"
    """
    email: EmailStr = Field(..., description="Unique email address, stored lowercase")
    password_hash: str = Field(..., description="BCrypt password hash")
    name: str = Field(..., min_length=2, max_length=50)
    bio: Optional[str] = Field(None, max_length=500)
    avatar_url: Optional[str] = None
    is_email_verified: bool = False
    email_verification_token: Optional[str] = None
    password_reset_token: Optional[str] = None
    password_reset_expires: Optional[datetime] = None


class Post(BaseModel):
    """
    Posts collection schema
    Collection name: "posts"
    """
    model_config = ConfigDict(arbitrary_types_allowed=True)

    title: str = Field(..., min_length=1, max_length=200)
    slug: str = Field(..., description="Unique, lowercase, derived from title")
    excerpt: Optional[str] = Field(None, max_length=300)
    body: str
    tags: List[str] = []
    author: ObjectId
    featured_image: Optional[str] = None
    is_published: bool = False
    published_at: Optional[datetime] = None
    likes_count: int = 0
    comments_count: int = 0


class Comment(BaseModel):
    """
    Comments collection schema
    Collection name: "comments"
    """
    model_config = ConfigDict(arbitrary_types_allowed=True)

    content: str = Field(..., min_length=1, max_length=1000)
    author: ObjectId
    post: ObjectId


class Like(BaseModel):
    """
    Likes collection schema, one per (user, post)
    Collection name: "likes"
    """
    model_config = ConfigDict(arbitrary_types_allowed=True)

    user: ObjectId
    post: ObjectId


class RefreshToken(BaseModel):
    """
    Refresh tokens collection schema
    Collection name: "refresh_tokens"
    """
    model_config = ConfigDict(arbitrary_types_allowed=True)

    token: str
    user: ObjectId
    expires_at: datetime
    is_revoked: bool = False


# Auth requests

class SignupRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=72)
    name: str = Field(..., min_length=2, max_length=50)

    @field_validator("email")
    @classmethod
    def lower_email(cls, v: str) -> str:
        return v.lower()

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v):
        return v.strip() if isinstance(v, str) else v


class SigninRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)

    @field_validator("email")
    @classmethod
    def lower_email(cls, v: str) -> str:
        return v.lower()


class RefreshRequest(BaseModel):
    refresh_token: Optional[str] = None


class SignoutRequest(BaseModel):
    refresh_token: Optional[str] = None


class ProfileUpdateRequest(BaseModel):
    # Checked in the route to return the original messages
    name: Optional[str] = None
    bio: Optional[str] = None


class VerifyEmailRequest(BaseModel):
    token: Optional[str] = None


class ForgotPasswordRequest(BaseModel):
    email: str


class ResetPasswordRequest(BaseModel):
    token: Optional[str] = None
    password: Optional[str] = Field(None, max_length=72)


# Post requests

class PostCreateRequest(BaseModel):
    """Body of POST /api/posts and PUT /api/posts/{id}."""
    title: str = Field(..., min_length=1, max_length=200)
    body: str = Field(..., min_length=1)
    excerpt: Optional[str] = Field(None, max_length=300)
    tags: List[str] = []
    featured_image: Optional[str] = None
    is_published: Optional[bool] = None

    @field_validator("title", mode="before")
    @classmethod
    def strip_title(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("tags")
    @classmethod
    def clean_tags(cls, v: List[str]) -> List[str]:
        return normalize_tags(v)


class CommentCreateRequest(BaseModel):
    content: str = Field(..., min_length=1, max_length=1000)

    @field_validator("content", mode="before")
    @classmethod
    def strip_content(cls, v):
        return v.strip() if isinstance(v, str) else v


# Responses

class PublicUser(BaseModel):
    id: str
    email: str
    name: str
    bio: Optional[str] = None
    avatar_url: Optional[str] = None
    is_email_verified: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class AuthResponse(BaseModel):
    message: str
    user: PublicUser
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
