from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Snake_case in Python, camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --- User ---

class UserCreate(CamelModel):
    email: EmailStr = Field(max_length=255)
    first_name: str = Field(min_length=1, max_length=150)
    last_name: str = Field(min_length=1, max_length=150)
    password: str = Field(min_length=1, max_length=72)


class LoginRequest(CamelModel):
    email: EmailStr
    password: str = Field(min_length=1, max_length=72)


class UserResponse(CamelModel):
    id: int
    email: str
    first_name: str
    last_name: str
    created_at: datetime


class RegisteredUserResponse(UserResponse):
    token: str


class TokenResponse(CamelModel):
    token: str


# --- Post ---

class PostRequest(CamelModel):
    content: str = Field(min_length=1)


class PostResponse(CamelModel):
    id: int
    author_id: int
    content: str
    likes: int = 0
    created_at: datetime
    updated_at: datetime


# --- Comment ---

class CommentRequest(CamelModel):
    content: str = Field(min_length=1)


class CommentResponse(CamelModel):
    id: int
    author_id: int
    post_id: int
    content: str
    likes: int = 0
    created_at: datetime
    updated_at: datetime
