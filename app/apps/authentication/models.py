"""
Authentication models
"""
from enum import Enum
from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import datetime


class Role(str, Enum):
    """Profile roles, most privileged first"""
    ADMIN = "admin"
    EDITOR = "editor"
    AUTHOR = "author"
    SUBSCRIBER = "subscriber"

    @property
    def rank(self) -> int:
        return ROLE_RANK[self]


ROLE_RANK = {
    Role.ADMIN: 0,
    Role.EDITOR: 1,
    Role.AUTHOR: 2,
    Role.SUBSCRIBER: 3,
}


class Profile(SQLModel, table=True):
    """
    Role-bearing profile attached to a Supabase auth identity
    Table: profiles
    """
    __tablename__ = "profiles"

    id: str = Field(primary_key=True)  # Supabase auth user id
    email: str = Field(max_length=255, index=True)
    full_name: Optional[str] = Field(default=None, max_length=255)
    avatar_url: Optional[str] = Field(default=None)
    role: str = Field(default=Role.AUTHOR.value, max_length=20)
    bio: Optional[str] = Field(default=None)
    website: Optional[str] = Field(default=None)
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)
