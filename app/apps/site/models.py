"""
Visitor submissions from the public site
"""
from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import datetime


class ContactMessage(SQLModel, table=True):
    """
    Contact form message
    Table: contact_messages
    """
    __tablename__ = "contact_messages"

    id: Optional[str] = Field(default=None, primary_key=True)
    name: str = Field(max_length=255)
    email: str = Field(max_length=255)
    subject: str = Field(default="", max_length=255)
    message: str
    created_at: datetime = Field(default_factory=datetime.now)


class Subscriber(SQLModel, table=True):
    """
    Newsletter subscriber
    Table: subscribers
    """
    __tablename__ = "subscribers"

    id: Optional[str] = Field(default=None, primary_key=True)
    name: str = Field(default="", max_length=255)
    email: str = Field(max_length=255, unique=True, index=True)
    preferences: str = Field(default="")
    created_at: datetime = Field(default_factory=datetime.now)
