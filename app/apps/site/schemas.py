"""
Pydantic schemas for the public site
"""
from pydantic import BaseModel, EmailStr, Field
from typing import Optional, Dict, Any, List
from datetime import datetime

from app.apps.cms.schemas import BannerResponse, CollectionResponse, PostResponse, PosterResponse


class ContactRequest(BaseModel):
    """Contact form schema"""
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    subject: str = Field(default="", max_length=255)
    message: str = Field(..., min_length=1)


class ContactMessageResponse(BaseModel):
    id: str
    name: str
    email: str
    subject: str
    message: str
    created_at: datetime

    class Config:
        from_attributes = True


class ContactResponse(BaseModel):
    success: bool
    message: str


class NewsletterRequest(BaseModel):
    """Newsletter signup schema"""
    email: EmailStr
    name: str = Field(default="", max_length=255)
    preferences: str = ""


class NewsletterResponse(BaseModel):
    success: bool
    message: str
    email: str
    created: bool


class SubscriberResponse(BaseModel):
    id: str
    name: str
    email: str
    preferences: str
    created_at: datetime

    class Config:
        from_attributes = True


class PopupResponse(BaseModel):
    """Whether the client should offer the newsletter popup"""
    show: bool
    delay_seconds: int
    subscribed_email: Optional[str] = None


class MenuNode(BaseModel):
    id: str
    label: str
    url: str
    open_in_new_tab: bool = False
    display_order: int = 0
    children: List["MenuNode"] = []


class HomeResponse(BaseModel):
    settings: Dict[str, Any]
    banners: List[BannerResponse] = []
    posts: List[PostResponse] = []
    collections: List[CollectionResponse] = []
    posters: List[PosterResponse] = []


class SettingsResponse(BaseModel):
    content: Dict[str, Any]
    version: int
    updated_at: Optional[datetime] = None
    updated_by: Optional[str] = None

    class Config:
        from_attributes = True


class SettingsUpdate(BaseModel):
    """Partial settings document; nested objects are merged key by key"""
    content: Dict[str, Any]
