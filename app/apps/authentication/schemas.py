"""
Pydantic schemas for authentication
"""
from pydantic import BaseModel, EmailStr, Field
from typing import List, Optional
from datetime import datetime

from app.apps.authentication.models import Role
from app.apps.authentication.gate import GateState


class NotificationSchema(BaseModel):
    level: str
    message: str

    class Config:
        from_attributes = True


class ProfileResponse(BaseModel):
    """Profile response schema"""
    id: str
    email: str
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None
    role: Role
    bio: Optional[str] = None
    website: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class LoginRequest(BaseModel):
    """Login request schema"""
    email: EmailStr
    password: str


class LoginResponse(BaseModel):
    """Login response schema"""
    message: str
    user_id: str
    access_token: str
    refresh_token: Optional[str] = None
    expires_in: Optional[int] = None
    profile: Optional[ProfileResponse] = None
    notifications: List[NotificationSchema] = []


class SignupRequest(BaseModel):
    """Signup request schema"""
    email: EmailStr
    password: str = Field(..., min_length=6)
    full_name: str = Field(..., min_length=1, max_length=255)


class SignupResponse(BaseModel):
    """Signup response schema"""
    message: str
    user_id: str
    access_token: Optional[str] = None
    refresh_token: Optional[str] = None
    profile: Optional[ProfileResponse] = None
    notifications: List[NotificationSchema] = []


class LogoutRequest(BaseModel):
    """Logout request schema; the access token travels in the Authorization header"""
    refresh_token: Optional[str] = None


class LogoutResponse(BaseModel):
    message: str
    notifications: List[NotificationSchema] = []


class SessionResponse(BaseModel):
    """Current session as seen by the admin UI"""
    authenticated: bool
    loading: bool
    user_id: Optional[str] = None
    email: Optional[str] = None
    profile: Optional[ProfileResponse] = None
    is_admin: bool = False
    is_editor: bool = False
    is_author: bool = False


class ProfileUpdateRequest(BaseModel):
    """Self-service profile fields"""
    full_name: Optional[str] = Field(default=None, max_length=255)
    avatar_url: Optional[str] = None
    bio: Optional[str] = None
    website: Optional[str] = None


class ProfileUpdateResponse(BaseModel):
    profile: ProfileResponse
    notifications: List[NotificationSchema] = []


class RoleUpdateRequest(BaseModel):
    role: Role


class GateResponse(BaseModel):
    """Authorization verdict for a page route"""
    path: str
    state: GateState
    required_tier: Optional[Role] = None
    redirect_to: Optional[str] = None
    message: Optional[str] = None
    remediation: List[str] = []
