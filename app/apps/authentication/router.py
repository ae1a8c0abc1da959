"""
Authentication router

Sign-in, sign-up and sign-out go through a per-request SessionStore, so
each response carries the notifications the action raised.
"""
from fastapi import APIRouter, Depends, HTTPException, status, Query
from fastapi.responses import JSONResponse
from typing import List
import logging

from app.common.errors import Failure
from app.apps.authentication.models import Role
from app.apps.authentication.schemas import (
    GateResponse,
    LoginRequest,
    LoginResponse,
    LogoutRequest,
    LogoutResponse,
    NotificationSchema,
    ProfileResponse,
    ProfileUpdateRequest,
    ProfileUpdateResponse,
    RoleUpdateRequest,
    SessionResponse,
    SignupRequest,
    SignupResponse,
)
from app.apps.authentication.dependencies import (
    AuthContext,
    gate,
    get_current_session,
    get_profile_resolver,
    get_session_store,
    require_admin,
)
from app.apps.authentication.gate import has_access, required_tier_for
from app.apps.authentication.profiles import ProfileResolver
from app.apps.authentication.session import SessionStore

logger = logging.getLogger(__name__)

router = APIRouter()
admin_router = APIRouter()


def _notifications(store: SessionStore) -> List[NotificationSchema]:
    return [NotificationSchema(level=n.level, message=n.message) for n in store.notifier.drain()]


def _profile(store: SessionStore):
    return ProfileResponse.model_validate(store.profile) if store.profile else None


def _failure_response(store: SessionStore, result: Failure) -> JSONResponse:
    content = result.error.to_dict()
    content["notifications"] = [n.model_dump() for n in _notifications(store)]
    return JSONResponse(content, status_code=result.error.status_code)


@router.post("/login", response_model=LoginResponse, status_code=status.HTTP_200_OK)
async def login(request: LoginRequest, store: SessionStore = Depends(get_session_store)):
    """
    Sign in with email and password.
    The profile is created on first sign-in.
    """
    logger.info("Attempting to log in user")
    result = await store.sign_in(request.email, request.password)
    if not result.ok:
        logger.warning(f"Login failed: {result.error.message}")
        return _failure_response(store, result)

    session = result.value
    logger.info(f"User logged in successfully, User ID: {session.identity.id}")
    return LoginResponse(
        message="Login successful",
        user_id=session.identity.id,
        access_token=session.access_token,
        refresh_token=session.refresh_token,
        expires_in=session.expires_in,
        profile=_profile(store),
        notifications=_notifications(store),
    )


@router.post("/signup", response_model=SignupResponse, status_code=status.HTTP_201_CREATED)
async def signup(request: SignupRequest, store: SessionStore = Depends(get_session_store)):
    """
    Create an account and its profile with the default role.
    Tokens are only returned when the auth service does not require email confirmation.
    """
    result = await store.sign_up(request.email, request.password, request.full_name)
    if not result.ok:
        logger.warning(f"Signup failed: {result.error.message}")
        return _failure_response(store, result)

    session = store.get_session()
    return SignupResponse(
        message="User created successfully",
        user_id=result.value.id,
        access_token=session.access_token if session else None,
        refresh_token=session.refresh_token if session else None,
        profile=_profile(store),
        notifications=_notifications(store),
    )


@router.post("/logout", response_model=LogoutResponse, status_code=status.HTTP_200_OK)
async def logout(request: LogoutRequest, store: SessionStore = Depends(get_current_session)):
    """Sign out the session identified by the Authorization header"""
    result = await store.sign_out()
    if not result.ok:
        return _failure_response(store, result)
    return LogoutResponse(message="Logout successful", notifications=_notifications(store))


@router.get("/me", response_model=SessionResponse, status_code=status.HTTP_200_OK)
async def me(store: SessionStore = Depends(get_current_session)):
    """Current session, its profile and role flags"""
    if store.state.error is not None:
        raise store.state.error
    role = store.profile.role if store.profile else None
    return SessionResponse(
        authenticated=store.user is not None,
        loading=store.loading,
        user_id=store.user.id if store.user else None,
        email=store.user.email if store.user else None,
        profile=_profile(store),
        is_admin=role is not None and has_access(role, Role.ADMIN),
        is_editor=role is not None and has_access(role, Role.EDITOR),
        is_author=role is not None and has_access(role, Role.AUTHOR),
    )


@router.patch("/profile", response_model=ProfileUpdateResponse, status_code=status.HTTP_200_OK)
async def update_profile(request: ProfileUpdateRequest, store: SessionStore = Depends(get_current_session)):
    """Update the signed-in user's own profile"""
    if store.user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
    result = await store.update_profile(request.model_dump(exclude_unset=True))
    if not result.ok:
        return _failure_response(store, result)
    return ProfileUpdateResponse(
        profile=ProfileResponse.model_validate(result.value),
        notifications=_notifications(store),
    )


@router.get("/gate", response_model=GateResponse, status_code=status.HTTP_200_OK)
async def check_gate(
    path: str = Query(..., description="Page route to check, e.g. /admin/posts"),
    store: SessionStore = Depends(get_current_session),
):
    """What the admin UI should render for a route: the page, a redirect, or a message"""
    decision = gate.evaluate(store.state, required_tier_for(path), location=path)
    return GateResponse(
        path=path,
        state=decision.state,
        required_tier=decision.required_tier,
        redirect_to=decision.redirect_to,
        message=decision.message,
        remediation=decision.remediation,
    )


@admin_router.get("/users", response_model=List[ProfileResponse], status_code=status.HTTP_200_OK)
async def list_users(
    resolver: ProfileResolver = Depends(get_profile_resolver),
    auth: AuthContext = Depends(require_admin),
):
    """List every profile, newest first"""
    profiles = await resolver.list_profiles()
    return [ProfileResponse.model_validate(profile) for profile in profiles]


@admin_router.patch("/users/{user_id}/role", response_model=ProfileResponse, status_code=status.HTTP_200_OK)
async def set_user_role(
    user_id: str,
    request: RoleUpdateRequest,
    resolver: ProfileResolver = Depends(get_profile_resolver),
    auth: AuthContext = Depends(require_admin),
):
    """Change a user's role"""
    profile = await resolver.set_role(user_id, request.role)
    logger.info(f"Admin {auth.identity.id} set role of {user_id} to {request.role.value}")
    return ProfileResponse.model_validate(profile)
