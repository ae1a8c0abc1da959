"""
Public site router: contact form, newsletter, popup flags and page payloads

The popup and subscription flags live in long-lived cookies so they
survive across visits.
"""
from fastapi import APIRouter, Cookie, Depends, Response, status
from typing import List, Optional
import logging

from app.config import NEWSLETTER_POPUP_COOKIE, PERSISTENT_COOKIE_MAX_AGE, SUBSCRIBED_EMAIL_COOKIE
from app.dependencies import get_repository
from app.apps.authentication.dependencies import AuthContext, require_admin
from app.apps.cms.repository import ContentRepository
from app.apps.cms.schemas import BannerResponse, CollectionResponse, PostResponse, PosterResponse
from app.apps.site import services
from app.apps.site.schemas import (
    ContactMessageResponse,
    ContactRequest,
    ContactResponse,
    HomeResponse,
    MenuNode,
    NewsletterRequest,
    NewsletterResponse,
    PopupResponse,
    SettingsResponse,
    SettingsUpdate,
    SubscriberResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()
admin_router = APIRouter()


def _set_persistent_cookie(response: Response, key: str, value: str) -> None:
    response.set_cookie(key=key, value=value, max_age=PERSISTENT_COOKIE_MAX_AGE, samesite="lax")


@router.post("/contact", response_model=ContactResponse, status_code=status.HTTP_201_CREATED)
async def submit_contact(request: ContactRequest, repository: ContentRepository = Depends(get_repository)):
    """Store a message from the contact form"""
    await services.submit_contact_message(repository.backend, request.model_dump())
    return ContactResponse(success=True, message="Thank you for your message. We'll get back to you soon.")


@router.post("/newsletter", response_model=NewsletterResponse, status_code=status.HTTP_200_OK)
async def subscribe_newsletter(
    request: NewsletterRequest,
    response: Response,
    repository: ContentRepository = Depends(get_repository),
):
    """Subscribe to the newsletter and remember the email on the client"""
    subscriber, created = await services.subscribe(repository.backend, request.model_dump())
    _set_persistent_cookie(response, SUBSCRIBED_EMAIL_COOKIE, subscriber.email)
    # Subscribing also counts as having seen the popup
    _set_persistent_cookie(response, NEWSLETTER_POPUP_COOKIE, "true")
    return NewsletterResponse(
        success=True,
        message="Thank you for subscribing!" if created else "You're already subscribed.",
        email=subscriber.email,
        created=created,
    )


@router.get("/newsletter/popup", response_model=PopupResponse, status_code=status.HTTP_200_OK)
async def newsletter_popup(
    has_seen_popup: Optional[str] = Cookie(None, alias=NEWSLETTER_POPUP_COOKIE),
    subscribed_email: Optional[str] = Cookie(None, alias=SUBSCRIBED_EMAIL_COOKIE),
):
    return PopupResponse(
        show=not has_seen_popup and not subscribed_email,
        delay_seconds=services.NEWSLETTER_POPUP_DELAY,
        subscribed_email=subscribed_email,
    )


@router.post("/newsletter/popup/dismiss", response_model=PopupResponse, status_code=status.HTTP_200_OK)
async def dismiss_newsletter_popup(
    response: Response,
    subscribed_email: Optional[str] = Cookie(None, alias=SUBSCRIBED_EMAIL_COOKIE),
):
    """Closing the popup hides it for good"""
    _set_persistent_cookie(response, NEWSLETTER_POPUP_COOKIE, "true")
    return PopupResponse(show=False, delay_seconds=services.NEWSLETTER_POPUP_DELAY, subscribed_email=subscribed_email)


@router.get("/home", response_model=HomeResponse, status_code=status.HTTP_200_OK)
async def home(repository: ContentRepository = Depends(get_repository)):
    payload = await services.build_home(repository)
    return HomeResponse(
        settings=payload["settings"],
        banners=[BannerResponse.model_validate(banner) for banner in payload["banners"]],
        posts=[PostResponse.model_validate(post) for post in payload["posts"]],
        collections=[CollectionResponse.model_validate(item) for item in payload["collections"]],
        posters=[PosterResponse.model_validate(poster) for poster in payload["posters"]],
    )


@router.get("/navigation", response_model=List[MenuNode], status_code=status.HTTP_200_OK)
async def navigation(repository: ContentRepository = Depends(get_repository)):
    return await services.build_navigation(repository)


@router.get("/settings", response_model=SettingsResponse, status_code=status.HTTP_200_OK)
async def public_settings(repository: ContentRepository = Depends(get_repository)):
    return await repository.settings.get()


@admin_router.get("/settings", response_model=SettingsResponse, status_code=status.HTTP_200_OK)
async def admin_get_settings(
    repository: ContentRepository = Depends(get_repository),
    auth: AuthContext = Depends(require_admin),
):
    return await repository.settings.get()


@admin_router.patch("/settings", response_model=SettingsResponse, status_code=status.HTTP_200_OK)
async def admin_update_settings(
    request: SettingsUpdate,
    repository: ContentRepository = Depends(get_repository),
    auth: AuthContext = Depends(require_admin),
):
    settings = await repository.settings.update(request.content, updated_by=auth.identity.id)
    logger.info(f"Site settings updated to version {settings.version} by {auth.identity.id}")
    return settings


@admin_router.get("/subscribers", response_model=List[SubscriberResponse], status_code=status.HTTP_200_OK)
async def admin_list_subscribers(
    repository: ContentRepository = Depends(get_repository),
    auth: AuthContext = Depends(require_admin),
):
    return await services.list_subscribers(repository.backend)


@admin_router.get("/messages", response_model=List[ContactMessageResponse], status_code=status.HTTP_200_OK)
async def admin_list_messages(
    repository: ContentRepository = Depends(get_repository),
    auth: AuthContext = Depends(require_admin),
):
    return await services.list_contact_messages(repository.backend)
