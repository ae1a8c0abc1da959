"""
Public site services: contact form, newsletter and page assembly
"""
import logging
import uuid
from datetime import datetime
from typing import Any, Dict, List, Mapping, Tuple

from app.common.errors import DuplicateRecord
from app.apps.cms.models import BannerPosition, MenuItem, PostStatus
from app.apps.cms.repository import ContentRepository, StoreBackend
from app.apps.site.models import ContactMessage, Subscriber

logger = logging.getLogger(__name__)

# Seconds the site waits before offering the newsletter popup
NEWSLETTER_POPUP_DELAY = 5
HOME_POST_LIMIT = 3


async def submit_contact_message(backend: StoreBackend, data: Mapping[str, Any]) -> ContactMessage:
    values = dict(data)
    values.update(id=str(uuid.uuid4()), created_at=datetime.now())
    message = await backend.insert(ContactMessage, values)
    logger.info(f"Contact message {message.id} received from {message.email}")
    return message


async def subscribe(backend: StoreBackend, data: Mapping[str, Any]) -> Tuple[Subscriber, bool]:
    """
    Add a newsletter subscriber.

    Subscribing twice with the same email is not an error; the existing
    subscriber is returned with created=False.
    """
    values = dict(data)
    values["email"] = values["email"].strip().lower()
    existing = await backend.find_one(Subscriber, email=values["email"])
    if existing is not None:
        return existing, False
    values.update(id=str(uuid.uuid4()), created_at=datetime.now())
    try:
        subscriber = await backend.insert(Subscriber, values)
    except DuplicateRecord:
        existing = await backend.find_one(Subscriber, email=values["email"])
        if existing is None:
            raise
        return existing, False
    logger.info(f"New newsletter subscriber {subscriber.id}")
    return subscriber, True


async def list_subscribers(backend: StoreBackend) -> List[Subscriber]:
    return await backend.select(Subscriber, order_by=(("created_at", True),))


async def list_contact_messages(backend: StoreBackend) -> List[ContactMessage]:
    return await backend.select(ContactMessage, order_by=(("created_at", True),))


def build_menu_tree(items: List[MenuItem]) -> List[Dict[str, Any]]:
    """Nest active menu items under their parents, keeping display order at each level."""
    nodes = {item.id: {**item.model_dump(), "children": []} for item in items}
    tree = []
    for item in items:
        node = nodes[item.id]
        parent = nodes.get(item.parent_id) if item.parent_id else None
        if parent is not None:
            parent["children"].append(node)
        elif item.parent_id is None:
            tree.append(node)
    return tree


async def build_navigation(repository: ContentRepository) -> List[Dict[str, Any]]:
    return build_menu_tree(await repository.menu_items.list())


async def build_home(repository: ContentRepository) -> Dict[str, Any]:
    """Everything the home page renders in one payload"""
    settings = await repository.settings.get()
    return {
        "settings": settings.content,
        "banners": await repository.banners.list(position=BannerPosition.HEADER),
        "posts": await repository.posts.list(status=PostStatus.PUBLISHED, limit=HOME_POST_LIMIT),
        "collections": await repository.collections.list(),
        "posters": await repository.posters.list(),
    }
