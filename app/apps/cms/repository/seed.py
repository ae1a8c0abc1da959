"""
Starter content for a fresh in-memory store
"""
from datetime import datetime
import logging

from app.apps.cms.repository.entities import ContentRepository

logger = logging.getLogger(__name__)

PEXELS = "https://images.pexels.com/photos/{}/pexels-photo-{}.jpeg?auto=compress&cs=tinysrgb&w=1260&h=750&dpr=2"

DEFAULT_POSTS = [
    {
        "title": "The Future of Sustainable Fashion",
        "slug": "future-sustainable-fashion",
        "content": "Exploring how sustainable practices are reshaping the fashion industry...",
        "excerpt": "A deep dive into sustainable fashion trends and innovations.",
        "featured_image": PEXELS.format(6626876, 6626876),
        "tags": ["sustainability", "fashion", "innovation"],
        "status": "published",
        "published_at": datetime(2024, 1, 15),
    },
    {
        "title": "Behind the Scenes: Our Design Process",
        "slug": "behind-scenes-design-process",
        "content": "Take a look at how we create our sustainable collections...",
        "excerpt": "An inside look at our creative and sustainable design process.",
        "featured_image": PEXELS.format(6626903, 6626903),
        "tags": ["design", "process", "craftsmanship"],
        "status": "published",
        "published_at": datetime(2024, 1, 20),
    },
]

DEFAULT_BANNERS = [
    {
        "title": "New Collection Launch",
        "content": "Discover our latest sustainable collection - now available!",
        "image_url": PEXELS.format(5384423, 5384423),
        "cta_text": "Shop Now",
        "cta_link": "/portfolio",
        "position": "header",
        "is_active": True,
        "display_order": 1,
    },
]

DEFAULT_MENU = [
    ("Home", "/"),
    ("About", "/about"),
    ("Portfolio", "/portfolio"),
    ("Blog", "/blog"),
    ("Instagram", "/instagram"),
    ("Contact", "/contact"),
]


async def seed_default_content(repository: ContentRepository) -> None:
    """Load the starter posts, banner and navigation when the store is empty."""
    if await repository.menu_items.list(include_inactive=True, limit=1):
        return

    for post in DEFAULT_POSTS:
        await repository.posts.create(post)
    for banner in DEFAULT_BANNERS:
        await repository.banners.create(banner)
    for order, (label, url) in enumerate(DEFAULT_MENU, start=1):
        await repository.menu_items.create({"label": label, "url": url, "display_order": order})

    logger.info("Seeded default site content")
