"""
CMS models for content management
"""
from enum import Enum
from sqlmodel import SQLModel, Field, Column
from sqlalchemy.dialects.postgresql import JSONB
from typing import Optional, Dict, Any, List
from datetime import datetime


class PostStatus(str, Enum):
    DRAFT = "draft"
    PUBLISHED = "published"
    ARCHIVED = "archived"


class PageStatus(str, Enum):
    DRAFT = "draft"
    PUBLISHED = "published"


class PageTemplate(str, Enum):
    DEFAULT = "default"
    HERO = "hero"
    PORTFOLIO = "portfolio"
    CONTACT = "contact"


class BannerPosition(str, Enum):
    HEADER = "header"
    FOOTER = "footer"
    SIDEBAR = "sidebar"
    POPUP = "popup"


class Category(SQLModel, table=True):
    """
    Blog category
    Table: categories
    """
    __tablename__ = "categories"

    id: Optional[str] = Field(default=None, primary_key=True)
    name: str = Field(max_length=100)
    slug: str = Field(max_length=120, unique=True, index=True)
    description: Optional[str] = Field(default=None)
    color: str = Field(default="#171717", max_length=20)
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)


class Post(SQLModel, table=True):
    """
    Blog post
    Table: posts
    """
    __tablename__ = "posts"

    id: Optional[str] = Field(default=None, primary_key=True)
    title: str = Field(max_length=255)
    slug: str = Field(max_length=255, unique=True, index=True)
    content: str
    excerpt: Optional[str] = Field(default=None)
    featured_image: Optional[str] = Field(default=None)
    author_id: Optional[str] = Field(default=None, foreign_key="profiles.id", index=True)
    category_id: Optional[str] = Field(default=None, foreign_key="categories.id", index=True)
    status: str = Field(default=PostStatus.DRAFT.value, max_length=20, index=True)
    published_at: Optional[datetime] = Field(default=None)
    meta_title: Optional[str] = Field(default=None)
    meta_description: Optional[str] = Field(default=None)
    reading_time: int = Field(default=0)
    view_count: int = Field(default=0)
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)


class Tag(SQLModel, table=True):
    """
    Post tag, shared between posts through post_tags
    Table: tags
    """
    __tablename__ = "tags"

    id: Optional[str] = Field(default=None, primary_key=True)
    name: str = Field(max_length=100)
    slug: str = Field(max_length=120, unique=True, index=True)
    description: Optional[str] = Field(default=None)
    created_at: datetime = Field(default_factory=datetime.now)


class PostTag(SQLModel, table=True):
    """
    Association between posts and tags
    Table: post_tags
    """
    __tablename__ = "post_tags"

    post_id: str = Field(foreign_key="posts.id", primary_key=True)
    tag_id: str = Field(foreign_key="tags.id", primary_key=True)
    position: int = Field(default=0)


class Page(SQLModel, table=True):
    """
    Static CMS page
    Table: pages
    """
    __tablename__ = "pages"

    id: Optional[str] = Field(default=None, primary_key=True)
    title: str = Field(max_length=255)
    slug: str = Field(max_length=255, unique=True, index=True)
    content: str = Field(default="")
    template: str = Field(default=PageTemplate.DEFAULT.value, max_length=20)
    meta_title: Optional[str] = Field(default=None)
    meta_description: Optional[str] = Field(default=None)
    featured_image: Optional[str] = Field(default=None)
    status: str = Field(default=PageStatus.DRAFT.value, max_length=20, index=True)
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)


class Banner(SQLModel, table=True):
    """
    Promotional banner
    Table: banners
    """
    __tablename__ = "banners"

    id: Optional[str] = Field(default=None, primary_key=True)
    title: str = Field(max_length=255)
    content: str = Field(default="")
    image_url: Optional[str] = Field(default=None)
    cta_text: Optional[str] = Field(default=None)
    cta_link: Optional[str] = Field(default=None)
    position: str = Field(default=BannerPosition.HEADER.value, max_length=20, index=True)
    is_active: bool = Field(default=True, index=True)
    display_order: int = Field(default=0)
    start_date: Optional[datetime] = Field(default=None)
    end_date: Optional[datetime] = Field(default=None)
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)


class MenuItem(SQLModel, table=True):
    """
    Navigation menu entry
    Table: menus
    """
    __tablename__ = "menus"

    id: Optional[str] = Field(default=None, primary_key=True)
    label: str = Field(max_length=100)
    url: str = Field(max_length=500)
    parent_id: Optional[str] = Field(default=None, foreign_key="menus.id")
    display_order: int = Field(default=0)
    is_active: bool = Field(default=True, index=True)
    open_in_new_tab: bool = Field(default=False)
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)


class Collection(SQLModel, table=True):
    """
    Featured clothing collection
    Table: collections
    """
    __tablename__ = "collections"

    id: Optional[str] = Field(default=None, primary_key=True)
    title: str = Field(max_length=255)
    description: str = Field(default="")
    image_url: Optional[str] = Field(default=None)
    category: Optional[str] = Field(default=None, max_length=100, index=True)
    items: List[Dict[str, Any]] = Field(default_factory=list, sa_column=Column(JSONB))
    is_active: bool = Field(default=True, index=True)
    display_order: int = Field(default=0)
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)


class Poster(SQLModel, table=True):
    """
    Poster shown in the portfolio grid
    Table: posters
    """
    __tablename__ = "posters"

    id: Optional[str] = Field(default=None, primary_key=True)
    title: str = Field(max_length=255)
    image_url: str = Field(max_length=1000)
    description: Optional[str] = Field(default=None)
    link: Optional[str] = Field(default=None)
    category: Optional[str] = Field(default=None, max_length=100, index=True)
    display_order: int = Field(default=0)
    is_active: bool = Field(default=True, index=True)
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)


class SiteContent(SQLModel, table=True):
    """
    Keyed JSON content, e.g. the "site_settings" document
    Table: site_content
    """
    __tablename__ = "site_content"

    id: Optional[str] = Field(default=None, primary_key=True)
    content_key: str = Field(max_length=100, unique=True, index=True)
    content: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSONB))
    version: int = Field(default=1)
    is_active: bool = Field(default=True, index=True)
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)
    updated_by: Optional[str] = Field(default=None, foreign_key="profiles.id")
