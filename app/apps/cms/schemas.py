"""
Pydantic schemas for CMS module
"""
from pydantic import BaseModel, Field
from typing import Optional, Dict, Any, List
from datetime import datetime

from app.apps.cms.models import BannerPosition, PageStatus, PageTemplate, PostStatus


# Tags and categories
class TagResponse(BaseModel):
    id: str
    name: str
    slug: str
    description: Optional[str] = None

    class Config:
        from_attributes = True


class CategoryCreate(BaseModel):
    """Create category schema"""
    name: str = Field(..., min_length=1, max_length=100)
    slug: Optional[str] = Field(default=None, max_length=120)
    description: Optional[str] = None
    color: str = Field(default="#171717", max_length=20)


class CategoryUpdate(BaseModel):
    name: Optional[str] = Field(default=None, max_length=100)
    slug: Optional[str] = Field(default=None, max_length=120)
    description: Optional[str] = None
    color: Optional[str] = Field(default=None, max_length=20)


class CategoryResponse(BaseModel):
    id: str
    name: str
    slug: str
    description: Optional[str] = None
    color: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


# Posts
class PostCreate(BaseModel):
    """Create post schema; slug, reading time and publish date are derived when omitted"""
    title: str = Field(..., max_length=255)
    content: str
    slug: Optional[str] = Field(default=None, max_length=255)
    excerpt: Optional[str] = None
    featured_image: Optional[str] = None
    category_id: Optional[str] = None
    status: PostStatus = PostStatus.DRAFT
    published_at: Optional[datetime] = None
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None
    tags: Optional[List[str]] = None


class PostUpdate(BaseModel):
    """Update post schema; only the fields sent are changed"""
    title: Optional[str] = Field(default=None, max_length=255)
    content: Optional[str] = None
    slug: Optional[str] = Field(default=None, max_length=255)
    excerpt: Optional[str] = None
    featured_image: Optional[str] = None
    category_id: Optional[str] = None
    status: Optional[PostStatus] = None
    published_at: Optional[datetime] = None
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None
    tags: Optional[List[str]] = None


class PostResponse(BaseModel):
    """Post response schema"""
    id: str
    title: str
    slug: str
    content: str
    excerpt: Optional[str] = None
    featured_image: Optional[str] = None
    author_id: Optional[str] = None
    category_id: Optional[str] = None
    status: PostStatus
    published_at: Optional[datetime] = None
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None
    reading_time: int = 0
    view_count: int = 0
    created_at: datetime
    updated_at: datetime
    tags: List[TagResponse] = []

    class Config:
        from_attributes = True


class PostEditorForm(BaseModel):
    """
    The post editor form as submitted by the admin UI.

    ``tags`` is the raw comma-separated input; ``slug_edited`` tells the
    editor the user typed the slug by hand.
    """
    title: str = ""
    slug: Optional[str] = None
    slug_edited: bool = False
    content: str = ""
    excerpt: Optional[str] = None
    featured_image: Optional[str] = None
    category_id: Optional[str] = None
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None
    tags: str = ""
    status: PostStatus = PostStatus.DRAFT


class PostDraftResponse(BaseModel):
    title: str
    slug: str
    slug_dirty: bool
    content: str
    excerpt: Optional[str] = None
    featured_image: Optional[str] = None
    category_id: Optional[str] = None
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None
    tags: List[str] = []
    status: PostStatus

    class Config:
        from_attributes = True


class PostEditorResponse(BaseModel):
    """Result of saving the editor"""
    success: bool
    post: Optional[PostResponse] = None
    redirect_to: Optional[str] = None
    draft: PostDraftResponse
    detail: Optional[str] = None


# Pages
class PageCreate(BaseModel):
    title: str = Field(..., max_length=255)
    slug: Optional[str] = Field(default=None, max_length=255)
    content: str = ""
    template: PageTemplate = PageTemplate.DEFAULT
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None
    featured_image: Optional[str] = None
    status: PageStatus = PageStatus.DRAFT


class PageUpdate(BaseModel):
    title: Optional[str] = Field(default=None, max_length=255)
    slug: Optional[str] = Field(default=None, max_length=255)
    content: Optional[str] = None
    template: Optional[PageTemplate] = None
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None
    featured_image: Optional[str] = None
    status: Optional[PageStatus] = None


class PageResponse(BaseModel):
    id: str
    title: str
    slug: str
    content: str
    template: PageTemplate
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None
    featured_image: Optional[str] = None
    status: PageStatus
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


# Banners
class BannerCreate(BaseModel):
    title: str = Field(..., max_length=255)
    content: str = ""
    image_url: Optional[str] = None
    cta_text: Optional[str] = None
    cta_link: Optional[str] = None
    position: BannerPosition = BannerPosition.HEADER
    is_active: bool = True
    display_order: int = 0
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None


class BannerUpdate(BaseModel):
    title: Optional[str] = Field(default=None, max_length=255)
    content: Optional[str] = None
    image_url: Optional[str] = None
    cta_text: Optional[str] = None
    cta_link: Optional[str] = None
    position: Optional[BannerPosition] = None
    is_active: Optional[bool] = None
    display_order: Optional[int] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None


class BannerResponse(BaseModel):
    id: str
    title: str
    content: str
    image_url: Optional[str] = None
    cta_text: Optional[str] = None
    cta_link: Optional[str] = None
    position: BannerPosition
    is_active: bool
    display_order: int
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


# Menus
class MenuItemCreate(BaseModel):
    label: str = Field(..., max_length=100)
    url: str = Field(..., max_length=500)
    parent_id: Optional[str] = None
    display_order: int = 0
    is_active: bool = True
    open_in_new_tab: bool = False


class MenuItemUpdate(BaseModel):
    label: Optional[str] = Field(default=None, max_length=100)
    url: Optional[str] = Field(default=None, max_length=500)
    parent_id: Optional[str] = None
    display_order: Optional[int] = None
    is_active: Optional[bool] = None
    open_in_new_tab: Optional[bool] = None


class MenuItemResponse(BaseModel):
    id: str
    label: str
    url: str
    parent_id: Optional[str] = None
    display_order: int
    is_active: bool
    open_in_new_tab: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


# Collections
class CollectionCreate(BaseModel):
    title: str = Field(..., max_length=255)
    description: str = ""
    image_url: Optional[str] = None
    category: Optional[str] = Field(default=None, max_length=100)
    items: List[Dict[str, Any]] = []
    is_active: bool = True
    display_order: int = 0


class CollectionUpdate(BaseModel):
    title: Optional[str] = Field(default=None, max_length=255)
    description: Optional[str] = None
    image_url: Optional[str] = None
    category: Optional[str] = Field(default=None, max_length=100)
    items: Optional[List[Dict[str, Any]]] = None
    is_active: Optional[bool] = None
    display_order: Optional[int] = None


class CollectionResponse(BaseModel):
    id: str
    title: str
    description: str
    image_url: Optional[str] = None
    category: Optional[str] = None
    items: List[Dict[str, Any]] = []
    is_active: bool
    display_order: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


# Posters
class PosterCreate(BaseModel):
    title: str = Field(..., max_length=255)
    image_url: str = Field(..., max_length=1000)
    description: Optional[str] = None
    link: Optional[str] = None
    category: Optional[str] = Field(default=None, max_length=100)
    display_order: int = 0
    is_active: bool = True


class PosterUpdate(BaseModel):
    title: Optional[str] = Field(default=None, max_length=255)
    image_url: Optional[str] = Field(default=None, max_length=1000)
    description: Optional[str] = None
    link: Optional[str] = None
    category: Optional[str] = Field(default=None, max_length=100)
    display_order: Optional[int] = None
    is_active: Optional[bool] = None


class PosterResponse(BaseModel):
    id: str
    title: str
    image_url: str
    description: Optional[str] = None
    link: Optional[str] = None
    category: Optional[str] = None
    display_order: int
    is_active: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class DeleteResponse(BaseModel):
    success: bool
    message: str
