"""
CMS router for content management

``router`` holds the public, read-only endpoints the site renders from.
``admin_router`` holds the role-gated CRUD used by the admin screens.
Repository errors (NotFound, ValidationError, ...) are turned into JSON
responses by the CMSError handler installed in app.main.
"""
from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, status, Query
from pydantic import BaseModel
from typing import Callable, List, Optional, Type
import logging

from app.dependencies import get_repository
from app.apps.authentication.dependencies import AuthContext, require_author, require_editor
from app.apps.cms.editor import PostEditor
from app.apps.cms.models import BannerPosition, Post, PostStatus
from app.apps.cms.repository import ContentRepository
from app.apps.cms.schemas import (
    BannerCreate,
    BannerResponse,
    BannerUpdate,
    CategoryCreate,
    CategoryResponse,
    CategoryUpdate,
    CollectionCreate,
    CollectionResponse,
    CollectionUpdate,
    DeleteResponse,
    MenuItemCreate,
    MenuItemResponse,
    MenuItemUpdate,
    PageCreate,
    PageResponse,
    PageUpdate,
    PostCreate,
    PostDraftResponse,
    PostEditorForm,
    PostEditorResponse,
    PostResponse,
    PostUpdate,
    PosterCreate,
    PosterResponse,
    PosterUpdate,
    TagResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()
admin_router = APIRouter()


async def _post_response(repository: ContentRepository, post: Post) -> PostResponse:
    response = PostResponse.model_validate(post)
    response.tags = [TagResponse.model_validate(tag) for tag in await repository.posts.get_tags(post.id)]
    return response


async def _category_id(repository: ContentRepository, category: Optional[str]) -> Optional[str]:
    """Category filter given as id or slug"""
    if not category:
        return None
    record = await repository.categories.get(category)
    if record is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Category not found: {category}"
        )
    return record.id


# -- public reads ----------------------------------------------------------

@router.get("/posts", response_model=List[PostResponse], status_code=status.HTTP_200_OK)
async def list_published_posts(
    category: Optional[str] = Query(None, description="Category id or slug"),
    limit: Optional[int] = Query(None, ge=1, le=100),
    repository: ContentRepository = Depends(get_repository),
):
    """Published posts, newest first (public endpoint, no auth required)"""
    posts = await repository.posts.list(
        status=PostStatus.PUBLISHED,
        category_id=await _category_id(repository, category),
        limit=limit,
    )
    return [await _post_response(repository, post) for post in posts]


@router.get("/posts/{slug}", response_model=PostResponse, status_code=status.HTTP_200_OK)
async def get_published_post(
    slug: str,
    background_tasks: BackgroundTasks,
    repository: ContentRepository = Depends(get_repository),
):
    """
    Get a published post by slug (public endpoint, no auth required)
    The view is counted after the response is sent.
    """
    post = await repository.posts.get_published_by_slug(slug, defer=background_tasks.add_task)
    if post is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Post not found for slug: {slug}"
        )
    return await _post_response(repository, post)


@router.get("/pages/{slug}", response_model=PageResponse, status_code=status.HTTP_200_OK)
async def get_published_page(slug: str, repository: ContentRepository = Depends(get_repository)):
    page = await repository.pages.find_published(slug)
    if page is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Page not found for slug: {slug}"
        )
    return page


@router.get("/banners", response_model=List[BannerResponse], status_code=status.HTTP_200_OK)
async def list_active_banners(
    position: Optional[BannerPosition] = Query(None),
    repository: ContentRepository = Depends(get_repository),
):
    return await repository.banners.list(position=position)


@router.get("/menu", response_model=List[MenuItemResponse], status_code=status.HTTP_200_OK)
async def list_menu(repository: ContentRepository = Depends(get_repository)):
    return await repository.menu_items.list()


@router.get("/collections", response_model=List[CollectionResponse], status_code=status.HTTP_200_OK)
async def list_active_collections(
    category: Optional[str] = Query(None),
    repository: ContentRepository = Depends(get_repository),
):
    return await repository.collections.list(category=category)


@router.get("/posters", response_model=List[PosterResponse], status_code=status.HTTP_200_OK)
async def list_active_posters(
    category: Optional[str] = Query(None),
    repository: ContentRepository = Depends(get_repository),
):
    return await repository.posters.list(category=category)


@router.get("/categories", response_model=List[CategoryResponse], status_code=status.HTTP_200_OK)
async def list_categories(repository: ContentRepository = Depends(get_repository)):
    return await repository.categories.list()


@router.get("/tags", response_model=List[TagResponse], status_code=status.HTTP_200_OK)
async def list_tags(repository: ContentRepository = Depends(get_repository)):
    return await repository.posts.list_tags()


# -- admin: posts (author and above) -----------------------------------------

@admin_router.get("/posts", response_model=List[PostResponse], status_code=status.HTTP_200_OK)
async def admin_list_posts(
    post_status: Optional[PostStatus] = Query(None, alias="status"),
    author_id: Optional[str] = Query(None),
    repository: ContentRepository = Depends(get_repository),
    auth: AuthContext = Depends(require_author),
):
    """All posts regardless of status, newest first"""
    posts = await repository.posts.list(status=post_status, author_id=author_id)
    return [await _post_response(repository, post) for post in posts]


@admin_router.get("/posts/{post_id}", response_model=PostResponse, status_code=status.HTTP_200_OK)
async def admin_get_post(
    post_id: str,
    repository: ContentRepository = Depends(get_repository),
    auth: AuthContext = Depends(require_author),
):
    post = await repository.posts.get(post_id)
    if post is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Post not found: {post_id}"
        )
    return await _post_response(repository, post)


@admin_router.post("/posts", response_model=PostResponse, status_code=status.HTTP_201_CREATED)
async def admin_create_post(
    request: PostCreate,
    repository: ContentRepository = Depends(get_repository),
    auth: AuthContext = Depends(require_author),
):
    """Create a post authored by the caller"""
    fields = request.model_dump(exclude_unset=True)
    fields["author_id"] = auth.identity.id
    post = await repository.posts.create(fields)
    logger.info(f"Post {post.id} created by {auth.identity.id}")
    return await _post_response(repository, post)


@admin_router.patch("/posts/{post_id}", response_model=PostResponse, status_code=status.HTTP_200_OK)
async def admin_update_post(
    post_id: str,
    request: PostUpdate,
    repository: ContentRepository = Depends(get_repository),
    auth: AuthContext = Depends(require_author),
):
    post = await repository.posts.update(post_id, request.model_dump(exclude_unset=True))
    return await _post_response(repository, post)


@admin_router.delete("/posts/{post_id}", response_model=DeleteResponse, status_code=status.HTTP_200_OK)
async def admin_delete_post(
    post_id: str,
    repository: ContentRepository = Depends(get_repository),
    auth: AuthContext = Depends(require_author),
):
    if not await repository.posts.delete(post_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Post not found: {post_id}"
        )
    return DeleteResponse(success=True, message="Post deleted")


@admin_router.post("/posts/editor/{post_id}", response_model=PostEditorResponse, status_code=status.HTTP_200_OK)
async def admin_save_post_editor(
    post_id: str,
    request: PostEditorForm,
    repository: ContentRepository = Depends(get_repository),
    auth: AuthContext = Depends(require_author),
):
    """
    Submit the post editor form for an existing post id or "new".

    A failed save answers 422 with the untouched draft so the form can be
    shown again.
    """
    editor = await PostEditor.open(repository.posts, post_id, author_id=auth.identity.id)
    editor.set_title(request.title)
    if request.slug_edited and request.slug is not None:
        editor.set_slug(request.slug)
    editor.set_tags(request.tags)
    for name in ("content", "excerpt", "featured_image", "category_id", "meta_title", "meta_description"):
        editor.set_field(name, getattr(request, name))

    result = await editor.save(request.status)
    draft = PostDraftResponse.model_validate(editor.draft)
    if not result.ok:
        raise HTTPException(
            status_code=result.error.status_code,
            detail=PostEditorResponse(success=False, draft=draft, detail=result.error.message).model_dump(mode="json"),
        )
    return PostEditorResponse(
        success=True,
        post=await _post_response(repository, result.value.post),
        redirect_to=result.value.redirect_to,
        draft=draft,
    )


# -- admin: site content (editor and above) ----------------------------------

def register_crud(
    path: str,
    attribute: str,
    label: str,
    create_schema: Type[BaseModel],
    update_schema: Type[BaseModel],
    response_schema: Type[BaseModel],
    permission: Callable = require_editor,
):
    """Add list/get/create/update/delete endpoints for one content type to admin_router"""

    def entities(repository: ContentRepository):
        return getattr(repository, attribute)

    @admin_router.get(path, response_model=List[response_schema], status_code=status.HTTP_200_OK,
                      name=f"admin_list_{attribute}")
    async def list_records(
        repository: ContentRepository = Depends(get_repository),
        auth: AuthContext = Depends(permission),
    ):
        return await entities(repository).list(include_inactive=True)

    @admin_router.get(path + "/{record_id}", response_model=response_schema, status_code=status.HTTP_200_OK,
                      name=f"admin_get_{attribute}")
    async def get_record(
        record_id: str,
        repository: ContentRepository = Depends(get_repository),
        auth: AuthContext = Depends(permission),
    ):
        record = await entities(repository).get(record_id)
        if record is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"{label.capitalize()} not found: {record_id}"
            )
        return record

    @admin_router.post(path, response_model=response_schema, status_code=status.HTTP_201_CREATED,
                       name=f"admin_create_{attribute}")
    async def create_record(
        request: create_schema,
        repository: ContentRepository = Depends(get_repository),
        auth: AuthContext = Depends(permission),
    ):
        record = await entities(repository).create(request.model_dump(exclude_unset=True))
        logger.info(f"{label.capitalize()} {record.id} created by {auth.identity.id}")
        return record

    @admin_router.patch(path + "/{record_id}", response_model=response_schema, status_code=status.HTTP_200_OK,
                        name=f"admin_update_{attribute}")
    async def update_record(
        record_id: str,
        request: update_schema,
        repository: ContentRepository = Depends(get_repository),
        auth: AuthContext = Depends(permission),
    ):
        return await entities(repository).update(record_id, request.model_dump(exclude_unset=True))

    @admin_router.delete(path + "/{record_id}", response_model=DeleteResponse, status_code=status.HTTP_200_OK,
                         name=f"admin_delete_{attribute}")
    async def delete_record(
        record_id: str,
        repository: ContentRepository = Depends(get_repository),
        auth: AuthContext = Depends(permission),
    ):
        if not await entities(repository).delete(record_id):
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"{label.capitalize()} not found: {record_id}"
            )
        return DeleteResponse(success=True, message=f"{label.capitalize()} deleted")


register_crud("/pages", "pages", "page", PageCreate, PageUpdate, PageResponse)
register_crud("/menus", "menu_items", "menu item", MenuItemCreate, MenuItemUpdate, MenuItemResponse)
register_crud("/banners", "banners", "banner", BannerCreate, BannerUpdate, BannerResponse)
register_crud("/collections", "collections", "collection", CollectionCreate, CollectionUpdate, CollectionResponse)
register_crud("/posters", "posters", "poster", PosterCreate, PosterUpdate, PosterResponse)
register_crud("/categories", "categories", "category", CategoryCreate, CategoryUpdate, CategoryResponse)
