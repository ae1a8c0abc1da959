"""
Post editor workflow: the state behind the admin "new/edit post" form.

The slug follows the title until the user edits it by hand; from then on
(and for any post that already has a slug) it is left alone.
"""
import logging
from dataclasses import dataclass, field, replace
from typing import Any, List, Optional, Union

from app.common.errors import CMSError, Failure, NetworkError, NotFound, Result, Success, ValidationError
from app.config import POSTS_ADMIN_PATH
from app.apps.cms.models import Post, PostStatus
from app.apps.cms.repository.entities import PostRepository
from app.apps.cms.utils.text import derive_slug, parse_tag_input

logger = logging.getLogger(__name__)

NEW_POST = "new"

DRAFT_FIELDS = (
    "title",
    "slug",
    "content",
    "excerpt",
    "featured_image",
    "category_id",
    "meta_title",
    "meta_description",
)


@dataclass
class PostDraft:
    title: str = ""
    slug: str = ""
    content: str = ""
    excerpt: Optional[str] = None
    featured_image: Optional[str] = None
    category_id: Optional[str] = None
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None
    tags: List[str] = field(default_factory=list)
    status: str = PostStatus.DRAFT.value
    slug_dirty: bool = False


@dataclass(frozen=True)
class SavedPost:
    post: Post
    redirect_to: str = POSTS_ADMIN_PATH


class PostEditor:
    def __init__(self, repository: PostRepository, post_id: Optional[str] = None,
                 author_id: Optional[str] = None, draft: Optional[PostDraft] = None):
        self.repository = repository
        self.post_id = post_id
        self.author_id = author_id
        self.draft = draft or PostDraft()

    @classmethod
    async def open(cls, repository: PostRepository, post_id: str = NEW_POST,
                   author_id: Optional[str] = None) -> "PostEditor":
        """Start editing ``post_id``, or a blank draft for "new"."""
        if not post_id or post_id == NEW_POST:
            return cls(repository, author_id=author_id)

        post = await repository.get(post_id)
        if post is None:
            raise NotFound(f"Post {post_id} not found")
        tags = await repository.get_tags(post.id)
        draft = PostDraft(
            **{name: getattr(post, name) for name in DRAFT_FIELDS},
            tags=[tag.name for tag in tags],
            status=post.status,
            slug_dirty=bool(post.slug),
        )
        return cls(repository, post.id, author_id, draft)

    @property
    def is_new(self) -> bool:
        return self.post_id is None

    def set_title(self, title: str) -> None:
        self.draft.title = title
        if not self.draft.slug_dirty:
            self.draft.slug = derive_slug(title)

    def set_slug(self, slug: str) -> None:
        self.draft.slug = slug
        self.draft.slug_dirty = True

    def set_tags(self, value: Union[str, List[str]]) -> None:
        """Accepts the comma-separated tag field or an already split list."""
        if isinstance(value, str):
            self.draft.tags = parse_tag_input(value)
        else:
            self.draft.tags = parse_tag_input(",".join(value))

    def set_field(self, name: str, value: Any) -> None:
        if name == "title":
            self.set_title(value)
        elif name == "slug":
            self.set_slug(value)
        elif name == "tags":
            self.set_tags(value)
        elif name in DRAFT_FIELDS:
            setattr(self.draft, name, value)
        else:
            raise ValidationError(f"Unknown post field: {name}")

    async def save(self, status: Union[PostStatus, str, None] = None) -> Result[SavedPost]:
        """
        Validate and persist the draft as ``status`` (default: the draft's own).

        On failure the draft is left exactly as it was so the form can be
        corrected and submitted again.
        """
        status = PostStatus(status).value if status else self.draft.status
        if not self.draft.title.strip():
            return Failure(ValidationError("Title is required"))
        if not self.draft.content.strip():
            return Failure(ValidationError("Content is required"))

        fields = {name: getattr(self.draft, name) for name in DRAFT_FIELDS}
        if not fields["slug"]:
            fields.pop("slug")
        fields["tags"] = list(self.draft.tags)
        fields["status"] = status

        try:
            if self.is_new:
                fields["author_id"] = self.author_id
                post = await self.repository.create(fields)
            else:
                post = await self.repository.update(self.post_id, fields)
        except CMSError as e:
            logger.warning(f"Could not save post {self.post_id or NEW_POST}: {e.message}")
            return Failure(e)
        except Exception as e:
            logger.error(f"Unexpected error saving post {self.post_id or NEW_POST}: {e}", exc_info=True)
            return Failure(NetworkError(str(e)))

        self.post_id = post.id
        self.draft = replace(self.draft, slug=post.slug, status=post.status, slug_dirty=True)
        logger.info(f"Saved post {post.id} as {post.status}")
        return Success(SavedPost(post))
