"""
Tests for the post editor workflow
"""
import pytest

from app.common.errors import NotFound, ValidationError
from app.apps.cms.editor import PostEditor


class TestOpen:
    """Opening the editor"""

    @pytest.mark.asyncio
    async def test_new_post(self, memory_repository):
        editor = await PostEditor.open(memory_repository.posts, "new", author_id="u1")
        assert editor.is_new
        assert editor.draft.status == "draft"
        assert editor.draft.slug_dirty is False
        assert editor.draft.tags == []

    @pytest.mark.asyncio
    async def test_existing_post(self, memory_repository):
        post = await memory_repository.posts.create({
            "title": "Linen Season",
            "content": "Notes on linen.",
            "tags": ["linen", "summer"],
        })
        editor = await PostEditor.open(memory_repository.posts, post.id)

        assert editor.post_id == post.id
        assert editor.draft.title == "Linen Season"
        assert editor.draft.tags == ["linen", "summer"]
        # Existing URLs stay put when the title changes
        assert editor.draft.slug_dirty is True
        editor.set_title("Linen Season, Revisited")
        assert editor.draft.slug == "linen-season"

    @pytest.mark.asyncio
    async def test_unknown_post(self, memory_repository):
        with pytest.raises(NotFound):
            await PostEditor.open(memory_repository.posts, "missing")


class TestDraftEditing:
    """Title, slug and tag editing"""

    @pytest.mark.asyncio
    async def test_slug_follows_title_until_edited(self, memory_repository):
        editor = await PostEditor.open(memory_repository.posts)
        editor.set_title("Hello, World!")
        assert editor.draft.slug == "hello-world"

        editor.set_slug("greetings")
        editor.set_title("Something Else")
        assert editor.draft.slug == "greetings"
        assert editor.draft.slug_dirty is True

    @pytest.mark.asyncio
    async def test_tag_input(self, memory_repository):
        editor = await PostEditor.open(memory_repository.posts)
        editor.set_tags(" Linen, wool , ,linen, Slow Fashion")
        assert editor.draft.tags == ["Linen", "wool", "Slow Fashion"]

    @pytest.mark.asyncio
    async def test_unknown_field(self, memory_repository):
        editor = await PostEditor.open(memory_repository.posts)
        with pytest.raises(ValidationError):
            editor.set_field("view_count", 10)


class TestSave:
    """Saving the draft"""

    @pytest.mark.asyncio
    async def test_save_new_draft(self, memory_repository):
        editor = await PostEditor.open(memory_repository.posts, author_id="u1")
        editor.set_title("Behind the Scenes")
        editor.set_field("content", "How we design.")
        editor.set_tags("design, process")

        result = await editor.save()

        assert result.ok
        post = result.value.post
        assert result.value.redirect_to == "/admin/posts"
        assert post.slug == "behind-the-scenes"
        assert post.author_id == "u1"
        assert post.published_at is None
        assert [tag.slug for tag in await memory_repository.posts.get_tags(post.id)] == ["design", "process"]
        assert editor.post_id == post.id

    @pytest.mark.asyncio
    async def test_publish_stamps_once(self, memory_repository):
        editor = await PostEditor.open(memory_repository.posts)
        editor.set_title("Launch")
        editor.set_field("content", "It's here.")

        first = await editor.save("published")
        assert first.value.post.published_at is not None

        editor.set_field("excerpt", "Now with an excerpt")
        second = await editor.save("published")
        assert second.value.post.id == first.value.post.id
        assert second.value.post.published_at == first.value.post.published_at

    @pytest.mark.asyncio
    @pytest.mark.parametrize("title,content", [("", "Body"), ("Title", "   ")])
    async def test_validation_keeps_draft(self, memory_repository, title, content):
        editor = await PostEditor.open(memory_repository.posts)
        editor.set_title(title)
        editor.set_field("content", content)
        editor.set_tags("a, b")
        before = editor.draft

        result = await editor.save("published")

        assert not result.ok
        assert isinstance(result.error, ValidationError)
        assert editor.draft == before
        assert editor.is_new
        assert await memory_repository.posts.list() == []

    @pytest.mark.asyncio
    async def test_duplicate_slug_keeps_draft(self, memory_repository):
        await memory_repository.posts.create({"title": "Taken", "content": "First"})
        editor = await PostEditor.open(memory_repository.posts)
        editor.set_title("Taken")
        editor.set_field("content", "Second")

        result = await editor.save()

        assert not result.ok
        assert isinstance(result.error, ValidationError)
        assert editor.draft.title == "Taken"
        assert editor.is_new

    @pytest.mark.asyncio
    async def test_edit_existing(self, memory_repository):
        post = await memory_repository.posts.create({"title": "Original", "content": "Body", "tags": ["a", "b"]})
        editor = await PostEditor.open(memory_repository.posts, post.id)
        editor.set_title("Renamed")
        editor.set_tags("b, c")

        result = await editor.save()

        assert result.ok
        assert result.value.post.title == "Renamed"
        assert result.value.post.slug == "original"
        assert [tag.slug for tag in await memory_repository.posts.get_tags(post.id)] == ["b", "c"]
