"""
Tests for the public CMS endpoints and the admin content endpoints
"""
import pytest
from fastapi import status

from app.apps.authentication.models import Role


async def create_post(repository, **fields):
    values = {"title": "The Future of Sustainable Fashion", "content": "Sustainable practices.", "status": "published"}
    values.update(fields)
    return await repository.posts.create(values)


class TestPublicPosts:
    """Tests for GET /api/cms/posts"""

    @pytest.mark.asyncio
    async def test_only_published_posts(self, client, memory_repository):
        published = await create_post(memory_repository, tags=["fashion"])
        await create_post(memory_repository, title="Work in progress", status="draft")

        response = client.get("/api/cms/posts")

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert [post["id"] for post in data] == [published.id]
        assert data[0]["tags"][0]["slug"] == "fashion"

    @pytest.mark.asyncio
    async def test_filter_by_category_slug(self, client, memory_repository):
        category = await memory_repository.categories.create({"name": "Process"})
        in_category = await create_post(memory_repository, title="Pattern cutting", category_id=category.id)
        await create_post(memory_repository, title="Elsewhere")

        data = client.get("/api/cms/posts", params={"category": "process"}).json()
        assert [post["id"] for post in data] == [in_category.id]

        response = client.get("/api/cms/posts", params={"category": "nope"})
        assert response.status_code == status.HTTP_404_NOT_FOUND

    @pytest.mark.asyncio
    async def test_get_by_slug_counts_view(self, client, memory_repository):
        post = await create_post(memory_repository)

        response = client.get(f"/api/cms/posts/{post.slug}")
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["title"] == post.title

        client.get(f"/api/cms/posts/{post.slug}")
        assert (await memory_repository.posts.get(post.id)).view_count == 2

    @pytest.mark.asyncio
    async def test_draft_is_not_found(self, client, memory_repository):
        post = await create_post(memory_repository, status="draft")
        response = client.get(f"/api/cms/posts/{post.slug}")
        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert (await memory_repository.posts.get(post.id)).view_count == 0


class TestPublicContent:
    """Tests for pages, banners, menu, collections, posters and tags"""

    @pytest.mark.asyncio
    async def test_published_page(self, client, memory_repository):
        await memory_repository.pages.create({"title": "About", "content": "Our story", "status": "published"})
        await memory_repository.pages.create({"title": "Hidden", "content": "Draft"})

        assert client.get("/api/cms/pages/about").status_code == status.HTTP_200_OK
        assert client.get("/api/cms/pages/hidden").status_code == status.HTTP_404_NOT_FOUND

    @pytest.mark.asyncio
    async def test_banners_by_position(self, client, memory_repository):
        await memory_repository.banners.create({"title": "Header", "position": "header", "display_order": 2})
        await memory_repository.banners.create({"title": "Header first", "position": "header", "display_order": 1})
        await memory_repository.banners.create({"title": "Footer", "position": "footer"})
        await memory_repository.banners.create({"title": "Off", "position": "header", "is_active": False})

        data = client.get("/api/cms/banners", params={"position": "header"}).json()
        assert [banner["title"] for banner in data] == ["Header first", "Header"]

        response = client.get("/api/cms/banners", params={"position": "middle"})
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    @pytest.mark.asyncio
    async def test_menu_and_posters(self, client, memory_repository):
        await memory_repository.menu_items.create({"label": "Blog", "url": "/blog", "display_order": 2})
        await memory_repository.menu_items.create({"label": "Home", "url": "/", "display_order": 1})
        await memory_repository.posters.create({"title": "SS24", "image_url": "https://img/ss24.jpg", "category": "campaign"})
        await memory_repository.posters.create({"title": "Lookbook", "image_url": "https://img/lb.jpg", "category": "editorial"})

        assert [item["label"] for item in client.get("/api/cms/menu").json()] == ["Home", "Blog"]
        posters = client.get("/api/cms/posters", params={"category": "campaign"}).json()
        assert [poster["title"] for poster in posters] == ["SS24"]

    @pytest.mark.asyncio
    async def test_tags(self, client, memory_repository):
        await create_post(memory_repository, tags=["Wool", "linen"])
        tags = client.get("/api/cms/tags").json()
        assert sorted(tag["slug"] for tag in tags) == ["linen", "wool"]


class TestAdminPosts:
    """Tests for /api/admin/posts"""

    def test_requires_login(self, client):
        response = client.post("/api/admin/posts", json={"title": "Nope", "content": "Nope"})
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    @pytest.mark.asyncio
    async def test_subscriber_is_denied(self, client, login_as):
        headers = await login_as(Role.SUBSCRIBER)
        response = client.get("/api/admin/posts", headers=headers)
        assert response.status_code == status.HTTP_403_FORBIDDEN

    @pytest.mark.asyncio
    async def test_author_crud(self, client, login_as):
        headers = await login_as(Role.AUTHOR)

        response = client.post("/api/admin/posts", json={
            "title": "Hello, World!",
            "content": "First post.",
            "tags": ["intro", "Intro", "news"],
        }, headers=headers)
        assert response.status_code == status.HTTP_201_CREATED
        post = response.json()
        assert post["slug"] == "hello-world"
        assert post["author_id"]
        assert [tag["slug"] for tag in post["tags"]] == ["intro", "news"]

        response = client.patch(f"/api/admin/posts/{post['id']}", json={"status": "published"}, headers=headers)
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["published_at"] is not None

        listed = client.get("/api/admin/posts", params={"status": "published"}, headers=headers).json()
        assert [item["id"] for item in listed] == [post["id"]]

        response = client.delete(f"/api/admin/posts/{post['id']}", headers=headers)
        assert response.status_code == status.HTTP_200_OK
        response = client.delete(f"/api/admin/posts/{post['id']}", headers=headers)
        assert response.status_code == status.HTTP_404_NOT_FOUND

    @pytest.mark.asyncio
    async def test_validation_errors(self, client, login_as, memory_repository):
        headers = await login_as(Role.AUTHOR)
        await create_post(memory_repository, title="Taken")

        response = client.post("/api/admin/posts", json={"title": "Taken", "content": "Again"}, headers=headers)
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert response.json()["code"] == "validation_error"

        response = client.patch("/api/admin/posts/missing", json={"title": "x"}, headers=headers)
        assert response.status_code == status.HTTP_404_NOT_FOUND


class TestPostEditorEndpoint:
    """Tests for POST /api/admin/posts/editor/{post_id}"""

    @pytest.mark.asyncio
    async def test_new_post(self, client, login_as):
        headers = await login_as(Role.AUTHOR)

        response = client.post("/api/admin/posts/editor/new", json={
            "title": "Slow Fashion Notes",
            "content": "Buy less, choose well.",
            "tags": "slow fashion, craft, Craft",
            "status": "published",
        }, headers=headers)

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["success"] is True
        assert data["redirect_to"] == "/admin/posts"
        assert data["post"]["slug"] == "slow-fashion-notes"
        assert data["post"]["published_at"] is not None
        assert [tag["name"] for tag in data["post"]["tags"]] == ["slow fashion", "craft"]

    @pytest.mark.asyncio
    async def test_hand_edited_slug(self, client, login_as):
        headers = await login_as(Role.AUTHOR)
        response = client.post("/api/admin/posts/editor/new", json={
            "title": "Slow Fashion Notes",
            "slug": "Notes On Slowness",
            "slug_edited": True,
            "content": "Buy less.",
        }, headers=headers)
        assert response.json()["post"]["slug"] == "notes-on-slowness"

    @pytest.mark.asyncio
    async def test_failed_save_returns_draft(self, client, login_as):
        headers = await login_as(Role.AUTHOR)

        response = client.post("/api/admin/posts/editor/new", json={
            "title": "No body yet",
            "content": "",
            "tags": "a, b",
        }, headers=headers)

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        detail = response.json()["detail"]
        assert detail["success"] is False
        assert detail["draft"]["title"] == "No body yet"
        assert detail["draft"]["tags"] == ["a", "b"]

    @pytest.mark.asyncio
    async def test_existing_post(self, client, login_as, memory_repository):
        headers = await login_as(Role.AUTHOR)
        post = await create_post(memory_repository, title="Original")

        response = client.post(f"/api/admin/posts/editor/{post.id}", json={
            "title": "Renamed",
            "content": "Updated body.",
            "status": "published",
        }, headers=headers)

        data = response.json()
        assert data["post"]["id"] == post.id
        assert data["post"]["slug"] == "original"
        assert data["post"]["published_at"] == post.published_at.isoformat()

    @pytest.mark.asyncio
    async def test_unknown_post(self, client, login_as):
        headers = await login_as(Role.AUTHOR)
        response = client.post("/api/admin/posts/editor/missing", json={"title": "x", "content": "y"}, headers=headers)
        assert response.status_code == status.HTTP_404_NOT_FOUND


class TestAdminContent:
    """Tests for the editor-only content endpoints"""

    @pytest.mark.asyncio
    async def test_author_is_denied(self, client, login_as):
        headers = await login_as(Role.AUTHOR)
        response = client.post("/api/admin/pages", json={"title": "About"}, headers=headers)
        assert response.status_code == status.HTTP_403_FORBIDDEN

    @pytest.mark.asyncio
    async def test_editor_manages_pages(self, client, login_as):
        headers = await login_as(Role.EDITOR)

        response = client.post("/api/admin/pages", json={"title": "About Us", "template": "hero"}, headers=headers)
        assert response.status_code == status.HTTP_201_CREATED
        page = response.json()
        assert page["slug"] == "about-us"

        response = client.patch(f"/api/admin/pages/{page['id']}", json={"status": "published"}, headers=headers)
        assert response.json()["status"] == "published"
        assert client.get("/api/cms/pages/about-us").status_code == status.HTTP_200_OK

        assert client.get(f"/api/admin/pages/{page['id']}", headers=headers).status_code == status.HTTP_200_OK
        assert client.delete(f"/api/admin/pages/{page['id']}", headers=headers).status_code == status.HTTP_200_OK
        assert client.get(f"/api/admin/pages/{page['id']}", headers=headers).status_code == status.HTTP_404_NOT_FOUND

    @pytest.mark.asyncio
    async def test_admin_lists_inactive_banners(self, client, login_as):
        headers = await login_as(Role.ADMIN)
        client.post("/api/admin/banners", json={"title": "Live"}, headers=headers)
        client.post("/api/admin/banners", json={"title": "Paused", "is_active": False}, headers=headers)

        admin_titles = {b["title"] for b in client.get("/api/admin/banners", headers=headers).json()}
        public_titles = {b["title"] for b in client.get("/api/cms/banners").json()}
        assert admin_titles == {"Live", "Paused"}
        assert public_titles == {"Live"}

    @pytest.mark.asyncio
    async def test_menus_collections_posters_categories(self, client, login_as):
        headers = await login_as(Role.EDITOR)

        assert client.post("/api/admin/menus", json={"label": "Shop", "url": "/shop"},
                           headers=headers).status_code == status.HTTP_201_CREATED
        assert client.post("/api/admin/collections", json={"title": "Autumn", "items": [{"name": "Coat"}]},
                           headers=headers).status_code == status.HTTP_201_CREATED
        assert client.post("/api/admin/posters", json={"title": "SS24", "image_url": "https://img/ss24.jpg"},
                           headers=headers).status_code == status.HTTP_201_CREATED
        assert client.post("/api/admin/categories", json={"name": "Design Notes"},
                           headers=headers).json()["slug"] == "design-notes"

        response = client.post("/api/admin/posters", json={"title": "No image"}, headers=headers)
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
