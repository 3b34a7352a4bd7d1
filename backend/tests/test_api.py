from pznews.utils.tasks import drain_background_tasks

from conftest import ARTICLE_BODY, auth_headers


async def _create_category(client, user, name_bg, **extra):
    response = await client.post("/api/categories", json={"nameBg": name_bg, **extra}, headers=auth_headers(user))
    assert response.status_code == 201, response.text
    return response.json()


async def _create_article(client, user, **fields):
    payload = {"title": "Мач в Пазарджик", "content": ARTICLE_BODY, **fields}
    response = await client.post("/api/articles", json=payload, headers=auth_headers(user))
    assert response.status_code == 201, response.text
    return response.json()


async def test_login_me_logout(client, author):
    response = await client.post(
        "/api/auth/login", json={"email": "Author@PZ-News.test", "password": "password123"},
    )
    assert response.status_code == 200
    body = response.json()
    assert body["token_type"] == "bearer"
    assert body["user"]["role"] == "author"
    assert "pz_access_token" in response.cookies

    me = await client.get("/api/auth/me", headers={"Authorization": f"Bearer {body['access_token']}"})
    assert me.json()["email"] == "author@pz-news.test"

    assert (await client.post("/api/auth/logout")).json() == {"success": True}


async def test_login_rejects_bad_password(client, author):
    response = await client.post("/api/auth/login", json={"email": "author@pz-news.test", "password": "nope-nope"})
    assert response.status_code == 401
    assert response.json() == {"error": "Invalid email or password"}


async def test_invalid_token_is_unauthorized(client):
    response = await client.get("/api/auth/me", headers={"Authorization": "Bearer not-a-token"})
    assert response.status_code == 401


async def test_article_lifecycle_end_to_end(client, editor, author):
    category = await _create_category(client, editor, "Спорт")
    assert category["slug"] == "sport"

    article = await _create_article(client, author, categoryId=category["id"], tags=["Футбол"])
    assert article["slug"] == "mach-v-pazardzhik"
    assert article["status"] == "draft"
    assert [t["slug"] for t in article["tags"]] == ["futbol"]

    # drafts are invisible to anonymous readers
    assert (await client.get(f"/api/articles/{article['id']}")).status_code == 404
    assert (await client.get("/api/articles/slug/mach-v-pazardzhik")).status_code == 404
    assert (await client.get("/api/articles")).json()["count"] == 0

    published = await client.post(f"/api/articles/{article['id']}/publish", headers=auth_headers(author))
    assert published.json()["published_at"] is not None

    public = await client.get("/api/articles/slug/mach-v-pazardzhik")
    assert public.status_code == 200
    assert public.json()["category"]["slug"] == "sport"
    await drain_background_tasks()

    await client.get("/api/articles/slug/mach-v-pazardzhik")
    await drain_background_tasks()

    detail = await client.get(f"/api/articles/{article['id']}", headers=auth_headers(author))
    assert detail.json()["view_count"] == 2

    feed = (await client.get("/api/feed/category/sport")).json()
    assert feed["category"]["slug"] == "sport"
    assert feed["total"] == 1
    assert feed["articleCount"] == 1
    assert feed["hasMore"] is False
    assert feed["articles"][0]["slug"] == "mach-v-pazardzhik"

    tag_feed = (await client.get("/api/feed/tag/futbol")).json()
    assert tag_feed["tag"]["name"] == "Футбол"
    assert tag_feed["total"] == 1

    latest = (await client.get("/api/feed/latest")).json()["articles"]
    assert [a["slug"] for a in latest] == ["mach-v-pazardzhik"]


async def test_article_delete_clears_feeds(client, author):
    article = await _create_article(client, author, status="published")
    assert len((await client.get("/api/feed/latest")).json()["articles"]) == 1

    response = await client.delete(f"/api/articles/{article['id']}", headers=auth_headers(author))
    assert response.json() == {"success": True}
    assert (await client.get("/api/feed/latest")).json()["articles"] == []


async def test_author_cannot_edit_other_authors_article(client, author, other_author):
    article = await _create_article(client, author)
    response = await client.patch(
        f"/api/articles/{article['id']}", json={"excerpt": "hijack"}, headers=auth_headers(other_author),
    )
    assert response.status_code == 403
    assert "error" in response.json()


async def test_duplicate_slug_returns_400(client, author):
    await _create_article(client, author)
    response = await client.post(
        "/api/articles", json={"title": "Мач в Пазарджик", "content": ARTICLE_BODY}, headers=auth_headers(author),
    )
    assert response.status_code == 400
    assert response.json()["error"] == "Article with this slug already exists"


async def test_validation_error_shape(client, author):
    response = await client.post(
        "/api/articles", json={"title": "abc", "content": "short"}, headers=auth_headers(author),
    )
    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "Validation error"
    assert {"title", "content"} <= {d["field"] for d in body["details"]}


async def test_anonymous_cannot_write(client):
    response = await client.post("/api/articles", json={"title": "Мач в Пазарджик", "content": ARTICLE_BODY})
    assert response.status_code == 401


async def test_list_filters_for_signed_in_users(client, author, editor):
    await _create_article(client, author, title="Draft by author")
    await _create_article(client, editor, title="Published by editor", status="published")

    drafts = (await client.get("/api/articles", params={"status": "draft"}, headers=auth_headers(editor))).json()
    assert [a["title"] for a in drafts["data"]] == ["Draft by author"]

    everything = (await client.get("/api/articles", params={"status": "all"}, headers=auth_headers(editor))).json()
    assert everything["count"] == 2

    anonymous = (await client.get("/api/articles", params={"status": "draft"})).json()
    assert [a["title"] for a in anonymous["data"]] == ["Published by editor"]

    paged = (await client.get("/api/articles", params={"status": "all", "limit": 1}, headers=auth_headers(editor))).json()
    assert paged["hasMore"] is True


async def test_categories_endpoints(client, editor, author):
    sport = await _create_category(client, editor, "Спорт")
    culture = await _create_category(client, editor, "Култура", displayOrder=1)

    listing = (await client.get("/api/categories")).json()["categories"]
    assert [c["slug"] for c in listing] == ["sport", "kultura"]

    forbidden = await client.post("/api/categories", json={"nameBg": "Общество"}, headers=auth_headers(author))
    assert forbidden.status_code == 403

    reordered = await client.post(
        "/api/categories/reorder", json={"categoryIds": [culture["id"], sport["id"]]}, headers=auth_headers(editor),
    )
    assert [c["slug"] for c in reordered.json()["categories"]] == ["kultura", "sport"]

    toggled = await client.post(f"/api/categories/{sport['id']}/toggle", headers=auth_headers(editor))
    assert toggled.json()["is_active"] is False
    assert (await client.get("/api/categories/slug/sport")).status_code == 404
    assert len((await client.get("/api/categories", params={"includeInactive": "true"})).json()["categories"]) == 2

    deleted = await client.delete(f"/api/categories/{culture['id']}", headers=auth_headers(editor))
    assert deleted.json() == {"success": True}


async def test_feed_tags_and_limits(client, author):
    await _create_article(client, author, status="published", tags=["Спорт", "Футбол"])
    await _create_article(client, author, title="Втори мач", status="published", tags=["Спорт"])

    tags = (await client.get("/api/feed/tags")).json()["tags"]
    counts = {t["slug"]: t["article_count"] for t in tags}
    assert counts == {"sport": 2, "futbol": 1}

    assert (await client.get("/api/feed/latest", params={"limit": 500})).status_code == 400
    assert (await client.get("/api/feed/category/missing")).status_code == 404


async def test_user_management_is_admin_only(client, admin, editor):
    assert (await client.get("/api/users", headers=auth_headers(editor))).status_code == 403

    created = await client.post(
        "/api/users",
        json={"email": "new@pz-news.test", "password": "password123", "fullName": "New Reporter"},
        headers=auth_headers(admin),
    )
    assert created.status_code == 201
    user = created.json()
    assert user["role"] == "author"
    assert "hashed_password" not in user

    duplicate = await client.post(
        "/api/users",
        json={"email": "NEW@pz-news.test", "password": "password123", "fullName": "Again"},
        headers=auth_headers(admin),
    )
    assert duplicate.status_code == 400

    promoted = await client.patch(f"/api/users/{user['id']}", json={"role": "editor"}, headers=auth_headers(admin))
    assert promoted.json()["role"] == "editor"

    deactivated = await client.delete(f"/api/users/{user['id']}", headers=auth_headers(admin))
    assert deactivated.json()["user"]["is_active"] is False

    login = await client.post("/api/auth/login", json={"email": "new@pz-news.test", "password": "password123"})
    assert login.status_code == 401

    self_delete = await client.delete(f"/api/users/{admin['id']}", headers=auth_headers(admin))
    assert self_delete.status_code == 400


async def test_health_and_root(client):
    health = (await client.get("/api/health")).json()
    assert health["status"] == "healthy"
    assert health["checks"] == {"database": "healthy", "cache": "healthy", "cache_backend": "memory"}

    root = await client.get("/")
    assert root.json()["health"] == "/api/health"
    assert root.headers["X-Content-Type-Options"] == "nosniff"
    assert root.headers["X-Request-ID"]


async def test_request_id_is_echoed(client):
    response = await client.get("/", headers={"X-Request-ID": "abc123"})
    assert response.headers["X-Request-ID"] == "abc123"


async def test_sitemap_lists_published_articles(client, editor, author):
    category = await _create_category(client, editor, "Спорт")
    await _create_article(client, author, status="published", categoryId=category["id"])
    await _create_article(client, author, title="Без категория", status="published")
    await _create_article(client, author, title="Чернова статия")

    response = await client.get("/api/sitemap.xml")
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("application/xml")
    body = response.text
    assert "http://localhost:3000/sport</loc>" in body
    assert "http://localhost:3000/sport/mach-v-pazardzhik</loc>" in body
    assert "http://localhost:3000/news/bez-kategoriya</loc>" in body
    assert "chernova-statiya" not in body
