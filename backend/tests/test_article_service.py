import pytest
from sqlalchemy import select

from pznews.core.exceptions import Conflict, NotFound, PermissionDenied, ValidationError
from pznews.models import Article, Tag
from pznews.services.articles import ArticleService, CategoryService
from pznews.services.articles import queries
from pznews.services.articles.article import increment_view_count
from pznews.services.users import UserService
from pznews.utils.cache import cache_key

from conftest import ARTICLE_BODY


def _payload(**overrides):
    data = {"title": "Мач в Пазарджик", "content": ARTICLE_BODY}
    data.update(overrides)
    return data


async def test_create_derives_slug_and_keeps_draft_unpublished(db, cache, author):
    article = await ArticleService.create(db, cache, _payload(), author_id=author["id"])
    assert article.slug == "mach-v-pazardzhik"
    assert article.status == "draft"
    assert article.published_at is None
    assert article.view_count == 0
    assert article.author.id == author["id"]


async def test_create_published_stamps_published_at(db, cache, author):
    article = await ArticleService.create(db, cache, _payload(status="published"), author_id=author["id"])
    assert article.published_at is not None


async def test_duplicate_slug_is_conflict(db, cache, author):
    await ArticleService.create(db, cache, _payload(), author_id=author["id"])
    with pytest.raises(Conflict):
        await ArticleService.create(db, cache, _payload(), author_id=author["id"])


async def test_unknown_category_is_validation_error(db, cache, author):
    with pytest.raises(ValidationError) as exc_info:
        await ArticleService.create(db, cache, _payload(category_id=999), author_id=author["id"])
    assert exc_info.value.details[0]["field"] == "category_id"


async def test_tags_are_created_once_and_reused(db, cache, author):
    await ArticleService.create(db, cache, _payload(tags=["Спорт", "Футбол"]), author_id=author["id"])
    second = await ArticleService.create(
        db, cache, _payload(title="Още един мач", tags=["Спорт"]), author_id=author["id"],
    )
    assert [t.slug for t in second.tags] == ["sport"]
    tags = (await db.execute(select(Tag))).scalars().all()
    assert sorted(t.slug for t in tags) == ["futbol", "sport"]


async def test_author_cannot_modify_someone_elses_article(db, cache, author, other_author, editor):
    article = await ArticleService.create(db, cache, _payload(), author_id=author["id"])

    with pytest.raises(PermissionDenied):
        await ArticleService.update(db, cache, article.id, {"excerpt": "x"}, other_author)
    with pytest.raises(PermissionDenied):
        await ArticleService.delete(db, cache, article.id, other_author)

    updated = await ArticleService.update(db, cache, article.id, {"excerpt": "Редакторска бележка"}, editor)
    assert updated.excerpt == "Редакторска бележка"


async def test_slug_follows_title_until_first_publish(db, cache, author):
    article = await ArticleService.create(db, cache, _payload(), author_id=author["id"])

    renamed = await ArticleService.update(db, cache, article.id, {"title": "Голям мач в Пазарджик"}, author)
    assert renamed.slug == "golyam-mach-v-pazardzhik"

    published = await ArticleService.publish(db, cache, article.id, author)
    first_published_at = published.published_at
    assert first_published_at is not None

    retitled = await ArticleService.update(db, cache, article.id, {"title": "Финал в Пазарджик"}, author)
    assert retitled.slug == "golyam-mach-v-pazardzhik"

    explicit = await ArticleService.update(db, cache, article.id, {"slug": "final-pazardzhik"}, author)
    assert explicit.slug == "final-pazardzhik"


async def test_published_at_is_set_only_once(db, cache, author):
    article = await ArticleService.create(db, cache, _payload(status="published"), author_id=author["id"])
    first = article.published_at

    await ArticleService.unpublish(db, cache, article.id, author)
    republished = await ArticleService.publish(db, cache, article.id, author)
    assert republished.published_at == first
    assert republished.status == "published"


async def test_archive(db, cache, author):
    article = await ArticleService.create(db, cache, _payload(status="published"), author_id=author["id"])
    archived = await ArticleService.archive(db, cache, article.id, author)
    assert archived.status == "archived"
    with pytest.raises(NotFound):
        await ArticleService.get_by_slug(db, archived.slug, published_only=True)


async def test_delete_removes_article_and_links(db, cache, author):
    article = await ArticleService.create(db, cache, _payload(tags=["Спорт"]), author_id=author["id"])
    await ArticleService.delete(db, cache, article.id, author)

    with pytest.raises(NotFound):
        await ArticleService.get_by_id(db, article.id)
    # the tag itself survives
    assert (await db.execute(select(Tag).where(Tag.slug == "sport"))).scalar_one() is not None


async def test_list_filters_and_pagination(db, cache, author, editor):
    for i in range(3):
        await ArticleService.create(
            db, cache, _payload(title=f"Published story {i}", status="published"), author_id=author["id"],
        )
    await ArticleService.create(db, cache, _payload(title="Draft story"), author_id=editor["id"])

    published = await ArticleService.list_articles(db, status="published", limit=2)
    assert published["count"] == 3
    assert len(published["data"]) == 2
    assert published["has_more"] is True

    everything = await ArticleService.list_articles(db, status="all", limit=10)
    assert everything["count"] == 4
    assert everything["has_more"] is False

    mine = await ArticleService.list_articles(db, author_id=editor["id"])
    assert [a.title for a in mine["data"]] == ["Draft story"]

    found = await ArticleService.list_articles(db, search="story 1")
    assert [a.title for a in found["data"]] == ["Published story 1"]


async def test_search_treats_wildcards_literally(db, cache, author):
    await ArticleService.create(db, cache, _payload(title="Discount 100% off"), author_id=author["id"])
    await ArticleService.create(db, cache, _payload(title="Discount 1000 off"), author_id=author["id"])

    found = await ArticleService.list_articles(db, search="100%")
    assert [a.title for a in found["data"]] == ["Discount 100% off"]


async def test_view_count_increment_keeps_updated_at(db, cache, author):
    article = await ArticleService.create(db, cache, _payload(status="published"), author_id=author["id"])
    before = article.updated_at

    await increment_view_count(article.id)
    await increment_view_count(article.id)

    reloaded = await ArticleService.get_by_id(db, article.id)
    assert reloaded.view_count == 2
    assert reloaded.updated_at == before


async def test_writes_invalidate_cached_feeds(db, cache, author):
    await ArticleService.create(db, cache, _payload(status="published"), author_id=author["id"])
    assert len(await queries.latest_articles(db, cache, 10)) == 1
    assert await cache.get(cache_key("articles:latest", 10)) is not None

    await ArticleService.create(
        db, cache, _payload(title="Втора новина", status="published"), author_id=author["id"],
    )
    assert await cache.get(cache_key("articles:latest", 10)) is None
    assert len(await queries.latest_articles(db, cache, 10)) == 2


async def test_category_move_drops_both_category_listings(db, cache, author, editor):
    sport = await CategoryService.create(db, cache, {"name_bg": "Спорт"}, editor)
    news = await CategoryService.create(db, cache, {"name_bg": "Новини"}, editor)
    article = await ArticleService.create(
        db, cache, _payload(status="published", category_id=sport.id), author_id=author["id"],
    )

    assert (await queries.articles_by_category(db, cache, sport.id))["total"] == 1
    await ArticleService.update(db, cache, article.id, {"category_id": news.id}, author)

    assert (await queries.articles_by_category(db, cache, sport.id))["total"] == 0
    assert (await queries.articles_by_category(db, cache, news.id))["total"] == 1


async def test_public_article_excludes_drafts(db, cache, author):
    article = await ArticleService.create(db, cache, _payload(), author_id=author["id"])
    with pytest.raises(NotFound):
        await queries.public_article(db, cache, article.slug)

    await ArticleService.publish(db, cache, article.id, author)
    payload = await queries.public_article(db, cache, article.slug)
    assert payload["slug"] == "mach-v-pazardzhik"
    assert payload["author"]["full_name"] == "Test Author"


async def test_renaming_an_author_refreshes_cached_articles(db, cache, author):
    article = await ArticleService.create(db, cache, _payload(status="published"), author_id=author["id"])
    assert (await queries.public_article(db, cache, article.slug))["author"]["full_name"] == "Test Author"
    assert (await queries.latest_articles(db, cache))[0]["author"]["full_name"] == "Test Author"

    await UserService.update(db, cache, author["id"], {"full_name": "Renamed Author"})

    assert (await queries.public_article(db, cache, article.slug))["author"]["full_name"] == "Renamed Author"
    assert (await queries.latest_articles(db, cache))[0]["author"]["full_name"] == "Renamed Author"


async def test_deactivating_a_user_drops_cached_articles(db, cache, admin, author):
    article = await ArticleService.create(db, cache, _payload(status="published"), author_id=author["id"])
    await queries.public_article(db, cache, article.slug)
    assert await cache.get(cache_key("articles:detail", article.slug)) is not None

    await UserService.deactivate(db, cache, author["id"], admin)
    assert await cache.get(cache_key("articles:detail", article.slug)) is None


async def test_featured_and_breaking_feeds(db, cache, author):
    await ArticleService.create(
        db, cache, _payload(title="Featured one", status="published", is_featured=True), author_id=author["id"],
    )
    await ArticleService.create(
        db, cache, _payload(title="Breaking one", status="published", is_breaking=True), author_id=author["id"],
    )
    await ArticleService.create(
        db, cache, _payload(title="Draft featured", is_featured=True), author_id=author["id"],
    )

    assert [a["title"] for a in await queries.featured_articles(db, cache)] == ["Featured one"]
    assert [a["title"] for a in await queries.breaking_news(db, cache)] == ["Breaking one"]


async def test_trending_orders_by_views(db, cache, author):
    quiet = await ArticleService.create(db, cache, _payload(title="Quiet story", status="published"), author_id=author["id"])
    busy = await ArticleService.create(db, cache, _payload(title="Busy story", status="published"), author_id=author["id"])
    for _ in range(3):
        await increment_view_count(busy.id)
    await increment_view_count(quiet.id)

    trending = await queries.trending_articles(db, cache)
    assert [a["title"] for a in trending] == ["Busy story", "Quiet story"]
    assert trending[0]["view_count"] == 3
