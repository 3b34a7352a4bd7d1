from sqlalchemy import func, select

from pznews.models import Article, Category, Tag, User
from pznews.seed import seed_demo
from pznews.services.articles import CategoryService


async def test_seed_creates_demo_content(db, cache):
    summary = await seed_demo(db, cache)
    assert summary["user_created"] is True
    assert summary["category_created"] is True
    assert summary["article_created"] is True
    assert summary["article"] == "pazardzhik-sartseto-na-trakiyskata-dolina"

    article = (await db.execute(select(Article).where(Article.slug == summary["article"]))).scalar_one()
    assert article.status == "published"
    assert article.is_featured is True
    assert article.published_at is not None

    author = (await db.execute(select(User).where(User.id == article.author_id))).scalar_one()
    assert author.email == "demo@pz-news.com"
    assert author.role == "author"

    slugs = (await db.execute(select(Tag.slug).order_by(Tag.slug))).scalars().all()
    assert slugs == sorted(["pazardzhik", "trakiyska-dolina", "istoriya"])


async def test_seed_is_idempotent(db, cache):
    await seed_demo(db, cache)
    summary = await seed_demo(db, cache)
    assert summary["user_created"] is False
    assert summary["category_created"] is False
    assert summary["article_created"] is False

    expected = {User: 1, Category: 1, Article: 1, Tag: 3}
    for model, count in expected.items():
        assert (await db.execute(select(func.count(model.id)))).scalar() == count


async def test_seed_reuses_existing_top_level_category(db, cache, admin):
    existing = await CategoryService.create(db, cache, {"name_bg": "Общество"}, admin)
    summary = await seed_demo(db, cache)
    assert summary["category"] == existing.slug
    assert summary["category_created"] is False
