"""
Demo content
One author, one category, one published article with tags.
Safe to run repeatedly: existing rows are matched by email and slug.
"""

import secrets
from typing import Any, Dict, Optional, Tuple

from loguru import logger
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from pznews.models import Article, Category, User
from pznews.services.articles import ArticleService, CategoryService
from pznews.services.users import UserService
from pznews.utils.cache import TaggedCache
from pznews.utils.slug import slugify

DEMO_EMAIL = "demo@pz-news.com"
DEMO_CATEGORY = {"name_bg": "Новини", "name_en": "News", "slug": "novini", "display_order": 0}
DEMO_TAGS = ["Пазарджик", "Тракийска долина", "История"]

DEMO_TITLE = "Пазарджик – Сърцето на Тракийската долина"
DEMO_ARTICLE = {
    "title": DEMO_TITLE,
    "subtitle": "История, култура и модерно развитие в един от най-живописните градове на България",
    "excerpt": (
        "Пазарджик е град с богата история, разположен в сърцето на Тракийската долина. "
        "Градът съчетава историческо наследство с модерно развитие."
    ),
    "content": (
        "<h2>История на града</h2>\n"
        "<p>Пазарджик е основан през 1485 година и бързо се превръща във важен търговски център "
        "благодарение на местоположението си на пътя между Европа и Изтока.</p>\n"
        "<h2>Културно наследство</h2>\n"
        "<p>Днес градът е известен със своите музеи, галерии и културни институции.</p>\n"
        "<h2>Модерно развитие</h2>\n"
        "<p>Тракийската долина предлага отлични условия за земеделие, а градът се развива като "
        "център на хранително-вкусовата промишленост.</p>"
    ),
    "status": "published",
    "is_featured": True,
    "is_breaking": False,
    "meta_title": "Пазарджик – История, култура и развитие | PZ News",
    "meta_description": (
        "Разгледайте историята и съвременното развитие на Пазарджик, "
        "един от най-живописните градове в Тракийската долина."
    ),
    "meta_keywords": ["Пазарджик", "Тракийска долина", "история", "култура", "туризъм", "България"],
    "tags": DEMO_TAGS,
}

SEED_ACTOR = {"id": None, "role": "admin"}


async def _demo_user(db: AsyncSession) -> Tuple[User, bool]:
    user = await UserService.get_by_email(db, DEMO_EMAIL)
    if user:
        return user, False
    # the demo author is not meant to log in
    user = await UserService.create(db, {
        "email": DEMO_EMAIL,
        "password": secrets.token_urlsafe(24),
        "full_name": "Demo Author",
        "role": "author",
    })
    return user, True


async def _demo_category(db: AsyncSession, cache: Optional[TaggedCache]) -> Tuple[Category, bool]:
    result = await db.execute(
        select(Category)
        .where(Category.is_active.is_(True), Category.parent_id.is_(None))
        .order_by(Category.display_order, Category.id)
        .limit(1)
    )
    category = result.scalar_one_or_none()
    if category:
        return category, False
    return await CategoryService.create(db, cache, DEMO_CATEGORY, SEED_ACTOR), True


async def seed_demo(db: AsyncSession, cache: Optional[TaggedCache] = None) -> Dict[str, Any]:
    """
    Create the demo rows that are missing

    Returns:
        what was created, plus the ids and slugs involved
    """
    user, user_created = await _demo_user(db)
    category, category_created = await _demo_category(db, cache)

    article_slug = slugify(DEMO_TITLE)
    existing = (await db.execute(select(Article).where(Article.slug == article_slug))).scalar_one_or_none()
    if existing:
        logger.info(f"Demo article already exists: {existing.slug}")
        article, article_created = existing, False
    else:
        article = await ArticleService.create(
            db, cache, {**DEMO_ARTICLE, "category_id": category.id}, author_id=user.id,
        )
        article_created = True

    summary = {
        "user": user.email,
        "user_created": user_created,
        "category": category.slug,
        "category_created": category_created,
        "article": article.slug,
        "article_created": article_created,
        "tags": [slugify(name) for name in DEMO_TAGS],
    }
    logger.info(f"Seed finished: {summary}")
    return summary
