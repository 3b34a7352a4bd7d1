"""
Tag service
Tags are identified by the slug of their name and created on first use.
"""

from typing import Dict, Iterable, List, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from pznews.core.exceptions import NotFound
from pznews.models.articles import Tag, article_tags
from pznews.utils.slug import slugify


class TagService:

    @staticmethod
    async def get_or_create_many(db: AsyncSession, names: Iterable[str]) -> List[Tag]:
        """Resolve names to Tag rows, adding the missing ones to the session (no commit)."""
        wanted: Dict[str, str] = {}
        for name in names:
            slug = slugify(name)
            if slug and slug not in wanted:
                wanted[slug] = name.strip()
        if not wanted:
            return []

        result = await db.execute(select(Tag).where(Tag.slug.in_(list(wanted))))
        existing = {tag.slug: tag for tag in result.scalars().all()}

        tags = []
        for slug, name in wanted.items():
            tag = existing.get(slug)
            if tag is None:
                tag = Tag(slug=slug, name=name)
                db.add(tag)
            tags.append(tag)
        return tags

    @staticmethod
    async def get_by_slug(db: AsyncSession, slug: str) -> Tag:
        result = await db.execute(select(Tag).where(Tag.slug == slug))
        tag = result.scalar_one_or_none()
        if not tag:
            raise NotFound("Tag not found")
        return tag

    @staticmethod
    async def list_tags(db: AsyncSession, search: Optional[str] = None, limit: int = 100) -> List[Dict]:
        """Tags with their article counts, most used first"""
        usage = func.count(article_tags.c.article_id)
        query = (
            select(Tag, usage.label("article_count"))
            .outerjoin(article_tags, article_tags.c.tag_id == Tag.id)
            .group_by(Tag.id)
            .order_by(usage.desc(), Tag.name)
            .limit(limit)
        )
        if search:
            query = query.where(Tag.slug.contains(slugify(search)))

        result = await db.execute(query)
        return [
            {"id": tag.id, "slug": tag.slug, "name": tag.name, "article_count": count}
            for tag, count in result.all()
        ]
