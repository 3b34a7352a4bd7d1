"""
Sitemap endpoint
Home, active categories and published articles as sitemaps.org XML
"""

from datetime import datetime, timezone
from typing import Optional
from xml.etree import ElementTree as ET

from fastapi import APIRouter, Depends, Response
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from pznews.core.config import settings
from pznews.db.database import get_db
from pznews.models.articles import Article, Category

router = APIRouter()

SITEMAP_NS = "http://www.sitemaps.org/schemas/sitemap/0.9"
STATIC_PAGES = (("", "hourly", "1.0"), ("/about", "monthly", "0.5"), ("/contact", "monthly", "0.5"))


def _add_url(root: ET.Element, loc: str, lastmod: Optional[datetime], changefreq: str, priority: str) -> None:
    url = ET.SubElement(root, "url")
    ET.SubElement(url, "loc").text = loc
    if lastmod is not None:
        ET.SubElement(url, "lastmod").text = lastmod.date().isoformat()
    ET.SubElement(url, "changefreq").text = changefreq
    ET.SubElement(url, "priority").text = priority


@router.get("/sitemap.xml", response_class=Response)
async def sitemap(db: AsyncSession = Depends(get_db)) -> Response:
    base_url = settings.SITE_URL
    root = ET.Element("urlset", xmlns=SITEMAP_NS)

    now = datetime.now(timezone.utc)
    for path, changefreq, priority in STATIC_PAGES:
        _add_url(root, f"{base_url}{path}", now, changefreq, priority)

    categories = (await db.execute(
        select(Category.slug, Category.updated_at).where(Category.is_active.is_(True)).order_by(Category.display_order)
    )).all()
    for slug, updated_at in categories:
        _add_url(root, f"{base_url}/{slug}", updated_at, "daily", "0.8")

    articles = (await db.execute(
        select(Article.slug, Article.updated_at, Category.slug)
        .outerjoin(Category, Article.category_id == Category.id)
        .where(Article.status == "published")
        .order_by(Article.updated_at.desc())
    )).all()
    for slug, updated_at, category_slug in articles:
        # uncategorised articles live under /news
        _add_url(root, f"{base_url}/{category_slug or 'news'}/{slug}", updated_at, "weekly", "0.7")

    body = ET.tostring(root, encoding="utf-8", xml_declaration=True)
    return Response(content=body, media_type="application/xml")
