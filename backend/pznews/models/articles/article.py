"""
Article model - pz_ prefix
"""

from sqlalchemy import JSON, Column, Integer, String, Text, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func, expression
from pznews.db.database import Base

ARTICLE_STATUSES = ("draft", "published", "archived")


class Article(Base):
    """News article - pz_articles"""
    __tablename__ = "pz_articles"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    slug = Column(String(255), unique=True, index=True, nullable=False, comment="URL-safe identifier")
    title = Column(String(500), nullable=False)
    subtitle = Column(String(500), nullable=True)
    excerpt = Column(Text, nullable=True)
    content = Column(Text, nullable=False, comment="Rich HTML body")

    status = Column(String(20), nullable=False, default="draft", server_default="draft", index=True, comment="draft, published, archived")
    is_featured = Column(Boolean, nullable=False, default=False, server_default=expression.false())
    is_breaking = Column(Boolean, nullable=False, default=False, server_default=expression.false())

    category_id = Column(Integer, ForeignKey("pz_categories.id"), nullable=True, index=True)
    author_id = Column(Integer, ForeignKey("pz_users.id"), nullable=True, index=True)
    # RESTRICT lets the store arbitrate deletes of media still in use
    featured_image_id = Column(Integer, ForeignKey("pz_media.id", ondelete="RESTRICT"), nullable=True, index=True)

    view_count = Column(Integer, nullable=False, default=0, server_default="0")
    published_at = Column(DateTime(timezone=True), nullable=True, comment="Set once, on first publish")

    meta_title = Column(String(255), nullable=True)
    meta_description = Column(String(500), nullable=True)
    meta_keywords = Column(JSON, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    author = relationship("User", back_populates="articles", lazy="select")
    category = relationship("Category", back_populates="articles", lazy="select")
    featured_image = relationship("Media", back_populates="featured_in", lazy="select")
    tags = relationship("Tag", secondary="pz_article_tags", back_populates="articles", lazy="select")

    def __repr__(self):
        return f"<Article(id={self.id}, slug='{self.slug}', status='{self.status}')>"
