from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Table, func
from sqlalchemy.orm import relationship

from pznews.db.database import Base


article_tags = Table(
    "pz_article_tags",
    Base.metadata,
    Column("article_id", Integer, ForeignKey("pz_articles.id", ondelete="CASCADE"), primary_key=True),
    Column("tag_id", Integer, ForeignKey("pz_tags.id", ondelete="CASCADE"), primary_key=True),
)


class Tag(Base):
    """Free-form article label - pz_tags, identified by slug"""
    __tablename__ = "pz_tags"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    slug = Column(String(255), unique=True, index=True, nullable=False)
    name = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    articles = relationship("Article", secondary=article_tags, back_populates="tags", lazy="select")

    def __repr__(self):
        return f"<Tag(id={self.id}, slug='{self.slug}')>"
