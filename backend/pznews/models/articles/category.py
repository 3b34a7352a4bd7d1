"""
Category model - pz_ prefix
"""

from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func, expression
from pznews.db.database import Base


class Category(Base):
    """Article category - pz_categories, one level of nesting via parent_id"""
    __tablename__ = "pz_categories"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    slug = Column(String(100), unique=True, index=True, nullable=False)
    name_bg = Column(String(255), nullable=False, comment="Bulgarian name")
    name_en = Column(String(255), nullable=True, comment="English name")
    description = Column(Text, nullable=True)
    # no cascade: children must be reassigned before the parent is deleted
    parent_id = Column(Integer, ForeignKey("pz_categories.id"), nullable=True, index=True)
    display_order = Column(Integer, nullable=False, default=0, server_default="0")
    is_active = Column(Boolean, nullable=False, default=True, server_default=expression.true())

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    articles = relationship("Article", back_populates="category", lazy="select")
    parent = relationship("Category", remote_side=[id], lazy="select")

    def __repr__(self):
        return f"<Category(id={self.id}, slug='{self.slug}')>"
