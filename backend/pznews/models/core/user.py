"""
User model - pz_ prefix
Roles: admin, editor, author
"""

from sqlalchemy import Column, Integer, String, Boolean, DateTime, func
from sqlalchemy.orm import relationship
from sqlalchemy.sql import expression
from pznews.db.database import Base

USER_ROLES = ("admin", "editor", "author")


class User(Base):
    """Newsroom account - pz_users"""
    __tablename__ = "pz_users"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    email = Column(String(255), unique=True, index=True, nullable=False, comment="Login email")
    hashed_password = Column(String(255), nullable=False, comment="bcrypt hash")
    full_name = Column(String(255), nullable=False, comment="Display name")
    role = Column(String(20), nullable=False, default="author", server_default="author", comment="admin, editor, author")
    avatar_url = Column(String(500), nullable=True)

    is_active = Column(Boolean, default=True, server_default=expression.true(), comment="Account enabled")

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    articles = relationship("Article", back_populates="author", lazy="select")
    uploads = relationship("Media", back_populates="uploader", lazy="select")

    def __repr__(self):
        return f"<User(id={self.id}, email='{self.email}', role='{self.role}')>"
