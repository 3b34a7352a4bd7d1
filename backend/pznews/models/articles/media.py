"""
Media model - pz_ prefix
Rows point at objects in the storage bucket; images are always stored as WebP.
"""

from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from pznews.db.database import Base


class Media(Base):
    """Uploaded image - pz_media"""
    __tablename__ = "pz_media"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    file_name = Column(String(255), nullable=False, comment="Stored file name")
    original_name = Column(String(255), nullable=False, comment="Client file name")
    storage_key = Column(String(500), unique=True, nullable=False, comment="Object key in the bucket")
    bucket = Column(String(255), nullable=False)
    public_url = Column(String(1000), nullable=False)
    mime_type = Column(String(100), nullable=False)
    file_size = Column(Integer, nullable=False, comment="Bytes after re-encoding")
    width = Column(Integer, nullable=True)
    height = Column(Integer, nullable=True)

    title = Column(String(255), nullable=True)
    alt_text = Column(String(255), nullable=True)
    caption = Column(Text, nullable=True)

    uploaded_by = Column(Integer, ForeignKey("pz_users.id"), nullable=True, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    uploader = relationship("User", back_populates="uploads", lazy="select")
    featured_in = relationship("Article", back_populates="featured_image", lazy="select", passive_deletes="all")

    def __repr__(self):
        return f"<Media(id={self.id}, key='{self.storage_key}')>"
