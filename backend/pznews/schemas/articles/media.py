"""
Media schemas
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from pznews.schemas.common import ORMModel, RequestModel


class MediaUpdate(RequestModel):
    title: Optional[str] = Field(None, max_length=255)
    alt_text: Optional[str] = Field(None, max_length=255)
    caption: Optional[str] = None


class MediaResponse(ORMModel):
    id: int
    file_name: str
    original_name: str
    storage_key: str
    bucket: str
    public_url: str
    mime_type: str
    file_size: int
    width: Optional[int] = None
    height: Optional[int] = None
    title: Optional[str] = None
    alt_text: Optional[str] = None
    caption: Optional[str] = None
    uploaded_by: Optional[int] = None
    created_at: datetime
    updated_at: datetime


class MediaStats(BaseModel):
    total_files: int = Field(0, alias="totalFiles")
    total_size: int = Field(0, alias="totalSize")
    total_size_mb: str = Field("0.00", alias="totalSizeMB")

    class Config:
        populate_by_name = True


class MediaDeleteResponse(BaseModel):
    success: bool = True
    storage_cleanup: str = Field("done", alias="storageCleanup",
                                 description="done, or pending when the object could not be removed")

    class Config:
        populate_by_name = True
