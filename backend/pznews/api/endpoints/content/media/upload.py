"""
Upload endpoints
POST: one file in the `file` field; PUT: several files in the `files` field.
Both run the same per-file pipeline.
"""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from pznews.api.utils import dump
from pznews.core.deps import get_cache, get_current_user, get_storage
from pznews.core.exceptions import ValidationError
from pznews.db.database import get_db
from pznews.schemas.articles import MediaResponse
from pznews.services.articles import IncomingFile, MediaService
from pznews.utils.cache import TaggedCache
from pznews.utils.storage import ObjectStorage

router = APIRouter()


async def _read(upload: UploadFile) -> IncomingFile:
    data = await upload.read()
    return IncomingFile(
        filename=upload.filename or "upload",
        content_type=upload.content_type,
        data=data,
        size=upload.size if upload.size is not None else len(data),
    )


@router.post("")
async def upload_file(
    file: Optional[UploadFile] = File(None),
    alt_text: Optional[str] = Form(None, alias="altText", max_length=255),
    caption: Optional[str] = Form(None),
    db: AsyncSession = Depends(get_db),
    cache: TaggedCache = Depends(get_cache),
    storage: ObjectStorage = Depends(get_storage),
    current_user: Dict[str, Any] = Depends(get_current_user),
) -> Dict[str, Any]:
    if file is None:
        raise ValidationError("No file provided", details=[{"field": "file", "message": "File is required"}])

    media = await MediaService.upload_image(
        db, cache, storage, await _read(file), current_user["id"], alt_text=alt_text, caption=caption,
    )
    return {"success": True, "media": dump(MediaResponse, media), "url": media.public_url}


@router.put("")
async def upload_files(
    files: Optional[List[UploadFile]] = File(None),
    db: AsyncSession = Depends(get_db),
    cache: TaggedCache = Depends(get_cache),
    storage: ObjectStorage = Depends(get_storage),
    current_user: Dict[str, Any] = Depends(get_current_user),
) -> Dict[str, Any]:
    if not files:
        raise ValidationError("No files provided", details=[{"field": "files", "message": "At least one file is required"}])

    incoming = [await _read(f) for f in files]
    result = await MediaService.upload_batch(db, cache, storage, incoming, current_user["id"])

    response = {
        "success": True,
        "uploaded": len(result["media"]),
        "total": len(incoming),
        "media": [dump(MediaResponse, m) for m in result["media"]],
    }
    if result["errors"]:
        response["errors"] = result["errors"]
    return response
