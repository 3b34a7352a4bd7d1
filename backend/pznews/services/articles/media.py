"""
Media service - upload pipeline and media library
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Union

from loguru import logger
from sqlalchemy import func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from pznews.core.config import settings
from pznews.core.exceptions import Conflict, NotFound, PZNewsException, UpstreamFailure
from pznews.core.permissions import ensure_can_delete_media, ensure_can_edit_media
from pznews.models.articles import Article, Media
from pznews.schemas.articles import MediaUpdate
from pznews.services.base import commit_or_raise, like_pattern
from pznews.utils.cache import CacheTags, TaggedCache
from pznews.utils.image import process_upload
from pznews.utils.storage import ObjectStorage
from pznews.utils.validation import ensure_model


@dataclass
class IncomingFile:
    """One uploaded file as received from the client"""
    filename: str
    content_type: Optional[str]
    data: bytes
    size: Optional[int] = None

    @property
    def declared_size(self) -> int:
        return self.size if self.size is not None else len(self.data)


class MediaService:

    @staticmethod
    async def upload_image(
        db: AsyncSession,
        cache: Optional[TaggedCache],
        storage: ObjectStorage,
        upload: IncomingFile,
        uploaded_by: Optional[int],
        alt_text: Optional[str] = None,
        caption: Optional[str] = None,
    ) -> Media:
        """
        Validate, re-encode, store and record one image

        Single attempt. When the row cannot be written after the object was
        stored, the object is removed best-effort and the failure propagates.
        """
        processed = await process_upload(upload.data, upload.content_type, upload.declared_size)

        public_url = await storage.put(
            processed.storage_key,
            processed.data,
            processed.content_type,
            cache_control=settings.UPLOAD_CACHE_CONTROL,
        )

        media = Media(
            file_name=processed.file_name,
            original_name=(upload.filename or processed.file_name)[:255],
            storage_key=processed.storage_key,
            bucket=storage.bucket,
            public_url=public_url,
            mime_type=processed.content_type,
            file_size=processed.size,
            width=processed.width,
            height=processed.height,
            alt_text=alt_text,
            caption=caption,
            uploaded_by=uploaded_by,
        )
        db.add(media)
        try:
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error(f"Media record insert failed for {processed.storage_key}: {e}")
            try:
                await storage.delete(processed.storage_key)
            except PZNewsException:
                logger.warning(f"Orphaned storage object left behind: {processed.storage_key}")
            raise UpstreamFailure("Failed to save media record")

        logger.info(f"Media uploaded: id={media.id} key={processed.storage_key} size={processed.size}")
        if cache:
            await cache.invalidate([CacheTags.MEDIA])
        return await MediaService.get_by_id(db, media.id)

    @staticmethod
    async def upload_batch(
        db: AsyncSession,
        cache: Optional[TaggedCache],
        storage: ObjectStorage,
        uploads: List[IncomingFile],
        uploaded_by: Optional[int],
    ) -> Dict[str, Any]:
        """Run the single-file pipeline per file; one failure never sinks the batch."""
        media: List[Media] = []
        errors: List[Dict[str, str]] = []
        for upload in uploads:
            try:
                media.append(await MediaService.upload_image(db, cache, storage, upload, uploaded_by))
            except PZNewsException as e:
                logger.warning(f"Batch upload rejected {upload.filename}: {e.message}")
                errors.append({"file": upload.filename, "error": e.message})
        return {"media": media, "errors": errors}

    @staticmethod
    async def get_by_id(db: AsyncSession, media_id: int) -> Media:
        result = await db.execute(
            select(Media).where(Media.id == media_id).execution_options(populate_existing=True)
        )
        media = result.scalar_one_or_none()
        if not media:
            raise NotFound("Media not found")
        return media

    @staticmethod
    async def list_media(
        db: AsyncSession,
        uploaded_by: Optional[int] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> Dict[str, Any]:
        query = select(Media)
        if uploaded_by:
            query = query.where(Media.uploaded_by == uploaded_by)

        count = (await db.execute(select(func.count()).select_from(query.subquery()))).scalar() or 0
        result = await db.execute(
            query.order_by(Media.created_at.desc(), Media.id.desc()).offset(offset).limit(limit)
        )
        return {"data": list(result.scalars().all()), "count": count, "has_more": offset + limit < count}

    @staticmethod
    async def update(
        db: AsyncSession,
        cache: Optional[TaggedCache],
        media_id: int,
        data: Union[MediaUpdate, Mapping[str, Any]],
        current_user: Dict[str, Any],
    ) -> Media:
        data = ensure_model(MediaUpdate, data)
        media = await MediaService.get_by_id(db, media_id)
        ensure_can_edit_media(current_user, media)

        for field, value in data.model_dump(exclude_unset=True).items():
            setattr(media, field, value)

        await commit_or_raise(db, "Media could not be updated", "Failed to update media",
                              context=f"update media {media_id}")
        if cache:
            # featured images are embedded in cached article payloads
            await cache.invalidate([CacheTags.MEDIA, CacheTags.ARTICLES])
        return await MediaService.get_by_id(db, media_id)

    @staticmethod
    async def delete(
        db: AsyncSession,
        cache: Optional[TaggedCache],
        storage: ObjectStorage,
        media_id: int,
        current_user: Dict[str, Any],
    ) -> str:
        """
        Delete the row, then the stored object

        Returns:
            "done", or "pending" when the object could not be removed
        """
        media = await MediaService.get_by_id(db, media_id)
        ensure_can_delete_media(current_user, media)

        in_use = (await db.execute(
            select(func.count(Article.id)).where(Article.featured_image_id == media_id)
        )).scalar() or 0
        if in_use:
            raise Conflict("Media is used as a featured image and cannot be deleted")

        storage_key = media.storage_key
        await db.delete(media)
        await commit_or_raise(db, "Media is used as a featured image and cannot be deleted",
                              "Failed to delete media", context=f"delete media {media_id}")
        logger.info(f"Media deleted: id={media_id} key={storage_key}")

        cleanup = "done"
        try:
            await storage.delete(storage_key)
        except PZNewsException:
            cleanup = "pending"
            logger.warning(f"Storage cleanup pending for {storage_key}")

        if cache:
            await cache.invalidate([CacheTags.MEDIA])
        return cleanup

    @staticmethod
    async def stats(db: AsyncSession, uploaded_by: Optional[int] = None) -> Dict[str, Any]:
        query = select(func.count(Media.id), func.coalesce(func.sum(Media.file_size), 0))
        if uploaded_by:
            query = query.where(Media.uploaded_by == uploaded_by)
        total_files, total_size = (await db.execute(query)).one()
        total_size = int(total_size or 0)
        return {
            "total_files": int(total_files or 0),
            "total_size": total_size,
            "total_size_mb": f"{total_size / (1024 * 1024):.2f}",
        }

    @staticmethod
    async def search(db: AsyncSession, term: str, limit: int = 20) -> List[Media]:
        pattern = like_pattern((term or "").strip())
        result = await db.execute(
            select(Media)
            .where(or_(
                Media.file_name.ilike(pattern, escape="\\"),
                Media.original_name.ilike(pattern, escape="\\"),
                Media.title.ilike(pattern, escape="\\"),
                Media.alt_text.ilike(pattern, escape="\\"),
                Media.caption.ilike(pattern, escape="\\"),
            ))
            .order_by(Media.created_at.desc(), Media.id.desc())
            .limit(limit)
        )
        return list(result.scalars().all())
