"""
Object storage adapter
Blobs are written under a key and served from a public URL base.
S3-compatible buckets (R2, MinIO, AWS) go through boto3; the local backend
writes into a directory for development and tests.
"""

import asyncio
import logging
import os
import tempfile
from pathlib import Path
from typing import Optional

import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError

from pznews.core.config import settings
from pznews.core.exceptions import UpstreamFailure

logger = logging.getLogger(__name__)


class ObjectStorage:
    """Interface shared by the storage backends"""

    bucket: str = ""

    def public_url(self, key: str) -> str:
        base = settings.STORAGE_PUBLIC_URL
        return f"{base}/{key}" if base else f"/{key}"

    async def put(self, key: str, data: bytes, content_type: str, cache_control: Optional[str] = None) -> str:
        raise NotImplementedError

    async def delete(self, key: str) -> None:
        raise NotImplementedError


class S3ObjectStorage(ObjectStorage):
    def __init__(self, bucket: Optional[str] = None, client=None):
        self.bucket = bucket or settings.S3_BUCKET_NAME
        self._client = client or boto3.client(
            "s3",
            endpoint_url=settings.S3_ENDPOINT_URL,
            aws_access_key_id=settings.S3_ACCESS_KEY_ID,
            aws_secret_access_key=settings.S3_SECRET_ACCESS_KEY,
            region_name=settings.S3_REGION,
            config=BotoConfig(retries={"max_attempts": 1}),
        )

    async def put(self, key: str, data: bytes, content_type: str, cache_control: Optional[str] = None) -> str:
        params = {
            "Bucket": self.bucket,
            "Key": key,
            "Body": data,
            "ContentType": content_type,
        }
        if cache_control:
            params["CacheControl"] = cache_control
        try:
            await asyncio.to_thread(self._client.put_object, **params)
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Storage upload failed for {key}: {e}")
            raise UpstreamFailure("Failed to upload file")
        return self.public_url(key)

    async def delete(self, key: str) -> None:
        try:
            await asyncio.to_thread(self._client.delete_object, Bucket=self.bucket, Key=key)
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Storage delete failed for {key}: {e}")
            raise UpstreamFailure("Failed to delete file")


class LocalObjectStorage(ObjectStorage):
    def __init__(self, root: Optional[str] = None):
        self.root = os.path.abspath(root or settings.LOCAL_STORAGE_DIR)
        self.bucket = "local"

    def path_for(self, key: str) -> str:
        abs_path = os.path.abspath(os.path.join(self.root, key))
        if not abs_path.startswith(self.root + os.sep):
            raise ValueError("invalid storage key")
        return abs_path

    def _write(self, key: str, data: bytes) -> None:
        abs_path = self.path_for(key)
        Path(os.path.dirname(abs_path)).mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(prefix="obj_", suffix=".tmp", dir=os.path.dirname(abs_path))
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
            os.replace(tmp_path, abs_path)
        finally:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)

    async def put(self, key: str, data: bytes, content_type: str, cache_control: Optional[str] = None) -> str:
        try:
            await asyncio.to_thread(self._write, key, data)
        except OSError as e:
            logger.error(f"Storage upload failed for {key}: {e}")
            raise UpstreamFailure("Failed to upload file")
        return self.public_url(key)

    async def delete(self, key: str) -> None:
        try:
            await asyncio.to_thread(os.remove, self.path_for(key))
        except FileNotFoundError:
            return
        except OSError as e:
            logger.error(f"Storage delete failed for {key}: {e}")
            raise UpstreamFailure("Failed to delete file")

    def exists(self, key: str) -> bool:
        return os.path.exists(self.path_for(key))


_storage: Optional[ObjectStorage] = None


def get_storage() -> ObjectStorage:
    """Process-wide storage backend, chosen by STORAGE_BACKEND."""
    global _storage
    if _storage is None:
        if settings.STORAGE_BACKEND.lower() == "local":
            _storage = LocalObjectStorage()
        else:
            _storage = S3ObjectStorage()
    return _storage
