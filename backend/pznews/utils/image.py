"""
Upload image step
Checks the declared type and size, then decodes, bounds and re-encodes to WebP.
"""

import asyncio
import time
import uuid
from dataclasses import dataclass
from io import BytesIO
from typing import Optional

from PIL import Image, UnidentifiedImageError

from pznews.core.config import settings
from pznews.core.exceptions import ValidationError

ALLOWED_IMAGE_TYPES = ("image/jpeg", "image/jpg", "image/png", "image/webp")
OUTPUT_MIME_TYPE = "image/webp"


@dataclass
class ProcessedImage:
    data: bytes
    storage_key: str
    file_name: str
    content_type: str
    width: int
    height: int

    @property
    def size(self) -> int:
        return len(self.data)


def check_upload(declared_mime: Optional[str], declared_size: int) -> None:
    """Reject by declared type and size, before any bytes are decoded."""
    mime = (declared_mime or "").lower()
    if mime not in ALLOWED_IMAGE_TYPES:
        raise ValidationError(
            "Invalid file type",
            details=[{"field": "file", "message": f"Allowed types: {', '.join(ALLOWED_IMAGE_TYPES)}"}],
        )
    if declared_size > settings.MAX_UPLOAD_SIZE:
        limit_mb = settings.MAX_UPLOAD_SIZE // (1024 * 1024)
        raise ValidationError(
            "File too large",
            details=[{"field": "file", "message": f"Maximum size is {limit_mb}MB"}],
        )


def generate_storage_key(prefix: Optional[str] = None) -> str:
    """uploads/<epoch-ms>-<random>.webp"""
    prefix = (prefix or settings.UPLOAD_KEY_PREFIX).strip("/")
    return f"{prefix}/{int(time.time() * 1000)}-{uuid.uuid4().hex[:13]}.webp"


def _encode_webp(data: bytes) -> bytes:
    try:
        img = Image.open(BytesIO(data))
        img.load()
    except (UnidentifiedImageError, OSError, Image.DecompressionBombError) as e:
        raise ValidationError(
            "Invalid image",
            details=[{"field": "file", "message": f"Could not decode image: {e}"}],
        )

    if img.mode not in ("RGB", "RGBA"):
        img = img.convert("RGBA" if "A" in img.getbands() or img.mode == "P" else "RGB")

    # thumbnail keeps aspect ratio and never upscales
    max_dim = settings.IMAGE_MAX_DIMENSION
    img.thumbnail((max_dim, max_dim), Image.LANCZOS)

    buf = BytesIO()
    img.save(buf, format="WEBP", quality=settings.IMAGE_QUALITY)
    return buf.getvalue()


def process_image_bytes(data: bytes, declared_mime: Optional[str], declared_size: Optional[int] = None) -> ProcessedImage:
    """Run the whole image step synchronously; raises ValidationError on bad input."""
    check_upload(declared_mime, len(data) if declared_size is None else declared_size)

    output = _encode_webp(data)

    # dimensions come from the re-encoded bytes, not the source
    with Image.open(BytesIO(output)) as encoded:
        width, height = encoded.size

    key = generate_storage_key()
    return ProcessedImage(
        data=output,
        storage_key=key,
        file_name=key.rsplit("/", 1)[-1],
        content_type=OUTPUT_MIME_TYPE,
        width=width,
        height=height,
    )


async def process_upload(data: bytes, declared_mime: Optional[str], declared_size: Optional[int] = None) -> ProcessedImage:
    # decoding and encoding are CPU bound; keep them off the event loop
    check_upload(declared_mime, len(data) if declared_size is None else declared_size)
    return await asyncio.to_thread(process_image_bytes, data, declared_mime, declared_size)
