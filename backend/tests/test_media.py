import os

import pytest
from PIL import Image

from pznews.core.config import settings
from pznews.core.exceptions import Conflict, PermissionDenied, UpstreamFailure, ValidationError
from pznews.models import Media
from pznews.services.articles import ArticleService, IncomingFile, MediaService
from pznews.utils.storage import LocalObjectStorage

from conftest import ARTICLE_BODY, auth_headers, make_image


def _png(name="photo.png", size=(40, 30)):
    data = make_image("PNG", size)
    return IncomingFile(filename=name, content_type="image/png", data=data)


class BrokenDeleteStorage(LocalObjectStorage):
    async def delete(self, key):
        raise UpstreamFailure("Failed to delete file")


async def test_upload_stores_webp_and_records_row(db, cache, storage, author):
    media = await MediaService.upload_image(db, cache, storage, _png(), author["id"], alt_text="Площад")
    assert media.mime_type == "image/webp"
    assert media.original_name == "photo.png"
    assert media.file_name.endswith(".webp")
    assert media.bucket == "local"
    assert media.public_url == f"https://images.test/{media.storage_key}"
    assert (media.width, media.height) == (40, 30)
    assert media.alt_text == "Площад"
    assert storage.exists(media.storage_key)


async def test_rejected_upload_stores_nothing(db, cache, storage, author):
    upload = IncomingFile(filename="anim.gif", content_type="image/gif", data=b"GIF89a")
    with pytest.raises(ValidationError):
        await MediaService.upload_image(db, cache, storage, upload, author["id"])
    assert (await MediaService.list_media(db))["count"] == 0


async def test_oversize_upload_is_rejected_before_decoding(db, cache, storage, author, monkeypatch):
    def fail_open(*args, **kwargs):
        raise AssertionError("image decoded")

    monkeypatch.setattr(Image, "open", fail_open)
    upload = IncomingFile(
        filename="huge.png", content_type="image/png", data=b"not an image at all",
        size=settings.MAX_UPLOAD_SIZE + 1,
    )
    with pytest.raises(ValidationError) as exc:
        await MediaService.upload_image(db, cache, storage, upload, author["id"])

    assert exc.value.message == "File too large"
    assert (await MediaService.list_media(db))["count"] == 0
    assert not os.path.exists(storage.root) or os.listdir(storage.root) == []


async def test_batch_reports_failures_per_file(db, cache, storage, author):
    uploads = [
        _png("one.png"),
        IncomingFile(filename="notes.txt", content_type="text/plain", data=b"hello"),
        IncomingFile(filename="broken.png", content_type="image/png", data=b"not really a png"),
        _png("two.png"),
    ]
    result = await MediaService.upload_batch(db, cache, storage, uploads, author["id"])
    assert [m.original_name for m in result["media"]] == ["one.png", "two.png"]
    assert result["errors"] == [
        {"file": "notes.txt", "error": "Invalid file type"},
        {"file": "broken.png", "error": "Invalid image"},
    ]


async def test_delete_rules(db, cache, storage, author, other_author, admin):
    media = await MediaService.upload_image(db, cache, storage, _png(), author["id"])

    with pytest.raises(PermissionDenied):
        await MediaService.delete(db, cache, storage, media.id, other_author)

    assert await MediaService.delete(db, cache, storage, media.id, author) == "done"
    assert not storage.exists(media.storage_key)
    assert await db.get(Media, media.id) is None

    other = await MediaService.upload_image(db, cache, storage, _png(), other_author["id"])
    assert await MediaService.delete(db, cache, storage, other.id, admin) == "done"


async def test_featured_image_cannot_be_deleted(db, cache, storage, author):
    media = await MediaService.upload_image(db, cache, storage, _png(), author["id"])
    await ArticleService.create(
        db, cache,
        {"title": "Мач в Пазарджик", "content": ARTICLE_BODY, "featured_image_id": media.id},
        author_id=author["id"],
    )
    with pytest.raises(Conflict):
        await MediaService.delete(db, cache, storage, media.id, author)
    assert storage.exists(media.storage_key)


async def test_storage_failure_leaves_cleanup_pending(db, cache, tmp_path, author):
    storage = BrokenDeleteStorage(str(tmp_path / "broken"))
    media = await MediaService.upload_image(db, cache, storage, _png(), author["id"])
    assert await MediaService.delete(db, cache, storage, media.id, author) == "pending"
    assert await db.get(Media, media.id) is None


async def test_stats_and_search(db, cache, storage, author, other_author):
    first = await MediaService.upload_image(db, cache, storage, _png("city-hall.png"), author["id"])
    await MediaService.upload_image(db, cache, storage, _png("river.png"), other_author["id"])
    await MediaService.update(db, cache, first.id, {"title": "Town hall at night"}, author)

    stats = await MediaService.stats(db)
    assert stats["total_files"] == 2
    assert stats["total_size"] > 0
    assert stats["total_size_mb"] == f"{stats['total_size'] / (1024 * 1024):.2f}"

    mine = await MediaService.stats(db, uploaded_by=author["id"])
    assert mine["total_files"] == 1

    assert [m.id for m in await MediaService.search(db, "town hall")] == [first.id]
    assert [m.original_name for m in await MediaService.search(db, "river")] == ["river.png"]


async def test_editor_can_edit_but_author_only_own(db, cache, storage, author, other_author, editor):
    media = await MediaService.upload_image(db, cache, storage, _png(), author["id"])
    with pytest.raises(PermissionDenied):
        await MediaService.update(db, cache, media.id, {"caption": "x"}, other_author)
    updated = await MediaService.update(db, cache, media.id, {"altText": "Мост"}, editor)
    assert updated.alt_text == "Мост"


async def test_single_upload_endpoint(client, author):
    response = await client.post(
        "/api/upload",
        files={"file": ("square.jpg", make_image("JPEG"), "image/jpeg")},
        data={"altText": "Център", "caption": "Главната улица"},
        headers=auth_headers(author),
    )
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["url"] == body["media"]["public_url"]
    assert body["media"]["mime_type"] == "image/webp"
    assert body["media"]["alt_text"] == "Център"


async def test_upload_requires_auth_and_file(client, author):
    response = await client.post("/api/upload", files={"file": ("a.png", make_image(), "image/png")})
    assert response.status_code == 401

    response = await client.post("/api/upload", data={"altText": "x"}, headers=auth_headers(author))
    assert response.status_code == 400
    assert response.json()["error"] == "No file provided"


async def test_upload_endpoint_rejects_wrong_type(client, author):
    response = await client.post(
        "/api/upload",
        files={"file": ("doc.pdf", b"%PDF-1.4", "application/pdf")},
        headers=auth_headers(author),
    )
    assert response.status_code == 400
    assert response.json()["error"] == "Invalid file type"


async def test_batch_upload_endpoint(client, author):
    response = await client.put(
        "/api/upload",
        files=[
            ("files", ("a.png", make_image(), "image/png")),
            ("files", ("b.txt", b"text", "text/plain")),
        ],
        headers=auth_headers(author),
    )
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["uploaded"] == 1
    assert body["total"] == 2
    assert body["errors"] == [{"file": "b.txt", "error": "Invalid file type"}]


async def test_media_library_endpoints(client, author):
    headers = auth_headers(author)
    uploaded = (await client.post(
        "/api/upload", files={"file": ("a.png", make_image(), "image/png")}, headers=headers,
    )).json()["media"]

    listing = (await client.get("/api/media", headers=headers)).json()
    assert listing["count"] == 1
    assert listing["hasMore"] is False

    stats = (await client.get("/api/media/stats", headers=headers)).json()
    assert stats["totalFiles"] == 1

    patched = await client.patch(f"/api/media/{uploaded['id']}", json={"title": "Sunrise"}, headers=headers)
    assert patched.json()["title"] == "Sunrise"

    found = (await client.get("/api/media/search", params={"q": "sunrise"}, headers=headers)).json()
    assert [m["id"] for m in found["data"]] == [uploaded["id"]]

    deleted = await client.delete(f"/api/media/{uploaded['id']}", headers=headers)
    assert deleted.json() == {"success": True, "storageCleanup": "done"}
    assert (await client.get(f"/api/media/{uploaded['id']}", headers=headers)).status_code == 404
