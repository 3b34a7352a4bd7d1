import pytest
from botocore.exceptions import ClientError

from pznews.core.exceptions import UpstreamFailure
from pznews.utils.storage import LocalObjectStorage, S3ObjectStorage


class FakeS3Client:
    def __init__(self, fail=False):
        self.fail = fail
        self.calls = []

    def put_object(self, **params):
        self.calls.append(("put", params))
        if self.fail:
            raise ClientError({"Error": {"Code": "500", "Message": "boom"}}, "PutObject")

    def delete_object(self, **params):
        self.calls.append(("delete", params))
        if self.fail:
            raise ClientError({"Error": {"Code": "500", "Message": "boom"}}, "DeleteObject")


async def test_local_put_and_delete(storage):
    url = await storage.put("uploads/a.webp", b"data", "image/webp")
    assert url == "https://images.test/uploads/a.webp"
    assert storage.exists("uploads/a.webp")

    await storage.delete("uploads/a.webp")
    assert not storage.exists("uploads/a.webp")
    # deleting a missing object is not an error
    await storage.delete("uploads/a.webp")


def test_local_rejects_path_traversal(tmp_path):
    storage = LocalObjectStorage(str(tmp_path))
    with pytest.raises(ValueError):
        storage.path_for("../outside.webp")


async def test_s3_put_sends_cache_headers():
    client = FakeS3Client()
    storage = S3ObjectStorage(bucket="pz-news-images", client=client)
    url = await storage.put("uploads/a.webp", b"data", "image/webp", cache_control="public, max-age=60")

    assert url == "https://images.test/uploads/a.webp"
    kind, params = client.calls[0]
    assert kind == "put"
    assert params["Bucket"] == "pz-news-images"
    assert params["ContentType"] == "image/webp"
    assert params["CacheControl"] == "public, max-age=60"


async def test_s3_failures_become_upstream_failures():
    storage = S3ObjectStorage(bucket="pz-news-images", client=FakeS3Client(fail=True))
    with pytest.raises(UpstreamFailure):
        await storage.put("uploads/a.webp", b"data", "image/webp")
    with pytest.raises(UpstreamFailure):
        await storage.delete("uploads/a.webp")
