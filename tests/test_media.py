from datetime import datetime, timezone

import boto3
import pytest
from botocore.stub import ANY, Stubber

from app.domain import BatchProgress, NotFoundError, PartialBatchFailureError, StoreUnavailableError
from app.services.media import MediaManager
from app.stores import LocalBlobStore, S3BlobStore
from app.stores.interfaces import BlobStore

NOW = datetime(2030, 6, 1, 12, 0, tzinfo=timezone.utc)
MILLIS = int(NOW.timestamp() * 1000)


class RecordingBlobStore(BlobStore):
    """In-memory blob store that can be told to fail on specific keys or URLs."""

    def __init__(self, failing=()):
        self.failing = set(failing)
        self.objects = {}
        self.calls = []

    async def put(self, key, data, content_type="image/jpeg"):
        self.calls.append(("put", key))
        if key in self.failing:
            raise StoreUnavailableError("Image upload failed")
        url = f"https://cdn.example.com/{key}"
        self.objects[url] = data
        return url

    async def delete(self, url):
        self.calls.append(("delete", url))
        if url in self.failing:
            raise StoreUnavailableError("Image delete failed")
        if url not in self.objects:
            raise NotFoundError("Image", url)
        del self.objects[url]


def _manager(store, **kwargs):
    return MediaManager(store, clock=lambda: NOW, **kwargs)


def test_image_key_format():
    manager = _manager(RecordingBlobStore(), prefix="/event_images/")

    assert manager.image_key("ev1", 3) == f"event_images/ev1_image_3_{MILLIS}.jpg"


@pytest.mark.anyio
async def test_upload_returns_urls_in_input_order(tmp_path):
    store = RecordingBlobStore()
    image_file = tmp_path / "poster.jpg"
    image_file.write_bytes(b"from-disk")

    result = await _manager(store).upload_event_images([b"first", str(image_file)], "ev1")

    assert result.value == [
        f"https://cdn.example.com/event_images/ev1_image_0_{MILLIS}.jpg",
        f"https://cdn.example.com/event_images/ev1_image_1_{MILLIS}.jpg",
    ]
    assert store.objects[result.value[1]] == b"from-disk"


@pytest.mark.anyio
async def test_upload_failure_on_first_image_returns_cause():
    store = RecordingBlobStore(failing={f"event_images/ev1_image_0_{MILLIS}.jpg"})

    result = await _manager(store).upload_event_images([b"a", b"b"], "ev1")

    assert isinstance(result.error, StoreUnavailableError)
    assert [call for call, _ in store.calls] == ["put"]


@pytest.mark.anyio
async def test_upload_stops_after_first_failure_and_reports_progress():
    store = RecordingBlobStore(failing={f"event_images/ev1_image_1_{MILLIS}.jpg"})

    result = await _manager(store).upload_event_images([b"a", b"b", b"c"], "ev1")

    error = result.error
    assert isinstance(error, PartialBatchFailureError)
    assert error.progress.completed == [f"https://cdn.example.com/event_images/ev1_image_0_{MILLIS}.jpg"]
    assert error.progress.failed == "image 1"
    assert error.progress.remaining == ["image 2"]
    assert error.progress.rolled_back == []
    assert len(store.calls) == 2
    assert len(store.objects) == 1


@pytest.mark.anyio
async def test_upload_rollback_deletes_completed_images():
    store = RecordingBlobStore(failing={f"event_images/ev1_image_1_{MILLIS}.jpg"})

    result = await _manager(store, rollback_on_failure=True).upload_event_images([b"a", b"b"], "ev1")

    assert result.error.progress.rolled_back == [
        f"https://cdn.example.com/event_images/ev1_image_0_{MILLIS}.jpg"
    ]
    assert store.objects == {}


@pytest.mark.anyio
async def test_unreadable_source_is_reported(tmp_path):
    result = await _manager(RecordingBlobStore()).upload_event_image(
        tmp_path / "missing.jpg", "ev1", 0
    )

    assert isinstance(result.error, StoreUnavailableError)


@pytest.mark.anyio
async def test_delete_batch_stops_at_first_failure():
    url1, url2, url3 = (f"https://cdn.example.com/img{i}.jpg" for i in (1, 2, 3))
    store = RecordingBlobStore(failing={url2})
    store.objects = {url1: b"1", url2: b"2", url3: b"3"}

    result = await _manager(store).delete_event_images([url1, url2, url3])

    error = result.error
    assert isinstance(error, PartialBatchFailureError)
    assert error.progress.completed == [url1]
    assert error.progress.failed == url2
    assert error.progress.remaining == [url3]
    assert ("delete", url3) not in store.calls
    assert set(store.objects) == {url2, url3}
    assert error.to_detail()["remaining"] == [url3]


@pytest.mark.anyio
async def test_delete_missing_image_is_not_found():
    result = await _manager(RecordingBlobStore()).delete_event_image("https://cdn.example.com/x.jpg")

    assert isinstance(result.error, NotFoundError)


@pytest.mark.anyio
async def test_delete_empty_batch_succeeds():
    assert (await _manager(RecordingBlobStore()).delete_event_images([])).ok


@pytest.mark.anyio
async def test_s3_blob_store_put_and_delete():
    client = boto3.client(
        "s3",
        region_name="us-east-1",
        aws_access_key_id="testing",
        aws_secret_access_key="testing",
    )
    store = S3BlobStore("event-media", region="us-east-1", client=client)
    key = "event_images/ev1_image_0_1.jpg"

    with Stubber(client) as stubber:
        stubber.add_response(
            "put_object",
            {},
            {"Bucket": "event-media", "Key": key, "Body": ANY, "ContentType": "image/jpeg"},
        )
        stubber.add_response("delete_object", {}, {"Bucket": "event-media", "Key": key})

        url = await store.put(key, b"img")
        await store.delete(url)

        stubber.assert_no_pending_responses()

    assert url == f"https://event-media.s3.us-east-1.amazonaws.com/{key}"


@pytest.mark.anyio
async def test_s3_blob_store_maps_client_errors():
    client = boto3.client(
        "s3",
        region_name="us-east-1",
        aws_access_key_id="testing",
        aws_secret_access_key="testing",
    )
    store = S3BlobStore("event-media", client=client)

    with Stubber(client) as stubber:
        stubber.add_client_error("put_object", service_error_code="AccessDenied", http_status_code=403)

        with pytest.raises(StoreUnavailableError):
            await store.put("k.jpg", b"img")


def test_s3_key_for_rejects_foreign_urls():
    store = S3BlobStore("event-media", client=object(), public_base_url="https://media.example.com")

    assert store.key_for("https://media.example.com/a%20b.jpg") == "a b.jpg"
    assert store.key_for("s3://event-media/event_images/a.jpg") == "event_images/a.jpg"
    with pytest.raises(NotFoundError):
        store.key_for("https://elsewhere.example.com/a.jpg")


@pytest.mark.anyio
async def test_local_blob_store(tmp_path):
    store = LocalBlobStore(tmp_path, "http://localhost:8000/media/")

    url = await store.put("event_images/ev1_image_0_1.jpg", b"img")

    assert url == "http://localhost:8000/media/event_images/ev1_image_0_1.jpg"
    assert (tmp_path / "event_images" / "ev1_image_0_1.jpg").read_bytes() == b"img"

    await store.delete(url)
    assert not (tmp_path / "event_images" / "ev1_image_0_1.jpg").exists()
    with pytest.raises(NotFoundError):
        await store.delete(url)
    with pytest.raises(NotFoundError):
        await store.delete("http://localhost:8000/media/../outside.jpg")


def test_batch_progress_is_partial_only_after_some_success():
    assert not BatchProgress(failed="a", remaining=["b"]).is_partial
    assert not BatchProgress(completed=["a"]).is_partial
    assert BatchProgress(completed=["a"], failed="b").is_partial
