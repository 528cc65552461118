from datetime import datetime, timedelta, timezone

import pytest

from app.domain import (
    EventCategory,
    EventStatus,
    NotFoundError,
    PartialBatchFailureError,
    StoreUnavailableError,
    ValidationFailedError,
)
from app.repositories import EventRepository
from app.services.media import MediaManager
from app.stores.interfaces import BlobStore, DocumentStore


class UnavailableStore(DocumentStore):
    async def insert(self, collection, data):
        raise StoreUnavailableError("Document store unavailable")

    async def get(self, collection, doc_id):
        raise StoreUnavailableError("Document store unavailable")

    async def set(self, collection, doc_id, data):
        raise StoreUnavailableError("Document store unavailable")

    async def delete(self, collection, doc_id):
        raise StoreUnavailableError("Document store unavailable")

    async def query(self, collection, query):
        raise StoreUnavailableError("Document store unavailable")

    async def count(self, collection, query=None):
        raise StoreUnavailableError("Document store unavailable")

    async def batch_update(self, collection, doc_ids, fields):
        raise StoreUnavailableError("Document store unavailable")


class MemoryBlobStore(BlobStore):
    def __init__(self, fail_on_put=None):
        self.objects = {}
        self.fail_on_put = fail_on_put
        self.puts = 0

    async def put(self, key, data, content_type="image/jpeg"):
        self.puts += 1
        if self.fail_on_put == self.puts:
            raise StoreUnavailableError("Image upload failed")
        self.objects[key] = data
        return f"https://cdn.example.com/{key}"

    async def delete(self, url):
        self.objects.pop(url.removeprefix("https://cdn.example.com/"), None)


def _at(day: int) -> datetime:
    return datetime(2030, 5, day, tzinfo=timezone.utc)


@pytest.mark.anyio
async def test_create_then_get(repository, make_event):
    created = await repository.create(make_event())

    assert created.ok
    found = (await repository.get_by_id(created.value)).unwrap()
    assert found.id == created.value
    assert found.name == "Jazz Night"
    assert found.category == "MUSICAL"


@pytest.mark.anyio
async def test_get_missing_returns_none(repository):
    result = await repository.get_by_id("nope")

    assert result.ok
    assert result.value is None


@pytest.mark.anyio
async def test_update_replaces_document_and_refreshes_updated_at(repository, make_event, fixed_now):
    event_id = (await repository.create(make_event(updated_at=_at(1)))).unwrap()

    result = await repository.update(event_id, make_event(name="Jazz Night II", updated_at=_at(1)))

    assert result.ok
    stored = (await repository.get_by_id(event_id)).unwrap()
    assert stored.name == "Jazz Night II"
    assert stored.updated_at == fixed_now


@pytest.mark.anyio
async def test_delete_removes_document(repository, make_event):
    event_id = (await repository.create(make_event())).unwrap()

    assert (await repository.delete(event_id)).ok
    assert (await repository.get_by_id(event_id)).value is None


@pytest.mark.anyio
async def test_duplicate_copies_fields_under_a_new_id(repository, make_event):
    source_id = (await repository.create(make_event(tags=["jazz"]))).unwrap()

    copy_id = (await repository.duplicate(source_id)).unwrap()

    assert copy_id != source_id
    source = (await repository.get_by_id(source_id)).unwrap()
    copy = (await repository.get_by_id(copy_id)).unwrap()
    assert copy.model_dump(exclude={"id"}) == source.model_dump(exclude={"id"})


@pytest.mark.anyio
async def test_duplicate_missing_event_is_not_found(repository):
    result = await repository.duplicate("missing")

    assert not result.ok
    assert isinstance(result.error, NotFoundError)
    assert await repository.store.count(repository.collection) == 0


@pytest.mark.anyio
async def test_get_all_newest_first(repository, make_event):
    for day, name in [(2, "middle"), (3, "newest"), (1, "oldest")]:
        await repository.create(make_event(name=name, created_at=_at(day)))

    events = (await repository.get_all()).unwrap()

    assert [e.name for e in events] == ["newest", "middle", "oldest"]


@pytest.mark.anyio
async def test_get_by_category_ordered_by_date(repository, make_event):
    await repository.create(make_event(name="late", date=datetime(2030, 9, 1, tzinfo=timezone.utc)))
    await repository.create(make_event(name="early", date=datetime(2030, 7, 1, tzinfo=timezone.utc)))
    await repository.create(make_event(name="match", category="SPORTS"))

    musical = (await repository.get_by_category(EventCategory.MUSICAL)).unwrap()
    sports = (await repository.get_by_category("SPORTS")).unwrap()

    assert [e.name for e in musical] == ["early", "late"]
    assert [e.name for e in sports] == ["match"]


@pytest.mark.anyio
async def test_get_by_status(repository, make_event):
    await repository.create(make_event(name="live", created_at=_at(1)))
    await repository.create(make_event(name="off", status=EventStatus.INACTIVE))
    await repository.create(make_event(name="live too", created_at=_at(2)))

    active = (await repository.get_by_status(EventStatus.ACTIVE)).unwrap()

    assert [e.name for e in active] == ["live too", "live"]


@pytest.mark.anyio
async def test_search_by_name_prefix(repository, make_event):
    for name in ["Jazz Night", "Smooth Jazz", "jazz brunch", "Jazzfest"]:
        await repository.create(make_event(name=name))

    found = (await repository.search_by_name_prefix("Jazz")).unwrap()

    assert [e.name for e in found] == ["Jazz Night", "Jazzfest"]


@pytest.mark.anyio
async def test_analytics_counts(repository, make_event, fixed_now):
    await repository.create(make_event(created_at=fixed_now - timedelta(days=2)))
    await repository.create(
        make_event(category="FOOD", status=EventStatus.INACTIVE, created_at=fixed_now - timedelta(days=45))
    )
    await repository.create(make_event(category="ART", created_at=fixed_now - timedelta(days=29)))

    analytics = (await repository.get_analytics()).unwrap()

    assert analytics.total_events == 3
    assert analytics.active_events == 2
    assert analytics.recent_events == 2
    assert analytics.category_counts == {"MUSICAL": 1, "SPORTS": 0, "FOOD": 1, "ART": 1}


@pytest.mark.anyio
async def test_batch_update_status(repository, make_event, fixed_now):
    ids = [(await repository.create(make_event(name=n))).unwrap() for n in ("one", "two")]

    assert (await repository.batch_update_status(ids, EventStatus.CANCELLED)).ok

    for event_id in ids:
        event = (await repository.get_by_id(event_id)).unwrap()
        assert event.status is EventStatus.CANCELLED
        assert event.updated_at == fixed_now


@pytest.mark.anyio
async def test_batch_update_status_with_missing_id_changes_nothing(repository, make_event):
    existing = (await repository.create(make_event())).unwrap()

    result = await repository.batch_update_status([existing, "missing"], "cancelled")

    assert isinstance(result.error, NotFoundError)
    assert (await repository.get_by_id(existing)).unwrap().status is EventStatus.ACTIVE


@pytest.mark.anyio
async def test_save_draft_forces_draft_status(repository, make_event):
    draft_id = (await repository.save_draft(make_event(name=""))).unwrap()

    assert (await repository.get_by_id(draft_id)).unwrap().status is EventStatus.DRAFT


@pytest.mark.anyio
async def test_store_failures_are_returned_not_raised(make_event):
    repository = EventRepository(UnavailableStore())

    for result in [
        await repository.create(make_event()),
        await repository.get_all(),
        await repository.get_by_id("x"),
        await repository.get_analytics(),
        await repository.duplicate("x"),
    ]:
        assert not result.ok
        assert isinstance(result.error, StoreUnavailableError)
        assert result.error_message() == "Document store unavailable"


@pytest.mark.anyio
async def test_create_with_images_stores_urls_in_order(repository, make_event, fixed_now):
    blobs = MemoryBlobStore()
    media = MediaManager(blobs, clock=lambda: fixed_now)

    event_id = (
        await repository.create_with_images(make_event(), [b"one", b"two"], media, now=fixed_now)
    ).unwrap()

    stored = (await repository.get_by_id(event_id)).unwrap()
    millis = int(fixed_now.timestamp() * 1000)
    assert stored.image_urls == [
        f"https://cdn.example.com/event_images/{event_id}_image_0_{millis}.jpg",
        f"https://cdn.example.com/event_images/{event_id}_image_1_{millis}.jpg",
    ]


@pytest.mark.anyio
async def test_create_with_images_rejects_invalid_event(repository, make_event, fixed_now):
    blobs = MemoryBlobStore()

    result = await repository.create_with_images(
        make_event(name="ab"), [b"one"], MediaManager(blobs), now=fixed_now
    )

    assert isinstance(result.error, ValidationFailedError)
    assert result.error.reasons == ["Event name must be at least 3 characters"]
    assert blobs.puts == 0
    assert await repository.store.count(repository.collection) == 0


@pytest.mark.anyio
async def test_create_with_images_keeps_event_when_upload_fails(repository, make_event, fixed_now):
    media = MediaManager(MemoryBlobStore(fail_on_put=2))

    result = await repository.create_with_images(
        make_event(), [b"one", b"two", b"three"], media, now=fixed_now
    )

    assert isinstance(result.error, PartialBatchFailureError)
    events = (await repository.get_all()).unwrap()
    assert len(events) == 1
    assert events[0].image_urls == []


@pytest.mark.anyio
async def test_unknown_status_is_a_validation_failure(repository, make_event):
    event_id = (await repository.create(make_event())).unwrap()

    by_status = await repository.get_by_status("archived")
    batch = await repository.batch_update_status([event_id], "archived")

    for result in (by_status, batch):
        assert isinstance(result.error, ValidationFailedError)
        assert result.error.reasons == ["Unknown event status: archived"]
    assert (await repository.get_by_id(event_id)).unwrap().status is EventStatus.ACTIVE
