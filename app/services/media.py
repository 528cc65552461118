"""Upload and delete event images against the blob store.

Batches run one step at a time. The first failing step aborts the rest, and
the returned error carries a ``BatchProgress`` describing what finished and
what never ran. Uploaded images are left in place on failure unless
``rollback_on_failure`` is set.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional, Sequence, Union

from app.domain import (
    BatchProgress,
    EventAdminError,
    Outcome,
    PartialBatchFailureError,
    StoreUnavailableError,
)
from app.models.events import utcnow
from app.stores.interfaces import BlobStore

logger = logging.getLogger("eventadmin.media")

ImageSource = Union[bytes, str, Path]

DEFAULT_IMAGE_PREFIX = "event_images"


async def _read_source(source: ImageSource) -> bytes:
    if isinstance(source, bytes):
        return source
    try:
        return await asyncio.to_thread(Path(source).read_bytes)
    except OSError as exc:
        logger.error("Unable to read image source %s: %s", source, exc)
        raise StoreUnavailableError("Unable to read image source") from exc


class MediaManager:
    """Keeps an event's image URLs in step with the blob store."""

    def __init__(
        self,
        blob_store: BlobStore,
        *,
        prefix: str = DEFAULT_IMAGE_PREFIX,
        rollback_on_failure: bool = False,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.blob_store = blob_store
        self.prefix = prefix.strip("/")
        self.rollback_on_failure = rollback_on_failure
        self._clock = clock or utcnow

    def image_key(self, event_id: str, index: int) -> str:
        epoch_millis = int(self._clock().timestamp() * 1000)
        return f"{self.prefix}/{event_id}_image_{index}_{epoch_millis}.jpg"

    async def upload_event_image(
        self, source: ImageSource, event_id: str, index: int
    ) -> Outcome[str]:
        key = self.image_key(event_id, index)
        try:
            data = await _read_source(source)
            url = await self.blob_store.put(key, data, content_type="image/jpeg")
        except EventAdminError as exc:
            return Outcome.failure(exc)
        logger.info("Uploaded image %s for event %s", key, event_id)
        return Outcome.success(url)

    async def upload_event_images(
        self, sources: Sequence[ImageSource], event_id: str
    ) -> Outcome[list[str]]:
        """Upload ``sources`` in order and return their URLs in the same order."""

        progress = BatchProgress(remaining=[f"image {i}" for i in range(len(sources))])
        for index, source in enumerate(sources):
            step = progress.remaining.pop(0)
            result = await self.upload_event_image(source, event_id, index)
            if not result.ok:
                progress.failed = step
                return await self._fail_upload(event_id, progress, result.error)
            progress.completed.append(result.value)
        return Outcome.success(list(progress.completed))

    async def _fail_upload(
        self, event_id: str, progress: BatchProgress, cause: EventAdminError
    ) -> Outcome[list[str]]:
        logger.warning(
            "Image upload for event %s stopped at %s after %s upload(s): %s",
            event_id,
            progress.failed,
            len(progress.completed),
            cause,
        )
        if not progress.is_partial:
            return Outcome.failure(cause)
        if self.rollback_on_failure:
            for url in progress.completed:
                undo = await self.delete_event_image(url)
                if undo.ok:
                    progress.rolled_back.append(url)
                else:
                    logger.warning("Rollback could not delete orphaned image %s", url)
        return Outcome.failure(
            PartialBatchFailureError("upload_event_images", progress, cause)
        )

    async def delete_event_image(self, image_url: str) -> Outcome[None]:
        try:
            await self.blob_store.delete(image_url)
        except EventAdminError as exc:
            logger.warning("Failed to delete image %s: %s", image_url, exc)
            return Outcome.failure(exc)
        logger.info("Deleted image %s", image_url)
        return Outcome.success()

    async def delete_event_images(self, image_urls: Sequence[str]) -> Outcome[None]:
        """Delete URLs in order, stopping at the first failure.

        Earlier deletions stay applied and later URLs are never attempted.
        """

        progress = BatchProgress(remaining=list(image_urls))
        while progress.remaining:
            url = progress.remaining.pop(0)
            result = await self.delete_event_image(url)
            if not result.ok:
                progress.failed = url
                if not progress.is_partial:
                    return Outcome.failure(result.error)
                return Outcome.failure(
                    PartialBatchFailureError("delete_event_images", progress, result.error)
                )
            progress.completed.append(url)
        return Outcome.success()


__all__ = ["DEFAULT_IMAGE_PREFIX", "ImageSource", "MediaManager"]
