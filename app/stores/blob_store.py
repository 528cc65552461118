"""Blob store backends for event images: Amazon S3 and the local filesystem."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from threading import Lock
from typing import Any
from urllib.parse import quote, unquote, urlparse

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from app.config import Settings
from app.domain import NotFoundError, StoreUnavailableError
from app.stores.interfaces import BlobStore

logger = logging.getLogger("eventadmin.stores.blob")


class S3BlobStore(BlobStore):
    """Store images as S3 objects and hand out their public URLs."""

    def __init__(
        self,
        bucket: str,
        *,
        region: str = "us-east-1",
        public_base_url: str | None = None,
        client: Any | None = None,
    ) -> None:
        if not bucket:
            raise ValueError("An S3 bucket name is required")
        self.bucket = bucket
        self.base_url = (
            public_base_url or f"https://{bucket}.s3.{region}.amazonaws.com"
        ).rstrip("/")
        self._client = client or boto3.client("s3", region_name=region)

    def url_for(self, key: str) -> str:
        return f"{self.base_url}/{quote(key)}"

    def key_for(self, url: str) -> str:
        """Recover the object key from a URL issued by this store."""

        if url.startswith(f"{self.base_url}/"):
            return unquote(url[len(self.base_url) + 1 :])
        parsed = urlparse(url)
        if parsed.scheme == "s3" and parsed.netloc == self.bucket:
            return unquote(parsed.path.lstrip("/"))
        raise NotFoundError("Image", url)

    async def put(self, key: str, data: bytes, content_type: str = "image/jpeg") -> str:
        try:
            await asyncio.to_thread(
                self._client.put_object,
                Bucket=self.bucket,
                Key=key,
                Body=data,
                ContentType=content_type,
            )
        except (ClientError, BotoCoreError) as exc:
            logger.error("S3 upload of %s failed: %s", key, exc)
            raise StoreUnavailableError("Image upload failed") from exc
        return self.url_for(key)

    async def delete(self, url: str) -> None:
        key = self.key_for(url)
        try:
            await asyncio.to_thread(self._client.delete_object, Bucket=self.bucket, Key=key)
        except (ClientError, BotoCoreError) as exc:
            logger.error("S3 delete of %s failed: %s", key, exc)
            raise StoreUnavailableError("Image delete failed") from exc


class LocalBlobStore(BlobStore):
    """Write images under a directory served at ``base_url`` (development use)."""

    def __init__(self, root: str | Path, base_url: str) -> None:
        self.root = Path(root)
        self.base_url = base_url.rstrip("/")
        self._lock = Lock()

    def _path_for_url(self, url: str) -> Path:
        if not url.startswith(f"{self.base_url}/"):
            raise NotFoundError("Image", url)
        relative = unquote(url[len(self.base_url) + 1 :])
        path = (self.root / relative).resolve()
        if self.root.resolve() not in path.parents:
            raise NotFoundError("Image", url)
        return path

    def _write(self, key: str, data: bytes) -> None:
        target = self.root / key
        with self._lock:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)

    async def put(self, key: str, data: bytes, content_type: str = "image/jpeg") -> str:
        try:
            await asyncio.to_thread(self._write, key, data)
        except OSError as exc:
            logger.error("Failed to write image %s: %s", key, exc)
            raise StoreUnavailableError("Image upload failed") from exc
        return f"{self.base_url}/{quote(key)}"

    async def delete(self, url: str) -> None:
        path = self._path_for_url(url)
        try:
            await asyncio.to_thread(path.unlink)
        except FileNotFoundError as exc:
            raise NotFoundError("Image", url) from exc
        except OSError as exc:
            logger.error("Failed to delete image %s: %s", path, exc)
            raise StoreUnavailableError("Image delete failed") from exc


def build_blob_store(config: Settings) -> BlobStore:
    """Create the blob store selected by ``EVENTADMIN_BLOB_BACKEND``."""

    if config.blob_backend == "s3":
        return S3BlobStore(
            config.s3_bucket,
            region=config.aws_region,
            public_base_url=config.s3_public_base_url,
        )
    if config.blob_backend == "local":
        return LocalBlobStore(config.local_media_dir, config.local_media_base_url)
    raise ValueError(f"Unsupported blob backend: {config.blob_backend}")


__all__ = ["LocalBlobStore", "S3BlobStore", "build_blob_store"]
