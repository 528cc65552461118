"""Storage backends behind the document and blob store contracts."""

from .blob_store import LocalBlobStore, S3BlobStore, build_blob_store
from .interfaces import (
    HIGH_SENTINEL,
    BlobStore,
    Direction,
    Document,
    DocumentQuery,
    DocumentStore,
    FilterOp,
)
from .sql_store import SqlDocumentStore

__all__ = [
    "BlobStore",
    "Direction",
    "Document",
    "DocumentQuery",
    "DocumentStore",
    "FilterOp",
    "HIGH_SENTINEL",
    "LocalBlobStore",
    "S3BlobStore",
    "SqlDocumentStore",
    "build_blob_store",
]
