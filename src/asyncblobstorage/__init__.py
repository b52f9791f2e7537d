"""
asyncblobstorage
================

Async HTTP facade over object storage (Azure Blob Storage or local filesystem):
upload files under generated names, download one blob or a zip bundle of several,
and delete blobs.

Main entry points:
- BlobStorageService: the storage facade
- AzureBlobAdapter, LocalFileAdapter: storage backends
- StorageResult, capture: tagged success-or-error results
- create_app: FastAPI application exposing POST /BlobStorage

Example:
    from asyncblobstorage import BlobStorageService, LocalFileAdapter

    async with BlobStorageService(LocalFileAdapter("./data")) as service:
        locator = await service.save_blob(b"hello", "hello.txt", "docs")
        data = (await service.download_blob("hello.txt", "docs")).read()
"""

from .blob_storage_service import BlobStorageService, DEFAULT_CONTAINER_NAME

from .errors import (
    ErrorKind,
    StorageError,
    ContainerNotFoundError,
    ClientNotFoundError,
    BlobAlreadyExistsError,
    BlobNotFoundError,
)
from .results import StorageResult, capture

from .storage_protocols import (
    AsyncStorageAdapter,
    AsyncContainerHandle,
    AsyncBlobHandle,
)
from .local_file_adapter import LocalFileAdapter
from .azure_blob_adapter import AzureBlobAdapter
from .app import create_app

import importlib.metadata

try:
    __version__ = importlib.metadata.version(__name__)
except importlib.metadata.PackageNotFoundError:
    __version__ = "0.0.0"

__all__ = [
    "BlobStorageService",
    "DEFAULT_CONTAINER_NAME",
    "ErrorKind",
    "StorageError",
    "ContainerNotFoundError",
    "ClientNotFoundError",
    "BlobAlreadyExistsError",
    "BlobNotFoundError",
    "StorageResult",
    "capture",
    "AsyncStorageAdapter",
    "AsyncContainerHandle",
    "AsyncBlobHandle",
    "LocalFileAdapter",
    "AzureBlobAdapter",
    "create_app",
]
