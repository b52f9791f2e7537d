from typing import BinaryIO, Protocol

BlobContent = bytes | BinaryIO


class AsyncBlobHandle(Protocol):
    """Represents a single blob in storage."""

    @property
    def name(self) -> str:
        """Blob name inside its container."""
        ...

    @property
    def locator(self) -> str:
        """Absolute path of the blob's URI."""
        ...

    async def exists(self) -> bool:
        """Return True if the blob exists."""
        ...

    async def upload(self, data: BlobContent, overwrite: bool = False) -> None:
        """Upload bytes or a readable binary stream to the blob."""
        ...

    async def download_to(self, sink: BinaryIO) -> None:
        """Write the full blob content into a writable binary stream."""
        ...


class AsyncContainerHandle(Protocol):
    """Represents a container/bucket in storage."""

    async def exists(self) -> bool:
        """Return True if the container exists."""
        ...

    async def create_if_not_exists(self) -> None:
        """Create the container; no-op if it already exists."""
        ...

    def get_blob(self, blob_name: str) -> AsyncBlobHandle:
        """Return a handle to a blob."""
        ...

    async def delete_blob_if_exists(self, blob_name: str) -> bool:
        """Delete a blob; return False if there was nothing to delete."""
        ...


class AsyncStorageAdapter(Protocol):
    """Protocol for a storage backend adapter."""

    def get_container(self, container_name: str) -> AsyncContainerHandle:
        """Return a handle to a container."""
        ...

    async def close(self) -> None:
        """Close any resources/connections."""
        ...
