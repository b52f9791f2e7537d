import io
import logging
import zipfile
from collections.abc import Sequence

from .errors import BlobAlreadyExistsError, ClientNotFoundError, ContainerNotFoundError
from .storage_protocols import (
    AsyncBlobHandle,
    AsyncContainerHandle,
    AsyncStorageAdapter,
    BlobContent,
)

logger = logging.getLogger(__name__)

DEFAULT_CONTAINER_NAME = "default-container"


def _require_name(value: str, what: str) -> None:
    if not value:
        raise ValueError(f"{what} name must be a non-empty string")


class BlobStorageService:
    """
    Facade over a storage adapter: save, fetch, bundle and delete named blobs
    inside named containers.

    The adapter is long-lived and shared; every call keeps its buffers to itself.
    Nothing is retried here. Provider failures other than the domain errors in
    `errors` propagate unmodified.
    """

    def __init__(self, adapter: AsyncStorageAdapter) -> None:
        self.adapter = adapter

    async def __aenter__(self) -> "BlobStorageService":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def close(self) -> None:
        await self.adapter.close()

    def _container(self, container_name: str) -> AsyncContainerHandle:
        _require_name(container_name, "Container")
        try:
            return self.adapter.get_container(container_name)
        except ValueError as e:
            raise ContainerNotFoundError(
                f"Container '{container_name}' cannot be resolved"
            ) from e

    async def _existing_container(self, container_name: str) -> AsyncContainerHandle:
        container = self._container(container_name)
        if not await container.exists():
            raise ContainerNotFoundError(f"Container '{container_name}' not found")
        return container

    @staticmethod
    def _blob(container: AsyncContainerHandle, blob_name: str) -> AsyncBlobHandle:
        _require_name(blob_name, "Blob")
        try:
            return container.get_blob(blob_name)
        except ValueError as e:
            raise ClientNotFoundError(f"Blob '{blob_name}' cannot be resolved") from e

    async def save_blob(
        self,
        content: BlobContent,
        blob_name: str,
        container_name: str = DEFAULT_CONTAINER_NAME,
    ) -> str:
        """
        Store content under a new blob name and return its locator.

        The container is created on first use. An existing blob is never
        overwritten: the existence check fails fast with BlobAlreadyExistsError,
        and the upload itself is non-overwriting, so a concurrent writer that
        slips past the check still gets the same error.
        """
        container = self._container(container_name)
        blob = self._blob(container, blob_name)
        await container.create_if_not_exists()

        if await blob.exists():
            raise BlobAlreadyExistsError(
                f"Blob '{blob_name}' already exists in '{container_name}'"
            )

        await blob.upload(content, overwrite=False)
        logger.info("Saved blob '%s' in container '%s'", blob_name, container_name)
        return blob.locator

    async def get_blob_handle(
        self, blob_name: str, container_name: str = DEFAULT_CONTAINER_NAME
    ) -> AsyncBlobHandle:
        """
        Resolve a handle for later reads. Does not check that the blob exists.
        """
        container = await self._existing_container(container_name)
        return self._blob(container, blob_name)

    async def download_blob(
        self, blob_name: str, container_name: str = DEFAULT_CONTAINER_NAME
    ) -> io.BytesIO:
        """
        Read a whole blob into memory and return it rewound to the start.
        """
        blob = await self.get_blob_handle(blob_name, container_name)
        buffer = io.BytesIO()
        try:
            await blob.download_to(buffer)
        except BaseException:
            buffer.close()
            raise
        buffer.seek(0)
        return buffer

    async def download_and_compress_blobs(
        self,
        blob_names: Sequence[str],
        container_name: str = DEFAULT_CONTAINER_NAME,
    ) -> io.BytesIO:
        """
        Bundle blobs into one in-memory zip archive, one entry per name.

        Names are written in the order given, duplicates included. The first
        failure aborts the whole bundle and nothing is returned.
        """
        buffer = io.BytesIO()
        try:
            with zipfile.ZipFile(
                buffer, "w", compression=zipfile.ZIP_DEFLATED, compresslevel=9
            ) as archive:
                for blob_name in blob_names:
                    blob = await self.get_blob_handle(blob_name, container_name)
                    with archive.open(blob_name, "w") as entry:
                        await blob.download_to(entry)
        except BaseException:
            buffer.close()
            raise

        logger.debug(
            "Compressed %d blob(s) from container '%s'", len(blob_names), container_name
        )
        buffer.seek(0)
        return buffer

    async def delete_blob(
        self, blob_name: str, container_name: str = DEFAULT_CONTAINER_NAME
    ) -> bool:
        """
        Delete a blob if present. Returns False when there was nothing to delete.
        """
        container = await self._existing_container(container_name)
        _require_name(blob_name, "Blob")
        try:
            deleted = await container.delete_blob_if_exists(blob_name)
        except ValueError as e:
            raise ClientNotFoundError(f"Blob '{blob_name}' cannot be resolved") from e
        if deleted:
            logger.info(
                "Deleted blob '%s' from container '%s'", blob_name, container_name
            )
        return deleted
