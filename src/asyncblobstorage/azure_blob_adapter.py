import logging
import mimetypes
from typing import BinaryIO
from urllib.parse import urlparse

from azure.core.exceptions import ResourceExistsError, ResourceNotFoundError
from azure.storage.blob import ContentSettings
from azure.storage.blob.aio import BlobClient, BlobServiceClient, ContainerClient

from .errors import BlobAlreadyExistsError, BlobNotFoundError
from .storage_protocols import (
    AsyncBlobHandle,
    AsyncContainerHandle,
    AsyncStorageAdapter,
    BlobContent,
)

logger = logging.getLogger(__name__)


class AzureBlobAdapter(AsyncStorageAdapter):
    """Azure Blob Storage adapter for BlobStorageService."""

    def __init__(self, blob_service_client: BlobServiceClient):
        """
        Create an adapter from an existing BlobServiceClient.
        This allows custom authentication and configuration.
        """
        self._client = blob_service_client

    @classmethod
    def from_connection_string(cls, connection_string: str) -> "AzureBlobAdapter":
        """
        Convenience builder: create adapter from a connection string.
        """
        client = BlobServiceClient.from_connection_string(connection_string)
        return cls(client)

    def get_container(self, container_name: str) -> AsyncContainerHandle:
        return _AzureContainerHandle(self._client.get_container_client(container_name))

    async def close(self) -> None:
        await self._client.close()


class _AzureContainerHandle(AsyncContainerHandle):
    def __init__(self, container_client: ContainerClient):
        self._container_client = container_client

    async def exists(self) -> bool:
        return await self._container_client.exists()

    async def create_if_not_exists(self) -> None:
        try:
            await self._container_client.create_container()
            logger.info(
                "Created container '%s'", self._container_client.container_name
            )
        except ResourceExistsError:
            pass

    def get_blob(self, blob_name: str) -> AsyncBlobHandle:
        return _AzureBlobHandle(self._container_client.get_blob_client(blob_name))

    async def delete_blob_if_exists(self, blob_name: str) -> bool:
        try:
            await self._container_client.delete_blob(blob_name)
        except ResourceNotFoundError:
            return False
        return True


class _AzureBlobHandle(AsyncBlobHandle):
    def __init__(self, blob_client: BlobClient):
        self._blob_client = blob_client

    @property
    def name(self) -> str:
        return self._blob_client.blob_name

    @property
    def locator(self) -> str:
        return urlparse(self._blob_client.url).path

    async def exists(self) -> bool:
        return await self._blob_client.exists()

    async def upload(self, data: BlobContent, overwrite: bool = False) -> None:
        """Note: Guesses content type from the blob name."""
        guessed, _ = mimetypes.guess_type(self._blob_client.blob_name)
        content_settings = ContentSettings(
            content_type=guessed or "application/octet-stream"
        )
        try:
            await self._blob_client.upload_blob(
                data, overwrite=overwrite, content_settings=content_settings
            )
        except ResourceExistsError:
            raise BlobAlreadyExistsError(
                f"Blob '{self._blob_client.blob_name}' already exists"
            )

    async def download_to(self, sink: BinaryIO) -> None:
        try:
            downloader = await self._blob_client.download_blob()
            await downloader.readinto(sink)
        except ResourceNotFoundError:
            raise BlobNotFoundError(f"Blob '{self._blob_client.blob_name}' not found")
