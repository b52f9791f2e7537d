import logging
import shutil
from pathlib import Path
from typing import BinaryIO

from .errors import BlobAlreadyExistsError, BlobNotFoundError
from .storage_protocols import (
    AsyncBlobHandle,
    AsyncContainerHandle,
    AsyncStorageAdapter,
    BlobContent,
)

logger = logging.getLogger(__name__)


def _ensure_within(base: Path, target: Path, strict: bool = True) -> Path:
    """
    Resolve target path and ensure it is strictly inside base path.
    strict=True will fail if the target does not exist (good for read/delete).
    strict=False allows non-existing targets (good for upload); symlinks along the
    existing part of the path are still followed before the check.
    """
    base_resolved = base.resolve()
    target_resolved = target.resolve(strict=strict)
    if target_resolved == base_resolved or not target_resolved.is_relative_to(
        base_resolved
    ):
        raise ValueError(
            f"Path {target_resolved} escapes base directory {base_resolved}"
        )
    return target_resolved


class LocalFileAdapter(AsyncStorageAdapter):
    """Local filesystem adapter: containers are directories, blobs are files."""

    def __init__(self, base_path: str):
        self._base_path = Path(base_path).resolve()
        self._base_path.mkdir(parents=True, exist_ok=True)

    def get_container(self, container_name: str) -> AsyncContainerHandle:
        if not container_name or "/" in container_name or "\\" in container_name:
            raise ValueError(f"Invalid container name '{container_name}'")
        container_path = _ensure_within(
            self._base_path, self._base_path / container_name, strict=False
        )
        return _LocalContainerHandle(container_path, container_name)

    async def close(self) -> None:
        pass


class _LocalContainerHandle(AsyncContainerHandle):
    def __init__(self, container_path: Path, container_name: str):
        self._container_path = container_path
        self._container_name = container_name

    async def exists(self) -> bool:
        return self._container_path.is_dir()

    async def create_if_not_exists(self) -> None:
        if not self._container_path.is_dir():
            self._container_path.mkdir(parents=True, exist_ok=True)
            logger.info("Created container '%s'", self._container_name)

    def get_blob(self, blob_name: str) -> AsyncBlobHandle:
        return self._get_local_blob(blob_name)

    def _get_local_blob(self, blob_name: str) -> "_LocalBlobHandle":
        blob_path = _ensure_within(
            self._container_path, self._container_path / blob_name, strict=False
        )
        return _LocalBlobHandle(
            blob_path,
            self._container_path,
            f"/{self._container_name}/{blob_name}",
            blob_name,
        )

    async def delete_blob_if_exists(self, blob_name: str) -> bool:
        return await self._get_local_blob(blob_name).delete_if_exists()


class _LocalBlobHandle(AsyncBlobHandle):
    def __init__(
        self, file_path: Path, container_path: Path, locator: str, blob_name: str
    ):
        self._file_path = file_path
        self._container_path = container_path
        self._locator = locator
        self._name = blob_name

    @property
    def name(self) -> str:
        return self._name

    @property
    def locator(self) -> str:
        return self._locator

    async def exists(self) -> bool:
        return self._file_path.is_file()

    async def upload(self, data: BlobContent, overwrite: bool = False) -> None:
        _ensure_within(self._container_path, self._file_path, strict=False)
        # "xb" is an atomic create-if-absent at the filesystem level
        mode = "wb" if overwrite else "xb"
        try:
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self._file_path, mode) as f:
                if isinstance(data, (bytes, bytearray)):
                    f.write(data)
                else:
                    shutil.copyfileobj(data, f)
        except (FileExistsError, IsADirectoryError, NotADirectoryError):
            # A file or a directory already occupies this name or its prefix
            raise BlobAlreadyExistsError(f"Blob '{self._name}' already exists")

    async def download_to(self, sink: BinaryIO) -> None:
        if not self._file_path.is_file():
            raise BlobNotFoundError(f"Blob '{self._name}' not found")
        _ensure_within(self._container_path, self._file_path, strict=True)
        with open(self._file_path, "rb") as f:
            shutil.copyfileobj(f, sink)

    async def delete_if_exists(self) -> bool:
        if not self._file_path.is_file():
            return False
        _ensure_within(self._container_path, self._file_path, strict=True)
        self._file_path.unlink()
        return True
