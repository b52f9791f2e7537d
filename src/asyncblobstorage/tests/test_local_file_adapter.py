import io
import os
import sys

import pytest

from asyncblobstorage import (
    BlobAlreadyExistsError,
    BlobNotFoundError,
    BlobStorageService,
    ClientNotFoundError,
    ContainerNotFoundError,
    LocalFileAdapter,
)
from asyncblobstorage.local_file_adapter import _LocalBlobHandle, _LocalContainerHandle

CONTAINER = "test-container"


@pytest.fixture
def adapter(tmp_path):
    return LocalFileAdapter(str(tmp_path / "storage"))


@pytest.mark.asyncio
async def test_container_is_created_lazily(adapter):
    container = adapter.get_container(CONTAINER)
    assert await container.exists() is False

    await container.create_if_not_exists()
    await container.create_if_not_exists()
    assert await container.exists() is True


@pytest.mark.asyncio
async def test_locator_is_container_relative_path(adapter):
    container = adapter.get_container(CONTAINER)
    blob = container.get_blob("nested/file.txt")
    assert blob.locator == f"/{CONTAINER}/nested/file.txt"
    assert blob.name == "nested/file.txt"


@pytest.mark.asyncio
async def test_upload_without_overwrite(adapter):
    container = adapter.get_container(CONTAINER)
    await container.create_if_not_exists()
    blob = container.get_blob("exists.txt")
    await blob.upload(b"data")
    with pytest.raises(BlobAlreadyExistsError):
        await blob.upload(b"newdata", overwrite=False)

    await blob.upload(io.BytesIO(b"newdata"), overwrite=True)
    sink = io.BytesIO()
    await blob.download_to(sink)
    assert sink.getvalue() == b"newdata"


@pytest.mark.asyncio
async def test_download_missing_blob(adapter):
    container = adapter.get_container(CONTAINER)
    await container.create_if_not_exists()
    with pytest.raises(BlobNotFoundError):
        await container.get_blob("missing.txt").download_to(io.BytesIO())


@pytest.mark.asyncio
async def test_prefix_of_nested_blob_is_not_a_blob(adapter):
    async with BlobStorageService(adapter) as service:
        await service.save_blob(b"x", "a/b.txt", CONTAINER)

        with pytest.raises(BlobNotFoundError):
            await service.download_blob("a", CONTAINER)
        assert await service.delete_blob("a", CONTAINER) is False
        with pytest.raises(BlobAlreadyExistsError):
            await service.save_blob(b"y", "a", CONTAINER)
        with pytest.raises(BlobAlreadyExistsError):
            await service.save_blob(b"z", "a/b.txt/c", CONTAINER)

        assert (await service.download_blob("a/b.txt", CONTAINER)).read() == b"x"


@pytest.mark.asyncio
async def test_blob_handles_hold_no_module_state(adapter):
    import asyncblobstorage.local_file_adapter as local_file_adapter

    module_state = dict(vars(local_file_adapter))
    async with BlobStorageService(adapter) as service:
        for i in range(50):
            await service.save_blob(b"x", f"blob-{i}.txt", CONTAINER)
            assert await service.delete_blob(f"blob-{i}.txt", CONTAINER) is True
            await service.get_blob_handle(f"missing-{i}.txt", CONTAINER)

    assert dict(vars(local_file_adapter)) == module_state


@pytest.mark.asyncio
async def test_local_path_traversal_protection(adapter):
    container = adapter.get_container(CONTAINER)

    with pytest.raises(ValueError) as excinfo:
        container.get_blob("../../etc/passwd")
    assert "escapes base directory" in str(excinfo.value)

    with pytest.raises(ValueError):
        adapter.get_container("../outside_container")
    with pytest.raises(ValueError):
        adapter.get_container("..")


@pytest.mark.asyncio
async def test_service_translates_invalid_names(adapter):
    async with BlobStorageService(adapter) as service:
        await service.save_blob(b"x", "ok.txt", CONTAINER)

        with pytest.raises(ClientNotFoundError):
            await service.get_blob_handle("../escape.txt", CONTAINER)
        with pytest.raises(ClientNotFoundError):
            await service.delete_blob("../escape.txt", CONTAINER)
        with pytest.raises(ContainerNotFoundError):
            await service.download_blob("ok.txt", "../elsewhere")


@pytest.mark.asyncio
async def test_local_delete_outside_protection(adapter, tmp_path):
    container = adapter.get_container(CONTAINER)
    await container.create_if_not_exists()
    assert isinstance(container, _LocalContainerHandle)

    outside_file = tmp_path / "outside.txt"
    outside_file.write_text("secret")

    # Bypass get_blob to point a handle outside the container
    malicious_blob = _LocalBlobHandle(
        outside_file, container._container_path, "/x/outside.txt", "outside.txt"
    )

    with pytest.raises(ValueError):
        await malicious_blob.delete_if_exists()

    assert outside_file.exists(), "Outside file should not be deleted"


@pytest.mark.asyncio
async def test_symlink_outside_protection(adapter, tmp_path):
    if not hasattr(os, "symlink"):
        pytest.skip("Symlinks not supported on this platform")
    if sys.platform == "win32":
        # Windows requires admin or Developer Mode for symlinks
        try:
            test_link = tmp_path / "test_link"
            test_target = tmp_path / "test_target"
            test_target.write_text("x")
            test_link.symlink_to(test_target)
        except OSError:
            pytest.skip("Symlink creation not permitted on this Windows system")

    container = adapter.get_container(CONTAINER)
    await container.create_if_not_exists()
    assert isinstance(container, _LocalContainerHandle)

    outside_file = tmp_path / "outside.txt"
    outside_file.write_text("secret")

    symlink_path = container._container_path / "link.txt"
    symlink_path.symlink_to(outside_file)

    with pytest.raises(ValueError):
        container.get_blob("link.txt")

    malicious_blob = _LocalBlobHandle(
        symlink_path, container._container_path, "/x/link.txt", "link.txt"
    )
    with pytest.raises(ValueError):
        await malicious_blob.download_to(io.BytesIO())
    with pytest.raises(ValueError):
        await malicious_blob.delete_if_exists()

    assert outside_file.read_text() == "secret"
