import logging
import os
import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile
from fastapi.responses import PlainTextResponse

from .blob_storage_service import DEFAULT_CONTAINER_NAME, BlobStorageService

logger = logging.getLogger(__name__)

router = APIRouter()


def file_extension(filename: str | None) -> str:
    """Extension of an uploaded filename, leading dot included, or ''."""
    if not filename:
        return ""
    base = filename.replace("\\", "/").rsplit("/", 1)[-1]
    _, ext = os.path.splitext(base)
    return "" if ext == "." else ext


def generate_blob_name(filename: str | None) -> str:
    return f"{uuid.uuid4().hex}{file_extension(filename)}"


def get_blob_storage_service(request: Request) -> BlobStorageService:
    return request.app.state.blob_storage


def get_default_container(request: Request) -> str:
    return getattr(request.app.state, "default_container", DEFAULT_CONTAINER_NAME)


@router.post("/BlobStorage", name="upload", response_class=PlainTextResponse)
async def upload_file(
    file: Annotated[UploadFile, File(alias="File")],
    service: Annotated[BlobStorageService, Depends(get_blob_storage_service)],
    default_container: Annotated[str, Depends(get_default_container)],
    container_name: Annotated[str | None, Form(alias="ContainerName")] = None,
) -> str:
    """Store the uploaded file under a fresh random name and return its locator."""
    blob_name = generate_blob_name(file.filename)
    await file.seek(0)
    locator = await service.save_blob(
        file.file, blob_name, container_name or default_container
    )
    logger.debug("Upload of '%s' stored as '%s'", file.filename, locator)
    return locator
