import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from .azure_blob_adapter import AzureBlobAdapter
from .blob_storage_service import BlobStorageService
from .config import ConfigurationError, Settings, get_settings
from .errors import BlobNotFoundError, ErrorKind, StorageError
from .local_file_adapter import LocalFileAdapter
from .storage_protocols import AsyncStorageAdapter
from .upload_endpoint import router as upload_router

logger = logging.getLogger(__name__)

_STATUS_BY_KIND = {
    ErrorKind.CONTAINER_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.CLIENT_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.ALREADY_EXISTS: status.HTTP_409_CONFLICT,
}


def configure_logging(level: int | str = logging.INFO) -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def build_adapter(settings: Settings) -> AsyncStorageAdapter:
    if settings.storage_backend == "azure":
        if settings.azure_connection_string is None:
            raise ConfigurationError("AZURE_CONN_STR is required for the azure backend")
        return AzureBlobAdapter.from_connection_string(
            settings.azure_connection_string
        )
    return LocalFileAdapter(settings.local_base_path)


async def storage_exception_handler(request: Request, exc: StorageError) -> JSONResponse:
    """Map domain storage errors onto HTTP status codes."""
    status_code = _STATUS_BY_KIND.get(exc.kind, status.HTTP_502_BAD_GATEWAY)
    if isinstance(exc, BlobNotFoundError):
        status_code = status.HTTP_404_NOT_FOUND

    logger.warning(
        "%s on %s %s: %s",
        type(exc).__name__,
        request.method,
        request.url.path,
        exc.message,
    )
    return JSONResponse(
        status_code=status_code,
        content={
            "error": type(exc).__name__,
            "kind": exc.kind.value,
            "message": exc.message,
        },
    )


def create_app(
    service: BlobStorageService | None = None, settings: Settings | None = None
) -> FastAPI:
    """
    Build the FastAPI application.
    Pass `service` to run against an existing facade (tests); otherwise one is
    built from settings at startup and closed on shutdown. `settings` defaults
    to the environment.
    """
    if settings is None:
        settings = get_settings()
    configure_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if service is not None:
            yield
            return
        async with BlobStorageService(build_adapter(settings)) as owned:
            app.state.blob_storage = owned
            logger.info("Using '%s' storage backend", settings.storage_backend)
            yield

    app = FastAPI(title="asyncblobstorage", lifespan=lifespan)
    app.state.default_container = settings.default_container
    if service is not None:
        app.state.blob_storage = service

    app.add_exception_handler(StorageError, storage_exception_handler)
    app.include_router(upload_router)
    return app


def main() -> None:
    import uvicorn

    settings = get_settings()
    uvicorn.run(create_app(), host=settings.host, port=settings.port)
