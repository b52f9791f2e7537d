from enum import Enum


class ErrorKind(Enum):
    CONTAINER_NOT_FOUND = "container_not_found"
    CLIENT_NOT_FOUND = "client_not_found"
    ALREADY_EXISTS = "already_exists"
    STORAGE_FAILURE = "storage_failure"


class StorageError(Exception):
    """Base class for every failure the blob storage facade reports."""

    kind: ErrorKind = ErrorKind.STORAGE_FAILURE
    default_message = "Blob storage operation failed"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ContainerNotFoundError(StorageError):
    """Raised when a container reference cannot be obtained."""

    kind = ErrorKind.CONTAINER_NOT_FOUND
    default_message = "Blob container not found"


class ClientNotFoundError(StorageError):
    """Raised when a blob reference cannot be obtained inside a container."""

    kind = ErrorKind.CLIENT_NOT_FOUND
    default_message = "Blob client not found"


class BlobAlreadyExistsError(StorageError):
    """Raised when saving under a name that is already taken."""

    kind = ErrorKind.ALREADY_EXISTS
    default_message = "There is already a blob with this name"


class BlobNotFoundError(StorageError):
    """Raised when a requested blob does not exist."""

    default_message = "Blob not found"
