from collections.abc import Awaitable
from dataclasses import dataclass
from typing import Generic, TypeVar

from .errors import ErrorKind, StorageError

T = TypeVar("T")


@dataclass(frozen=True)
class StorageResult(Generic[T]):
    """
    Outcome of a facade call: either a value or the domain error that stopped it.
    Callers branch on `kind` instead of wrapping every call in try/except.
    """

    value: T | None = None
    error: StorageError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def kind(self) -> ErrorKind | None:
        return self.error.kind if self.error is not None else None

    def unwrap(self) -> T:
        """Return the value, or re-raise the captured error."""
        if self.error is not None:
            raise self.error
        return self.value  # type: ignore[return-value]


async def capture(call: Awaitable[T]) -> StorageResult[T]:
    """
    Await a facade call and fold domain errors into a StorageResult.
    Anything that is not a StorageError (provider failures, cancellation) propagates.
    """
    try:
        return StorageResult(value=await call)
    except StorageError as e:
        return StorageResult(error=e)
