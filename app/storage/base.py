from abc import ABC, abstractmethod
from collections.abc import Callable, Iterator

from app.upload.models import StoredObject

StorageProgressCallback = Callable[[float], None]


class BaseObjectStorage(ABC):
    """Contract for object storage backends holding referral documents."""

    @abstractmethod
    def upload(
        self,
        key: str,
        data: bytes,
        *,
        owner_id: str,
        content_type: str,
        cache_control: str,
        on_progress: StorageProgressCallback | None = None,
    ) -> StoredObject:
        """Write ``data`` under ``key``. An existing key is an error.

        ``on_progress`` receives the percentage of bytes sent so far as a float.

        Raises:
            StorageError: if the write fails or the key already exists.
        """

    @abstractmethod
    def remove(self, keys: list[str]) -> None:
        """Delete the given keys.

        Raises:
            StorageError: if the delete fails.
        """


def iter_chunks(
    data: bytes,
    chunk_size: int,
    on_progress: StorageProgressCallback | None = None,
) -> Iterator[bytes]:
    """Yield ``data`` in chunks, reporting percent sent after each one."""
    total = len(data)
    sent = 0
    for start in range(0, total, chunk_size):
        chunk = data[start : start + chunk_size]
        yield chunk
        sent += len(chunk)
        if on_progress is not None:
            on_progress(sent * 100 / total)
