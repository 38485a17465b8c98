from pathlib import Path

from app.storage.base import BaseObjectStorage, StorageProgressCallback, iter_chunks
from app.upload.exceptions import StorageError
from app.upload.models import StoredObject


class LocalStorageAdapter(BaseObjectStorage):
    """Stores objects as files below a root directory: {files_root}/{key}."""

    FILES_ROOT = Path("/app/files")

    def __init__(self, files_root: Path | None = None, chunk_size: int = 64 * 1024) -> None:
        self._files_root = files_root if files_root is not None else self.FILES_ROOT
        self._chunk_size = chunk_size

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
        path = self.resolve_path(key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with path.open("xb") as fh:
                for chunk in iter_chunks(data, self._chunk_size, on_progress):
                    fh.write(chunk)
        except FileExistsError as exc:
            raise StorageError(f"Object already exists: {key}") from exc
        except OSError as exc:
            raise StorageError(f"Could not write {path}: {exc}") from exc
        return StoredObject(storage_path=key, owner_id=owner_id)

    def remove(self, keys: list[str]) -> None:
        for key in keys:
            try:
                self.resolve_path(key).unlink(missing_ok=True)
            except OSError as exc:
                raise StorageError(f"Could not delete {key}: {exc}") from exc

    def resolve_path(self, key: str) -> Path:
        path = (self._files_root / key).resolve()
        if not path.is_relative_to(self._files_root.resolve()):
            raise StorageError(f"Key escapes storage root: {key}")
        return path
