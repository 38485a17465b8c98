from pathlib import Path

from app.config.settings import Settings
from app.storage.base import BaseObjectStorage
from app.storage.local_storage_adapter import LocalStorageAdapter
from app.storage.supabase_storage_adapter import SupabaseStorageAdapter


class StorageFactory:
    """Creates the object storage backend named in settings."""

    BACKENDS: tuple[str, ...] = ("supabase", "local")

    @classmethod
    def create(cls, settings: Settings) -> BaseObjectStorage:
        backend = settings.storage_backend.lower()
        if backend == "local":
            return LocalStorageAdapter(
                files_root=Path(settings.storage_files_root),
                chunk_size=settings.storage_chunk_size_bytes,
            )
        if backend == "supabase":
            if not settings.supabase_url.strip():
                raise ValueError("supabase_url is required for storage_backend=supabase")
            return SupabaseStorageAdapter(
                base_url=settings.supabase_url,
                service_role_key=settings.supabase_service_role_key,
                bucket=settings.storage_bucket,
                timeout_seconds=settings.http_timeout_seconds,
                chunk_size=settings.storage_chunk_size_bytes,
            )
        raise ValueError(
            f"Unknown storage backend '{backend}'. Choose from: {list(cls.BACKENDS)}"
        )
