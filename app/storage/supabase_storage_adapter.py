import httpx

from app.logging.logger import Log
from app.storage.base import BaseObjectStorage, StorageProgressCallback, iter_chunks
from app.upload.exceptions import StorageError
from app.upload.models import StoredObject


class SupabaseStorageAdapter(BaseObjectStorage):
    """Object storage backed by the Supabase Storage REST API."""

    def __init__(
        self,
        *,
        base_url: str,
        service_role_key: str,
        bucket: str,
        timeout_seconds: int,
        chunk_size: int = 64 * 1024,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._bucket = bucket
        self._chunk_size = chunk_size
        self._client = httpx.Client(
            base_url=f"{base_url.rstrip('/')}/storage/v1",
            headers={
                "Authorization": f"Bearer {service_role_key}",
                "apikey": service_role_key,
            },
            timeout=timeout_seconds,
            transport=transport,
        )

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
        try:
            response = self._client.post(
                f"/object/{self._bucket}/{key}",
                headers={
                    "Content-Type": content_type,
                    "Content-Length": str(len(data)),
                    "cache-control": f"max-age={cache_control}",
                    "x-upsert": "false",
                },
                content=iter_chunks(data, self._chunk_size, on_progress),
            )
        except httpx.HTTPError as exc:
            raise StorageError(f"Storage upload transport error: {exc}") from exc

        if response.status_code != 200:
            Log.error(
                "Storage rejected upload",
                bucket=self._bucket,
                key=key,
                status_code=response.status_code,
            )
            raise StorageError(f"Storage upload failed with HTTP {response.status_code}")

        try:
            body = response.json()
        except ValueError:
            body = None
        if not isinstance(body, dict) or not body.get("Key"):
            raise StorageError(
                "Storage response carried no object key",
                user_message="Upload completed but no file path returned",
            )
        return StoredObject(storage_path=key, owner_id=owner_id)

    def remove(self, keys: list[str]) -> None:
        try:
            response = self._client.request(
                "DELETE",
                f"/object/{self._bucket}",
                json={"prefixes": keys},
            )
        except httpx.HTTPError as exc:
            raise StorageError(f"Storage delete transport error: {exc}") from exc

        if response.status_code != 200:
            raise StorageError(f"Storage delete failed with HTTP {response.status_code}")
