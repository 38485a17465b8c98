import time
from collections.abc import Callable, Sequence

from app.auth.models import AuthSession
from app.config.settings import Settings
from app.logging.logger import Log
from app.upload.models import PDF_MIME_TYPE, UploadRequest, UploadResult
from app.upload.uploader import DocumentUploader

MAX_FILE_SIZE_BYTES = 10 * 1024 * 1024
SUCCESS_DISPLAY_DELAY_SECONDS = 0.5


class UploadFormController:
    """State and gatekeeping around one referral upload form.

    Holds the selected file, the error shown under the drop zone, whether a
    submission is in flight and the progress bar value.
    """

    def __init__(
        self,
        uploader: DocumentUploader,
        *,
        on_success: Callable[[], None],
        on_cancel: Callable[[], None],
        session: AuthSession | None = None,
        client_id: str | None = None,
        client_name: str | None = None,
        max_file_size_bytes: int = MAX_FILE_SIZE_BYTES,
        success_delay_seconds: float = SUCCESS_DISPLAY_DELAY_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._uploader = uploader
        self._on_success = on_success
        self._on_cancel = on_cancel
        self._session = session
        self._max_file_size_bytes = max_file_size_bytes
        self._success_delay_seconds = success_delay_seconds
        self._sleep = sleep
        self.client_id = client_id
        self.client_name = client_name

        self.selected_file: UploadRequest | None = None
        self.error_message: str | None = None
        self.is_uploading = False
        self.progress_percent = 0

    @property
    def can_submit(self) -> bool:
        return self.selected_file is not None and not self.is_uploading

    @property
    def can_cancel(self) -> bool:
        return not self.is_uploading

    @property
    def file_summary(self) -> str | None:
        if self.selected_file is None:
            return None
        megabytes = self.selected_file.size_bytes / 1024 / 1024
        return f"{self.selected_file.file_name} ({megabytes:.2f} MB)"

    @property
    def status_line(self) -> str:
        if self.is_uploading:
            return f"Uploading... {self.progress_percent}%"
        return self.error_message or ""

    def select_file(self, file: UploadRequest) -> bool:
        """Accept ``file`` if it is a PDF within the size limit."""
        self.error_message = None

        if file.declared_mime_type != PDF_MIME_TYPE:
            self.selected_file = None
            self.error_message = "Please upload a PDF file only"
            return False

        if file.size_bytes > self._max_file_size_bytes:
            self.selected_file = None
            limit_mb = self._max_file_size_bytes / (1024 * 1024)
            self.error_message = f"File size must be less than {limit_mb:g}MB"
            return False

        self.selected_file = file
        return True

    def drop_files(self, files: Sequence[UploadRequest]) -> bool:
        """Single-file drop target: only the first dropped file is considered."""
        if not files:
            return False
        return self.select_file(files[0])

    def clear(self) -> None:
        self.selected_file = None
        self.error_message = None
        self.progress_percent = 0

    def cancel(self) -> bool:
        if not self.can_cancel:
            Log.debug("Cancel ignored while upload is in flight")
            return False
        self._on_cancel()
        return True

    def submit(self) -> UploadResult | None:
        if self.selected_file is None:
            self.error_message = "Please select a file to upload"
            return None

        self.is_uploading = True
        self.error_message = None
        self.progress_percent = 0
        try:
            result = self._uploader.upload(
                self.selected_file,
                is_clients_page=self.client_id is None,
                client_id=self.client_id,
                on_progress=self._set_progress,
                session=self._session,
            )
            if not result.success:
                self.error_message = result.error or "Upload failed"
                self.progress_percent = 0
                return result

            # Let the 100% state render before leaving the form.
            self._sleep(self._success_delay_seconds)
            self._on_success()
            return result
        finally:
            self.is_uploading = False

    def _set_progress(self, percent: int) -> None:
        self.progress_percent = percent


def build_upload_form(
    settings: Settings,
    uploader: DocumentUploader,
    *,
    on_success: Callable[[], None],
    on_cancel: Callable[[], None],
    session: AuthSession | None = None,
    client_id: str | None = None,
    client_name: str | None = None,
) -> UploadFormController:
    """Build a form controller using the size limit and delay from settings."""
    return UploadFormController(
        uploader,
        on_success=on_success,
        on_cancel=on_cancel,
        session=session,
        client_id=client_id,
        client_name=client_name,
        max_file_size_bytes=settings.max_upload_size_bytes,
        success_delay_seconds=settings.success_display_delay_seconds,
    )
