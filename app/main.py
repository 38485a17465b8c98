from collections.abc import Generator
from contextlib import contextmanager

from app.config.settings import Settings
from app.database.connection import close_pool, init_pool
from app.logging.logger import Log
from app.upload.uploader import DocumentUploader, build_document_uploader


@contextmanager
def open_application(settings: Settings | None = None) -> Generator[DocumentUploader, None, None]:
    """Configure logging -> open the pool -> yield a ready uploader -> close the pool."""
    settings = settings or Settings()
    Log.configure(settings.log_level)
    init_pool(settings)
    Log.info("Referral upload service started", env=settings.app_env)

    try:
        yield build_document_uploader(settings)
    finally:
        close_pool()
        Log.info("Referral upload service stopped")
