from abc import ABC, abstractmethod
from dataclasses import dataclass

from app.auth.models import AuthenticatedUser, AuthSession
from app.upload.models import (
    ProgressCallback,
    StageOutcome,
    StageStatus,
    StoredObject,
    UploadRequest,
    UploadStage,
    WebhookNotification,
)


@dataclass(slots=True)
class UploadContext:
    request: UploadRequest | None
    is_clients_page: bool
    client_id: str | None = None
    session: AuthSession | None = None
    on_progress: ProgressCallback | None = None
    user: AuthenticatedUser | None = None
    storage_key: str = ""
    stored_object: StoredObject | None = None
    referral_id: str = ""
    notification: WebhookNotification | None = None

    def report_progress(self, percent: int) -> None:
        if self.on_progress is not None:
            self.on_progress(percent)


class UploadStep(ABC):
    stage: UploadStage

    @abstractmethod
    def run(self, context: UploadContext) -> UploadContext:
        raise NotImplementedError

    def on_failure(self, context: UploadContext, error: Exception) -> StageOutcome:
        """Failure policy for this stage. Default: nothing to undo."""
        return StageOutcome(self.stage, StageStatus.UNCOMPENSATED, str(error))
