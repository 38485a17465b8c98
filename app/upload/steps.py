from app.auth.base import BaseIdentityProvider
from app.database.models import ReferralStatus
from app.database.repositories.referrals_repository import ReferralsRepository
from app.logging.logger import Log
from app.notifications.webhook_client import WebhookNotifier
from app.storage.base import BaseObjectStorage
from app.upload.exceptions import (
    NotificationError,
    UploadError,
    UploadValidationError,
)
from app.upload.models import (
    PDF_MIME_TYPE,
    StageOutcome,
    StageStatus,
    UploadStage,
    WebhookNotification,
)
from app.upload.pipeline import UploadContext, UploadStep
from app.upload.storage_key import build_storage_key


def round_percent(percent: float) -> int:
    """Round half up and clamp to [0, 100]."""
    return max(0, min(100, int(percent + 0.5)))


class ValidateFileStep(UploadStep):
    stage = UploadStage.VALIDATE

    def run(self, context: UploadContext) -> UploadContext:
        request = context.request
        if request is None:
            raise UploadValidationError("No file provided", user_message="No file provided")
        if request.declared_mime_type != PDF_MIME_TYPE:
            Log.error("Invalid file type", mime_type=request.declared_mime_type)
            raise UploadValidationError(f"Rejected MIME type {request.declared_mime_type}")
        return context


class AuthenticateStep(UploadStep):
    stage = UploadStage.AUTHENTICATE

    def __init__(self, identity: BaseIdentityProvider) -> None:
        self._identity = identity

    def run(self, context: UploadContext) -> UploadContext:
        context.user = self._identity.get_current_user(context.session)
        Log.info("Authenticated user", user_id=context.user.id)
        return context


class StoreObjectStep(UploadStep):
    stage = UploadStage.STORE_OBJECT

    def __init__(self, storage: BaseObjectStorage, cache_control: str) -> None:
        self._storage = storage
        self._cache_control = cache_control

    def run(self, context: UploadContext) -> UploadContext:
        if context.user is None or context.request is None:
            raise ValueError("UploadContext.user and request must be set before storing")

        context.storage_key = build_storage_key(context.user.id)
        Log.debug("Generated storage key", key=context.storage_key)

        def forward_progress(percent: float) -> None:
            Log.debug("Upload progress", percent=percent)
            context.report_progress(round_percent(percent))

        context.stored_object = self._storage.upload(
            context.storage_key,
            context.request.content,
            owner_id=context.user.id,
            content_type=PDF_MIME_TYPE,
            cache_control=self._cache_control,
            on_progress=forward_progress,
        )
        Log.info("File uploaded", path=context.stored_object.storage_path)
        return context


class InsertReferralStep(UploadStep):
    """Writes the referral row; on failure deletes the object just stored."""

    stage = UploadStage.INSERT_RECORD

    def __init__(self, referrals_repo: ReferralsRepository, storage: BaseObjectStorage) -> None:
        self._referrals_repo = referrals_repo
        self._storage = storage

    def run(self, context: UploadContext) -> UploadContext:
        if context.stored_object is None or context.request is None:
            raise ValueError("UploadContext.stored_object must be set before inserting")
        context.referral_id = self._referrals_repo.insert(
            file_path=context.stored_object.storage_path,
            file_name=context.request.file_name,
            file_size=context.request.size_bytes,
            mime_type=context.request.declared_mime_type,
            status=ReferralStatus.PENDING,
        )
        Log.info("Referral record created", referral_id=context.referral_id)
        return context

    def on_failure(self, context: UploadContext, error: Exception) -> StageOutcome:
        Log.error("Database insert failed, cleaning up storage", error=error)
        if context.stored_object is None:
            return StageOutcome(self.stage, StageStatus.UNCOMPENSATED, "no object to delete")
        try:
            self._storage.remove([context.stored_object.storage_path])
        except Exception as exc:
            Log.error(
                "Cleanup of stored object failed",
                key=context.stored_object.storage_path,
                error=exc,
            )
            return StageOutcome(self.stage, StageStatus.UNCOMPENSATED, str(exc))
        return StageOutcome(
            self.stage,
            StageStatus.COMPENSATED,
            f"deleted {context.stored_object.storage_path}",
        )


class NotifyWebhookStep(UploadStep):
    """Notifies the automation webhook; on failure keeps the row, marked failed."""

    stage = UploadStage.NOTIFY

    def __init__(self, notifier: WebhookNotifier, referrals_repo: ReferralsRepository) -> None:
        self._notifier = notifier
        self._referrals_repo = referrals_repo

    def run(self, context: UploadContext) -> UploadContext:
        if not context.referral_id:
            raise ValueError("UploadContext.referral_id must be set before notifying")
        context.notification = WebhookNotification.for_upload(
            context.referral_id, context.is_clients_page, context.client_id
        )
        Log.info("Calling webhook", payload=context.notification.to_payload())
        self._notifier.notify(context.notification)
        Log.info("Webhook completed", referral_id=context.referral_id)
        return context

    def on_failure(self, context: UploadContext, error: Exception) -> StageOutcome:
        # Unexpected errors from the notifier count as a failed delivery.
        delivery_failed = isinstance(error, NotificationError) or not isinstance(error, UploadError)
        if not context.referral_id or not delivery_failed:
            return super().on_failure(context, error)
        try:
            self._referrals_repo.update_status(context.referral_id, ReferralStatus.FAILED)
        except Exception as exc:
            Log.error(
                "Could not mark referral failed",
                referral_id=context.referral_id,
                error=exc,
            )
            return StageOutcome(self.stage, StageStatus.UNCOMPENSATED, str(exc))
        return StageOutcome(
            self.stage,
            StageStatus.UNCOMPENSATED,
            f"referral {context.referral_id} kept with status failed",
        )
