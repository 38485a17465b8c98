from pathlib import Path

from app.auth.base import BaseIdentityProvider
from app.auth.models import AuthSession
from app.auth.supabase_auth_adapter import SupabaseAuthAdapter
from app.config.settings import Settings
from app.database.repositories.referrals_repository import ReferralsRepository
from app.logging.logger import Log
from app.notifications.webhook_client import WebhookNotifier
from app.storage.base import BaseObjectStorage
from app.storage.factory import StorageFactory
from app.upload.exceptions import UploadError
from app.upload.models import (
    ErrorCategory,
    ProgressCallback,
    StageOutcome,
    StageStatus,
    UploadRequest,
    UploadResult,
)
from app.upload.pipeline import UploadContext, UploadStep
from app.upload.steps import (
    AuthenticateStep,
    InsertReferralStep,
    NotifyWebhookStep,
    StoreObjectStep,
    ValidateFileStep,
)

UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred. Please try again."


class DocumentUploader:
    """Runs the referral upload stages in order.

    Pipeline: validate -> authenticate -> store object -> insert record -> notify.
    The first failing stage applies its own failure policy and ends the run;
    nothing raised inside a stage escapes ``upload``.

    ``client_id`` falls back to ``request.client_id`` when not passed.
    """

    def __init__(self, steps: list[UploadStep]) -> None:
        self._steps = steps

    def upload(
        self,
        request: UploadRequest | None,
        *,
        is_clients_page: bool,
        client_id: str | None = None,
        on_progress: ProgressCallback | None = None,
        session: AuthSession | None = None,
    ) -> UploadResult:
        Log.info("Starting document upload")
        if client_id is None and request is not None:
            client_id = request.client_id
        context = UploadContext(
            request=request,
            is_clients_page=is_clients_page,
            client_id=client_id,
            session=session,
            on_progress=on_progress,
        )
        outcomes: list[StageOutcome] = []

        try:
            for step in self._steps:
                try:
                    context = step.run(context)
                except UploadError as exc:
                    Log.error(
                        "Upload stage failed",
                        stage=step.stage.value,
                        category=exc.category.value,
                        error=exc,
                    )
                    outcomes.append(step.on_failure(context, exc))
                    return UploadResult.failed(exc.user_message, exc.category, outcomes)
                except Exception as exc:
                    Log.error(
                        "Unexpected error during upload",
                        stage=step.stage.value,
                        error=repr(exc),
                    )
                    outcomes.append(step.on_failure(context, exc))
                    return UploadResult.failed(
                        UNEXPECTED_ERROR_MESSAGE, ErrorCategory.UNEXPECTED, outcomes
                    )
                outcomes.append(StageOutcome(step.stage, StageStatus.OK))

            context.report_progress(100)
        except Exception as exc:
            Log.error("Unexpected error during upload", error=repr(exc))
            return UploadResult.failed(
                UNEXPECTED_ERROR_MESSAGE, ErrorCategory.UNEXPECTED, outcomes
            )

        Log.info("Upload process completed", referral_id=context.referral_id)
        return UploadResult.succeeded(context.referral_id, outcomes)


def build_steps(
    identity: BaseIdentityProvider,
    storage: BaseObjectStorage,
    referrals_repo: ReferralsRepository,
    notifier: WebhookNotifier,
    cache_control: str,
) -> list[UploadStep]:
    return [
        ValidateFileStep(),
        AuthenticateStep(identity),
        StoreObjectStep(storage, cache_control=cache_control),
        InsertReferralStep(referrals_repo, storage),
        NotifyWebhookStep(notifier, referrals_repo),
    ]


def build_document_uploader(
    settings: Settings,
    files_root: Path | None = None,
) -> DocumentUploader:
    """Build a DocumentUploader with adapters chosen by settings.

    Passing ``files_root`` forces the local storage backend rooted there.
    """
    if not settings.supabase_url.strip():
        raise ValueError("supabase_url is required")
    if not settings.webhook_url.strip():
        raise ValueError("webhook_url is required")

    if files_root is not None:
        settings = settings.model_copy(
            update={"storage_backend": "local", "storage_files_root": str(files_root)}
        )
    identity = SupabaseAuthAdapter(
        base_url=settings.supabase_url,
        anon_key=settings.supabase_anon_key,
        timeout_seconds=settings.http_timeout_seconds,
    )
    notifier = WebhookNotifier(
        url=settings.webhook_url,
        timeout_seconds=settings.http_timeout_seconds,
    )
    steps = build_steps(
        identity=identity,
        storage=StorageFactory.create(settings),
        referrals_repo=ReferralsRepository(),
        notifier=notifier,
        cache_control=settings.storage_cache_control,
    )
    return DocumentUploader(steps)
