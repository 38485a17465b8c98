import mimetypes
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

PDF_MIME_TYPE = "application/pdf"

# Sent in place of a client id when the upload starts from the clients list.
CLIENTS_PAGE_CLIENT_ID = "-1"

ProgressCallback = Callable[[int], None]


@dataclass(frozen=True)
class UploadRequest:
    """A single file picked by the user, before validation."""

    file_name: str
    content: bytes
    declared_mime_type: str
    size_bytes: int
    client_id: str | None = None

    @classmethod
    def from_bytes(
        cls,
        file_name: str,
        content: bytes,
        declared_mime_type: str = PDF_MIME_TYPE,
        client_id: str | None = None,
    ) -> "UploadRequest":
        return cls(
            file_name=file_name,
            content=content,
            declared_mime_type=declared_mime_type,
            size_bytes=len(content),
            client_id=client_id,
        )

    @classmethod
    def from_path(cls, path: Path, client_id: str | None = None) -> "UploadRequest":
        """Read a file from disk; the MIME type is guessed from its extension."""
        mime_type, _encoding = mimetypes.guess_type(path.name)
        return cls.from_bytes(
            path.name,
            path.read_bytes(),
            declared_mime_type=mime_type or "application/octet-stream",
            client_id=client_id,
        )


@dataclass(frozen=True)
class StoredObject:
    storage_path: str
    owner_id: str


@dataclass(frozen=True)
class WebhookNotification:
    referral_id: str
    client_id: str | None

    @classmethod
    def for_upload(
        cls, referral_id: str, is_clients_page: bool, client_id: str | None
    ) -> "WebhookNotification":
        return cls(
            referral_id=referral_id,
            client_id=CLIENTS_PAGE_CLIENT_ID if is_clients_page else client_id,
        )

    def to_payload(self) -> dict[str, str]:
        """JSON body for the automation webhook. A missing client id is omitted."""
        payload = {"id": self.referral_id}
        if self.client_id is not None:
            payload["clientId"] = self.client_id
        return payload


class ErrorCategory(str, Enum):
    VALIDATION = "validation"
    AUTHENTICATION = "authentication"
    STORAGE = "storage"
    PERSISTENCE = "persistence"
    NOTIFICATION = "notification"
    UNEXPECTED = "unexpected"


class UploadStage(str, Enum):
    VALIDATE = "validate"
    AUTHENTICATE = "authenticate"
    STORE_OBJECT = "store_object"
    INSERT_RECORD = "insert_record"
    NOTIFY = "notify"


class StageStatus(str, Enum):
    OK = "ok"
    COMPENSATED = "compensated"
    UNCOMPENSATED = "uncompensated"


@dataclass(frozen=True)
class StageOutcome:
    stage: UploadStage
    status: StageStatus
    detail: str = ""


@dataclass
class UploadResult:
    """What the pipeline hands back to its caller. Never an exception."""

    success: bool
    referral_id: str | None = None
    error: str | None = None
    category: ErrorCategory | None = None
    outcomes: list[StageOutcome] = field(default_factory=list)

    @classmethod
    def succeeded(cls, referral_id: str, outcomes: list[StageOutcome]) -> "UploadResult":
        return cls(success=True, referral_id=referral_id, outcomes=outcomes)

    @classmethod
    def failed(
        cls,
        error: str,
        category: ErrorCategory,
        outcomes: list[StageOutcome],
    ) -> "UploadResult":
        return cls(success=False, error=error, category=category, outcomes=outcomes)
