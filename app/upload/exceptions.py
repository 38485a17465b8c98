from app.upload.models import ErrorCategory


class UploadError(Exception):
    """Base exception for all upload failures.

    ``user_message`` is the short text shown to the end user; the exception
    message itself may carry transport or database detail for the logs.
    """

    category: ErrorCategory = ErrorCategory.UNEXPECTED
    default_user_message: str = "An unexpected error occurred. Please try again."

    def __init__(self, message: str, user_message: str | None = None) -> None:
        super().__init__(message)
        self.user_message = user_message or self.default_user_message


class UploadValidationError(UploadError):
    """Raised when the selected file is missing or not an acceptable PDF."""

    category = ErrorCategory.VALIDATION
    default_user_message = "Invalid file type. Please upload a PDF document."


class AuthenticationError(UploadError):
    """Raised when no current user can be resolved from the session."""

    category = ErrorCategory.AUTHENTICATION
    default_user_message = "Authentication required"


class StorageError(UploadError):
    """Raised when the object store rejects or fails a write or delete."""

    category = ErrorCategory.STORAGE
    default_user_message = "Failed to upload document. Please try again."


class PersistenceError(UploadError):
    """Raised when the referrals table cannot be written."""

    category = ErrorCategory.PERSISTENCE
    default_user_message = "Failed to create referral record. Please try again."


class ReferralNotFoundError(PersistenceError):
    """Raised when a referral row cannot be found."""


class NotificationError(UploadError):
    """Raised when the automation webhook does not acknowledge the referral."""

    category = ErrorCategory.NOTIFICATION
    default_user_message = "Failed to process document. Please try again."
