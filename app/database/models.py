from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class ReferralStatus(str, Enum):
    PENDING = "pending"
    FAILED = "failed"


@dataclass
class ReferralRecord:
    """Represents a row from the referrals table."""

    id: str
    file_path: str
    file_name: str
    file_size_bytes: int
    mime_type: str
    status: ReferralStatus
    created_at: datetime | None = None
