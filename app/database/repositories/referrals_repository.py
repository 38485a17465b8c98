import psycopg
from psycopg.rows import dict_row

from app.database.connection import get_connection
from app.database.models import ReferralRecord, ReferralStatus
from app.upload.exceptions import PersistenceError, ReferralNotFoundError


class ReferralsRepository:
    """Database operations for the referrals table."""

    def insert(
        self,
        *,
        file_path: str,
        file_name: str,
        file_size: int,
        mime_type: str,
        status: ReferralStatus = ReferralStatus.PENDING,
    ) -> str:
        """Insert a referral row and return its generated id.

        Raises:
            PersistenceError: if the insert fails or returns no id.
        """
        try:
            with get_connection() as conn:
                with conn.cursor() as cur:
                    cur.execute(
                        """
                        INSERT INTO referrals
                            (file_path, file_name, file_size, mime_type, status)
                        VALUES (%s, %s, %s, %s, %s)
                        RETURNING id
                        """,
                        (file_path, file_name, file_size, mime_type, status.value),
                    )
                    row = cur.fetchone()
                conn.commit()
        except psycopg.Error as exc:
            raise PersistenceError(f"Referral insert failed: {exc}") from exc

        if row is None:
            raise PersistenceError("Referral insert returned no id")
        return str(row[0])

    def update_status(self, referral_id: str, status: ReferralStatus) -> None:
        """Set the status column of one referral.

        Raises:
            ReferralNotFoundError: if no referral with this id exists.
            PersistenceError: if the update fails.
        """
        try:
            with get_connection() as conn:
                with conn.cursor() as cur:
                    cur.execute(
                        """
                        UPDATE referrals
                        SET status = %s
                        WHERE id = %s
                        """,
                        (status.value, referral_id),
                    )
                    if cur.rowcount == 0:
                        raise ReferralNotFoundError(f"Referral {referral_id} not found")
                conn.commit()
        except psycopg.Error as exc:
            raise PersistenceError(f"Referral status update failed: {exc}") from exc

    def find_by_id(self, referral_id: str) -> ReferralRecord:
        """Find a referral by id.

        Raises:
            ReferralNotFoundError: if no referral with this id exists.
            PersistenceError: if the lookup fails.
        """
        try:
            with get_connection() as conn:
                with conn.cursor(row_factory=dict_row) as cur:
                    cur.execute(
                        """
                        SELECT id, file_path, file_name, file_size, mime_type,
                               status, created_at
                        FROM referrals
                        WHERE id = %s
                        """,
                        (referral_id,),
                    )
                    row = cur.fetchone()
        except psycopg.Error as exc:
            raise PersistenceError(f"Referral lookup failed: {exc}") from exc

        if row is None:
            raise ReferralNotFoundError(f"Referral {referral_id} not found")

        return ReferralRecord(
            id=str(row["id"]),
            file_path=row["file_path"],
            file_name=row["file_name"],
            file_size_bytes=row["file_size"],
            mime_type=row["mime_type"],
            status=ReferralStatus(row["status"]),
            created_at=row["created_at"],
        )
