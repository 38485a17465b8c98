from datetime import datetime
from unittest.mock import MagicMock, patch

import psycopg
import pytest

from app.database.models import ReferralRecord, ReferralStatus
from app.database.repositories.referrals_repository import ReferralsRepository
from app.upload.exceptions import PersistenceError, ReferralNotFoundError

REPO_MODULE = "app.database.repositories.referrals_repository"


def _mock_connection(mock_get_conn: MagicMock) -> tuple[MagicMock, MagicMock]:
    """Wire up a mock connection + cursor and return (mock_conn, mock_cursor)."""
    mock_cursor = MagicMock()
    mock_conn = MagicMock()
    mock_conn.cursor.return_value.__enter__ = MagicMock(return_value=mock_cursor)
    mock_conn.cursor.return_value.__exit__ = MagicMock(return_value=False)
    mock_get_conn.return_value.__enter__ = MagicMock(return_value=mock_conn)
    mock_get_conn.return_value.__exit__ = MagicMock(return_value=False)
    return mock_conn, mock_cursor


def _insert(repo: ReferralsRepository) -> str:
    return repo.insert(
        file_path="u1/1700000000000-abc.pdf",
        file_name="referral.pdf",
        file_size=2048,
        mime_type="application/pdf",
    )


class TestInsert:
    @patch(f"{REPO_MODULE}.get_connection")
    def test_returns_generated_id(self, mock_get_conn: MagicMock) -> None:
        _conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.fetchone.return_value = ("3f1c9a52-0000-4000-8000-000000000001",)

        referral_id = _insert(ReferralsRepository())

        assert referral_id == "3f1c9a52-0000-4000-8000-000000000001"

    @patch(f"{REPO_MODULE}.get_connection")
    def test_inserts_pending_row_with_file_metadata(self, mock_get_conn: MagicMock) -> None:
        _conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.fetchone.return_value = ("r1",)

        _insert(ReferralsRepository())

        sql, params = mock_cursor.execute.call_args.args
        assert "INSERT INTO referrals" in sql
        assert "RETURNING id" in sql
        assert params == (
            "u1/1700000000000-abc.pdf",
            "referral.pdf",
            2048,
            "application/pdf",
            "pending",
        )

    @patch(f"{REPO_MODULE}.get_connection")
    def test_commits_transaction(self, mock_get_conn: MagicMock) -> None:
        mock_conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.fetchone.return_value = ("r1",)

        _insert(ReferralsRepository())

        mock_conn.commit.assert_called_once()

    @patch(f"{REPO_MODULE}.get_connection")
    def test_wraps_database_errors(self, mock_get_conn: MagicMock) -> None:
        _conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.execute.side_effect = psycopg.OperationalError("connection lost")

        with pytest.raises(PersistenceError, match="connection lost"):
            _insert(ReferralsRepository())

    @patch(f"{REPO_MODULE}.get_connection")
    def test_raises_when_no_id_returned(self, mock_get_conn: MagicMock) -> None:
        _conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.fetchone.return_value = None

        with pytest.raises(PersistenceError, match="no id"):
            _insert(ReferralsRepository())


class TestUpdateStatus:
    @patch(f"{REPO_MODULE}.get_connection")
    def test_executes_update_query(self, mock_get_conn: MagicMock) -> None:
        _conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.rowcount = 1

        ReferralsRepository().update_status("r1", ReferralStatus.FAILED)

        sql, params = mock_cursor.execute.call_args.args
        assert "UPDATE referrals" in sql
        assert "status" in sql
        assert params == ("failed", "r1")

    @patch(f"{REPO_MODULE}.get_connection")
    def test_commits_transaction(self, mock_get_conn: MagicMock) -> None:
        mock_conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.rowcount = 1

        ReferralsRepository().update_status("r1", ReferralStatus.FAILED)

        mock_conn.commit.assert_called_once()

    @patch(f"{REPO_MODULE}.get_connection")
    def test_raises_not_found_when_no_rows_updated(self, mock_get_conn: MagicMock) -> None:
        mock_conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.rowcount = 0

        with pytest.raises(ReferralNotFoundError, match="Referral r9 not found"):
            ReferralsRepository().update_status("r9", ReferralStatus.FAILED)
        mock_conn.commit.assert_not_called()

    @patch(f"{REPO_MODULE}.get_connection")
    def test_wraps_database_errors(self, mock_get_conn: MagicMock) -> None:
        _conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.execute.side_effect = psycopg.OperationalError("timeout")

        with pytest.raises(PersistenceError, match="timeout"):
            ReferralsRepository().update_status("r1", ReferralStatus.FAILED)


class TestFindById:
    @patch(f"{REPO_MODULE}.get_connection")
    def test_returns_referral_record(self, mock_get_conn: MagicMock) -> None:
        _conn, mock_cursor = _mock_connection(mock_get_conn)
        created = datetime(2026, 1, 2, 3, 4, 5)
        mock_cursor.fetchone.return_value = {
            "id": "r1",
            "file_path": "u1/1-abc.pdf",
            "file_name": "referral.pdf",
            "file_size": 2048,
            "mime_type": "application/pdf",
            "status": "pending",
            "created_at": created,
        }

        record = ReferralsRepository().find_by_id("r1")

        assert record == ReferralRecord(
            id="r1",
            file_path="u1/1-abc.pdf",
            file_name="referral.pdf",
            file_size_bytes=2048,
            mime_type="application/pdf",
            status=ReferralStatus.PENDING,
            created_at=created,
        )

    @patch(f"{REPO_MODULE}.get_connection")
    def test_raises_not_found_when_missing(self, mock_get_conn: MagicMock) -> None:
        _conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.fetchone.return_value = None

        with pytest.raises(ReferralNotFoundError, match="Referral missing not found"):
            ReferralsRepository().find_by_id("missing")

    @patch(f"{REPO_MODULE}.get_connection")
    def test_wraps_database_errors(self, mock_get_conn: MagicMock) -> None:
        _conn, mock_cursor = _mock_connection(mock_get_conn)
        mock_cursor.execute.side_effect = psycopg.OperationalError("server closed")

        with pytest.raises(PersistenceError, match="server closed"):
            ReferralsRepository().find_by_id("r1")
