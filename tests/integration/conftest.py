import os
from collections.abc import Generator

import pytest

from app.config.settings import Settings
from app.database.connection import close_pool, get_connection, init_pool

REFERRALS_DDL = """
CREATE TABLE IF NOT EXISTS referrals (
    id uuid PRIMARY KEY DEFAULT gen_random_uuid(),
    file_path text NOT NULL,
    file_name text NOT NULL,
    file_size bigint NOT NULL,
    mime_type text NOT NULL,
    status text NOT NULL DEFAULT 'pending',
    created_at timestamptz NOT NULL DEFAULT now()
)
"""


def _test_settings() -> Settings:
    os.environ.setdefault("DB_DATABASE", "referrals_test")
    return Settings()


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    return _test_settings()


@pytest.fixture(scope="session")
def integration_pool(test_settings: Settings) -> Generator[None, None, None]:
    try:
        init_pool(test_settings)
        with get_connection() as conn:
            conn.execute(REFERRALS_DDL)
            conn.commit()
    except Exception as e:
        close_pool()
        pytest.skip(
            f"PostgreSQL test DB not available: {e}. "
            "Set DB_* env to point at a disposable database"
        )
    try:
        yield
    finally:
        close_pool()


@pytest.fixture
def referral_cleanup(integration_pool: None) -> Generator[list[str], None, None]:
    created: list[str] = []
    yield created
    if not created:
        return
    with get_connection() as conn:
        with conn.cursor() as cur:
            for referral_id in created:
                cur.execute("DELETE FROM referrals WHERE id = %s", (referral_id,))
        conn.commit()
