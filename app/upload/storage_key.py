import secrets
import time


def build_storage_key(
    user_id: str,
    *,
    epoch_millis: int | None = None,
    token: str | None = None,
) -> str:
    """Build ``{user_id}/{epoch_millis}-{token}.pdf``.

    The user id prefix matches the bucket's per-user folder policy. The token
    is drawn fresh on every call unless one is given.
    """
    if epoch_millis is None:
        epoch_millis = time.time_ns() // 1_000_000
    if token is None:
        token = secrets.token_hex(8)
    return f"{user_id}/{epoch_millis}-{token}.pdf"
