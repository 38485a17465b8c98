from dataclasses import dataclass


@dataclass(frozen=True)
class AuthSession:
    """The caller's session, passed explicitly into each upload."""

    access_token: str


@dataclass(frozen=True)
class AuthenticatedUser:
    id: str
    email: str | None = None
