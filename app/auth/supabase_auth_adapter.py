import httpx

from app.auth.base import BaseIdentityProvider
from app.auth.models import AuthenticatedUser, AuthSession
from app.upload.exceptions import AuthenticationError


class SupabaseAuthAdapter(BaseIdentityProvider):
    """Resolves users through the Supabase Auth ``/user`` endpoint."""

    def __init__(
        self,
        *,
        base_url: str,
        anon_key: str,
        timeout_seconds: int,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._client = httpx.Client(
            base_url=f"{base_url.rstrip('/')}/auth/v1",
            headers={"apikey": anon_key},
            timeout=timeout_seconds,
            transport=transport,
        )

    def get_current_user(self, session: AuthSession | None) -> AuthenticatedUser:
        if session is None or not session.access_token:
            raise AuthenticationError("No session supplied")

        try:
            response = self._client.get(
                "/user",
                headers={"Authorization": f"Bearer {session.access_token}"},
            )
        except httpx.HTTPError as exc:
            raise AuthenticationError(f"Auth transport error: {exc}") from exc

        if response.status_code != 200:
            raise AuthenticationError(f"Auth rejected session with HTTP {response.status_code}")

        try:
            body = response.json()
        except ValueError as exc:
            raise AuthenticationError("Auth returned a non-JSON body") from exc
        if not isinstance(body, dict) or not body.get("id"):
            raise AuthenticationError("Auth returned no user id")
        return AuthenticatedUser(id=str(body["id"]), email=body.get("email"))
