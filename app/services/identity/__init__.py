from __future__ import annotations

import httpx
from pydantic import BaseModel, ConfigDict, Field


SIGN_UP_URL = "https://identitytoolkit.googleapis.com/v1/accounts:signUp"


class IdentityProviderError(Exception):
    """Sign-up rejected or the identity provider was unreachable.

    `reason` holds the provider's error code (EMAIL_EXISTS, WEAK_PASSWORD,
    ...) for logs; it is never returned to the caller.
    """

    def __init__(self, reason: str, status_code: int | None = None) -> None:
        self.reason = reason
        self.status_code = status_code
        super().__init__(f"identity sign-up failed: {reason}")


class SignUpResult(BaseModel):
    """Identity created by the provider."""
    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(alias="localId")
    email: str


class FirebaseIdentityClient:
    """Email/password sign-up against the Firebase Identity Toolkit REST API."""

    def __init__(self, api_key: str, http_client: httpx.Client) -> None:
        self._api_key = api_key
        self._http = http_client

    def sign_up_with_email(self, email: str, password: str, want_secure_token: bool = False) -> SignUpResult:
        try:
            resp = self._http.post(
                SIGN_UP_URL,
                params={"key": self._api_key},
                json={
                    "email": email,
                    "password": password,
                    "returnSecureToken": want_secure_token,
                },
            )
        except httpx.HTTPError as exc:
            raise IdentityProviderError(type(exc).__name__) from exc

        if resp.is_error:
            raise IdentityProviderError(_error_reason(resp), status_code=resp.status_code)

        try:
            return SignUpResult.model_validate(resp.json())
        except ValueError as exc:
            raise IdentityProviderError("MALFORMED_RESPONSE", status_code=resp.status_code) from exc


def _error_reason(resp: httpx.Response) -> str:
    # Error bodies look like {"error": {"code": 400, "message": "EMAIL_EXISTS"}}
    try:
        message = resp.json()["error"]["message"]
    except (ValueError, KeyError, TypeError):
        return f"HTTP_{resp.status_code}"
    # WEAK_PASSWORD carries a trailing " : detail"
    return str(message).split(" : ", 1)[0]
