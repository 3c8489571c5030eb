from __future__ import annotations

import json

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator


INVALID_USERNAME_CHARS = (" ", "@")


class RegistrationRequest(BaseModel):
    """Signup payload. The password is write-only: never stored or logged."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    email: str = ""
    username: str = ""
    password: str = Field(default="", repr=False)
    want_secure_token: bool = Field(default=False, alias="wantSecureToken")

    @field_validator("want_secure_token", mode="before")
    @classmethod
    def _null_means_false(cls, value):
        return False if value is None else value


def parse_registration_request(raw_body: bytes | None) -> RegistrationRequest:
    """Deserialize a signup body, degrading bad input to empty values.

    Malformed JSON or a non-object body gives an all-empty request. A wrongly
    typed field falls back to its default on its own, so the remaining fields
    (the username in particular) still reach validation.
    """
    if not raw_body:
        return RegistrationRequest()
    try:
        data = json.loads(raw_body)
    except ValueError:
        return RegistrationRequest()
    if not isinstance(data, dict):
        return RegistrationRequest()

    try:
        return RegistrationRequest.model_validate(data)
    except ValidationError as exc:
        bad_keys = {err["loc"][0] for err in exc.errors() if err["loc"]}

    # A field may arrive under its name or its alias; drop both spellings
    for name, field in RegistrationRequest.model_fields.items():
        if name in bad_keys or field.alias in bad_keys:
            bad_keys.update({name, field.alias})
    return RegistrationRequest.model_validate({k: v for k, v in data.items() if k not in bad_keys})


def is_valid_username(username: str) -> bool:
    return not any(ch in username for ch in INVALID_USERNAME_CHARS)
