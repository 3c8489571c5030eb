from __future__ import annotations

from typing import Any

import httpx
from pydantic import BaseModel


SENDGRID_MAIL_URL = "https://api.sendgrid.com/v3/mail/send"


class EmailDeliveryError(Exception):
    """The email service refused or never received the message."""

    def __init__(self, reason: str, status_code: int | None = None) -> None:
        self.reason = reason
        self.status_code = status_code
        super().__init__(f"email delivery failed: {reason}")


class SenderIdentity(BaseModel):
    email: str
    name: str


class SendGridClient:
    """Dynamic-template mail via the SendGrid v3 API."""

    def __init__(self, api_key: str, http_client: httpx.Client) -> None:
        self._api_key = api_key
        self._http = http_client

    def send_templated_email(
        self,
        template_id: str,
        recipient: str,
        template_data: dict[str, Any],
        sender: SenderIdentity,
    ) -> None:
        payload = {
            "from": sender.model_dump(),
            "personalizations": [
                {
                    "to": [{"email": recipient}],
                    "dynamic_template_data": template_data,
                }
            ],
            "template_id": template_id,
        }
        try:
            resp = self._http.post(
                SENDGRID_MAIL_URL,
                headers={"Authorization": f"Bearer {self._api_key}"},
                json=payload,
            )
        except httpx.HTTPError as exc:
            raise EmailDeliveryError(type(exc).__name__) from exc

        if resp.is_error:
            raise EmailDeliveryError(f"HTTP_{resp.status_code}", status_code=resp.status_code)
