from __future__ import annotations

from dataclasses import dataclass

from app.services.email import SenderIdentity
from app.utils.config import Settings


@dataclass(frozen=True)
class RegistrationConfig:
    """Everything the signup pipeline reads from configuration.

    Built once at startup; the pipeline never consults the environment.
    """
    identity_api_key: str | None
    email_api_key: str | None
    confirmation_template_id: str
    sender: SenderIdentity
    default_merchant_id: str
    default_allowance_amount: str = "$0.00"
    check_uniqueness: bool = True
    create_default_allowance: bool = True

    @classmethod
    def from_settings(cls, settings: Settings) -> "RegistrationConfig":
        return cls(
            identity_api_key=_secret(settings.firebase_web_api_key),
            email_api_key=_secret(settings.sendgrid_api_key),
            confirmation_template_id=settings.confirmation_template_id,
            sender=SenderIdentity(
                email=settings.confirmation_sender_email,
                name=settings.confirmation_sender_name,
            ),
            default_merchant_id=settings.default_merchant_id,
            default_allowance_amount=settings.default_allowance_amount,
            check_uniqueness=settings.check_uniqueness,
            create_default_allowance=settings.create_default_allowance,
        )


def _secret(value) -> str | None:
    if value is None:
        return None
    # Empty env vars count as unset
    return value.get_secret_value() or None
