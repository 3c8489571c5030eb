"""User signup: validate, check uniqueness, then create identity and records.

The pipeline talks to three independent systems in a fixed order: the
identity provider, the document store and the email service. Nothing is
written before the identity exists, and the confirmation email is best
effort: once the user and allowance documents are stored the registration
has succeeded whatever the email service does.
"""
from __future__ import annotations

import json
import logging
import uuid
from dataclasses import dataclass

import httpx

from app.models.allowance import Allowance
from app.models.user import User
from app.services.email import EmailDeliveryError, SendGridClient
from app.services.identity import FirebaseIdentityClient, IdentityProviderError, SignUpResult
from app.services.registration.config import RegistrationConfig
from app.services.registration.validation import (
    RegistrationRequest,
    is_valid_username,
    parse_registration_request,
)
from app.services.store import StoreError, UserStore
from app.utils.base import FailureKind


logger = logging.getLogger(__name__)

JSON_CONTENT_TYPE = "application/json"

# status, message (None: bare {"failed": true})
_FAILURES: dict[FailureKind, tuple[int, str | None]] = {
    FailureKind.VALIDATION: (400, "invalid characters in username"),
    FailureKind.CONFLICT: (409, "username already exists"),
    FailureKind.CONFIGURATION: (500, "FIREBASE_WEB_API_KEY is not set"),
    FailureKind.UPSTREAM_AUTH: (500, None),
    FailureKind.UPSTREAM_PERSISTENCE: (500, "registration could not be completed"),
}


class RegistrationError(Exception):
    """Fatal failure after the identity was created."""


class DefaultMerchantMissingError(RegistrationError):
    def __init__(self, merchant_id: str) -> None:
        self.merchant_id = merchant_id
        super().__init__(f"default merchant {merchant_id!r} does not exist")


@dataclass(frozen=True)
class RegistrationResponse:
    status: int
    body: bytes
    content_type: str = JSON_CONTENT_TYPE
    failure: FailureKind | None = None

    @classmethod
    def ok(cls) -> "RegistrationResponse":
        return cls(status=200, body=b"{}")

    @classmethod
    def failed(cls, kind: FailureKind) -> "RegistrationResponse":
        status, message = _FAILURES[kind]
        payload: dict = {"failed": True}
        if message is not None:
            payload["message"] = message
        return cls(status=status, body=json.dumps(payload).encode(), failure=kind)


class RegistrationService:
    """Runs one signup end to end and shapes the response.

    Every terminal outcome is a RegistrationResponse; store failures and a
    missing default merchant are mapped to a JSON 500 rather than raised.
    """

    def __init__(self, config: RegistrationConfig, store: UserStore, http_client: httpx.Client) -> None:
        self.config = config
        self.store = store
        self.identity: FirebaseIdentityClient | None = None
        self.mailer: SendGridClient | None = None
        if config.identity_api_key:
            self.identity = FirebaseIdentityClient(config.identity_api_key, http_client)
        if config.email_api_key:
            self.mailer = SendGridClient(config.email_api_key, http_client)

    def handle(self, raw_body: bytes | None) -> RegistrationResponse:
        request = parse_registration_request(raw_body)

        if not is_valid_username(request.username):
            logger.info("Rejected signup: invalid characters in username")
            return RegistrationResponse.failed(FailureKind.VALIDATION)

        if self.identity is None:
            logger.error("FIREBASE_WEB_API_KEY is not set")
            return RegistrationResponse.failed(FailureKind.CONFIGURATION)

        try:
            return self._register(request)
        except StoreError as exc:
            logger.error("Signup aborted: %s", exc, exc_info=exc.cause)
            return RegistrationResponse.failed(FailureKind.UPSTREAM_PERSISTENCE)
        except RegistrationError as exc:
            logger.error("Signup aborted: %s", exc)
            return RegistrationResponse.failed(FailureKind.UPSTREAM_PERSISTENCE)

    def _register(self, request: RegistrationRequest) -> RegistrationResponse:
        if self.config.check_uniqueness and self.store.username_taken(request.username.lower()):
            logger.info("Rejected signup: username %r already exists", request.username)
            return RegistrationResponse.failed(FailureKind.CONFLICT)

        try:
            identity = self.identity.sign_up_with_email(
                request.email, request.password, request.want_secure_token
            )
        except IdentityProviderError as exc:
            logger.warning("Identity sign-up failed: %s", exc.reason)
            return RegistrationResponse.failed(FailureKind.UPSTREAM_AUTH)

        # From here on the identity exists; later failures leave it orphaned
        user = self._create_user(request, identity)
        if self.config.create_default_allowance:
            self._create_default_allowance(user)

        self._send_confirmation(request, user)
        logger.info("Registered user %s", user.user_id)
        return RegistrationResponse.ok()

    def _create_user(self, request: RegistrationRequest, identity: SignUpResult) -> User:
        user = User(
            id=identity.user_id,
            email=identity.email,
            username=request.username.lower(),
            photo_url=None,
            email_verification_token=str(uuid.uuid4()),
            email_verified=False,
            is_public=False,
        )
        try:
            return self.store.insert_user(user)
        except StoreError:
            logger.error("Identity %s has no user document", identity.user_id)
            raise

    def _create_default_allowance(self, user: User) -> Allowance:
        merchant = self.store.get_merchant(self.config.default_merchant_id)
        if merchant is None:
            logger.error("User %s stored without a default allowance", user.user_id)
            raise DefaultMerchantMissingError(self.config.default_merchant_id)

        allowance = Allowance(
            user=user,
            merchant_uid=merchant.merchant_uid,
            amount=self.config.default_allowance_amount,
        )
        try:
            return self.store.insert_allowance(allowance)
        except StoreError:
            logger.error("User %s stored without a default allowance", user.user_id)
            raise

    def _send_confirmation(self, request: RegistrationRequest, user: User) -> None:
        if self.mailer is None:
            logger.warning("SENDGRID_API_KEY is not set; no confirmation email for %s", user.user_id)
            return
        try:
            self.mailer.send_templated_email(
                template_id=self.config.confirmation_template_id,
                recipient=request.email,
                template_data={
                    "username": request.username,
                    "uid": user.user_id,
                    "token": user.email_verification_token,
                },
                sender=self.config.sender,
            )
        except EmailDeliveryError as exc:
            logger.warning("Confirmation email for %s not sent: %s", user.user_id, exc.reason)


__all__ = [
    "DefaultMerchantMissingError",
    "RegistrationConfig",
    "RegistrationError",
    "RegistrationRequest",
    "RegistrationResponse",
    "RegistrationService",
    "parse_registration_request",
]
