import json
from collections.abc import Iterator

import httpx
import mongomock
import pytest
from mongoengine import connect, disconnect

from app.models.allowance import Allowance
from app.models.merchant import Merchant
from app.models.user import User
from app.services.email import SenderIdentity
from app.services.registration import RegistrationConfig, RegistrationService
from app.services.store import UserStore

TEST_IDENTITY_KEY = "test-firebase-key"  # nosec B105
TEST_EMAIL_KEY = "test-sendgrid-key"  # nosec B105
TEST_MERCHANT_ID = "zzy3wQDdmwXXjzVu4eCx3QRAQ1J3"
TEST_MERCHANT_UID = "merchant-uid-default"
TEST_TEMPLATE_ID = "d-test-template"


class FakeUpstreams:
    """Stands in for the identity provider and SendGrid at the HTTP layer.

    Records every request so tests can assert which external calls happened.
    """

    def __init__(self) -> None:
        self.identity_requests: list[httpx.Request] = []
        self.email_requests: list[httpx.Request] = []
        self.identity_error: str | None = None
        self.identity_down = False
        self.email_status = 202
        self.email_down = False
        self._next_uid = 1

    def handler(self, request: httpx.Request) -> httpx.Response:
        if request.url.host == "identitytoolkit.googleapis.com":
            self.identity_requests.append(request)
            if self.identity_down:
                raise httpx.ConnectError("connection refused", request=request)
            if self.identity_error:
                return httpx.Response(400, json={"error": {"code": 400, "message": self.identity_error}})
            body = _json(request)
            if not body.get("email"):
                return httpx.Response(400, json={"error": {"code": 400, "message": "INVALID_EMAIL"}})
            if not body.get("password"):
                return httpx.Response(400, json={"error": {"code": 400, "message": "MISSING_PASSWORD"}})
            uid = f"uid-{self._next_uid}"
            self._next_uid += 1
            payload = {"localId": uid, "email": body["email"].lower()}
            if body.get("returnSecureToken"):
                payload.update({"idToken": "id-token", "refreshToken": "refresh-token"})
            return httpx.Response(200, json=payload)

        if request.url.host == "api.sendgrid.com":
            self.email_requests.append(request)
            if self.email_down:
                raise httpx.ReadTimeout("timed out", request=request)
            return httpx.Response(self.email_status)

        return httpx.Response(404)

    def client(self) -> httpx.Client:
        return httpx.Client(transport=httpx.MockTransport(self.handler))


def _json(request: httpx.Request) -> dict:
    return json.loads(request.content)


@pytest.fixture
def mongo() -> Iterator[None]:
    """Fresh in-memory MongoDB per test."""
    connect("allowance_test", alias="default", mongo_client_class=mongomock.MongoClient)
    User.ensure_indexes()
    Allowance.ensure_indexes()
    yield
    # mongomock clients on the same host share data
    for document in (Allowance, Merchant, User):
        document.drop_collection()
    disconnect(alias="default")


@pytest.fixture
def default_merchant(mongo) -> Merchant:
    merchant = Merchant(id=TEST_MERCHANT_ID, name="Hoya Allowance", merchant_uid=TEST_MERCHANT_UID)
    merchant.save(force_insert=True)
    return merchant


@pytest.fixture
def upstreams() -> FakeUpstreams:
    return FakeUpstreams()


@pytest.fixture
def http_client(upstreams: FakeUpstreams) -> Iterator[httpx.Client]:
    client = upstreams.client()
    yield client
    client.close()


def make_config(**overrides) -> RegistrationConfig:
    values = {
        "identity_api_key": TEST_IDENTITY_KEY,
        "email_api_key": TEST_EMAIL_KEY,
        "confirmation_template_id": TEST_TEMPLATE_ID,
        "sender": SenderIdentity(email="confirmation@allowance.fund", name="Hoya Allowance"),
        "default_merchant_id": TEST_MERCHANT_ID,
    }
    values.update(overrides)
    return RegistrationConfig(**values)


@pytest.fixture
def make_service(mongo, http_client):
    """Build a RegistrationService against mongomock and the fake upstreams."""

    def _make(**overrides) -> RegistrationService:
        return RegistrationService(make_config(**overrides), UserStore(), http_client)

    return _make


@pytest.fixture
def service(make_service, default_merchant) -> RegistrationService:
    return make_service()
