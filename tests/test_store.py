"""Tests for the document-store adapter and the documents it writes."""

import pytest
from mongoengine.errors import FieldDoesNotExist
from pymongo.errors import ServerSelectionTimeoutError

from app.models.allowance import Allowance
from app.models.merchant import Merchant
from app.models.user import User
from app.services.store import StoreError, UserStore


def _user(uid="uid-1", username="alice") -> User:
    return User(id=uid, email=f"{uid}@example.com", username=username, email_verification_token="tok")


class TestUserStore:
    def test_username_taken(self, mongo):
        store = UserStore()
        assert store.username_taken("alice") is False

        store.insert_user(_user())

        assert store.username_taken("alice") is True
        assert store.username_taken("bob") is False

    def test_insert_user_lowercases_username(self, mongo):
        UserStore().insert_user(_user(username="MixedCase"))

        assert User.objects.get(id="uid-1").username == "mixedcase"

    def test_insert_user_never_overwrites_existing_uid(self, mongo):
        store = UserStore()
        store.insert_user(_user(username="alice"))

        with pytest.raises(StoreError) as exc_info:
            store.insert_user(_user(username="other"))

        assert exc_info.value.operation == "user insert"
        assert User.objects.get(id="uid-1").username == "alice"

    def test_duplicate_username_rejected_by_index(self, mongo):
        store = UserStore()
        store.insert_user(_user(uid="uid-1", username="alice"))

        with pytest.raises(StoreError):
            store.insert_user(_user(uid="uid-2", username="ALICE"))

    def test_invalid_document_is_a_store_error(self, mongo):
        with pytest.raises(StoreError):
            UserStore().insert_user(User(id="uid-1", email="not-an-email", username="a", email_verification_token="t"))

    def test_get_merchant(self, default_merchant):
        store = UserStore()

        assert store.get_merchant(default_merchant.id).merchant_uid == default_merchant.merchant_uid
        assert store.get_merchant("missing") is None

    def test_get_merchant_ignores_unknown_keys(self, mongo):
        Merchant._get_collection().insert_one({"_id": "m-raw", "name": "Hoya", "merchant_uid": "m-1", "logoUrl": "x"})

        merchant = UserStore().get_merchant("m-raw")

        assert merchant.merchant_uid == "m-1"
        assert merchant.logo_url is None

    def test_undeclared_field_error_is_wrapped(self, default_merchant, monkeypatch):
        def _drifted(cls, *args, **kwargs):
            raise FieldDoesNotExist("The fields \"{'logoUrl'}\" do not exist on the document \"Merchant\"")

        monkeypatch.setattr(Merchant, "_from_son", classmethod(_drifted))

        with pytest.raises(StoreError) as exc_info:
            UserStore().get_merchant(default_merchant.id)

        assert exc_info.value.operation == "merchant lookup"
        assert isinstance(exc_info.value.cause, FieldDoesNotExist)

    def test_allowance_keyed_by_merchant_within_user(self, mongo):
        store = UserStore()
        user = store.insert_user(_user())
        store.insert_allowance(Allowance(user=user, merchant_uid="m-1", amount="$0.00"))

        with pytest.raises(StoreError):
            store.insert_allowance(Allowance(user=user, merchant_uid="m-1", amount="$5.00"))

        other = store.insert_user(_user(uid="uid-2", username="bob"))
        store.insert_allowance(Allowance(user=other, merchant_uid="m-1", amount="$0.00"))
        assert Allowance.objects.count() == 2

    def test_driver_errors_are_wrapped(self, mongo, monkeypatch):
        def _unreachable(self, *args, **kwargs):
            raise ServerSelectionTimeoutError("no servers")

        monkeypatch.setattr(User, "save", _unreachable)

        with pytest.raises(StoreError) as exc_info:
            UserStore().insert_user(_user())

        assert isinstance(exc_info.value.cause, ServerSelectionTimeoutError)


class TestDocuments:
    def test_allowance_deleted_with_user(self, mongo):
        store = UserStore()
        user = store.insert_user(_user())
        store.insert_allowance(Allowance(user=user, merchant_uid="m-1", amount="$0.00"))

        user.delete()

        assert Allowance.objects.count() == 0

