from __future__ import annotations

from mongoengine.errors import FieldDoesNotExist, OperationError, ValidationError
from pymongo.errors import PyMongoError

from app.models.allowance import Allowance
from app.models.merchant import Merchant
from app.models.user import User


_STORE_ERRORS = (PyMongoError, OperationError, ValidationError, FieldDoesNotExist)


class StoreError(Exception):
    """A document-store read or write failed."""

    def __init__(self, operation: str, cause: Exception | None = None) -> None:
        self.operation = operation
        self.cause = cause
        super().__init__(f"document store {operation} failed")


class UserStore:
    """Registration's view of the document store.

    Wraps the mongoengine documents and turns every driver or validation
    failure into a StoreError so callers match on one type.
    """

    def username_taken(self, username: str) -> bool:
        try:
            return User.objects(username=username).count() > 0
        except _STORE_ERRORS as exc:
            raise StoreError("username query", exc) from exc

    def insert_user(self, user: User) -> User:
        try:
            # force_insert: never overwrite an existing uid
            user.save(force_insert=True)
        except _STORE_ERRORS as exc:
            raise StoreError("user insert", exc) from exc
        return user

    def get_merchant(self, merchant_id: str) -> Merchant | None:
        try:
            return Merchant.objects(id=merchant_id).first()
        except _STORE_ERRORS as exc:
            raise StoreError("merchant lookup", exc) from exc

    def insert_allowance(self, allowance: Allowance) -> Allowance:
        try:
            allowance.save(force_insert=True)
        except _STORE_ERRORS as exc:
            raise StoreError("allowance insert", exc) from exc
        return allowance
