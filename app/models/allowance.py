from mongoengine import CASCADE, ReferenceField, StringField

from app.models.base import BaseDocument
from app.models.user import User


class Allowance(BaseDocument):
    """Per-user spending allowance at one merchant.

    Owned by its user: keyed by merchant_uid within the user and removed
    when the user is deleted.

    Fields:
    - user (Ref[User])
    - merchant_uid (str)
    - amount (str): money in the grantor's display format, e.g. "$0.00"
    """
    user = ReferenceField(document_type=User, required=True, null=False, reverse_delete_rule=CASCADE)
    merchant_uid = StringField(required=True, null=False)
    amount = StringField(required=True, null=False)

    meta = {
        "collection": "allowances",
        "indexes": [
            {"fields": ["user", "merchant_uid"], "unique": True},
        ],
    }
