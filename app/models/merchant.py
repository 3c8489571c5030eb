from mongoengine import StringField, URLField

from app.models.base import BaseDocument


class Merchant(BaseDocument):
    """Merchant document, seeded out of band and read-only to registration.

    Fields:
    - id (str): well-known document identifier
    - name (str)
    - logo_url (str|None)
    - merchant_uid (str): identifier copied onto allowances
    """
    id = StringField(primary_key=True)
    name = StringField(required=True, null=False)
    logo_url = URLField(required=False, null=True)
    merchant_uid = StringField(required=True, null=False)

    meta = {
        "collection": "merchants",
        "strict": False,
    }
