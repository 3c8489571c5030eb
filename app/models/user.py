from mongoengine import BooleanField, EmailField, StringField, URLField
from app.models.base import BaseDocument


class User(BaseDocument):
    """User document.

    Fields:
    - id (str): identity-provider uid, used as primary key
    - email (EmailStr): canonical address returned by the identity provider
    - username (str, unique): always stored lower-cased
    - photo_url (str|None)
    - email_verification_token (str): random token mailed at signup
    - email_verified/is_public (bool): both false at signup
    """
    id = StringField(primary_key=True)
    email = EmailField(required=True, null=False)
    username = StringField(required=True, null=False, unique=True)
    photo_url = URLField(required=False, null=True)
    email_verification_token = StringField(required=True, null=False)
    email_verified = BooleanField(required=True, null=False, default=False)
    is_public = BooleanField(required=True, null=False, default=False)

    meta = {
        "collection": "users",
        "indexes": [
            {"fields": ["username"], "unique": True},
        ],
    }

    @property
    def user_id(self) -> str:
        return self.id

    def clean(self):
        if self.username:
            self.username = self.username.lower()
