from django.conf import settings
from django.core import signing

ADMIN_ROLE = "admin"
QUIZ_TAKER_ROLE = "quiztaker"

_TOKEN_SALT = "accounts.bearer"


def make_bearer_token(principal_id, role: str) -> str:
    return signing.dumps({"id": principal_id, "role": role}, salt=_TOKEN_SALT)


def read_bearer_token(token: str) -> dict:
    """Return the {id, role} payload, raising signing.BadSignature when invalid or expired."""
    return signing.loads(token, salt=_TOKEN_SALT, max_age=settings.BEARER_TOKEN_MAX_AGE)
