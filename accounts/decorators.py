import logging
from functools import wraps

from django.contrib.auth import get_user_model
from django.core import signing
from django.views.decorators.csrf import csrf_exempt

from accounts.tokens import ADMIN_ROLE, QUIZ_TAKER_ROLE, read_bearer_token
from quiz_platform.utils import error_response

logger = logging.getLogger("quiz_platform")

User = get_user_model()


def get_bearer_payload(request):
    header = request.headers.get("Authorization", "")
    if not header.startswith("Bearer "):
        return None
    token = header[len("Bearer "):].strip()
    if not token:
        return None
    try:
        return read_bearer_token(token)
    except signing.BadSignature:
        logger.info("Rejected an invalid or expired bearer token")
        return False


def resolve_admin(request):
    """Return the staff user behind the request's bearer token, or None."""
    payload = get_bearer_payload(request)
    if not payload or payload.get("role") != ADMIN_ROLE:
        return None
    return User.objects.filter(pk=payload.get("id"), is_staff=True, is_active=True).first()


def admin_required(view_func):
    @wraps(view_func)
    def wrapper(request, *args, **kwargs):
        payload = get_bearer_payload(request)

        if payload is None:
            return error_response("Access denied. No token provided.", 401)
        if payload is False:
            return error_response("Invalid token.", 401)
        if payload.get("role") != ADMIN_ROLE:
            return error_response("Access denied. Admin only.", 403)

        admin = User.objects.filter(pk=payload.get("id"), is_staff=True, is_active=True).first()
        if admin is None:
            return error_response("Invalid token.", 401)

        request.admin = admin
        return view_func(request, *args, **kwargs)
    return csrf_exempt(wrapper)


def quiztaker_required(view_func):
    @wraps(view_func)
    def wrapper(request, *args, **kwargs):
        from quiztakers.models import QuizTaker

        payload = get_bearer_payload(request)

        if payload is None:
            return error_response("Access denied. No token provided.", 401)
        if payload is False:
            return error_response("Invalid token.", 401)
        if payload.get("role") != QUIZ_TAKER_ROLE:
            return error_response("Access denied. Quiz taker only.", 403)

        quiz_taker = QuizTaker.objects.filter(pk=payload.get("id")).first()
        if quiz_taker is None:
            return error_response("Invalid token.", 401)
        if not quiz_taker.is_active:
            return error_response("Account is inactive. Contact admin.", 403)

        request.quiz_taker = quiz_taker
        return view_func(request, *args, **kwargs)
    return csrf_exempt(wrapper)
