import logging

from django.contrib.auth import authenticate, get_user_model
from django.http import JsonResponse
from django.utils.crypto import constant_time_compare
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_POST

from accounts.decorators import resolve_admin
from accounts.forms import AdminLoginForm, AdminRegistrationForm, QuizTakerLoginForm
from accounts.tokens import ADMIN_ROLE, QUIZ_TAKER_ROLE, make_bearer_token
from quiz_platform.utils import error_response, form_error_message, handle_api_errors, parse_json_body
from quiztakers.models import PREMIUM, QuizTaker

logger = logging.getLogger("quiz_platform")

User = get_user_model()


def _admin_dict(user):
    return {"id": user.pk, "email": user.email, "role": ADMIN_ROLE}


@csrf_exempt
@require_POST
@handle_api_errors
def admin_register(request):
    # Registration is open until the first admin exists, then only admins may add more
    if User.objects.filter(is_staff=True).exists() and resolve_admin(request) is None:
        return error_response("Only an existing admin can register new admins", 403)

    form = AdminRegistrationForm(parse_json_body(request))
    if not form.is_valid():
        return error_response(form_error_message(form), 400)

    email = form.cleaned_data["email"]
    admin = User.objects.create_user(username=email, email=email, password=form.cleaned_data["password"],
                                     is_staff=True)

    logger.info(f"Registered admin {admin.pk}")

    return JsonResponse({
        "success": True,
        "message": "Admin registered successfully",
        "token": make_bearer_token(admin.pk, ADMIN_ROLE),
        "admin": _admin_dict(admin),
    }, status=201)


@csrf_exempt
@require_POST
@handle_api_errors
def admin_login(request):
    form = AdminLoginForm(parse_json_body(request))
    if not form.is_valid():
        return error_response("Please provide email and password", 400)

    admin = authenticate(request, username=form.cleaned_data["email"].strip(),
                         password=form.cleaned_data["password"])

    if admin is None or not admin.is_staff:
        return error_response("Invalid credentials", 401)

    return JsonResponse({
        "success": True,
        "message": "Login successful",
        "token": make_bearer_token(admin.pk, ADMIN_ROLE),
        "admin": _admin_dict(admin),
    })


@csrf_exempt
@require_POST
@handle_api_errors
def quiztaker_login(request):
    form = QuizTakerLoginForm(parse_json_body(request))
    if not form.is_valid():
        return error_response("Please provide a valid email address and access code", 400)

    quiz_taker = QuizTaker.objects.filter(email=form.cleaned_data["email"], account_type=PREMIUM).first()

    if quiz_taker is None or not constant_time_compare(quiz_taker.access_code or "",
                                                       form.cleaned_data["accessCode"]):
        return error_response("Invalid email or access code", 401)

    if not quiz_taker.is_active:
        return error_response("Account is inactive. Contact admin.", 403)

    return JsonResponse({
        "success": True,
        "message": "Login successful",
        "token": make_bearer_token(quiz_taker.pk, QUIZ_TAKER_ROLE),
        "quizTaker": {
            "id": quiz_taker.pk,
            "email": quiz_taker.email,
            "name": quiz_taker.name,
            "accessCode": quiz_taker.access_code,
        },
    })
