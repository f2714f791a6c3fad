import json
import logging
from functools import wraps

from django.core.exceptions import ValidationError as ModelValidationError
from django.http import Http404, JsonResponse
from pydantic import ValidationError

from quiz_platform.exceptions import InvalidRequest, QuizPlatformError

logger = logging.getLogger("quiz_platform")


def parse_json_body(request) -> dict:
    if not request.body:
        return {}
    try:
        data = json.loads(request.body.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError):
        raise InvalidRequest("Request body must be valid JSON")

    if not isinstance(data, dict):
        raise InvalidRequest("Request body must be a JSON object")
    return data


def format_validation_errors(errors) -> str:
    parts = []
    for error in errors:
        location = ".".join(str(loc) for loc in error["loc"]) or "body"
        parts.append(f"{location}: {error['msg']}")
    return "; ".join(parts)


def validate_payload(schema, data):
    """Validate a parsed body against a pydantic model, raising InvalidRequest."""
    try:
        return schema.model_validate(data)
    except ValidationError as e:
        raise InvalidRequest(format_validation_errors(e.errors()))


def form_error_message(form) -> str:
    parts = []
    for field, errors in form.errors.items():
        label = "body" if field == "__all__" else field
        parts.append(f"{label}: {' '.join(errors)}")
    return "; ".join(parts)


def error_response(message, status, **extra):
    return JsonResponse({"success": False, "message": message, **extra}, status=status)


def handle_api_errors(view_func):
    """Translate domain errors raised by a JSON view into error responses."""
    @wraps(view_func)
    def wrapper(request, *args, **kwargs):
        try:
            return view_func(request, *args, **kwargs)
        except QuizPlatformError as e:
            if e.status_code >= 500:
                logger.error(e)
            return error_response(e.message, e.status_code)
        except ModelValidationError as e:
            return error_response("; ".join(e.messages), 400)
        except Http404 as e:
            return error_response(str(e) or "Not found", 404)
        except Exception as e:
            logger.error(e)
            return error_response("Server error", 500, error=str(e))
    return wrapper


def method_not_allowed():
    return error_response("Method not allowed", 405)
