import logging

from django.db import transaction
from django.http import JsonResponse

from accounts.decorators import admin_required
from quiz.forms import DEFAULT_SETTINGS, QuizSettingsForm
from quiz.models import Quiz
from quiz.services import load_question_sets, snapshot_question_sets
from quiz_platform.exceptions import InvalidRequest, NotFound, PreconditionFailed
from quiz_platform.utils import form_error_message, handle_api_errors, method_not_allowed, parse_json_body

logger = logging.getLogger("quiz_platform")


def get_quiz(pk):
    quiz = Quiz.objects.prefetch_related("question_sets__questions").filter(pk=pk).first()
    if quiz is None:
        raise NotFound("Quiz not found")
    return quiz


def _validated_settings(base, incoming):
    if not isinstance(incoming, dict):
        raise InvalidRequest("Quiz settings must be an object")
    form = QuizSettingsForm.for_settings(base, incoming)
    if not form.is_valid():
        raise InvalidRequest(form_error_message(form))
    return form


@admin_required
@handle_api_errors
def quiz_collection(request):
    if request.method == "GET":
        return list_quizzes(request)
    if request.method == "POST":
        return create_quiz(request)
    return method_not_allowed()


def list_quizzes(request):
    quizzes = Quiz.objects.prefetch_related("question_sets__questions")

    is_active = request.GET.get("isActive")
    if is_active is not None:
        quizzes = quizzes.filter(is_active=is_active == "true")

    is_quiz_challenge = request.GET.get("isQuizChallenge")
    if is_quiz_challenge is not None:
        quizzes = quizzes.filter(is_quiz_challenge=is_quiz_challenge == "true")

    data = [quiz.as_dict(include_questions=False) for quiz in quizzes]
    return JsonResponse({"success": True, "count": len(data), "quizzes": data})


def create_quiz(request):
    body = parse_json_body(request)

    incoming = body.get("settings")
    if not isinstance(incoming, dict) or not incoming.get("title"):
        raise InvalidRequest("Quiz title is required")

    form = _validated_settings({"title": "", **DEFAULT_SETTINGS}, incoming)
    question_sets = load_question_sets(body.get("questionSetCombination"))

    with transaction.atomic():
        quiz = form.apply_to(Quiz(created_by=request.admin))
        quiz.save()
        snapshot_question_sets(quiz, question_sets)

    logger.info(f"Quiz {quiz.pk} created by admin {request.admin.pk}")

    return JsonResponse({
        "success": True,
        "message": "Quiz created successfully",
        "quiz": get_quiz(quiz.pk).as_dict(),
    }, status=201)


@admin_required
@handle_api_errors
def quiz_detail(request, pk):
    quiz = get_quiz(pk)

    if request.method == "GET":
        return JsonResponse({"success": True, "quiz": quiz.as_dict()})

    if request.method == "PUT":
        body = parse_json_body(request)

        if "settings" in body:
            form = _validated_settings(quiz.settings_dict(), body["settings"])
            form.apply_to(quiz)
        if "isActive" in body:
            quiz.is_active = bool(body["isActive"])
        quiz.save()

        return JsonResponse({
            "success": True,
            "message": "Quiz updated successfully",
            "quiz": get_quiz(quiz.pk).as_dict(),
        })

    if request.method == "DELETE":
        if quiz.submissions.exists():
            raise PreconditionFailed("Cannot delete a quiz that has submissions. Deactivate it instead.")
        quiz.delete()
        logger.info(f"Quiz {pk} deleted")
        return JsonResponse({"success": True, "message": "Quiz deleted successfully"})

    return method_not_allowed()


@admin_required
@handle_api_errors
def replace_question_sets(request, pk):
    if request.method != "PUT":
        return method_not_allowed()

    body = parse_json_body(request)
    question_set_ids = body.get("questionSetCombination")
    if not isinstance(question_set_ids, list) or len(question_set_ids) != 4:
        raise InvalidRequest("Exactly 4 question set IDs are required")

    quiz = get_quiz(pk)
    if quiz.submissions.exists():
        raise PreconditionFailed("Cannot change the question sets of a quiz that already has submissions")

    question_sets = load_question_sets(question_set_ids)

    with transaction.atomic():
        snapshot_question_sets(quiz, question_sets)

    return JsonResponse({
        "success": True,
        "message": "Quiz question sets updated successfully",
        "quiz": get_quiz(quiz.pk).as_dict(),
    })


@admin_required
@handle_api_errors
def toggle_active(request, pk):
    if request.method != "PATCH":
        return method_not_allowed()

    quiz = get_quiz(pk)
    quiz.is_active = not quiz.is_active
    quiz.save()

    state = "activated" if quiz.is_active else "deactivated"
    return JsonResponse({
        "success": True,
        "message": f"Quiz {state} successfully",
        "quiz": quiz.as_dict(include_questions=False),
    })


@admin_required
@handle_api_errors
def statistics(request, pk):
    if request.method != "GET":
        return method_not_allowed()

    quiz = get_quiz(pk)
    snapshots = list(quiz.question_sets.all())

    return JsonResponse({
        "success": True,
        "statistics": {
            "totalQuestionSets": len(snapshots),
            "totalQuestions": sum(len(snapshot.questions.all()) for snapshot in snapshots),
            "totalPoints": quiz.total_points,
            "questionSetBreakdown": [
                {
                    "title": snapshot.title,
                    "questionCount": len(snapshot.questions.all()),
                    "totalPoints": snapshot.total_points,
                    "order": snapshot.order,
                }
                for snapshot in snapshots
            ],
            "duration": quiz.get_total_duration_in_seconds(),
        },
    })
