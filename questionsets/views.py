import logging

from django.db import transaction
from django.http import JsonResponse
from django.shortcuts import get_object_or_404

from accounts.decorators import admin_required
from questionsets.models import Question, QuestionSet
from questionsets.schemas import QuestionPayload, QuestionSetCreate, QuestionSetUpdate, QuestionsAppend, \
    QuestionUpdate
from quiz_platform.exceptions import NotFound, PreconditionFailed
from quiz_platform.utils import handle_api_errors, method_not_allowed, parse_json_body, validate_payload

logger = logging.getLogger("quiz_platform")


def _get_question_set(pk):
    question_set = QuestionSet.objects.select_related("created_by").filter(pk=pk).first()
    if question_set is None:
        raise NotFound("Question set not found")
    return question_set


def _add_questions(question_set, payloads, start_order):
    Question.objects.bulk_create([
        Question(question_set=question_set, order=start_order + index + 1, **payload.model_fields_for_question())
        for index, payload in enumerate(payloads)
    ])
    question_set.recalculate_totals()


@admin_required
@handle_api_errors
def question_set_collection(request):
    if request.method == "GET":
        return list_question_sets(request)
    if request.method == "POST":
        return create_question_set(request)
    return method_not_allowed()


def list_question_sets(request):
    question_sets = QuestionSet.objects.select_related("created_by")

    is_active = request.GET.get("isActive")
    if is_active is not None:
        question_sets = question_sets.filter(is_active=is_active == "true")

    search = request.GET.get("search")
    if search:
        question_sets = question_sets.filter(title__icontains=search)

    data = [question_set.as_dict(include_questions=False) for question_set in question_sets]
    return JsonResponse({"success": True, "count": len(data), "questionSets": data})


def create_question_set(request):
    payload = validate_payload(QuestionSetCreate, parse_json_body(request))

    with transaction.atomic():
        question_set = QuestionSet.objects.create(title=payload.title, created_by=request.admin)
        _add_questions(question_set, payload.questions, 0)

    logger.info(f"Question set {question_set.pk} created with {question_set.question_count} questions")

    return JsonResponse({
        "success": True,
        "message": "Question set created successfully",
        "questionSet": question_set.as_dict(),
    }, status=201)


@admin_required
@handle_api_errors
def question_set_detail(request, pk):
    question_set = _get_question_set(pk)

    if request.method == "GET":
        return JsonResponse({"success": True, "questionSet": question_set.as_dict()})

    if request.method == "PUT":
        payload = validate_payload(QuestionSetUpdate, parse_json_body(request))

        with transaction.atomic():
            if payload.title:
                question_set.title = payload.title
            if payload.is_active is not None:
                question_set.is_active = payload.is_active
            if payload.questions is not None:
                question_set.questions.all().delete()
                _add_questions(question_set, payload.questions, 0)
            question_set.save()

        return JsonResponse({
            "success": True,
            "message": "Question set updated successfully",
            "questionSet": question_set.as_dict(),
        })

    if request.method == "DELETE":
        quizzes_using_set = question_set.quiz_snapshots.values("quiz").distinct().count()
        if quizzes_using_set:
            raise PreconditionFailed(
                f"Cannot delete question set. It is being used in {quizzes_using_set} quiz(zes). "
                "Please remove it from those quizzes first or deactivate it instead."
            )
        question_set.delete()
        logger.info(f"Question set {pk} deleted")
        return JsonResponse({"success": True, "message": "Question set deleted successfully"})

    return method_not_allowed()


@admin_required
@handle_api_errors
def toggle_active(request, pk):
    if request.method != "PATCH":
        return method_not_allowed()

    question_set = _get_question_set(pk)
    question_set.is_active = not question_set.is_active
    question_set.save()

    state = "activated" if question_set.is_active else "deactivated"
    return JsonResponse({
        "success": True,
        "message": f"Question set {state} successfully",
        "questionSet": question_set.as_dict(),
    })


@admin_required
@handle_api_errors
def add_questions(request, pk):
    if request.method != "POST":
        return method_not_allowed()

    question_set = _get_question_set(pk)
    payload = validate_payload(QuestionsAppend, parse_json_body(request))

    with transaction.atomic():
        _add_questions(question_set, payload.questions, question_set.questions.count())

    return JsonResponse({
        "success": True,
        "message": "Questions added successfully",
        "questionSet": question_set.as_dict(),
    })


@admin_required
@handle_api_errors
def question_detail(request, pk, question_pk):
    question_set = _get_question_set(pk)
    question = get_object_or_404(Question, pk=question_pk, question_set=question_set)

    if request.method == "PUT":
        changes = validate_payload(QuestionUpdate, parse_json_body(request))
        merged = validate_payload(QuestionPayload, changes.merged_with(question))

        for field, value in merged.model_fields_for_question().items():
            setattr(question, field, value)
        if merged.order is not None:
            question.order = merged.order
        question.save()

        question_set.refresh_from_db()
        return JsonResponse({
            "success": True,
            "message": "Question updated successfully",
            "questionSet": question_set.as_dict(),
        })

    if request.method == "DELETE":
        question.delete()
        question_set.refresh_from_db()
        return JsonResponse({
            "success": True,
            "message": "Question deleted successfully",
            "questionSet": question_set.as_dict(),
        })

    return method_not_allowed()
