import logging

from django.db import transaction
from django.http import JsonResponse

from accounts.decorators import admin_required, quiztaker_required
from accounts.emails import send_access_code_email
from quiz.models import Quiz
from quiz_platform.exceptions import InvalidRequest, NotFound, PermissionDenied, PreconditionFailed
from quiz_platform.utils import form_error_message, handle_api_errors, method_not_allowed, parse_json_body
from quiztakers.forms import AssignQuizForm, QuizTakerForm
from quiztakers.models import COMPLETED, PREMIUM, REGULAR, AssignedQuiz, QuizTaker
from quiztakers.progress import check_slot, ensure_progress, reorder_question_sets, start_question_set, start_quiz
from submissions.coordinator import run_in_transaction
from submissions.models import IN_PROGRESS

logger = logging.getLogger("quiz_platform")


def get_quiz_taker(pk):
    quiz_taker = QuizTaker.objects.filter(pk=pk).first()
    if quiz_taker is None:
        raise NotFound("Quiz taker not found")
    return quiz_taker


def quiz_taker_detail_dict(quiz_taker):
    data = quiz_taker.as_dict()
    data["assignedQuizzes"] = [
        assignment.as_dict()
        for assignment in quiz_taker.assigned_quizzes.select_related("quiz").prefetch_related("progress")
    ]
    data["quizzesTaken"] = [entry.as_dict() for entry in quiz_taker.quizzes_taken.all()]
    return data


# Admin endpoints

@admin_required
@handle_api_errors
def create_quiz_taker(request):
    if request.method != "POST":
        return method_not_allowed()

    form = QuizTakerForm.for_create(parse_json_body(request))
    if not form.is_valid():
        raise InvalidRequest(form_error_message(form))

    quiz_taker = form.apply_to(QuizTaker())
    if quiz_taker.account_type == PREMIUM:
        quiz_taker.access_code = QuizTaker.generate_unique_access_code()

    with transaction.atomic():
        quiz_taker.save_versioned()
        if quiz_taker.account_type == PREMIUM:
            send_access_code_email(quiz_taker)

    logger.info(f"Quiz taker {quiz_taker.pk} created by admin {request.admin.pk}")

    return JsonResponse({
        "success": True,
        "message": "Quiz taker created successfully",
        "quizTaker": quiz_taker.as_dict(),
    }, status=201)


@admin_required
@handle_api_errors
def list_quiz_takers(request):
    if request.method != "GET":
        return method_not_allowed()

    quiz_takers = QuizTaker.objects.all()

    account_type = request.GET.get("accountType")
    if account_type:
        quiz_takers = quiz_takers.filter(account_type=account_type)

    is_active = request.GET.get("isActive")
    if is_active is not None:
        quiz_takers = quiz_takers.filter(is_active=is_active == "true")

    data = [quiz_taker.as_dict() for quiz_taker in quiz_takers]
    return JsonResponse({"success": True, "count": len(data), "quizTakers": data})


@admin_required
@handle_api_errors
def quiz_taker_detail(request, pk):
    quiz_taker = get_quiz_taker(pk)

    if request.method == "GET":
        return JsonResponse({"success": True, "quizTaker": quiz_taker_detail_dict(quiz_taker)})

    if request.method == "PUT":
        return update_quiz_taker(request, quiz_taker)

    if request.method == "DELETE":
        quiz_taker.delete()
        logger.info(f"Quiz taker {pk} deleted by admin {request.admin.pk}")
        return JsonResponse({"success": True, "message": "Quiz taker deleted successfully"})

    return method_not_allowed()


def update_quiz_taker(request, quiz_taker):
    form = QuizTakerForm.for_update(quiz_taker, parse_json_body(request))
    if not form.is_valid():
        raise InvalidRequest(form_error_message(form))

    form.apply_to(quiz_taker)

    needs_access_code = quiz_taker.account_type == PREMIUM and not quiz_taker.access_code
    if needs_access_code:
        quiz_taker.access_code = QuizTaker.generate_unique_access_code()
    elif quiz_taker.account_type == REGULAR:
        quiz_taker.access_code = None

    with transaction.atomic():
        quiz_taker.save_versioned()
        if needs_access_code:
            send_access_code_email(quiz_taker)

    return JsonResponse({
        "success": True,
        "message": "Quiz taker updated successfully",
        "quizTaker": quiz_taker.as_dict(),
    })


@admin_required
@handle_api_errors
def assign_quiz(request, pk):
    if request.method != "POST":
        return method_not_allowed()

    form = AssignQuizForm(parse_json_body(request))
    if not form.is_valid():
        raise InvalidRequest(form_error_message(form))

    quiz_taker = get_quiz_taker(pk)
    if quiz_taker.account_type != PREMIUM:
        raise PreconditionFailed("Quizzes can only be assigned to premium quiz takers")

    quiz = Quiz.objects.filter(pk=form.cleaned_data["quizId"]).first()
    if quiz is None:
        raise NotFound("Quiz not found")
    if not quiz.is_active:
        raise PreconditionFailed("This quiz is not currently active")

    existing = quiz_taker.assigned_quizzes.filter(quiz=quiz).first()
    if existing is not None:
        if existing.status == COMPLETED:
            raise PreconditionFailed("This quiz taker has already completed this quiz")
        raise PreconditionFailed("This quiz is already assigned to this quiz taker")

    with transaction.atomic():
        assignment = AssignedQuiz.objects.create(quiz_taker=quiz_taker, quiz=quiz)
        ensure_progress(assignment)
        quiz_taker.save_versioned()

    logger.info(f"Quiz {quiz.pk} assigned to quiz taker {quiz_taker.pk}")

    assignment = AssignedQuiz.objects.select_related("quiz").prefetch_related("progress").get(pk=assignment.pk)
    return JsonResponse({
        "success": True,
        "message": "Quiz assigned successfully",
        "assignedQuiz": assignment.as_dict(),
    }, status=201)


@admin_required
@handle_api_errors
def unassign_quiz(request, pk, quiz_pk):
    if request.method != "DELETE":
        return method_not_allowed()

    quiz_taker = get_quiz_taker(pk)
    assignment = quiz_taker.assigned_quizzes.filter(quiz_id=quiz_pk).first()
    if assignment is None:
        raise NotFound("This quiz is not assigned to this quiz taker")
    if assignment.status == COMPLETED:
        raise PreconditionFailed("Completed quizzes cannot be unassigned")

    with transaction.atomic():
        quiz_taker.submissions.filter(quiz_id=quiz_pk, status=IN_PROGRESS).delete()
        assignment.delete()
        quiz_taker.save_versioned()

    return JsonResponse({"success": True, "message": "Quiz unassigned successfully"})


# Quiz taker endpoints

def get_assignment(quiz_taker, quiz_id):
    assignment = (quiz_taker.assigned_quizzes.select_related("quiz")
                  .prefetch_related("quiz__question_sets__questions").filter(quiz_id=quiz_id).first())
    if assignment is None:
        if not Quiz.objects.filter(pk=quiz_id).exists():
            raise NotFound("Quiz not found")
        raise PermissionDenied("This quiz is not assigned to you")
    return assignment


def get_open_assignment(quiz_taker, quiz_id):
    assignment = get_assignment(quiz_taker, quiz_id)
    if assignment.status == COMPLETED:
        raise PreconditionFailed("You have already completed this quiz")
    if not assignment.quiz.is_active:
        raise PreconditionFailed("This quiz is not currently active")
    return assignment


@quiztaker_required
@handle_api_errors
def dashboard(request):
    if request.method != "GET":
        return method_not_allowed()

    return JsonResponse({"success": True, "quizTaker": quiz_taker_detail_dict(request.quiz_taker)})


@quiztaker_required
@handle_api_errors
def profile(request):
    if request.method != "GET":
        return method_not_allowed()

    quiz_taker = request.quiz_taker
    assignments = quiz_taker.assigned_quizzes

    return JsonResponse({
        "success": True,
        "profile": {
            "id": quiz_taker.pk,
            "email": quiz_taker.email,
            "name": quiz_taker.name,
            "accountType": quiz_taker.account_type,
            "accessCode": quiz_taker.access_code,
            "totalQuizzesAssigned": assignments.count(),
            "completedQuizzes": assignments.filter(status=COMPLETED).count(),
            "memberSince": quiz_taker.created_at,
        },
    })


@quiztaker_required
@handle_api_errors
def quiz_overview(request, quiz_id):
    if request.method != "GET":
        return method_not_allowed()

    assignment = get_open_assignment(request.quiz_taker, quiz_id)
    quiz = assignment.quiz
    progress = ensure_progress(assignment)
    snapshots = quiz.snapshots_by_slot()

    question_sets = []
    for slot in assignment.question_set_order:
        snapshot = snapshots[slot]
        question_sets.append({
            **snapshot.as_dict(include_questions=False),
            "progress": progress[slot].as_dict(),
        })

    return JsonResponse({
        "success": True,
        "quiz": {
            "id": quiz.pk,
            "settings": quiz.settings_dict(),
            "totalPoints": quiz.total_points,
            "duration": quiz.get_total_duration_in_seconds(),
            "questionSets": question_sets,
        },
        "assignmentStatus": assignment.status,
        "startedAt": assignment.started_at,
        "questionSetOrder": assignment.question_set_order,
        "currentQuestionSet": assignment.current_question_set,
    })


def _locked_operation(quiz_taker_id, quiz_id, mutate):
    """Re-read the taker and assignment inside the coordinator, apply ``mutate`` and bump the taker version."""

    def operation():
        quiz_taker = QuizTaker.objects.get(pk=quiz_taker_id)
        assignment = get_open_assignment(quiz_taker, quiz_id)
        result = mutate(assignment)
        quiz_taker.save_versioned()
        return assignment, result

    return run_in_transaction(operation, f"quiz {quiz_id} progress of quiz taker {quiz_taker_id}")


@quiztaker_required
@handle_api_errors
def start(request, quiz_id):
    if request.method != "POST":
        return method_not_allowed()

    assignment, started = _locked_operation(request.quiz_taker.pk, quiz_id, start_quiz)

    return JsonResponse({
        "success": True,
        "message": "Quiz started successfully" if started else "Quiz already in progress",
        "startedAt": assignment.started_at,
    })


@quiztaker_required
@handle_api_errors
def set_question_set_order(request, quiz_id):
    if request.method != "PUT":
        return method_not_allowed()

    order = parse_json_body(request).get("questionSetOrder")
    assignment, _ = _locked_operation(request.quiz_taker.pk, quiz_id,
                                      lambda assignment: reorder_question_sets(assignment, order))

    return JsonResponse({
        "success": True,
        "message": "Question set order updated successfully",
        "questionSetOrder": assignment.question_set_order,
    })


@quiztaker_required
@handle_api_errors
def question_set_questions(request, quiz_id, slot):
    if request.method != "GET":
        return method_not_allowed()

    check_slot(slot)
    assignment = get_open_assignment(request.quiz_taker, quiz_id)
    snapshot = assignment.quiz.snapshots_by_slot().get(slot)
    if snapshot is None:
        raise NotFound("Question set not found")

    progress = ensure_progress(assignment)

    return JsonResponse({
        "success": True,
        "questionSet": snapshot.as_dict(include_answers=False),
        "progress": progress[slot].as_dict(),
    })


@quiztaker_required
@handle_api_errors
def start_slot(request, quiz_id, slot):
    if request.method != "POST":
        return method_not_allowed()

    check_slot(slot)
    assignment, record = _locked_operation(request.quiz_taker.pk, quiz_id,
                                           lambda assignment: start_question_set(assignment, slot))

    return JsonResponse({
        "success": True,
        "message": "Question set started successfully",
        "assignmentStatus": assignment.status,
        "currentQuestionSet": assignment.current_question_set,
        "progress": record.as_dict(),
    })
