import logging

from django.http import JsonResponse

from accounts.decorators import admin_required, quiztaker_required
from quiz.views import get_quiz
from quiz_platform.exceptions import NotFound, PermissionDenied
from quiz_platform.utils import handle_api_errors, method_not_allowed, parse_json_body, validate_payload
from submissions.aggregator import answers_by_slot
from submissions.models import QuizSubmission
from submissions.schemas import ManualGradingPayload, QuestionSetSubmissionPayload
from submissions.services import grade_manually, quiz_report, submit_question_set

logger = logging.getLogger("quiz_platform")


def get_submission(pk):
    submission = (QuizSubmission.objects.select_related("quiz", "quiz_taker", "graded_by")
                  .prefetch_related("question_set_submissions").filter(pk=pk).first())
    if submission is None:
        raise NotFound("Submission not found")
    return submission


def grouped_answers(submission, include_correct_answers=True):
    snapshots = submission.quiz.snapshots_by_slot()
    grouped = []
    for slot, answers in answers_by_slot(submission).items():
        if not answers:
            continue
        snapshot = snapshots.get(slot)
        grouped.append({
            "questionSetOrder": slot,
            "questionSetTitle": snapshot.title if snapshot else "",
            "answers": [answer.as_dict(include_correct_answer=include_correct_answers) for answer in answers],
        })
    return grouped


def submission_result(submission):
    """Shape a submission for its taker, honouring the quiz's result and answer visibility."""
    quiz = submission.quiz
    if not quiz.view_results:
        raise PermissionDenied("Results viewing is not allowed for this quiz")

    data = submission.summary_dict()
    data["quizTitle"] = quiz.title
    data["feedback"] = submission.feedback
    if quiz.view_answer:
        data["answersByQuestionSet"] = grouped_answers(submission)
    return data


@quiztaker_required
@handle_api_errors
def submit_quiz(request, quiz_id):
    if request.method != "POST":
        return method_not_allowed()

    payload = validate_payload(QuestionSetSubmissionPayload, parse_json_body(request))
    result = submit_question_set(request.quiz_taker.pk, quiz_id, payload)
    logger.info(f"Quiz taker {request.quiz_taker.pk} submitted question set {payload.question_set_order} of quiz {quiz_id}")

    message = "Quiz submitted successfully" if result["quizCompleted"] else "Question set submitted successfully"
    return JsonResponse({"success": True, "message": message, "submission": result})


@quiztaker_required
@handle_api_errors
def my_submission(request, pk):
    if request.method != "GET":
        return method_not_allowed()

    submission = get_submission(pk)
    if submission.quiz_taker_id != request.quiz_taker.pk:
        raise PermissionDenied("Access denied")

    return JsonResponse({"success": True, "submission": submission_result(submission)})


@quiztaker_required
@handle_api_errors
def my_submissions(request):
    if request.method != "GET":
        return method_not_allowed()

    submissions = (QuizSubmission.objects.filter(quiz_taker=request.quiz_taker)
                   .select_related("quiz").prefetch_related("question_set_submissions"))

    data = [
        {
            **submission.summary_dict(),
            "quizTitle": submission.quiz.title,
            "isQuizChallenge": submission.quiz.is_quiz_challenge,
        }
        for submission in submissions
    ]
    return JsonResponse({"success": True, "count": len(data), "submissions": data})


@admin_required
@handle_api_errors
def quiz_submissions(request, quiz_id):
    if request.method != "GET":
        return method_not_allowed()

    quiz = get_quiz(quiz_id)
    submissions = (QuizSubmission.objects.filter(quiz=quiz)
                   .select_related("quiz_taker").prefetch_related("question_set_submissions"))

    status = request.GET.get("status")
    if status:
        submissions = submissions.filter(status=status)

    data = [
        {
            **submission.summary_dict(),
            "quizTaker": {
                "id": submission.quiz_taker_id,
                "email": submission.quiz_taker.email,
                "name": submission.quiz_taker.name,
                "accountType": submission.quiz_taker.account_type,
            },
        }
        for submission in submissions
    ]
    return JsonResponse({"success": True, "count": len(data), "submissions": data})


def admin_submission_dict(submission):
    data = submission.summary_dict()
    data.update({
        "quizTitle": submission.quiz.title,
        "quizTaker": {
            "id": submission.quiz_taker_id,
            "email": submission.quiz_taker.email,
            "name": submission.quiz_taker.name,
        },
        "feedback": submission.feedback,
        "gradedBy": submission.graded_by.email if submission.graded_by else None,
        "gradedAt": submission.graded_at,
        "answersByQuestionSet": grouped_answers(submission),
    })
    return data


@admin_required
@handle_api_errors
def submission_detail(request, pk):
    if request.method != "GET":
        return method_not_allowed()

    return JsonResponse({"success": True, "submission": admin_submission_dict(get_submission(pk))})


@admin_required
@handle_api_errors
def grade_submission(request, pk):
    if request.method != "POST":
        return method_not_allowed()

    payload = validate_payload(ManualGradingPayload, parse_json_body(request))
    submission = grade_manually(pk, request.admin, payload)

    return JsonResponse({
        "success": True,
        "message": "Submission graded successfully",
        "submission": admin_submission_dict(get_submission(submission.pk)),
    })


@admin_required
@handle_api_errors
def report(request, quiz_id):
    if request.method != "GET":
        return method_not_allowed()

    return JsonResponse({"success": True, "report": quiz_report(get_quiz(quiz_id))})
