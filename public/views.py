import logging

from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt

from quiz.models import QUESTION_SETS_PER_QUIZ, Quiz
from quiz_platform.exceptions import InvalidRequest, NotFound, PermissionDenied
from quiz_platform.utils import handle_api_errors, method_not_allowed, parse_json_body, validate_payload
from quiztakers.models import REGULAR
from quiztakers.progress import check_slot
from submissions.models import QuizSubmission
from submissions.schemas import OpenQuizSubmissionPayload
from submissions.services import get_open_quiz, submit_open_quiz
from submissions.views import grouped_answers

logger = logging.getLogger("quiz_platform")


def quiz_overview_dict(quiz):
    return {
        "id": quiz.pk,
        "settings": quiz.settings_dict(),
        "questionSets": [snapshot.as_dict(include_questions=False) for snapshot in quiz.question_sets.all()],
        "totalPoints": quiz.total_points,
        "questionSetCombination": quiz.question_set_combination,
    }


@csrf_exempt
@handle_api_errors
def available_quizzes(request):
    if request.method != "POST":
        return method_not_allowed()

    combination = parse_json_body(request).get("questionSetCombination")
    if not isinstance(combination, list) or len(combination) != QUESTION_SETS_PER_QUIZ:
        raise InvalidRequest(
            f"Please provide a valid question set combination (array of {QUESTION_SETS_PER_QUIZ} question set IDs)"
        )
    try:
        wanted = sorted(int(pk) for pk in combination)
    except (TypeError, ValueError):
        raise InvalidRequest("Question set combination must contain question set IDs")

    quizzes = (Quiz.objects.filter(is_open_quiz=True, is_active=True)
               .prefetch_related("question_sets__questions"))
    matches = [quiz_overview_dict(quiz) for quiz in quizzes if quiz.source_question_set_ids() == wanted]

    return JsonResponse({"success": True, "count": len(matches), "quizzes": matches})


@csrf_exempt
@handle_api_errors
def quiz_detail(request, quiz_id):
    if request.method != "GET":
        return method_not_allowed()

    return JsonResponse({"success": True, "quiz": quiz_overview_dict(get_open_quiz(quiz_id))})


@csrf_exempt
@handle_api_errors
def question_set_questions(request, quiz_id, slot):
    if request.method != "GET":
        return method_not_allowed()

    check_slot(slot)
    snapshot = get_open_quiz(quiz_id).snapshots_by_slot().get(slot)
    if snapshot is None:
        raise NotFound("Question set not found")

    return JsonResponse({"success": True, "questionSet": snapshot.as_dict(include_answers=False)})


@csrf_exempt
@handle_api_errors
def submit(request, quiz_id):
    if request.method != "POST":
        return method_not_allowed()

    payload = validate_payload(OpenQuizSubmissionPayload, parse_json_body(request))
    result = submit_open_quiz(quiz_id, payload)

    response = {
        "success": True,
        "message": "Quiz submitted successfully",
        "submission": result,
    }
    if result["questionsAnswered"] < result["totalQuestions"]:
        response["message"] = "Quiz submitted successfully (partial submission)"
        response["warning"] = f"You answered {result['questionsAnswered']} out of {result['totalQuestions']} questions."
        logger.info(f"Partial submission {result['id']} for open quiz {quiz_id}: {response['warning']}")

    return JsonResponse(response)


@csrf_exempt
@handle_api_errors
def submission_result(request, pk):
    if request.method != "GET":
        return method_not_allowed()

    submission = QuizSubmission.objects.select_related("quiz", "quiz_taker").filter(pk=pk).first()
    if submission is None:
        raise NotFound("Submission not found")
    if submission.quiz_taker.account_type != REGULAR:
        raise PermissionDenied("Access denied")

    quiz = submission.quiz
    if not quiz.view_results:
        raise PermissionDenied("Results viewing is not allowed for this quiz")

    data = {
        "id": submission.pk,
        "score": submission.score,
        "totalPoints": submission.total_points,
        "percentage": submission.percentage,
        "timeTaken": submission.time_taken,
        "submittedAt": submission.submitted_at,
        "status": submission.status,
        "feedback": submission.feedback,
        "studentName": submission.quiz_taker.name,
        "studentEmail": submission.quiz_taker.email,
    }
    if quiz.view_answer:
        data["answersByQuestionSet"] = grouped_answers(submission)

    return JsonResponse({"success": True, "submission": data})
