import logging
from datetime import timedelta

from django.db.models import Avg, Count, Max, Min
from django.utils import timezone

from quiz.models import SLOTS, Quiz
from quiz_platform.exceptions import InvalidRequest, NotFound, PermissionDenied, PreconditionFailed
from quiztakers.models import COMPLETED, NOT_STARTED, PENDING, PREMIUM, REGULAR, QuizTakenEntry, QuizTaker
from quiztakers.progress import (complete_question_set, completed_count, ensure_progress, outstanding_slots,
                                 record_question_set_score, start_question_set)
from submissions.aggregator import (finalize_submission, get_or_open_submission, grade_question_set,
                                    has_ungraded_essays, recalculate_totals, record_question_set,
                                    refresh_question_set_scores, replace_question_set_answers)
from submissions.coordinator import run_in_transaction
from submissions.grading import grade_essay, is_answered
from submissions.models import GRADED, IN_PROGRESS, PENDING_MANUAL_GRADING, SUBMISSION_STATUS_CHOICES, \
    QuestionSetSubmission, QuizSubmission

logger = logging.getLogger("quiz_platform")


def _index_answers(answers, snapshot):
    question_ids = {question.pk for question in snapshot.questions.all()}
    indexed = {}
    for submitted in answers:
        if submitted.question_id not in question_ids:
            raise InvalidRequest(
                f"Question {submitted.question_id} does not belong to question set {snapshot.order}"
            )
        indexed[submitted.question_id] = submitted.answer
    return indexed


def submit_question_set(quiz_taker_id, quiz_id, payload):
    """
    Grade one slot of an assigned quiz and fold it into the taker's open submission.

    A final submission completes the slot. When it was the last slot still outstanding the
    submission is closed, the assignment completes and a history entry is written. The whole
    read-mutate-write runs through the commit coordinator.
    """
    slot = payload.question_set_order

    def operation():
        now = timezone.now()
        quiz_taker = QuizTaker.objects.get(pk=quiz_taker_id)

        assignment = quiz_taker.assigned_quizzes.select_related("quiz").filter(quiz_id=quiz_id).first()
        if assignment is None:
            if not Quiz.objects.filter(pk=quiz_id).exists():
                raise NotFound("Quiz not found")
            raise PreconditionFailed("This quiz is not assigned to you")
        if assignment.status == COMPLETED:
            raise PreconditionFailed("You have already completed this quiz")
        if assignment.status == PENDING:
            raise PreconditionFailed("You must start the quiz before submitting")

        quiz = assignment.quiz
        if not quiz.is_active:
            raise PreconditionFailed("This quiz is not currently active")

        snapshot = quiz.question_sets.prefetch_related("questions").filter(order=slot).first()
        if snapshot is None:
            raise NotFound("Question set not found")
        submitted = _index_answers(payload.answers, snapshot)

        progress = ensure_progress(assignment)
        record = progress[slot]
        if record.status == COMPLETED:
            raise PreconditionFailed("This question set has already been completed")
        if record.status == NOT_STARTED:
            start_question_set(assignment, slot, progress=progress, now=now)

        submission, _ = get_or_open_submission(quiz, quiz_taker, assignment.started_at or now,
                                               assignment.question_set_order)

        graded = grade_question_set(submission, snapshot, submitted)
        replace_question_set_answers(submission, slot, graded)

        order_answered = completed_count(progress) + 1 if payload.is_final_submission else None
        entry = record_question_set(submission, slot, snapshot.total_points, now,
                                    is_final=payload.is_final_submission, order_answered=order_answered)

        if payload.is_final_submission:
            complete_question_set(record, entry.score, entry.total_points, now=now)
        else:
            record_question_set_score(record, entry.score, entry.total_points)

        recalculate_totals(submission)

        quiz_completed = payload.is_final_submission and not outstanding_slots(progress)
        if quiz_completed:
            finalize_submission(submission, now)

        submission.save_versioned()

        if quiz_completed:
            assignment.status = COMPLETED
            assignment.completed_at = now
            assignment.submission = submission
            assignment.current_question_set = None
            assignment.save(update_fields=["status", "completed_at", "submission", "current_question_set"])
            QuizTakenEntry.objects.create(quiz_taker=quiz_taker, quiz=quiz, submission=submission,
                                          score=submission.score, completed_at=now)
            logger.info(f"Quiz taker {quiz_taker.pk} completed quiz {quiz.pk} with submission {submission.pk}")

        quiz_taker.save_versioned()

        return {
            "id": submission.pk,
            "questionSetOrder": slot,
            "questionSetScore": entry.score,
            "questionSetTotalPoints": entry.total_points,
            "orderAnswered": entry.order_answered,
            "overallScore": submission.score,
            "overallTotalPoints": submission.total_points,
            "percentage": submission.percentage,
            "status": submission.status,
            "timeTaken": submission.time_taken,
            "isFinalSubmission": payload.is_final_submission,
            "quizCompleted": quiz_completed,
            "remainingQuestionSets": outstanding_slots(progress),
        }

    return run_in_transaction(operation, f"quiz {quiz_id} slot {slot} submission by quiz taker {quiz_taker_id}")


def check_open_quiz(quiz):
    if not quiz.is_active or not quiz.is_open_quiz:
        raise PermissionDenied("This quiz is not available")


def get_open_quiz(quiz_id):
    quiz = Quiz.objects.prefetch_related("question_sets__questions").filter(pk=quiz_id).first()
    if quiz is None:
        raise NotFound("Quiz not found")
    check_open_quiz(quiz)
    return quiz


def _find_or_create_regular_taker(payload):
    quiz_taker = QuizTaker.objects.filter(email=payload.email).first()

    if quiz_taker is None:
        quiz_taker = QuizTaker(
            email=payload.email,
            name=payload.name,
            account_type=REGULAR,
            question_set_combination=payload.question_set_combination,
        )
        # Two first submissions racing on one email collide on the unique email and are retried
        quiz_taker.save_versioned()
        logger.info(f"Registered regular quiz taker {quiz_taker.pk} on first submission")
        return quiz_taker

    if quiz_taker.account_type == PREMIUM:
        raise PreconditionFailed("This email belongs to a premium account. Please log in with your access code.")
    if not quiz_taker.is_active:
        raise PermissionDenied("Account is inactive. Contact admin.")

    quiz_taker.name = payload.name
    if sorted(quiz_taker.question_set_combination or []) != sorted(payload.question_set_combination):
        quiz_taker.question_set_combination = payload.question_set_combination
    return quiz_taker


def submit_open_quiz(quiz_id, payload):
    """Grade a whole open quiz sent in one request by a regular quiz taker."""
    if len(set(payload.question_set_combination)) != len(payload.question_set_combination):
        raise InvalidRequest("Question set combination cannot repeat a question set")

    def operation():
        now = timezone.now()
        quiz = get_open_quiz(quiz_id)

        if quiz.source_question_set_ids() != sorted(payload.question_set_combination):
            raise InvalidRequest("Question set combination does not match this quiz")

        quiz_taker = _find_or_create_regular_taker(payload)

        if not quiz.multiple_attempts and quiz_taker.submissions.filter(quiz=quiz).exists():
            raise PreconditionFailed("You have already submitted this quiz. Multiple attempts are not allowed.")

        submitted = {answer.question_id: answer.answer for answer in payload.answers}
        submission, _ = get_or_open_submission(quiz, quiz_taker, now - timedelta(seconds=payload.time_taken),
                                               SLOTS)

        answered = 0
        total_questions = 0
        for order_answered, snapshot in enumerate(quiz.question_sets.all(), start=1):
            graded = grade_question_set(submission, snapshot, submitted)
            replace_question_set_answers(submission, snapshot.order, graded)
            record_question_set(submission, snapshot.order, snapshot.total_points, now,
                                is_final=True, order_answered=order_answered)
            total_questions += len(graded)
            answered += sum(1 for answer in graded if is_answered(answer.answer))

        recalculate_totals(submission)
        finalize_submission(submission, now)
        submission.time_taken = payload.time_taken
        submission.save_versioned()

        QuizTakenEntry.objects.create(quiz_taker=quiz_taker, quiz=quiz, submission=submission,
                                      score=submission.score, completed_at=now)
        quiz_taker.save_versioned()

        result = {
            "id": submission.pk,
            "score": submission.score,
            "totalPoints": submission.total_points,
            "percentage": submission.percentage,
            "timeTaken": submission.time_taken,
            "status": submission.status,
            "questionsAnswered": answered,
            "totalQuestions": total_questions,
            "submissionType": payload.submission_type,
        }
        return result

    return run_in_transaction(operation, f"open quiz {quiz_id} submission by {payload.email}")


def grade_manually(submission_id, admin, payload):
    """
    Apply admin point awards to a closed submission.

    The submission becomes graded once no essay answer is left without an award.
    """

    def operation():
        submission = QuizSubmission.objects.filter(pk=submission_id).first()
        if submission is None:
            raise NotFound("Submission not found")
        if submission.status == IN_PROGRESS:
            raise PreconditionFailed("This submission has not been submitted yet")

        answers = {answer.question_id: answer for answer in submission.answers.all()}
        for grade in payload.grades:
            answer = answers.get(grade.question_id)
            if answer is None:
                raise InvalidRequest(f"Question {grade.question_id} is not part of this submission")
            result = grade_essay(answer.points_possible, grade.points_awarded)
            answer.is_correct = result.is_correct
            answer.points_awarded = result.points_awarded
            answer.save(update_fields=["is_correct", "points_awarded"])

        refresh_question_set_scores(submission)
        recalculate_totals(submission)
        submission.status = PENDING_MANUAL_GRADING if has_ungraded_essays(submission) else GRADED
        submission.graded_by = admin
        submission.graded_at = timezone.now()
        if payload.feedback is not None:
            submission.feedback = payload.feedback
        submission.save_versioned()

        QuizTakenEntry.objects.filter(submission=submission).update(score=submission.score)
        logger.info(f"Submission {submission.pk} graded by admin {admin.pk}")
        return submission

    return run_in_transaction(operation, f"grading of submission {submission_id}")


def quiz_report(quiz):
    submissions = QuizSubmission.objects.filter(quiz=quiz)
    closed = submissions.exclude(status=IN_PROGRESS)

    counts = dict(submissions.values_list("status").annotate(count=Count("id")).order_by())
    percentages = closed.aggregate(average=Avg("percentage"), highest=Max("percentage"),
                                   lowest=Min("percentage"))

    slot_averages = {
        row["question_set_order"]: row
        for row in QuestionSetSubmission.objects.filter(submission__in=closed)
        .values("question_set_order")
        .annotate(average_score=Avg("score"), submissions=Count("id"))
        .order_by("question_set_order")
    }

    return {
        "quizId": quiz.pk,
        "title": quiz.title,
        "totalSubmissions": submissions.count(),
        "completedSubmissions": closed.count(),
        "statusCounts": {status: counts.get(status, 0) for status, _ in SUBMISSION_STATUS_CHOICES},
        "averagePercentage": round(percentages["average"], 2) if percentages["average"] is not None else None,
        "highestPercentage": percentages["highest"],
        "lowestPercentage": percentages["lowest"],
        "questionSets": [
            {
                "questionSetOrder": snapshot.order,
                "title": snapshot.title,
                "totalPoints": snapshot.total_points,
                "averageScore": round(slot_averages[snapshot.order]["average_score"], 2)
                if snapshot.order in slot_averages else None,
                "submissions": slot_averages[snapshot.order]["submissions"] if snapshot.order in slot_averages else 0,
            }
            for snapshot in quiz.question_sets.all()
        ],
    }
