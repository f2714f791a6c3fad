"""
Folding graded question set batches into the one open submission of a (quiz, quiz taker) pair.

Every total is recomputed from the stored answers rather than incremented, so sending the
same batch twice leaves the scores where they were.
"""
from django.db.models import Sum

from questionsets.models import ESSAY
from quiz.models import SLOTS
from submissions.grading import grade_answer
from submissions.models import (AUTO_GRADED, IN_PROGRESS, PENDING_MANUAL_GRADING, QuestionSetSubmission,
                                QuizSubmission, SubmissionAnswer)


def get_or_open_submission(quiz, quiz_taker, started_at, question_set_order):
    """Return the pair's in-progress submission, creating it when there is none."""
    submission = QuizSubmission.objects.filter(quiz=quiz, quiz_taker=quiz_taker, status=IN_PROGRESS).first()
    if submission is not None:
        return submission, False

    submission = QuizSubmission(
        quiz=quiz,
        quiz_taker=quiz_taker,
        started_at=started_at,
        total_points=quiz.total_points,
        question_set_order_used=list(question_set_order),
    )
    # A concurrent first submission trips the one-open-submission constraint here
    submission.save_versioned()
    return submission, True


def grade_question_set(submission, snapshot, answers_by_question):
    """Grade every question of a slot. Questions with no submitted answer are graded as unanswered."""
    graded = []
    for question in snapshot.questions.all():
        answer = answers_by_question.get(question.pk)
        result = grade_answer(question, answer)
        graded.append(SubmissionAnswer(
            submission=submission,
            question=question,
            question_set_order=snapshot.order,
            question_type=question.type,
            answer=answer,
            is_correct=result.is_correct,
            points_awarded=result.points_awarded,
            points_possible=question.points,
        ))
    return graded


def replace_question_set_answers(submission, slot, graded):
    submission.answers.filter(question_set_order=slot).delete()
    SubmissionAnswer.objects.bulk_create(graded)


def slot_score(submission, slot):
    return submission.answers.filter(question_set_order=slot).aggregate(total=Sum("points_awarded"))["total"] or 0


def record_question_set(submission, slot, total_points, submitted_at, is_final=False, order_answered=None):
    """Create or overwrite the slot's entry with a score taken from its stored answers."""
    entry, _ = QuestionSetSubmission.objects.update_or_create(
        submission=submission,
        question_set_order=slot,
        defaults={
            "submitted_at": submitted_at,
            "score": slot_score(submission, slot),
            "total_points": total_points,
            "is_final": is_final,
            "order_answered": order_answered,
        },
    )
    return entry


def refresh_question_set_scores(submission):
    for entry in submission.question_set_submissions.all():
        score = slot_score(submission, entry.question_set_order)
        if entry.score != score:
            entry.score = score
            entry.save(update_fields=["score"])


def recalculate_totals(submission):
    """Set the overall score from the stored answers. The caller saves the submission."""
    submission.score = submission.answers.aggregate(total=Sum("points_awarded"))["total"] or 0
    return submission


def has_ungraded_essays(submission):
    return submission.answers.filter(question_type=ESSAY, is_correct__isnull=True).exists()


def finalize_submission(submission, submitted_at):
    submission.submitted_at = submitted_at
    submission.time_taken = max(0, int((submitted_at - submission.started_at).total_seconds()))
    submission.status = PENDING_MANUAL_GRADING if has_ungraded_essays(submission) else AUTO_GRADED
    return submission


def answers_by_slot(submission):
    grouped = {slot: [] for slot in SLOTS}
    for answer in submission.answers.select_related("question"):
        grouped.setdefault(answer.question_set_order, []).append(answer)
    return grouped
