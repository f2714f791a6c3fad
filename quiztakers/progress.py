"""
Per-assignment tracking of the four question set slots a premium taker works through.

Slots move not-started -> in-progress -> completed and never back. The assignment itself
moves pending -> in-progress -> completed. Callers run these inside the submission
transaction so a rejected transition leaves nothing behind.
"""
import logging

from django.utils import timezone

from quiz.models import SLOTS
from quiz_platform.exceptions import InvalidRequest, PreconditionFailed
from quiztakers.models import COMPLETED, IN_PROGRESS, NOT_STARTED, PENDING, QuestionSetProgress

logger = logging.getLogger("quiz_platform")


def check_slot(slot):
    if isinstance(slot, bool) or slot not in SLOTS:
        raise InvalidRequest(f"Question set order must be between {SLOTS[0]} and {SLOTS[-1]}")
    return slot


def ensure_progress(assignment):
    """Create any missing slot records for the assignment and return all four keyed by slot."""
    existing = {record.slot: record for record in QuestionSetProgress.objects.filter(assigned_quiz=assignment)}
    missing = [slot for slot in SLOTS if slot not in existing]

    if missing:
        positions = {slot: position for position, slot in enumerate(assignment.question_set_order, start=1)}
        QuestionSetProgress.objects.bulk_create(
            [
                QuestionSetProgress(assigned_quiz=assignment, slot=slot, custom_position=positions.get(slot, slot))
                for slot in missing
            ],
            ignore_conflicts=True,
        )
        existing = {record.slot: record
                    for record in QuestionSetProgress.objects.filter(assigned_quiz=assignment)}

    return existing


def outstanding_slots(progress):
    return [slot for slot in SLOTS if progress[slot].status != COMPLETED]


def completed_count(progress):
    return sum(1 for record in progress.values() if record.status == COMPLETED)


def start_quiz(assignment, now=None):
    """Move a pending assignment to in-progress. Returns False when it was already started."""
    if assignment.status == COMPLETED:
        raise PreconditionFailed("You have already completed this quiz")
    if assignment.status == IN_PROGRESS:
        return False

    assignment.status = IN_PROGRESS
    assignment.started_at = now or timezone.now()
    assignment.save(update_fields=["status", "started_at"])
    logger.info(f"Assignment {assignment.pk} started")
    return True


def start_question_set(assignment, slot, progress=None, now=None):
    check_slot(slot)
    now = now or timezone.now()

    if assignment.status == COMPLETED:
        raise PreconditionFailed("You have already completed this quiz")

    progress = progress or ensure_progress(assignment)
    record = progress[slot]
    if record.status == COMPLETED:
        raise PreconditionFailed("This question set has already been completed")

    if assignment.status == PENDING:
        start_quiz(assignment, now=now)

    if record.status == NOT_STARTED:
        record.status = IN_PROGRESS
        record.started_at = now
        record.save(update_fields=["status", "started_at"])

    assignment.current_question_set = slot
    assignment.save(update_fields=["current_question_set"])
    return record


def record_question_set_score(record, score, total_points):
    """Store a running score for a slot that is still open."""
    if record.status == COMPLETED:
        raise PreconditionFailed("This question set has already been completed")

    record.score = score
    record.total_points = total_points
    record.save(update_fields=["score", "total_points"])
    return record


def complete_question_set(record, score, total_points, now=None):
    if record.status == COMPLETED:
        raise PreconditionFailed("This question set has already been completed")

    record.status = COMPLETED
    record.completed_at = now or timezone.now()
    record.score = score
    record.total_points = total_points
    record.save(update_fields=["status", "completed_at", "score", "total_points"])
    return record


def reorder_question_sets(assignment, order):
    if (not isinstance(order, list)
            or not all(isinstance(slot, int) and not isinstance(slot, bool) for slot in order)
            or sorted(order) != list(SLOTS)):
        raise InvalidRequest("Question set order must list each of the slots 1 to 4 exactly once")
    if assignment.status == COMPLETED:
        raise PreconditionFailed("You have already completed this quiz")

    progress = ensure_progress(assignment)
    if completed_count(progress):
        raise PreconditionFailed("The question set order cannot change once a question set has been completed")

    assignment.question_set_order = order
    assignment.save(update_fields=["question_set_order"])

    for position, slot in enumerate(order, start=1):
        record = progress[slot]
        if record.custom_position != position:
            record.custom_position = position
            record.save(update_fields=["custom_position"])

    return progress
