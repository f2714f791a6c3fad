import logging
import time

from django.conf import settings
from django.db import IntegrityError, transaction

from quiz_platform.exceptions import SubmissionConflict
from quiz_platform.versioning import WriteConflict

logger = logging.getLogger("quiz_platform")

# Unique indexes two racing requests can both try to claim. PostgreSQL reports the index
# name, SQLite reports the table and column.
RACE_CONSTRAINT_MARKERS = (
    "one_open_submission_per_quiz_taker",
    "submissions_quizsubmission.quiz_taker_id",
    "quiztakers_quiztaker_email",
    "quiztakers_quiztaker.email",
)


def backoff_sleep(attempt: int, base: float) -> None:
    time.sleep(base * (2 ** attempt))


def is_write_conflict(error) -> bool:
    if isinstance(error, WriteConflict):
        return True
    message = str(error.__cause__ or error)
    return any(marker in message for marker in RACE_CONSTRAINT_MARKERS)


def run_in_transaction(operation, description="submission"):
    """
    Run ``operation()`` inside one atomic block, retrying the whole block on a write conflict.

    The operation must do all of its reads inside the call so a retry starts from fresh rows.
    A version mismatch or a lost race for one of RACE_CONSTRAINT_MARKERS rolls the block
    back and the operation is attempted again, up to SUBMISSION_COMMIT_MAX_ATTEMPTS times.
    Any other exception, including other integrity errors, propagates straight away.
    """
    max_attempts = settings.SUBMISSION_COMMIT_MAX_ATTEMPTS
    base = settings.SUBMISSION_COMMIT_BACKOFF_SECONDS

    for attempt in range(max_attempts):
        try:
            with transaction.atomic():
                return operation()
        except (WriteConflict, IntegrityError) as e:
            if not is_write_conflict(e):
                raise
            if attempt + 1 >= max_attempts:
                logger.error(f"Giving up on {description} after {max_attempts} attempts: {e}")
                raise SubmissionConflict()
            logger.warning(f"Conflict on {description} (attempt {attempt + 1} of {max_attempts}): {e}")
            backoff_sleep(attempt, base)
