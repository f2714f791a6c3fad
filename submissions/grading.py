"""Pure grading rules shared by live submissions, manual grading and the regrade command."""
from collections import namedtuple

from questionsets.models import ESSAY, FILL_IN_THE_BLANKS, MULTIPLE_CHOICE, TRUE_FALSE
from quiz_platform.exceptions import InvalidRequest

GradeResult = namedtuple("GradeResult", ["is_correct", "points_awarded"])


def is_answered(answer):
    return answer is not None and answer != "" and answer != []


def option_list(options):
    if isinstance(options, str):
        return options.split("|")
    if isinstance(options, dict):
        return list(options.values())
    return list(options or [])


def correct_option(question):
    """The full option text whose "X." label matches the stored correct letter, or None."""
    label = f"{str(question.correct_answer).strip()}."
    for option in option_list(question.options):
        if str(option).strip().startswith(label):
            return option
    return None


def grade_answer(question, answer):
    """
    Grade one submitted answer against a question.

    Essays are never auto-graded: they come back as (None, 0) until an admin awards points.
    Unanswered questions of the other types are wrong.
    """
    if question.type == ESSAY:
        return GradeResult(None, 0)

    if not is_answered(answer):
        return GradeResult(False, 0)

    if question.type == MULTIPLE_CHOICE:
        expected = correct_option(question)
        correct = expected is not None and answer == expected
    elif question.type == TRUE_FALSE:
        correct = str(answer).lower() == str(question.correct_answer).lower()
    elif question.type == FILL_IN_THE_BLANKS:
        correct = str(answer).strip().lower() == str(question.correct_answer).strip().lower()
    else:
        raise ValueError(f"Unknown question type {question.type!r}")

    return GradeResult(correct, question.points if correct else 0)


def grade_essay(points_possible, points_awarded):
    if isinstance(points_awarded, bool) or not isinstance(points_awarded, int):
        raise InvalidRequest("Points awarded must be a whole number")
    if not 0 <= points_awarded <= points_possible:
        raise InvalidRequest(f"Points awarded must be between 0 and {points_possible}")
    return GradeResult(points_awarded > 0, points_awarded)
