import logging

from questionsets.models import QuestionSet
from quiz.models import QUESTION_SETS_PER_QUIZ, QuizQuestion, QuizQuestionSet
from quiz_platform.exceptions import InvalidRequest

logger = logging.getLogger("quiz_platform")


def load_question_sets(question_set_ids):
    """Fetch the four active source sets for a quiz, in the order the ids were given."""
    if not isinstance(question_set_ids, list) or len(question_set_ids) != QUESTION_SETS_PER_QUIZ:
        raise InvalidRequest(f"Exactly {QUESTION_SETS_PER_QUIZ} question set IDs are required")

    try:
        question_set_ids = [int(pk) for pk in question_set_ids]
    except (TypeError, ValueError):
        raise InvalidRequest("Question set IDs must be integers")

    if len(set(question_set_ids)) != QUESTION_SETS_PER_QUIZ:
        raise InvalidRequest("Cannot use the same question set multiple times")

    found = QuestionSet.objects.in_bulk(question_set_ids)
    question_sets = [found.get(pk) for pk in question_set_ids]

    if any(question_set is None or not question_set.is_active for question_set in question_sets):
        raise InvalidRequest("One or more question sets not found or inactive")

    return question_sets


def snapshot_question_sets(quiz, question_sets):
    """
    Copy each question set, and its questions, into the quiz slot matching its position.

    Any snapshots the quiz already holds are replaced. The quiz total is recomputed from the new copies.
    """
    quiz.question_sets.all().delete()

    for slot, question_set in enumerate(question_sets, start=1):
        snapshot = QuizQuestionSet.objects.create(
            quiz=quiz,
            question_set=question_set,
            title=question_set.title,
            total_points=question_set.total_points,
            order=slot,
        )
        QuizQuestion.objects.bulk_create([
            QuizQuestion(
                quiz_question_set=snapshot,
                original_question=question,
                type=question.type,
                question_text=question.question_text,
                options=question.options,
                correct_answer=question.correct_answer,
                points=question.points,
                order=question.order,
            )
            for question in question_set.questions.all()
        ])

    quiz.question_set_combination = [question_set.pk for question_set in question_sets]
    quiz.save()

    logger.info(f"Quiz {quiz.pk} snapshotted question sets {quiz.question_set_combination}")
    return quiz
