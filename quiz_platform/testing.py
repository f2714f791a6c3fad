"""Fixture builders shared by the app test suites."""
from django.contrib.auth import get_user_model

from accounts.tokens import ADMIN_ROLE, QUIZ_TAKER_ROLE, make_bearer_token
from questionsets.models import ESSAY, FILL_IN_THE_BLANKS, MULTIPLE_CHOICE, TRUE_FALSE, Question, QuestionSet
from quiz.models import Quiz
from quiz.services import snapshot_question_sets

User = get_user_model()


def create_admin(email="admin@example.com", password="password123"):
    return User.objects.create_user(username=email, email=email, password=password, is_staff=True)


def admin_headers(admin):
    return {"Authorization": f"Bearer {make_bearer_token(admin.pk, ADMIN_ROLE)}"}


def quiz_taker_headers(quiz_taker):
    return {"Authorization": f"Bearer {make_bearer_token(quiz_taker.pk, QUIZ_TAKER_ROLE)}"}


def create_question_set(admin, title, with_essay=False):
    """A set worth 4 points: multiple choice (2), true-false (1), fill in the blank (1), plus an optional essay (5)."""
    question_set = QuestionSet.objects.create(title=title, created_by=admin)
    questions = [
        Question(question_set=question_set, type=MULTIPLE_CHOICE, order=1, points=2,
                 question_text=f"{title}: What is the capital of France?",
                 options=["A. Paris", "B. Lyon"], correct_answer="A"),
        Question(question_set=question_set, type=TRUE_FALSE, order=2, points=1,
                 question_text=f"{title}: The earth orbits the sun.", correct_answer="true"),
        Question(question_set=question_set, type=FILL_IN_THE_BLANKS, order=3, points=1,
                 question_text=f"{title}: The capital of England is ____.", correct_answer=" London "),
    ]
    if with_essay:
        questions.append(Question(question_set=question_set, type=ESSAY, order=4, points=5,
                                  question_text=f"{title}: Describe the water cycle."))
    Question.objects.bulk_create(questions)
    question_set.recalculate_totals()
    return question_set


def create_quiz(admin, question_sets, **fields):
    quiz = Quiz.objects.create(title=fields.pop("title", "General knowledge"), created_by=admin, **fields)
    return snapshot_question_sets(quiz, question_sets)


def correct_answers(snapshot):
    """Answers that score full marks on every auto-graded question of a snapshot."""
    answers = {
        MULTIPLE_CHOICE: "A. Paris",
        TRUE_FALSE: "TRUE",
        FILL_IN_THE_BLANKS: "london",
        ESSAY: "Water evaporates, condenses and falls as rain.",
    }
    return [{"questionId": question.pk, "answer": answers[question.type]} for question in snapshot.questions.all()]
