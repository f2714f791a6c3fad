from django.test import TestCase

from quiz_platform.testing import create_admin, create_question_set, create_quiz, correct_answers
from quiztakers.models import PREMIUM, REGULAR, QuizTakenEntry, QuizTaker
from submissions.models import AUTO_GRADED, QuizSubmission


class PublicQuizTestCase(TestCase):

    @classmethod
    def setUpTestData(cls):
        cls.admin = create_admin()
        cls.question_sets = [create_question_set(cls.admin, f"Set {index}") for index in range(1, 5)]
        cls.combination = [question_set.pk for question_set in cls.question_sets]
        cls.quiz = create_quiz(cls.admin, cls.question_sets, title="Open quiz", is_open_quiz=True)
        cls.assigned_only = create_quiz(cls.admin, cls.question_sets, title="Premium quiz")

    def all_correct_answers(self):
        answers = []
        for snapshot in self.quiz.question_sets.all():
            answers.extend(correct_answers(snapshot))
        return answers

    def submit(self, **overrides):
        body = {
            "email": "Student@Example.com",
            "name": "Sam",
            "questionSetCombination": list(reversed(self.combination)),
            "answers": self.all_correct_answers(),
            "timeTaken": 420,
        }
        body.update(overrides)
        return self.client.post(f"/api/public/quiz/{self.quiz.pk}/submit", body, content_type="application/json")

    def test_available_quizzes_match_any_order(self):
        response = self.client.post("/api/public/quiz/available",
                                    {"questionSetCombination": list(reversed(self.combination))},
                                    content_type="application/json")

        self.assertEqual(response.status_code, 200)
        self.assertEqual([quiz["id"] for quiz in response.json()["quizzes"]], [self.quiz.pk])

    def test_available_quizzes_needs_four_ids(self):
        response = self.client.post("/api/public/quiz/available", {"questionSetCombination": self.combination[:2]},
                                    content_type="application/json")

        self.assertEqual(response.status_code, 400)

    def test_quiz_detail(self):
        response = self.client.get(f"/api/public/quiz/{self.quiz.pk}")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["quiz"]["settings"]["title"], "Open quiz")

    def test_non_open_quiz_is_not_available(self):
        response = self.client.get(f"/api/public/quiz/{self.assigned_only.pk}")

        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.json()["message"], "This quiz is not available")

    def test_question_set_hides_answers(self):
        response = self.client.get(f"/api/public/quiz/{self.quiz.pk}/question-set/1")

        self.assertEqual(response.status_code, 200)
        questions = response.json()["questionSet"]["questions"]
        self.assertEqual(len(questions), 3)
        self.assertTrue(all("correctAnswer" not in question for question in questions))

    def test_submit_registers_a_regular_taker(self):
        response = self.submit()

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["message"], "Quiz submitted successfully")
        result = body["submission"]
        self.assertEqual((result["score"], result["totalPoints"], result["percentage"]), (16, 16, 100))
        self.assertEqual(result["timeTaken"], 420)
        self.assertEqual(result["status"], AUTO_GRADED)
        self.assertEqual((result["questionsAnswered"], result["totalQuestions"]), (12, 12))

        quiz_taker = QuizTaker.objects.get(email="student@example.com")
        self.assertEqual(quiz_taker.account_type, REGULAR)
        self.assertIsNone(quiz_taker.access_code)
        self.assertEqual(quiz_taker.question_set_combination, list(reversed(self.combination)))
        self.assertEqual(QuizTakenEntry.objects.get(quiz_taker=quiz_taker).score, 16)

        submission = QuizSubmission.objects.get(pk=result["id"])
        self.assertEqual(list(submission.question_set_submissions.values_list("order_answered", flat=True)),
                         [1, 2, 3, 4])

    def test_partial_submission_warns(self):
        response = self.submit(answers=self.all_correct_answers()[:5], submissionType="timeout")

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["message"], "Quiz submitted successfully (partial submission)")
        self.assertEqual(body["warning"], "You answered 5 out of 12 questions.")
        self.assertEqual(body["submission"]["submissionType"], "timeout")

    def test_second_attempt_rejected_without_multiple_attempts(self):
        self.submit()

        response = self.submit()

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["message"],
                         "You have already submitted this quiz. Multiple attempts are not allowed.")
        self.assertEqual(QuizSubmission.objects.count(), 1)

    def test_second_attempt_allowed_with_multiple_attempts(self):
        self.quiz.multiple_attempts = True
        self.quiz.save()
        self.submit()

        response = self.submit(name="Sam Smith")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(QuizSubmission.objects.filter(quiz=self.quiz).count(), 2)
        self.assertEqual(QuizTaker.objects.get(email="student@example.com").name, "Sam Smith")

    def test_premium_email_rejected(self):
        QuizTaker.objects.create(email="student@example.com", account_type=PREMIUM, access_code="ABC123XYZ")

        response = self.submit()

        self.assertEqual(response.status_code, 400)
        self.assertFalse(QuizSubmission.objects.exists())

    def test_inactive_regular_taker_rejected(self):
        QuizTaker.objects.create(email="student@example.com", account_type=REGULAR, is_active=False)

        response = self.submit()

        self.assertEqual(response.status_code, 403)

    def test_combination_must_match_quiz(self):
        other = create_question_set(self.admin, "Other")

        response = self.submit(questionSetCombination=[*self.combination[:3], other.pk])

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["message"], "Question set combination does not match this quiz")

    def test_invalid_email(self):
        response = self.submit(email="not-an-email")

        self.assertEqual(response.status_code, 400)
        self.assertFalse(QuizTaker.objects.exists())

    def test_submission_result(self):
        submission_id = self.submit().json()["submission"]["id"]

        response = self.client.get(f"/api/public/submission/{submission_id}")

        self.assertEqual(response.status_code, 200)
        data = response.json()["submission"]
        self.assertEqual(data["studentEmail"], "student@example.com")
        self.assertEqual(len(data["answersByQuestionSet"]), 4)

    def test_premium_submission_not_served_publicly(self):
        premium = QuizTaker.objects.create(email="premium@example.com", account_type=PREMIUM,
                                           access_code="ABC123XYZ")
        submission = QuizSubmission.objects.create(quiz=self.assigned_only, quiz_taker=premium)

        response = self.client.get(f"/api/public/submission/{submission.pk}")

        self.assertEqual(response.status_code, 403)
