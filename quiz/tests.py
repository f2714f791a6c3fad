from django.test import TestCase

from questionsets.models import Question
from quiz.models import Quiz, QuizQuestion, QuizQuestionSet
from quiz_platform.testing import admin_headers, create_admin, create_question_set, create_quiz
from quiztakers.models import REGULAR, QuizTaker
from submissions.models import QuizSubmission


class QuizCreateTestCase(TestCase):

    @classmethod
    def setUpTestData(cls):
        cls.admin = create_admin()
        cls.question_sets = [create_question_set(cls.admin, f"Set {index}") for index in range(1, 5)]
        cls.question_sets[3].questions.create(type="essay", question_text="Explain gravity.", points=5, order=4)

    def quiz_body(self, **settings):
        return {
            "settings": {"title": "Weekly challenge", **settings},
            "questionSetCombination": [question_set.pk for question_set in self.question_sets],
        }

    def test_create_quiz_snapshots_question_sets(self):
        response = self.client.post("/api/quiz/", self.quiz_body(duration={"hours": 1, "minutes": 15}),
                                    content_type="application/json", headers=admin_headers(self.admin))

        self.assertEqual(response.status_code, 201)
        data = response.json()["quiz"]
        self.assertEqual(data["totalPoints"], 21)
        self.assertEqual(data["settings"]["duration"], {"hours": 1, "minutes": 15, "seconds": 0})
        self.assertTrue(data["settings"]["viewAnswer"])
        self.assertEqual([snapshot["order"] for snapshot in data["questionSets"]], [1, 2, 3, 4])
        self.assertEqual(data["questionSetCombination"], [question_set.pk for question_set in self.question_sets])

        quiz = Quiz.objects.get(pk=data["id"])
        self.assertEqual(quiz.get_total_duration_in_seconds(), 4500)
        self.assertEqual(QuizQuestion.objects.filter(quiz_question_set__quiz=quiz).count(), 13)

    def test_snapshot_is_independent_of_later_edits(self):
        response = self.client.post("/api/quiz/", self.quiz_body(), content_type="application/json",
                                    headers=admin_headers(self.admin))
        quiz = Quiz.objects.get(pk=response.json()["quiz"]["id"])

        source = Question.objects.get(question_set=self.question_sets[0], order=1)
        source.question_text = "Changed"
        source.points = 10
        source.save()

        copy = QuizQuestion.objects.get(quiz_question_set__quiz=quiz, original_question=source)
        self.assertNotEqual(copy.question_text, "Changed")
        self.assertEqual(copy.points, 2)
        quiz.refresh_from_db()
        self.assertEqual(quiz.total_points, 21)

    def test_permit_lose_focus_alias(self):
        response = self.client.post("/api/quiz/", self.quiz_body(permitLoseFocus=True),
                                    content_type="application/json", headers=admin_headers(self.admin))

        self.assertEqual(response.status_code, 201)
        self.assertTrue(response.json()["quiz"]["settings"]["looseFocus"])

    def test_title_required(self):
        body = self.quiz_body()
        body["settings"]["title"] = ""

        response = self.client.post("/api/quiz/", body, content_type="application/json",
                                    headers=admin_headers(self.admin))

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["message"], "Quiz title is required")

    def test_exactly_four_question_sets(self):
        body = self.quiz_body()
        body["questionSetCombination"] = body["questionSetCombination"][:3]

        response = self.client.post("/api/quiz/", body, content_type="application/json",
                                    headers=admin_headers(self.admin))

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["message"], "Exactly 4 question set IDs are required")
        self.assertFalse(Quiz.objects.exists())

    def test_question_sets_must_be_distinct(self):
        body = self.quiz_body()
        body["questionSetCombination"][3] = body["questionSetCombination"][0]

        response = self.client.post("/api/quiz/", body, content_type="application/json",
                                    headers=admin_headers(self.admin))

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["message"], "Cannot use the same question set multiple times")

    def test_inactive_question_set_rejected(self):
        inactive = self.question_sets[2]
        inactive.is_active = False
        inactive.save()

        response = self.client.post("/api/quiz/", self.quiz_body(), content_type="application/json",
                                    headers=admin_headers(self.admin))

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["message"], "One or more question sets not found or inactive")

    def test_duration_out_of_range(self):
        response = self.client.post("/api/quiz/", self.quiz_body(duration={"minutes": 75}),
                                    content_type="application/json", headers=admin_headers(self.admin))

        self.assertEqual(response.status_code, 400)
        self.assertIn("minutes", response.json()["message"])


class QuizManagementTestCase(TestCase):

    @classmethod
    def setUpTestData(cls):
        cls.admin = create_admin()
        cls.question_sets = [create_question_set(cls.admin, f"Set {index}") for index in range(1, 6)]

    def setUp(self):
        self.quiz = create_quiz(self.admin, self.question_sets[:4])

    def add_submission(self):
        quiz_taker = QuizTaker.objects.create(email="regular@example.com", account_type=REGULAR)
        return QuizSubmission.objects.create(quiz=self.quiz, quiz_taker=quiz_taker)

    def test_list_filters(self):
        create_quiz(self.admin, self.question_sets[1:5], title="Challenge", is_quiz_challenge=True)

        response = self.client.get("/api/quiz/", {"isQuizChallenge": "true"}, headers=admin_headers(self.admin))

        self.assertEqual(response.status_code, 200)
        self.assertEqual([quiz["settings"]["title"] for quiz in response.json()["quizzes"]], ["Challenge"])

    def test_get_hides_nothing_from_admin(self):
        response = self.client.get(f"/api/quiz/{self.quiz.pk}", headers=admin_headers(self.admin))

        self.assertEqual(response.status_code, 200)
        question = response.json()["quiz"]["questionSets"][0]["questions"][0]
        self.assertEqual(question["correctAnswer"], "A")

    def test_missing_quiz(self):
        response = self.client.get("/api/quiz/999999", headers=admin_headers(self.admin))

        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["message"], "Quiz not found")

    def test_update_settings_keeps_unsent_fields(self):
        response = self.client.put(f"/api/quiz/{self.quiz.pk}",
                                   {"settings": {"viewResults": False, "duration": {"seconds": 30}}},
                                   content_type="application/json", headers=admin_headers(self.admin))

        self.assertEqual(response.status_code, 200)
        self.quiz.refresh_from_db()
        self.assertFalse(self.quiz.view_results)
        self.assertEqual(self.quiz.title, "General knowledge")
        self.assertEqual((self.quiz.duration_minutes, self.quiz.duration_seconds), (30, 30))

    def test_replace_question_sets(self):
        replacement = self.question_sets[1:5]

        response = self.client.put(f"/api/quiz/{self.quiz.pk}/question-sets",
                                   {"questionSetCombination": [question_set.pk for question_set in replacement]},
                                   content_type="application/json", headers=admin_headers(self.admin))

        self.assertEqual(response.status_code, 200)
        self.assertEqual(
            list(QuizQuestionSet.objects.filter(quiz=self.quiz).values_list("question_set_id", flat=True)),
            [question_set.pk for question_set in replacement],
        )

    def test_replace_question_sets_blocked_after_submissions(self):
        self.add_submission()

        response = self.client.put(f"/api/quiz/{self.quiz.pk}/question-sets",
                                   {"questionSetCombination": [qs.pk for qs in self.question_sets[1:5]]},
                                   content_type="application/json", headers=admin_headers(self.admin))

        self.assertEqual(response.status_code, 400)

    def test_toggle_active(self):
        response = self.client.patch(f"/api/quiz/{self.quiz.pk}/toggle-active", headers=admin_headers(self.admin))

        self.assertEqual(response.status_code, 200)
        self.quiz.refresh_from_db()
        self.assertFalse(self.quiz.is_active)

    def test_statistics(self):
        response = self.client.get(f"/api/quiz/{self.quiz.pk}/statistics", headers=admin_headers(self.admin))

        self.assertEqual(response.status_code, 200)
        statistics = response.json()["statistics"]
        self.assertEqual(statistics["totalQuestionSets"], 4)
        self.assertEqual(statistics["totalQuestions"], 12)
        self.assertEqual(statistics["totalPoints"], 16)
        self.assertEqual(statistics["duration"], 1800)

    def test_delete_quiz(self):
        response = self.client.delete(f"/api/quiz/{self.quiz.pk}", headers=admin_headers(self.admin))

        self.assertEqual(response.status_code, 200)
        self.assertFalse(Quiz.objects.filter(pk=self.quiz.pk).exists())

    def test_delete_blocked_after_submissions(self):
        self.add_submission()

        response = self.client.delete(f"/api/quiz/{self.quiz.pk}", headers=admin_headers(self.admin))

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["message"],
                         "Cannot delete a quiz that has submissions. Deactivate it instead.")
        self.assertTrue(Quiz.objects.filter(pk=self.quiz.pk).exists())
