from django.test import TestCase

from questionsets.models import ESSAY, MULTIPLE_CHOICE, TRUE_FALSE, Question, QuestionSet
from quiz_platform.testing import admin_headers, create_admin, create_question_set, create_quiz


def question_set_body(title="Capitals"):
    return {
        "title": title,
        "questions": [
            {"type": MULTIPLE_CHOICE, "question": "Capital of France?", "options": "A. Paris|B. Lyon",
             "correctAnswer": "A", "points": 2},
            {"type": TRUE_FALSE, "question": "Rome is in Italy.", "correctAnswer": "Yes"},
            {"type": ESSAY, "question": "Describe Paris.", "points": 5},
        ],
    }


class QuestionSetCreateTestCase(TestCase):

    @classmethod
    def setUpTestData(cls):
        cls.admin = create_admin()

    def test_create_question_set(self):
        response = self.client.post("/api/questionset/", question_set_body(), content_type="application/json",
                                    headers=admin_headers(self.admin))

        self.assertEqual(response.status_code, 201)
        data = response.json()["questionSet"]
        self.assertEqual(data["title"], "Capitals")
        self.assertEqual(data["totalPoints"], 8)
        self.assertEqual(data["questionCount"], 3)
        self.assertEqual([question["order"] for question in data["questions"]], [1, 2, 3])

        question_set = QuestionSet.objects.get(pk=data["id"])
        self.assertEqual(question_set.created_by, self.admin)
        multiple_choice, true_false, essay = question_set.questions.all()
        self.assertEqual(multiple_choice.options, ["A. Paris", "B. Lyon"])
        self.assertEqual(true_false.correct_answer, "true")
        self.assertEqual(essay.correct_answer, "")

    def test_multiple_choice_needs_options(self):
        body = {"title": "Bad", "questions": [{"type": MULTIPLE_CHOICE, "question": "Q?", "correctAnswer": "A"}]}

        response = self.client.post("/api/questionset/", body, content_type="application/json",
                                    headers=admin_headers(self.admin))

        self.assertEqual(response.status_code, 400)
        self.assertIn("multiple-choice questions need options", response.json()["message"])
        self.assertFalse(QuestionSet.objects.exists())

    def test_multiple_choice_answer_must_name_an_option(self):
        body = {"title": "Bad", "questions": [{"type": MULTIPLE_CHOICE, "question": "Capital of France?",
                                               "options": ["A. Paris", "B. Lyon"], "correctAnswer": "C"}]}

        response = self.client.post("/api/questionset/", body, content_type="application/json",
                                    headers=admin_headers(self.admin))

        self.assertEqual(response.status_code, 400)
        self.assertIn("correct answer C does not match an option label", response.json()["message"])
        self.assertFalse(QuestionSet.objects.exists())

    def test_true_false_answer_must_be_boolean_like(self):
        body = {"title": "Bad", "questions": [{"type": TRUE_FALSE, "question": "Q?", "correctAnswer": "maybe"}]}

        response = self.client.post("/api/questionset/", body, content_type="application/json",
                                    headers=admin_headers(self.admin))

        self.assertEqual(response.status_code, 400)

    def test_unknown_question_type(self):
        body = {"title": "Bad", "questions": [{"type": "matching", "question": "Q?"}]}

        response = self.client.post("/api/questionset/", body, content_type="application/json",
                                    headers=admin_headers(self.admin))

        self.assertEqual(response.status_code, 400)

    def test_at_least_one_question(self):
        response = self.client.post("/api/questionset/", {"title": "Empty", "questions": []},
                                    content_type="application/json", headers=admin_headers(self.admin))

        self.assertEqual(response.status_code, 400)

    def test_requires_admin(self):
        response = self.client.post("/api/questionset/", question_set_body(), content_type="application/json")

        self.assertEqual(response.status_code, 401)


class QuestionSetManagementTestCase(TestCase):

    @classmethod
    def setUpTestData(cls):
        cls.admin = create_admin()

    def setUp(self):
        self.question_set = create_question_set(self.admin, "Geography")

    def test_list_with_filters(self):
        inactive = create_question_set(self.admin, "History")
        inactive.is_active = False
        inactive.save()

        response = self.client.get("/api/questionset/", {"isActive": "true"}, headers=admin_headers(self.admin))

        self.assertEqual(response.status_code, 200)
        titles = [question_set["title"] for question_set in response.json()["questionSets"]]
        self.assertEqual(titles, ["Geography"])
        self.assertNotIn("questions", response.json()["questionSets"][0])

        response = self.client.get("/api/questionset/", {"search": "hist"}, headers=admin_headers(self.admin))
        self.assertEqual(response.json()["count"], 1)

    def test_get_missing_question_set(self):
        response = self.client.get("/api/questionset/999999", headers=admin_headers(self.admin))

        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["message"], "Question set not found")

    def test_update_replaces_questions(self):
        body = {"title": "Renamed", "questions": [
            {"type": TRUE_FALSE, "question": "Water is wet.", "correctAnswer": False, "points": 3},
        ]}

        response = self.client.put(f"/api/questionset/{self.question_set.pk}", body,
                                   content_type="application/json", headers=admin_headers(self.admin))

        self.assertEqual(response.status_code, 200)
        self.question_set.refresh_from_db()
        self.assertEqual(self.question_set.title, "Renamed")
        self.assertEqual(self.question_set.total_points, 3)
        self.assertEqual(self.question_set.question_count, 1)
        self.assertEqual(self.question_set.questions.get().correct_answer, "false")

    def test_toggle_active(self):
        response = self.client.patch(f"/api/questionset/{self.question_set.pk}/toggle-active",
                                     headers=admin_headers(self.admin))

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["message"], "Question set deactivated successfully")
        self.question_set.refresh_from_db()
        self.assertFalse(self.question_set.is_active)

    def test_add_questions_appends_in_order(self):
        body = {"questions": [{"type": ESSAY, "question": "Explain tides.", "points": 4}]}

        response = self.client.post(f"/api/questionset/{self.question_set.pk}/questions", body,
                                    content_type="application/json", headers=admin_headers(self.admin))

        self.assertEqual(response.status_code, 200)
        data = response.json()["questionSet"]
        self.assertEqual(data["totalPoints"], 8)
        self.assertEqual(data["questions"][-1]["order"], 4)

    def test_update_single_question_keeps_totals_in_step(self):
        question = self.question_set.questions.get(type=MULTIPLE_CHOICE)

        response = self.client.put(f"/api/questionset/{self.question_set.pk}/questions/{question.pk}",
                                   {"points": 6}, content_type="application/json",
                                   headers=admin_headers(self.admin))

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["questionSet"]["totalPoints"], 8)
        question.refresh_from_db()
        self.assertEqual(question.options, ["A. Paris", "B. Lyon"])

    def test_update_single_question_validates_merged_result(self):
        question = self.question_set.questions.get(type=MULTIPLE_CHOICE)

        response = self.client.put(f"/api/questionset/{self.question_set.pk}/questions/{question.pk}",
                                   {"options": []}, content_type="application/json",
                                   headers=admin_headers(self.admin))

        self.assertEqual(response.status_code, 400)

    def test_delete_question(self):
        question = self.question_set.questions.get(type=MULTIPLE_CHOICE)

        response = self.client.delete(f"/api/questionset/{self.question_set.pk}/questions/{question.pk}",
                                      headers=admin_headers(self.admin))

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["questionSet"]["totalPoints"], 2)
        self.assertFalse(Question.objects.filter(pk=question.pk).exists())

    def test_delete_unused_question_set(self):
        response = self.client.delete(f"/api/questionset/{self.question_set.pk}", headers=admin_headers(self.admin))

        self.assertEqual(response.status_code, 200)
        self.assertFalse(QuestionSet.objects.filter(pk=self.question_set.pk).exists())

    def test_delete_blocked_while_used_by_a_quiz(self):
        others = [create_question_set(self.admin, f"Set {index}") for index in range(3)]
        create_quiz(self.admin, [self.question_set, *others])

        response = self.client.delete(f"/api/questionset/{self.question_set.pk}", headers=admin_headers(self.admin))

        self.assertEqual(response.status_code, 400)
        self.assertIn("It is being used in 1 quiz(zes)", response.json()["message"])
        self.assertTrue(QuestionSet.objects.filter(pk=self.question_set.pk).exists())
