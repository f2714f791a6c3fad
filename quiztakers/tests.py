from unittest.mock import patch

from django.core.exceptions import ValidationError
from django.test import TestCase

from quiz_platform.exceptions import PreconditionFailed
from quiz_platform.testing import admin_headers, create_admin, create_question_set, create_quiz, quiz_taker_headers
from quiztakers.models import (ACCESS_CODE_ALPHABET, COMPLETED, IN_PROGRESS, NOT_STARTED, PENDING, PREMIUM, REGULAR,
                               AssignedQuiz, QuestionSetProgress, QuizTaker, generate_access_code)
from quiztakers.progress import (complete_question_set, ensure_progress, outstanding_slots, reorder_question_sets,
                                 start_question_set, start_quiz)
from submissions.models import QuizSubmission


class QuizTakerModelTestCase(TestCase):

    @classmethod
    def setUpTestData(cls):
        cls.admin = create_admin()
        cls.question_sets = [create_question_set(cls.admin, f"Set {index}") for index in range(1, 5)]
        cls.quiz = create_quiz(cls.admin, cls.question_sets)

    def test_access_code_format(self):
        code = generate_access_code()

        self.assertEqual(len(code), 9)
        self.assertTrue(set(code) <= set(ACCESS_CODE_ALPHABET))

    def test_email_is_normalised(self):
        quiz_taker = QuizTaker.objects.create(email="  Someone@Example.COM ", account_type=REGULAR)

        self.assertEqual(quiz_taker.email, "someone@example.com")

    def test_premium_taker_needs_access_code(self):
        with self.assertRaises(ValidationError):
            QuizTaker.objects.create(email="premium@example.com", account_type=PREMIUM)

    def test_question_set_combination_must_have_four_distinct_ids(self):
        with self.assertRaises(ValidationError):
            QuizTaker.objects.create(email="regular@example.com", account_type=REGULAR,
                                     question_set_combination=[1, 2, 2, 3])

    def test_regular_taker_cannot_be_assigned(self):
        quiz_taker = QuizTaker.objects.create(email="regular@example.com", account_type=REGULAR)

        with self.assertRaises(ValidationError):
            AssignedQuiz.objects.create(quiz_taker=quiz_taker, quiz=self.quiz)

    def test_premium_taker_with_assignments_cannot_become_regular(self):
        quiz_taker = QuizTaker.objects.create(email="premium@example.com", account_type=PREMIUM,
                                              access_code="ABC123XYZ")
        AssignedQuiz.objects.create(quiz_taker=quiz_taker, quiz=self.quiz)

        quiz_taker.account_type = REGULAR
        quiz_taker.access_code = None
        with self.assertRaises(ValidationError):
            quiz_taker.save()


class QuestionSetProgressTestCase(TestCase):

    @classmethod
    def setUpTestData(cls):
        cls.admin = create_admin()
        cls.quiz = create_quiz(cls.admin, [create_question_set(cls.admin, f"Set {index}") for index in range(1, 5)])
        cls.quiz_taker = QuizTaker.objects.create(email="premium@example.com", account_type=PREMIUM,
                                                  access_code="ABC123XYZ")

    def setUp(self):
        self.assignment = AssignedQuiz.objects.create(quiz_taker=self.quiz_taker, quiz=self.quiz)

    def test_ensure_progress_creates_four_records_once(self):
        progress = ensure_progress(self.assignment)
        ensure_progress(self.assignment)

        self.assertEqual(sorted(progress), [1, 2, 3, 4])
        self.assertEqual(QuestionSetProgress.objects.filter(assigned_quiz=self.assignment).count(), 4)
        self.assertTrue(all(record.status == NOT_STARTED for record in progress.values()))

    def test_start_quiz_only_once(self):
        self.assertTrue(start_quiz(self.assignment))
        started_at = self.assignment.started_at

        self.assertFalse(start_quiz(self.assignment))
        self.assertEqual(self.assignment.status, IN_PROGRESS)
        self.assertEqual(self.assignment.started_at, started_at)

    def test_starting_a_slot_starts_the_quiz(self):
        record = start_question_set(self.assignment, 3)

        self.assignment.refresh_from_db()
        self.assertEqual(self.assignment.status, IN_PROGRESS)
        self.assertEqual(self.assignment.current_question_set, 3)
        self.assertEqual(record.status, IN_PROGRESS)

    def test_completed_slot_cannot_be_completed_again(self):
        progress = ensure_progress(self.assignment)
        complete_question_set(progress[2], 3, 4)

        with self.assertRaises(PreconditionFailed):
            complete_question_set(progress[2], 4, 4)
        with self.assertRaises(PreconditionFailed):
            start_question_set(self.assignment, 2)

        progress[2].refresh_from_db()
        self.assertEqual((progress[2].status, progress[2].score), (COMPLETED, 3))
        self.assertEqual(outstanding_slots(progress), [1, 3, 4])

    def test_reorder_sets_custom_positions(self):
        reorder_question_sets(self.assignment, [4, 2, 3, 1])

        positions = dict(QuestionSetProgress.objects.filter(assigned_quiz=self.assignment)
                         .values_list("slot", "custom_position"))
        self.assertEqual(positions, {4: 1, 2: 2, 3: 3, 1: 4})

    def test_reorder_blocked_after_a_completed_slot(self):
        progress = ensure_progress(self.assignment)
        complete_question_set(progress[1], 4, 4)

        with self.assertRaises(PreconditionFailed):
            reorder_question_sets(self.assignment, [4, 3, 2, 1])


@patch("accounts.emails.deliver_access_code.delay")
class QuizTakerAdminTestCase(TestCase):

    @classmethod
    def setUpTestData(cls):
        cls.admin = create_admin()
        cls.question_sets = [create_question_set(cls.admin, f"Set {index}") for index in range(1, 5)]
        cls.quiz = create_quiz(cls.admin, cls.question_sets)
        cls.premium = QuizTaker.objects.create(email="premium@example.com", name="Pat", account_type=PREMIUM,
                                               access_code="ABC123XYZ")

    def test_create_premium_taker_sends_access_code(self, mock_delay):
        with self.captureOnCommitCallbacks(execute=True):
            response = self.client.post("/api/admin/quiztaker", {"email": "New@Example.com", "name": "Ada"},
                                        content_type="application/json", headers=admin_headers(self.admin))

        self.assertEqual(response.status_code, 201)
        data = response.json()["quizTaker"]
        self.assertEqual(data["email"], "new@example.com")
        self.assertEqual(data["accountType"], PREMIUM)
        self.assertEqual(len(data["accessCode"]), 9)
        mock_delay.assert_called_once_with(data["id"])

    def test_create_regular_taker_has_no_access_code(self, mock_delay):
        with self.captureOnCommitCallbacks(execute=True):
            response = self.client.post("/api/admin/quiztaker",
                                        {"email": "regular@example.com", "accountType": REGULAR,
                                         "questionSetCombination": [qs.pk for qs in self.question_sets]},
                                        content_type="application/json", headers=admin_headers(self.admin))

        self.assertEqual(response.status_code, 201)
        self.assertIsNone(response.json()["quizTaker"]["accessCode"])
        mock_delay.assert_not_called()

    def test_duplicate_email(self, mock_delay):
        response = self.client.post("/api/admin/quiztaker", {"email": "PREMIUM@example.com"},
                                    content_type="application/json", headers=admin_headers(self.admin))

        self.assertEqual(response.status_code, 400)
        self.assertIn("Quiz taker with this email already exists", response.json()["message"])

    def test_invalid_combination(self, mock_delay):
        response = self.client.post("/api/admin/quiztaker",
                                    {"email": "regular@example.com", "accountType": REGULAR,
                                     "questionSetCombination": [1, 2]},
                                    content_type="application/json", headers=admin_headers(self.admin))

        self.assertEqual(response.status_code, 400)
        self.assertIn("questionSetCombination", response.json()["message"])

    def test_list_filters_by_account_type(self, mock_delay):
        QuizTaker.objects.create(email="regular@example.com", account_type=REGULAR)

        response = self.client.get("/api/admin/quiztakers", {"accountType": REGULAR},
                                   headers=admin_headers(self.admin))

        self.assertEqual(response.status_code, 200)
        self.assertEqual([taker["email"] for taker in response.json()["quizTakers"]], ["regular@example.com"])

    def test_detail_includes_assignments(self, mock_delay):
        AssignedQuiz.objects.create(quiz_taker=self.premium, quiz=self.quiz)

        response = self.client.get(f"/api/admin/quiztaker/{self.premium.pk}", headers=admin_headers(self.admin))

        self.assertEqual(response.status_code, 200)
        assigned = response.json()["quizTaker"]["assignedQuizzes"]
        self.assertEqual([assignment["quizId"] for assignment in assigned], [self.quiz.pk])

    def test_cannot_downgrade_taker_holding_assignments(self, mock_delay):
        AssignedQuiz.objects.create(quiz_taker=self.premium, quiz=self.quiz)

        response = self.client.put(f"/api/admin/quiztaker/{self.premium.pk}", {"accountType": REGULAR},
                                   content_type="application/json", headers=admin_headers(self.admin))

        self.assertEqual(response.status_code, 400)
        self.assertIn("Regular quiz takers cannot hold assigned quizzes", response.json()["message"])
        self.premium.refresh_from_db()
        self.assertEqual(self.premium.account_type, PREMIUM)

    def test_upgrade_to_premium_issues_access_code(self, mock_delay):
        regular = QuizTaker.objects.create(email="regular@example.com", account_type=REGULAR)

        with self.captureOnCommitCallbacks(execute=True):
            response = self.client.put(f"/api/admin/quiztaker/{regular.pk}", {"accountType": PREMIUM},
                                       content_type="application/json", headers=admin_headers(self.admin))

        self.assertEqual(response.status_code, 200)
        regular.refresh_from_db()
        self.assertEqual(regular.account_type, PREMIUM)
        self.assertIsNotNone(regular.access_code)
        mock_delay.assert_called_once_with(regular.pk)

    def test_delete_taker(self, mock_delay):
        response = self.client.delete(f"/api/admin/quiztaker/{self.premium.pk}", headers=admin_headers(self.admin))

        self.assertEqual(response.status_code, 200)
        self.assertFalse(QuizTaker.objects.filter(pk=self.premium.pk).exists())

    def test_assign_quiz(self, mock_delay):
        response = self.client.post(f"/api/admin/quiztaker/{self.premium.pk}/assign", {"quizId": self.quiz.pk},
                                    content_type="application/json", headers=admin_headers(self.admin))

        self.assertEqual(response.status_code, 201)
        data = response.json()["assignedQuiz"]
        self.assertEqual(data["status"], PENDING)
        self.assertEqual(data["questionSetOrder"], [1, 2, 3, 4])
        self.assertEqual(len(data["questionSetProgress"]), 4)

    def test_assign_twice_rejected(self, mock_delay):
        AssignedQuiz.objects.create(quiz_taker=self.premium, quiz=self.quiz)

        response = self.client.post(f"/api/admin/quiztaker/{self.premium.pk}/assign", {"quizId": self.quiz.pk},
                                    content_type="application/json", headers=admin_headers(self.admin))

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["message"], "This quiz is already assigned to this quiz taker")

    def test_assign_to_regular_rejected(self, mock_delay):
        regular = QuizTaker.objects.create(email="regular@example.com", account_type=REGULAR)

        response = self.client.post(f"/api/admin/quiztaker/{regular.pk}/assign", {"quizId": self.quiz.pk},
                                    content_type="application/json", headers=admin_headers(self.admin))

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["message"], "Quizzes can only be assigned to premium quiz takers")

    def test_assign_inactive_quiz_rejected(self, mock_delay):
        self.quiz.is_active = False
        self.quiz.save()

        response = self.client.post(f"/api/admin/quiztaker/{self.premium.pk}/assign", {"quizId": self.quiz.pk},
                                    content_type="application/json", headers=admin_headers(self.admin))

        self.assertEqual(response.status_code, 400)

    def test_unassign_discards_open_submission(self, mock_delay):
        AssignedQuiz.objects.create(quiz_taker=self.premium, quiz=self.quiz, status=IN_PROGRESS)
        QuizSubmission.objects.create(quiz=self.quiz, quiz_taker=self.premium)

        response = self.client.delete(f"/api/admin/quiztaker/{self.premium.pk}/assign/{self.quiz.pk}",
                                      headers=admin_headers(self.admin))

        self.assertEqual(response.status_code, 200)
        self.assertFalse(AssignedQuiz.objects.filter(quiz_taker=self.premium).exists())
        self.assertFalse(QuizSubmission.objects.filter(quiz_taker=self.premium).exists())

    def test_completed_quiz_cannot_be_unassigned(self, mock_delay):
        AssignedQuiz.objects.create(quiz_taker=self.premium, quiz=self.quiz, status=COMPLETED)

        response = self.client.delete(f"/api/admin/quiztaker/{self.premium.pk}/assign/{self.quiz.pk}",
                                      headers=admin_headers(self.admin))

        self.assertEqual(response.status_code, 400)
        self.assertTrue(AssignedQuiz.objects.filter(quiz_taker=self.premium).exists())


class QuizTakerEndpointsTestCase(TestCase):

    @classmethod
    def setUpTestData(cls):
        cls.admin = create_admin()
        cls.question_sets = [create_question_set(cls.admin, f"Set {index}") for index in range(1, 5)]
        cls.quiz = create_quiz(cls.admin, cls.question_sets)
        cls.other_quiz = create_quiz(cls.admin, cls.question_sets, title="Not assigned")
        cls.quiz_taker = QuizTaker.objects.create(email="premium@example.com", name="Pat", account_type=PREMIUM,
                                                  access_code="ABC123XYZ")

    def setUp(self):
        self.assignment = AssignedQuiz.objects.create(quiz_taker=self.quiz_taker, quiz=self.quiz)
        ensure_progress(self.assignment)

    def test_dashboard(self):
        response = self.client.get("/api/quiztaker/dashboard", headers=quiz_taker_headers(self.quiz_taker))

        self.assertEqual(response.status_code, 200)
        assigned = response.json()["quizTaker"]["assignedQuizzes"]
        self.assertEqual(assigned[0]["quiz"]["settings"]["title"], "General knowledge")

    def test_profile(self):
        response = self.client.get("/api/quiztaker/profile", headers=quiz_taker_headers(self.quiz_taker))

        self.assertEqual(response.status_code, 200)
        profile = response.json()["profile"]
        self.assertEqual(profile["totalQuizzesAssigned"], 1)
        self.assertEqual(profile["completedQuizzes"], 0)

    def test_inactive_taker_is_locked_out(self):
        self.quiz_taker.is_active = False
        self.quiz_taker.save()

        response = self.client.get("/api/quiztaker/profile", headers=quiz_taker_headers(self.quiz_taker))

        self.assertEqual(response.status_code, 403)

    def test_quiz_not_assigned(self):
        response = self.client.get(f"/api/quiztaker/quiz/{self.other_quiz.pk}",
                                   headers=quiz_taker_headers(self.quiz_taker))

        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.json()["message"], "This quiz is not assigned to you")

    def test_start_quiz(self):
        url = f"/api/quiztaker/quiz/{self.quiz.pk}/start"

        first = self.client.post(url, headers=quiz_taker_headers(self.quiz_taker))
        second = self.client.post(url, headers=quiz_taker_headers(self.quiz_taker))

        self.assertEqual(first.json()["message"], "Quiz started successfully")
        self.assertEqual(second.json()["message"], "Quiz already in progress")
        self.assertEqual(first.json()["startedAt"], second.json()["startedAt"])
        self.assignment.refresh_from_db()
        self.assertEqual(self.assignment.status, IN_PROGRESS)

    def test_start_completed_quiz_rejected(self):
        self.assignment.status = COMPLETED
        self.assignment.save()

        response = self.client.post(f"/api/quiztaker/quiz/{self.quiz.pk}/start",
                                    headers=quiz_taker_headers(self.quiz_taker))

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["message"], "You have already completed this quiz")

    def test_reorder_and_overview(self):
        response = self.client.put(f"/api/quiztaker/quiz/{self.quiz.pk}/order", {"questionSetOrder": [3, 1, 4, 2]},
                                   content_type="application/json", headers=quiz_taker_headers(self.quiz_taker))
        self.assertEqual(response.status_code, 200)

        response = self.client.get(f"/api/quiztaker/quiz/{self.quiz.pk}", headers=quiz_taker_headers(self.quiz_taker))

        self.assertEqual(response.status_code, 200)
        question_sets = response.json()["quiz"]["questionSets"]
        self.assertEqual([question_set["order"] for question_set in question_sets], [3, 1, 4, 2])
        self.assertEqual([question_set["progress"]["customOrder"] for question_set in question_sets], [1, 2, 3, 4])

    def test_reorder_rejects_repeated_slots(self):
        response = self.client.put(f"/api/quiztaker/quiz/{self.quiz.pk}/order", {"questionSetOrder": [1, 1, 2, 3]},
                                   content_type="application/json", headers=quiz_taker_headers(self.quiz_taker))

        self.assertEqual(response.status_code, 400)
        self.assignment.refresh_from_db()
        self.assertEqual(self.assignment.question_set_order, [1, 2, 3, 4])

    def test_question_set_hides_answers(self):
        response = self.client.get(f"/api/quiztaker/quiz/{self.quiz.pk}/question-set/2",
                                   headers=quiz_taker_headers(self.quiz_taker))

        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual(data["questionSet"]["order"], 2)
        self.assertTrue(all("correctAnswer" not in question for question in data["questionSet"]["questions"]))
        self.assertEqual(data["progress"]["status"], NOT_STARTED)

    def test_question_set_out_of_range(self):
        response = self.client.get(f"/api/quiztaker/quiz/{self.quiz.pk}/question-set/5",
                                   headers=quiz_taker_headers(self.quiz_taker))

        self.assertEqual(response.status_code, 400)

    def test_start_question_set(self):
        response = self.client.post(f"/api/quiztaker/quiz/{self.quiz.pk}/question-set/2/start",
                                    headers=quiz_taker_headers(self.quiz_taker))

        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual(data["assignmentStatus"], IN_PROGRESS)
        self.assertEqual(data["currentQuestionSet"], 2)
        self.assertEqual(data["progress"]["status"], IN_PROGRESS)
