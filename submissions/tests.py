from datetime import timedelta
from io import StringIO
from unittest.mock import patch

from django.core.management import call_command
from django.db import IntegrityError, transaction
from django.db.models import F
from django.test import SimpleTestCase, TestCase
from django.utils import timezone

from questionsets.models import ESSAY, FILL_IN_THE_BLANKS, MULTIPLE_CHOICE, TRUE_FALSE
from quiz.models import QuizQuestion
from quiz_platform.exceptions import InvalidRequest, SubmissionConflict
from quiz_platform.testing import (admin_headers, create_admin, create_question_set, create_quiz, correct_answers,
                                   quiz_taker_headers)
from quiz_platform.versioning import WriteConflict
from quiztakers.models import COMPLETED, IN_PROGRESS, PENDING, PREMIUM, REGULAR, AssignedQuiz, QuestionSetProgress, \
    QuizTakenEntry, QuizTaker
from quiztakers.progress import ensure_progress
from submissions import aggregator
from submissions.coordinator import is_write_conflict, run_in_transaction
from submissions.grading import grade_answer, grade_essay
from submissions.models import AUTO_GRADED, GRADED, PENDING_MANUAL_GRADING, QuestionSetSubmission, QuizSubmission, \
    SubmissionAnswer, calculate_percentage


class GradingTestCase(SimpleTestCase):

    def question(self, type, correct_answer="", options=None, points=1):
        return QuizQuestion(type=type, question_text="Q", correct_answer=correct_answer, options=options or [],
                            points=points, order=1)

    def test_multiple_choice_needs_the_full_option_text(self):
        question = self.question(MULTIPLE_CHOICE, "A", ["A. Paris", "B. Lyon"], points=2)

        self.assertEqual(grade_answer(question, "A. Paris"), (True, 2))
        self.assertEqual(grade_answer(question, "A"), (False, 0))
        self.assertEqual(grade_answer(question, "B. Lyon"), (False, 0))

    def test_multiple_choice_with_unmatched_label_is_never_correct(self):
        question = self.question(MULTIPLE_CHOICE, "D", ["A. Paris", "B. Lyon"])

        self.assertEqual(grade_answer(question, "D"), (False, 0))

    def test_true_false_ignores_case(self):
        question = self.question(TRUE_FALSE, "true")

        self.assertEqual(grade_answer(question, "TRUE"), (True, 1))
        self.assertEqual(grade_answer(question, True), (True, 1))
        self.assertEqual(grade_answer(question, "false"), (False, 0))

    def test_fill_in_the_blanks_trims_and_ignores_case(self):
        question = self.question(FILL_IN_THE_BLANKS, " London ")

        self.assertEqual(grade_answer(question, "london"), (True, 1))
        self.assertEqual(grade_answer(question, "Londres"), (False, 0))

    def test_essay_waits_for_an_admin(self):
        question = self.question(ESSAY, points=5)

        self.assertEqual(grade_answer(question, "An essay"), (None, 0))

    def test_unanswered_is_wrong(self):
        question = self.question(TRUE_FALSE, "false")

        self.assertEqual(grade_answer(question, None), (False, 0))
        self.assertEqual(grade_answer(question, ""), (False, 0))
        self.assertEqual(grade_answer(question, []), (False, 0))

    def test_grade_essay_bounds(self):
        self.assertEqual(grade_essay(5, 3), (True, 3))
        self.assertEqual(grade_essay(5, 0), (False, 0))
        with self.assertRaises(InvalidRequest):
            grade_essay(5, 6)
        with self.assertRaises(InvalidRequest):
            grade_essay(5, True)

    def test_percentage_rounds_half_up(self):
        self.assertEqual(calculate_percentage(1, 3), 33)
        self.assertEqual(calculate_percentage(2, 3), 67)
        self.assertEqual(calculate_percentage(101, 200), 51)
        self.assertEqual(calculate_percentage(0, 0), 0)


class SubmissionFixtureMixin:
    with_essay = False

    @classmethod
    def setUpTestData(cls):
        cls.admin = create_admin()
        cls.question_sets = [create_question_set(cls.admin, f"Set {index}", with_essay=cls.with_essay and index == 4)
                             for index in range(1, 5)]
        cls.quiz = create_quiz(cls.admin, cls.question_sets)
        cls.quiz_taker = QuizTaker.objects.create(email="premium@example.com", name="Pat", account_type=PREMIUM,
                                                  access_code="ABC123XYZ")

    def setUp(self):
        self.assignment = AssignedQuiz.objects.create(quiz_taker=self.quiz_taker, quiz=self.quiz, status=IN_PROGRESS,
                                                      started_at=timezone.now() - timedelta(minutes=10))
        ensure_progress(self.assignment)

    def snapshot(self, slot):
        return self.quiz.question_sets.get(order=slot)

    def submit(self, slot, answers=None, final=True, quiz_taker=None):
        if answers is None:
            answers = correct_answers(self.snapshot(slot))
        return self.client.post(
            f"/api/quiztaker/quiz/{self.quiz.pk}/submit",
            {"questionSetOrder": slot, "answers": answers, "isFinalSubmission": final},
            content_type="application/json",
            headers=quiz_taker_headers(quiz_taker or self.quiz_taker),
        )

    def complete_quiz(self):
        for slot in (1, 2, 3, 4):
            response = self.submit(slot)
            self.assertEqual(response.status_code, 200)
        return QuizSubmission.objects.get(quiz_taker=self.quiz_taker)


class QuestionSetSubmissionTestCase(SubmissionFixtureMixin, TestCase):

    def test_first_batch_opens_the_submission(self):
        response = self.submit(1, final=False)

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["message"], "Question set submitted successfully")
        result = body["submission"]
        self.assertEqual(result["questionSetScore"], 4)
        self.assertEqual(result["overallScore"], 4)
        self.assertEqual(result["overallTotalPoints"], 16)
        self.assertEqual(result["status"], "in-progress")
        self.assertFalse(result["quizCompleted"])
        self.assertEqual(result["remainingQuestionSets"], [1, 2, 3, 4])

        progress = QuestionSetProgress.objects.get(assigned_quiz=self.assignment, slot=1)
        self.assertEqual((progress.status, progress.score, progress.total_points), (IN_PROGRESS, 4, 4))

    def test_resubmitting_the_same_batch_is_idempotent(self):
        first = self.submit(2, final=False).json()["submission"]
        second = self.submit(2, final=False).json()["submission"]

        self.assertEqual(first["id"], second["id"])
        self.assertEqual(second["overallScore"], first["overallScore"])
        self.assertEqual(QuizSubmission.objects.filter(quiz_taker=self.quiz_taker).count(), 1)
        self.assertEqual(QuestionSetSubmission.objects.filter(submission_id=first["id"]).count(), 1)
        self.assertEqual(SubmissionAnswer.objects.filter(submission_id=first["id"]).count(), 3)

    def test_later_batch_replaces_earlier_answers_for_the_slot(self):
        self.submit(1, final=False)
        answers = correct_answers(self.snapshot(1))
        answers[0]["answer"] = "B. Lyon"

        result = self.submit(1, answers=answers, final=False).json()["submission"]

        self.assertEqual(result["questionSetScore"], 2)
        self.assertEqual(result["overallScore"], 2)

    def test_final_submission_completes_the_slot_only(self):
        result = self.submit(3).json()["submission"]

        self.assertEqual(result["orderAnswered"], 1)
        self.assertEqual(result["remainingQuestionSets"], [1, 2, 4])
        self.assertFalse(result["quizCompleted"])
        self.assignment.refresh_from_db()
        self.assertEqual(self.assignment.status, IN_PROGRESS)

    def test_completed_slot_cannot_be_resubmitted(self):
        self.submit(1)
        answers = correct_answers(self.snapshot(1))
        answers[0]["answer"] = "B. Lyon"

        response = self.submit(1, answers=answers)

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["message"], "This question set has already been completed")
        submission = QuizSubmission.objects.get(quiz_taker=self.quiz_taker)
        self.assertEqual(submission.score, 4)

    def test_quiz_completes_after_the_last_outstanding_slot(self):
        responses = [self.submit(slot).json() for slot in (3, 1, 4, 2)]

        self.assertEqual([response["submission"]["orderAnswered"] for response in responses], [1, 2, 3, 4])
        self.assertEqual([response["submission"]["quizCompleted"] for response in responses],
                         [False, False, False, True])
        self.assertEqual(responses[-1]["message"], "Quiz submitted successfully")

        submission = QuizSubmission.objects.get(quiz_taker=self.quiz_taker)
        self.assertEqual(submission.status, AUTO_GRADED)
        self.assertEqual((submission.score, submission.total_points, submission.percentage), (16, 16, 100))
        self.assertGreaterEqual(submission.time_taken, 600)
        self.assertIsNotNone(submission.submitted_at)

        self.assignment.refresh_from_db()
        self.assertEqual(self.assignment.status, COMPLETED)
        self.assertEqual(self.assignment.submission, submission)
        entry = QuizTakenEntry.objects.get(quiz_taker=self.quiz_taker)
        self.assertEqual((entry.submission, entry.score), (submission, 16))

    def test_partial_credit_percentage(self):
        for slot in (1, 3, 4):
            self.submit(slot)
        answers = correct_answers(self.snapshot(2))
        answers[0]["answer"] = "B. Lyon"

        result = self.submit(2, answers=answers).json()["submission"]

        self.assertEqual((result["overallScore"], result["percentage"]), (14, 88))

    def test_unanswered_questions_are_graded_wrong(self):
        result = self.submit(1, answers=[]).json()["submission"]

        self.assertEqual(result["questionSetScore"], 0)
        answers = SubmissionAnswer.objects.filter(submission_id=result["id"])
        self.assertEqual(answers.count(), 3)
        self.assertFalse(answers.filter(is_correct=True).exists())

    def test_no_submission_after_completion(self):
        self.complete_quiz()

        response = self.submit(1)

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["message"], "You have already completed this quiz")
        self.assertEqual(QuizSubmission.objects.filter(quiz_taker=self.quiz_taker).count(), 1)

    def test_quiz_must_be_started(self):
        self.assignment.status = PENDING
        self.assignment.save()

        response = self.submit(1)

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["message"], "You must start the quiz before submitting")
        self.assertFalse(QuizSubmission.objects.exists())

    def test_quiz_must_be_assigned(self):
        other = QuizTaker.objects.create(email="other@example.com", account_type=PREMIUM, access_code="OTHER0000")

        response = self.submit(1, quiz_taker=other)

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["message"], "This quiz is not assigned to you")

    def test_question_from_another_slot_rejected(self):
        answers = correct_answers(self.snapshot(2))

        response = self.submit(1, answers=answers)

        self.assertEqual(response.status_code, 400)
        self.assertFalse(QuizSubmission.objects.exists())

    def test_slot_out_of_range(self):
        response = self.submit(5, answers=[])

        self.assertEqual(response.status_code, 400)

    def test_one_open_submission_per_quiz_taker(self):
        QuizSubmission.objects.create(quiz=self.quiz, quiz_taker=self.quiz_taker)

        with self.assertRaises(IntegrityError), transaction.atomic():
            QuizSubmission.objects.create(quiz=self.quiz, quiz_taker=self.quiz_taker)


class CommitCoordinatorTestCase(SubmissionFixtureMixin, TestCase):

    def test_stale_copy_raises_write_conflict(self):
        first = QuizTaker.objects.get(pk=self.quiz_taker.pk)
        second = QuizTaker.objects.get(pk=self.quiz_taker.pk)

        first.save_versioned()
        with self.assertRaises(WriteConflict):
            second.save_versioned()

    @patch("submissions.coordinator.time.sleep")
    def test_retries_the_whole_block(self, mock_sleep):
        attempts = []

        def operation():
            attempts.append(len(attempts) + 1)
            QuizTaker.objects.create(email=f"retry{len(attempts)}@example.com", account_type=REGULAR)
            if len(attempts) < 3:
                raise WriteConflict("stale")
            return len(attempts)

        self.assertEqual(run_in_transaction(operation), 3)
        self.assertEqual(list(QuizTaker.objects.filter(account_type=REGULAR).values_list("email", flat=True)),
                         ["retry3@example.com"])
        self.assertEqual([call.args[0] for call in mock_sleep.call_args_list], [0.1, 0.2])

    @patch("submissions.coordinator.time.sleep")
    def test_gives_up_after_max_attempts(self, mock_sleep):
        def operation():
            raise WriteConflict("stale")

        with self.assertRaises(SubmissionConflict):
            run_in_transaction(operation)
        self.assertEqual(mock_sleep.call_count, 2)

    @patch("submissions.coordinator.time.sleep")
    def test_other_errors_are_not_retried(self, mock_sleep):
        def operation():
            raise InvalidRequest("bad")

        with self.assertRaises(InvalidRequest):
            run_in_transaction(operation)
        mock_sleep.assert_not_called()

    @patch("submissions.coordinator.time.sleep")
    def test_check_constraint_violation_is_not_retried(self, mock_sleep):
        attempts = []

        def operation():
            attempts.append(1)
            # bulk_create skips full_clean, so the database CHECK constraint rejects the row
            QuizTaker.objects.bulk_create([QuizTaker(email="nocode@example.com", account_type=PREMIUM)])

        with self.assertRaises(IntegrityError):
            run_in_transaction(operation)
        self.assertEqual(len(attempts), 1)
        mock_sleep.assert_not_called()
        self.assertFalse(QuizTaker.objects.filter(email="nocode@example.com").exists())

    @patch("submissions.coordinator.time.sleep")
    def test_lost_open_submission_race_is_retried(self, mock_sleep):
        attempts = []

        def operation():
            attempts.append(1)
            if len(attempts) == 1:
                raise IntegrityError("UNIQUE constraint failed: submissions_quizsubmission.quiz_id, "
                                     "submissions_quizsubmission.quiz_taker_id")
            return "saved"

        self.assertEqual(run_in_transaction(operation), "saved")
        self.assertEqual(len(attempts), 2)
        self.assertEqual(mock_sleep.call_count, 1)

    def test_is_write_conflict(self):
        self.assertTrue(is_write_conflict(WriteConflict("stale")))
        self.assertTrue(is_write_conflict(IntegrityError(
            'duplicate key value violates unique constraint "one_open_submission_per_quiz_taker"')))
        self.assertTrue(is_write_conflict(IntegrityError("UNIQUE constraint failed: quiztakers_quiztaker.email")))
        self.assertFalse(is_write_conflict(IntegrityError("CHECK constraint failed: premium_taker_has_access_code")))
        self.assertFalse(is_write_conflict(IntegrityError("NOT NULL constraint failed: quiz_quiz.title")))

    @patch("submissions.coordinator.time.sleep")
    def test_concurrent_writer_causes_a_clean_retry(self, mock_sleep):
        calls = []

        def racing_recalculate(submission):
            calls.append(submission.pk)
            if len(calls) == 1:
                # Another request commits a change to the taker between our read and our write
                QuizTaker.objects.filter(pk=self.quiz_taker.pk).update(version=F("version") + 1)
            return aggregator.recalculate_totals(submission)

        with patch("submissions.services.recalculate_totals", side_effect=racing_recalculate):
            response = self.submit(1)

        self.assertEqual(response.status_code, 200)
        self.assertEqual(len(calls), 2)
        self.assertEqual(mock_sleep.call_count, 1)
        submission = QuizSubmission.objects.get(quiz_taker=self.quiz_taker)
        self.assertEqual(submission.question_set_submissions.count(), 1)
        self.assertEqual(submission.answers.count(), 3)
        self.assertEqual(QuestionSetProgress.objects.get(assigned_quiz=self.assignment, slot=1).status, COMPLETED)

    @patch("submissions.coordinator.time.sleep")
    def test_persistent_conflict_returns_409(self, mock_sleep):
        with patch.object(QuizTaker, "save_versioned", side_effect=WriteConflict("stale")):
            response = self.submit(1)

        self.assertEqual(response.status_code, 409)
        self.assertFalse(response.json()["success"])
        self.assertFalse(QuizSubmission.objects.exists())
        self.assertEqual(QuestionSetProgress.objects.get(assigned_quiz=self.assignment, slot=1).status, "not-started")


class ManualGradingTestCase(SubmissionFixtureMixin, TestCase):
    with_essay = True

    def essay(self):
        return self.snapshot(4).questions.get(type=ESSAY)

    def grade(self, submission, grades, feedback=None):
        body = {"grades": grades}
        if feedback is not None:
            body["feedback"] = feedback
        return self.client.post(f"/api/admin/submission/{submission.pk}/grade", body,
                                content_type="application/json", headers=admin_headers(self.admin))

    def test_essay_leaves_submission_pending(self):
        submission = self.complete_quiz()

        self.assertEqual(submission.status, PENDING_MANUAL_GRADING)
        self.assertEqual((submission.score, submission.total_points, submission.percentage), (12 + 4, 21, 76))
        answer = submission.answers.get(question=self.essay())
        self.assertIsNone(answer.is_correct)

    def test_admin_grades_the_essay(self):
        submission = self.complete_quiz()

        response = self.grade(submission, [{"questionId": self.essay().pk, "pointsAwarded": 3}], "Good effort")

        self.assertEqual(response.status_code, 200)
        data = response.json()["submission"]
        self.assertEqual(data["status"], GRADED)
        self.assertEqual(data["score"], 19)
        self.assertEqual(data["gradedBy"], self.admin.email)
        self.assertEqual(data["feedback"], "Good effort")

        submission.refresh_from_db()
        self.assertEqual(submission.percentage, 90)
        self.assertEqual(submission.question_set_submissions.get(question_set_order=4).score, 7)
        self.assertEqual(QuizTakenEntry.objects.get(submission=submission).score, 19)

    def test_submission_stays_pending_while_an_essay_is_ungraded(self):
        submission = self.complete_quiz()
        multiple_choice = self.snapshot(1).questions.get(type=MULTIPLE_CHOICE)

        response = self.grade(submission, [{"questionId": multiple_choice.pk, "pointsAwarded": 1}])

        self.assertEqual(response.status_code, 200)
        data = response.json()["submission"]
        self.assertEqual(data["status"], PENDING_MANUAL_GRADING)
        self.assertEqual(data["score"], 15)
        self.assertEqual(data["gradedBy"], self.admin.email)

        # A regrade must not undo the partial award
        call_command("regrade_submissions", "--apply", stdout=StringIO())
        self.assertEqual(submission.answers.get(question=multiple_choice).points_awarded, 1)

        response = self.grade(submission, [{"questionId": self.essay().pk, "pointsAwarded": 5}])

        self.assertEqual(response.json()["submission"]["status"], GRADED)
        self.assertEqual(response.json()["submission"]["score"], 20)

    def test_points_above_the_question_value_rejected(self):
        submission = self.complete_quiz()

        response = self.grade(submission, [{"questionId": self.essay().pk, "pointsAwarded": 6}])

        self.assertEqual(response.status_code, 400)
        submission.refresh_from_db()
        self.assertEqual(submission.status, PENDING_MANUAL_GRADING)

    def test_question_outside_the_submission_rejected(self):
        submission = self.complete_quiz()

        response = self.grade(submission, [{"questionId": 999999, "pointsAwarded": 1}])

        self.assertEqual(response.status_code, 400)

    def test_open_submission_cannot_be_graded(self):
        self.submit(4, final=False)
        submission = QuizSubmission.objects.get(quiz_taker=self.quiz_taker)

        response = self.grade(submission, [{"questionId": self.essay().pk, "pointsAwarded": 2}])

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["message"], "This submission has not been submitted yet")


class SubmissionViewsTestCase(SubmissionFixtureMixin, TestCase):

    def test_taker_sees_own_result_with_answers(self):
        submission = self.complete_quiz()

        response = self.client.get(f"/api/quiztaker/submission/{submission.pk}",
                                   headers=quiz_taker_headers(self.quiz_taker))

        self.assertEqual(response.status_code, 200)
        data = response.json()["submission"]
        self.assertEqual(data["score"], 16)
        self.assertEqual(len(data["questionSetSubmissions"]), 4)
        self.assertEqual([group["questionSetOrder"] for group in data["answersByQuestionSet"]], [1, 2, 3, 4])
        self.assertEqual(data["answersByQuestionSet"][0]["answers"][0]["correctAnswer"], "A")

    def test_answers_hidden_when_quiz_disallows(self):
        submission = self.complete_quiz()
        self.quiz.view_answer = False
        self.quiz.save()

        response = self.client.get(f"/api/quiztaker/submission/{submission.pk}",
                                   headers=quiz_taker_headers(self.quiz_taker))

        self.assertEqual(response.status_code, 200)
        self.assertNotIn("answersByQuestionSet", response.json()["submission"])

    def test_results_hidden_when_quiz_disallows(self):
        submission = self.complete_quiz()
        self.quiz.view_results = False
        self.quiz.save()

        response = self.client.get(f"/api/quiztaker/submission/{submission.pk}",
                                   headers=quiz_taker_headers(self.quiz_taker))

        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.json()["message"], "Results viewing is not allowed for this quiz")

    def test_other_takers_submission_denied(self):
        submission = self.complete_quiz()
        other = QuizTaker.objects.create(email="other@example.com", account_type=PREMIUM, access_code="OTHER0000")

        response = self.client.get(f"/api/quiztaker/submission/{submission.pk}", headers=quiz_taker_headers(other))

        self.assertEqual(response.status_code, 403)

    def test_my_submissions(self):
        self.submit(1, final=False)

        response = self.client.get("/api/quiztaker/my-submissions", headers=quiz_taker_headers(self.quiz_taker))

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["count"], 1)
        self.assertEqual(response.json()["submissions"][0]["quizTitle"], "General knowledge")

    def test_admin_lists_submissions_by_status(self):
        self.complete_quiz()

        response = self.client.get(f"/api/admin/quiz/{self.quiz.pk}/submissions", {"status": AUTO_GRADED},
                                   headers=admin_headers(self.admin))
        self.assertEqual(response.json()["count"], 1)
        self.assertEqual(response.json()["submissions"][0]["quizTaker"]["email"], "premium@example.com")

        response = self.client.get(f"/api/admin/quiz/{self.quiz.pk}/submissions", {"status": GRADED},
                                   headers=admin_headers(self.admin))
        self.assertEqual(response.json()["count"], 0)

    def test_admin_submission_detail(self):
        submission = self.complete_quiz()

        response = self.client.get(f"/api/admin/submission/{submission.pk}", headers=admin_headers(self.admin))

        self.assertEqual(response.status_code, 200)
        data = response.json()["submission"]
        self.assertEqual(data["quizTaker"]["id"], self.quiz_taker.pk)
        self.assertIsNone(data["gradedBy"])

    def test_report(self):
        self.complete_quiz()

        response = self.client.get(f"/api/admin/quiz/{self.quiz.pk}/report", headers=admin_headers(self.admin))

        self.assertEqual(response.status_code, 200)
        report = response.json()["report"]
        self.assertEqual(report["totalSubmissions"], 1)
        self.assertEqual(report["statusCounts"][AUTO_GRADED], 1)
        self.assertEqual(report["averagePercentage"], 100)
        self.assertEqual([question_set["averageScore"] for question_set in report["questionSets"]], [4, 4, 4, 4])


class RegradeCommandTestCase(SubmissionFixtureMixin, TestCase):

    def setUp(self):
        super().setUp()
        self.submission = self.complete_quiz()
        # The answer key of slot 1's multiple choice question is corrected after the quiz was taken
        QuizQuestion.objects.filter(quiz_question_set__quiz=self.quiz, quiz_question_set__order=1,
                                    type=MULTIPLE_CHOICE).update(correct_answer="B")

    def test_dry_run_changes_nothing(self):
        out = StringIO()

        call_command("regrade_submissions", stdout=out)

        self.assertIn("checked=1, submissions_changed=1, answers_changed=1, dry_run=True", out.getvalue())
        self.submission.refresh_from_db()
        self.assertEqual(self.submission.score, 16)

    def test_apply_repairs_scores(self):
        out = StringIO()

        call_command("regrade_submissions", "--apply", "--quiz", str(self.quiz.pk), stdout=out)

        self.assertIn("dry_run=False", out.getvalue())
        self.submission.refresh_from_db()
        self.assertEqual((self.submission.score, self.submission.percentage), (14, 88))
        self.assertEqual(self.submission.question_set_submissions.get(question_set_order=1).score, 2)
        self.assertEqual(QuizTakenEntry.objects.get(submission=self.submission).score, 14)

    def test_manually_graded_submissions_are_skipped(self):
        QuizSubmission.objects.filter(pk=self.submission.pk).update(status=GRADED)
        out = StringIO()

        call_command("regrade_submissions", "--apply", stdout=out)

        self.assertIn("checked=0", out.getvalue())
