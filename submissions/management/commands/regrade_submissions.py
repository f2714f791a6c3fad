from django.core.management.base import BaseCommand

from questionsets.models import ESSAY
from quiztakers.models import QuizTakenEntry
from submissions.aggregator import recalculate_totals, refresh_question_set_scores
from submissions.coordinator import run_in_transaction
from submissions.grading import grade_answer
from submissions.models import GRADED, QuizSubmission


class Command(BaseCommand):
    """
    Re-run the grading rules over stored answers and repair any score that drifted.

    Essay answers and submissions an admin has graded by hand, even partly, are left alone.

    python manage.py regrade_submissions --quiz 12
    python manage.py regrade_submissions --apply
    """

    help = "Regrade stored non-essay answers against the quiz questions they were given for."

    def add_arguments(self, parser):
        parser.add_argument("--quiz", type=int, help="Only regrade submissions for this quiz id")
        parser.add_argument("--apply", action="store_true", help="Save the corrected scores")

    def handle(self, *args, **opts):
        quiz_id = opts.get("quiz")
        apply_changes = bool(opts.get("apply", False))

        submissions = QuizSubmission.objects.exclude(status=GRADED).filter(graded_by__isnull=True).order_by("id")
        if quiz_id:
            submissions = submissions.filter(quiz_id=quiz_id)

        checked = 0
        changed_answers = 0
        changed_submissions = 0

        for submission_id in submissions.values_list("id", flat=True):
            checked += 1
            changes = run_in_transaction(lambda: self.regrade(submission_id, apply_changes),
                                         f"regrade of submission {submission_id}")
            if changes:
                changed_submissions += 1
                changed_answers += changes

        self.stdout.write(self.style.SUCCESS(
            f"Regrade done. checked={checked}, submissions_changed={changed_submissions}, "
            f"answers_changed={changed_answers}, dry_run={not apply_changes}"
        ))

    def regrade(self, submission_id, apply_changes):
        submission = QuizSubmission.objects.get(pk=submission_id)
        changes = 0

        for answer in submission.answers.exclude(question_type=ESSAY).select_related("question"):
            result = grade_answer(answer.question, answer.answer)
            if (answer.is_correct, answer.points_awarded) == (result.is_correct, result.points_awarded):
                continue

            changes += 1
            self.stdout.write(
                f"submission={submission.pk} question={answer.question_id} "
                f"points {answer.points_awarded} -> {result.points_awarded}"
            )
            if apply_changes:
                answer.is_correct = result.is_correct
                answer.points_awarded = result.points_awarded
                answer.save(update_fields=["is_correct", "points_awarded"])

        if changes and apply_changes:
            refresh_question_set_scores(submission)
            old_score = submission.score
            recalculate_totals(submission)
            submission.save_versioned()
            QuizTakenEntry.objects.filter(submission=submission).update(score=submission.score)
            self.stdout.write(f"submission={submission.pk} score {old_score} -> {submission.score}")

        return changes
