import math

from django.conf import settings
from django.db import models
from django.db.models import Q
from django.utils import timezone

from questionsets.models import QUESTION_TYPE_CHOICES
from quiz.models import QUESTION_SETS_PER_QUIZ
from quiz_platform.versioning import VersionedModel

IN_PROGRESS = "in-progress"
AUTO_GRADED = "auto-graded"
PENDING_MANUAL_GRADING = "pending-manual-grading"
GRADED = "graded"

SUBMISSION_STATUS_CHOICES = [
    (IN_PROGRESS, "In progress"),
    (AUTO_GRADED, "Auto graded"),
    (PENDING_MANUAL_GRADING, "Pending manual grading"),
    (GRADED, "Graded"),
]


def calculate_percentage(score, total_points):
    if not total_points:
        return 0
    # Half-up: 50.5 -> 51
    return math.floor(score * 100 / total_points + 0.5)


class QuizSubmission(VersionedModel):
    quiz = models.ForeignKey("quiz.Quiz", on_delete=models.PROTECT, related_name="submissions")
    quiz_taker = models.ForeignKey("quiztakers.QuizTaker", on_delete=models.CASCADE, related_name="submissions")
    started_at = models.DateTimeField(default=timezone.now)
    submitted_at = models.DateTimeField(null=True, blank=True)
    time_taken = models.PositiveIntegerField(default=0)
    score = models.PositiveIntegerField(default=0)
    total_points = models.PositiveIntegerField(default=0)
    percentage = models.PositiveSmallIntegerField(default=0)
    status = models.CharField(max_length=32, choices=SUBMISSION_STATUS_CHOICES, default=IN_PROGRESS)
    question_set_order_used = models.JSONField(default=list, blank=True)
    graded_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True,
                                  related_name="graded_submissions")
    graded_at = models.DateTimeField(null=True, blank=True)
    feedback = models.TextField(blank=True, default="")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-submitted_at", "-id"]
        constraints = [
            models.UniqueConstraint(fields=["quiz", "quiz_taker"], condition=Q(status=IN_PROGRESS),
                                    name="one_open_submission_per_quiz_taker"),
        ]

    def __str__(self):
        return f"Submission {self.pk} ({self.status})"

    def save(self, *args, **kwargs):
        self.percentage = calculate_percentage(self.score, self.total_points)
        super().save(*args, **kwargs)

    @property
    def is_open(self):
        return self.status == IN_PROGRESS

    def summary_dict(self):
        return {
            "id": self.pk,
            "quizId": self.quiz_id,
            "quizTakerId": self.quiz_taker_id,
            "score": self.score,
            "totalPoints": self.total_points,
            "percentage": self.percentage,
            "timeTaken": self.time_taken,
            "startedAt": self.started_at,
            "submittedAt": self.submitted_at,
            "status": self.status,
            "questionSetOrderUsed": self.question_set_order_used,
            "questionSetSubmissions": [entry.as_dict() for entry in self.question_set_submissions.all()],
        }


class SubmissionAnswer(models.Model):
    submission = models.ForeignKey(QuizSubmission, on_delete=models.CASCADE, related_name="answers")
    question = models.ForeignKey("quiz.QuizQuestion", on_delete=models.CASCADE, related_name="+")
    question_set_order = models.PositiveSmallIntegerField()
    question_type = models.CharField(max_length=32, choices=QUESTION_TYPE_CHOICES)
    answer = models.JSONField(null=True, blank=True)
    is_correct = models.BooleanField(null=True, blank=True)
    points_awarded = models.PositiveIntegerField(default=0)
    points_possible = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ["question_set_order", "question__order", "id"]
        constraints = [
            models.UniqueConstraint(fields=["submission", "question"], name="one_answer_per_question"),
        ]

    def as_dict(self, include_correct_answer=True):
        data = {
            "questionId": self.question_id,
            "questionSetOrder": self.question_set_order,
            "question": self.question.question_text,
            "type": self.question_type,
            "yourAnswer": self.answer,
            "isCorrect": self.is_correct,
            "pointsAwarded": self.points_awarded,
            "pointsPossible": self.points_possible,
        }
        if include_correct_answer:
            data["correctAnswer"] = self.question.correct_answer
        return data


class QuestionSetSubmission(models.Model):
    submission = models.ForeignKey(QuizSubmission, on_delete=models.CASCADE,
                                   related_name="question_set_submissions")
    question_set_order = models.PositiveSmallIntegerField()
    submitted_at = models.DateTimeField(default=timezone.now)
    score = models.PositiveIntegerField(default=0)
    total_points = models.PositiveIntegerField(default=0)
    # Position in which the taker actually finished this slot, 1 for the first slot completed
    order_answered = models.PositiveSmallIntegerField(null=True, blank=True)
    is_final = models.BooleanField(default=False)

    class Meta:
        ordering = ["question_set_order"]
        constraints = [
            models.UniqueConstraint(fields=["submission", "question_set_order"],
                                    name="one_entry_per_submission_slot"),
            models.CheckConstraint(condition=Q(question_set_order__gte=1)
                                   & Q(question_set_order__lte=QUESTION_SETS_PER_QUIZ),
                                   name="submission_slot_in_range"),
        ]

    def as_dict(self):
        return {
            "questionSetOrder": self.question_set_order,
            "submittedAt": self.submitted_at,
            "score": self.score,
            "totalPoints": self.total_points,
            "orderAnswered": self.order_answered,
            "isFinal": self.is_final,
        }
