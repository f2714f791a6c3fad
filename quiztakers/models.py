import secrets
import string

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q
from django.utils import timezone

from quiz.models import QUESTION_SETS_PER_QUIZ, SLOTS
from quiz_platform.versioning import VersionedModel

PREMIUM = "premium"
REGULAR = "regular"

ACCOUNT_TYPE_CHOICES = [
    (PREMIUM, "Premium"),
    (REGULAR, "Regular"),
]

PENDING = "pending"
NOT_STARTED = "not-started"
IN_PROGRESS = "in-progress"
COMPLETED = "completed"

ASSIGNMENT_STATUS_CHOICES = [
    (PENDING, "Pending"),
    (IN_PROGRESS, "In progress"),
    (COMPLETED, "Completed"),
]

PROGRESS_STATUS_CHOICES = [
    (NOT_STARTED, "Not started"),
    (IN_PROGRESS, "In progress"),
    (COMPLETED, "Completed"),
]

ACCESS_CODE_ALPHABET = string.ascii_uppercase + string.digits
ACCESS_CODE_LENGTH = 9


def generate_access_code():
    return "".join(secrets.choice(ACCESS_CODE_ALPHABET) for _ in range(ACCESS_CODE_LENGTH))


def default_question_set_order():
    return list(SLOTS)


def combination_errors(combination):
    """Return the problems with a question set combination, an empty list when it is usable."""
    if combination in (None, []):
        return []
    if not isinstance(combination, list) or len(combination) != QUESTION_SETS_PER_QUIZ:
        return [f"Question set combination must contain exactly {QUESTION_SETS_PER_QUIZ} question sets"]
    if not all(isinstance(pk, int) and not isinstance(pk, bool) for pk in combination):
        return ["Question set combination must contain question set IDs"]
    if len(set(combination)) != QUESTION_SETS_PER_QUIZ:
        return ["Question set combination cannot repeat a question set"]
    return []


class QuizTaker(VersionedModel):
    email = models.EmailField(unique=True)
    name = models.CharField(max_length=255, blank=True, default="")
    account_type = models.CharField(max_length=16, choices=ACCOUNT_TYPE_CHOICES, default=PREMIUM)
    is_active = models.BooleanField(default=True)
    access_code = models.CharField(max_length=ACCESS_CODE_LENGTH, unique=True, null=True, blank=True)
    question_set_combination = models.JSONField(default=list, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        constraints = [
            models.CheckConstraint(condition=Q(account_type=REGULAR) | Q(access_code__isnull=False),
                                   name="premium_taker_has_access_code"),
        ]

    def __str__(self):
        return self.email

    @property
    def is_premium(self):
        return self.account_type == PREMIUM

    @classmethod
    def generate_unique_access_code(cls):
        while True:
            code = generate_access_code()
            if not cls.objects.filter(access_code=code).exists():
                return code

    def check_invariants(self):
        errors = {}

        if self.account_type == PREMIUM and not self.access_code:
            errors["access_code"] = "Premium quiz takers need an access code"

        if self.account_type == REGULAR and not self._state.adding and self.assigned_quizzes.exists():
            errors["account_type"] = "Regular quiz takers cannot hold assigned quizzes"

        combination = combination_errors(self.question_set_combination)
        if combination:
            errors["question_set_combination"] = combination

        if errors:
            raise ValidationError(errors)

    def clean(self):
        self.check_invariants()

    def save(self, *args, **kwargs):
        self.email = self.email.strip().lower()
        if not self.access_code:
            self.access_code = None
        self.check_invariants()
        super().save(*args, **kwargs)

    def as_dict(self):
        return {
            "id": self.pk,
            "email": self.email,
            "name": self.name,
            "accountType": self.account_type,
            "accessCode": self.access_code,
            "isActive": self.is_active,
            "questionSetCombination": self.question_set_combination,
            "createdAt": self.created_at,
        }


class AssignedQuiz(models.Model):
    quiz_taker = models.ForeignKey(QuizTaker, on_delete=models.CASCADE, related_name="assigned_quizzes")
    quiz = models.ForeignKey("quiz.Quiz", on_delete=models.CASCADE, related_name="assignments")
    status = models.CharField(max_length=16, choices=ASSIGNMENT_STATUS_CHOICES, default=PENDING)
    assigned_at = models.DateTimeField(default=timezone.now)
    started_at = models.DateTimeField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)
    submission = models.ForeignKey("submissions.QuizSubmission", on_delete=models.SET_NULL, null=True,
                                   blank=True, related_name="+")
    question_set_order = models.JSONField(default=default_question_set_order)
    current_question_set = models.PositiveSmallIntegerField(null=True, blank=True)

    class Meta:
        ordering = ["-assigned_at", "-id"]
        constraints = [
            models.UniqueConstraint(fields=["quiz_taker", "quiz"], name="unique_assignment_per_quiz"),
        ]

    def __str__(self):
        return f"{self.quiz_id} for {self.quiz_taker_id} ({self.status})"

    def save(self, *args, **kwargs):
        if self._state.adding and not self.quiz_taker.is_premium:
            raise ValidationError("Only premium quiz takers can be assigned quizzes")
        super().save(*args, **kwargs)

    def progress_by_slot(self):
        return {record.slot: record for record in self.progress.all()}

    def as_dict(self, include_quiz=True):
        data = {
            "id": self.pk,
            "quizId": self.quiz_id,
            "status": self.status,
            "assignedAt": self.assigned_at,
            "startedAt": self.started_at,
            "completedAt": self.completed_at,
            "submissionId": self.submission_id,
            "questionSetOrder": self.question_set_order,
            "currentQuestionSet": self.current_question_set,
            "questionSetProgress": [record.as_dict() for record in self.progress.all()],
        }
        if include_quiz:
            data["quiz"] = {
                "id": self.quiz_id,
                "settings": self.quiz.settings_dict(),
                "totalPoints": self.quiz.total_points,
            }
        return data


class QuestionSetProgress(models.Model):
    assigned_quiz = models.ForeignKey(AssignedQuiz, on_delete=models.CASCADE, related_name="progress")
    slot = models.PositiveSmallIntegerField()
    custom_position = models.PositiveSmallIntegerField()
    status = models.CharField(max_length=16, choices=PROGRESS_STATUS_CHOICES, default=NOT_STARTED)
    started_at = models.DateTimeField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)
    score = models.PositiveIntegerField(default=0)
    total_points = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ["custom_position", "slot"]
        verbose_name_plural = "question set progress"
        constraints = [
            models.UniqueConstraint(fields=["assigned_quiz", "slot"], name="unique_progress_per_slot"),
            models.CheckConstraint(condition=Q(slot__gte=1) & Q(slot__lte=QUESTION_SETS_PER_QUIZ),
                                   name="progress_slot_in_range"),
        ]

    def __str__(self):
        return f"slot {self.slot}: {self.status}"

    def as_dict(self):
        return {
            "questionSetOrder": self.slot,
            "customOrder": self.custom_position,
            "status": self.status,
            "startedAt": self.started_at,
            "completedAt": self.completed_at,
            "score": self.score,
            "totalPoints": self.total_points,
        }


class QuizTakenEntry(models.Model):
    quiz_taker = models.ForeignKey(QuizTaker, on_delete=models.CASCADE, related_name="quizzes_taken")
    quiz = models.ForeignKey("quiz.Quiz", on_delete=models.CASCADE, related_name="+")
    submission = models.ForeignKey("submissions.QuizSubmission", on_delete=models.SET_NULL, null=True,
                                   blank=True, related_name="+")
    score = models.PositiveIntegerField(default=0)
    completed_at = models.DateTimeField()

    class Meta:
        ordering = ["-completed_at", "-id"]
        verbose_name_plural = "quizzes taken"

    def as_dict(self):
        return {
            "quizId": self.quiz_id,
            "submissionId": self.submission_id,
            "score": self.score,
            "completedAt": self.completed_at,
        }
