from django.conf import settings
from django.db import models
from django.db.models import Q, Sum

from questionsets.models import QUESTION_TYPE_CHOICES

QUESTION_SETS_PER_QUIZ = 4
SLOTS = tuple(range(1, QUESTION_SETS_PER_QUIZ + 1))


class Quiz(models.Model):
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True, default="")
    instructions = models.TextField(blank=True, default="")
    cover_image = models.CharField(max_length=500, blank=True, default="")
    is_quiz_challenge = models.BooleanField(default=False)
    # Open quizzes are served to regular takers, the rest are assigned to premium takers
    is_open_quiz = models.BooleanField(default=False)
    duration_hours = models.PositiveIntegerField(default=0)
    duration_minutes = models.PositiveIntegerField(default=30)
    duration_seconds = models.PositiveIntegerField(default=0)
    multiple_attempts = models.BooleanField(default=False)
    loose_focus = models.BooleanField(default=False)
    view_answer = models.BooleanField(default=True)
    view_results = models.BooleanField(default=True)
    display_calculator = models.BooleanField(default=False)

    question_set_combination = models.JSONField(default=list, blank=True)
    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name="quizzes")
    is_active = models.BooleanField(default=True)
    total_points = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        verbose_name_plural = "quizzes"
        constraints = [
            models.CheckConstraint(condition=Q(duration_minutes__lte=59) & Q(duration_seconds__lte=59),
                                   name="quiz_duration_in_range"),
        ]

    def __str__(self):
        return self.title

    def get_total_duration_in_seconds(self):
        return self.duration_hours * 3600 + self.duration_minutes * 60 + self.duration_seconds

    def recalculate_total_points(self):
        return self.question_sets.aggregate(total=Sum("total_points"))["total"] or 0

    def save(self, *args, **kwargs):
        if self.pk and "update_fields" not in kwargs:
            self.total_points = self.recalculate_total_points()
        super().save(*args, **kwargs)

    def snapshots_by_slot(self):
        return {snapshot.order: snapshot for snapshot in self.question_sets.all()}

    def source_question_set_ids(self):
        return sorted(snapshot.question_set_id for snapshot in self.question_sets.all())

    def settings_dict(self):
        return {
            "title": self.title,
            "description": self.description,
            "instructions": self.instructions,
            "coverImage": self.cover_image,
            "isQuizChallenge": self.is_quiz_challenge,
            "isOpenQuiz": self.is_open_quiz,
            "duration": {
                "hours": self.duration_hours,
                "minutes": self.duration_minutes,
                "seconds": self.duration_seconds,
            },
            "multipleAttempts": self.multiple_attempts,
            "looseFocus": self.loose_focus,
            "viewAnswer": self.view_answer,
            "viewResults": self.view_results,
            "displayCalculator": self.display_calculator,
        }

    def as_dict(self, include_questions=True, include_answers=True):
        return {
            "id": self.pk,
            "settings": self.settings_dict(),
            "questionSetCombination": self.question_set_combination,
            "questionSets": [
                snapshot.as_dict(include_questions=include_questions, include_answers=include_answers)
                for snapshot in self.question_sets.all()
            ],
            "isActive": self.is_active,
            "totalPoints": self.total_points,
            "createdBy": self.created_by_id,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }


class QuizQuestionSet(models.Model):
    """A copy of a question set taken when it was placed in a quiz slot."""

    quiz = models.ForeignKey(Quiz, on_delete=models.CASCADE, related_name="question_sets")
    question_set = models.ForeignKey("questionsets.QuestionSet", on_delete=models.PROTECT,
                                     related_name="quiz_snapshots")
    title = models.CharField(max_length=255)
    total_points = models.PositiveIntegerField(default=0)
    order = models.PositiveSmallIntegerField()

    class Meta:
        ordering = ["order"]
        constraints = [
            models.UniqueConstraint(fields=["quiz", "order"], name="unique_slot_per_quiz"),
            models.UniqueConstraint(fields=["quiz", "question_set"], name="unique_question_set_per_quiz"),
            models.CheckConstraint(condition=Q(order__gte=1) & Q(order__lte=QUESTION_SETS_PER_QUIZ),
                                   name="quiz_question_set_slot_in_range"),
        ]

    def __str__(self):
        return f"{self.quiz_id} slot {self.order}: {self.title}"

    def as_dict(self, include_questions=True, include_answers=True):
        data = {
            "id": self.pk,
            "questionSetId": self.question_set_id,
            "title": self.title,
            "totalPoints": self.total_points,
            "order": self.order,
            "questionCount": len(self.questions.all()),
        }
        if include_questions:
            data["questions"] = [question.as_dict(include_answer=include_answers)
                                 for question in self.questions.all()]
        return data


class QuizQuestion(models.Model):
    quiz_question_set = models.ForeignKey(QuizQuestionSet, on_delete=models.CASCADE, related_name="questions")
    original_question = models.ForeignKey("questionsets.Question", on_delete=models.SET_NULL, null=True,
                                          blank=True, related_name="quiz_copies")
    type = models.CharField(max_length=32, choices=QUESTION_TYPE_CHOICES)
    question_text = models.TextField()
    options = models.JSONField(default=list, blank=True)
    correct_answer = models.TextField(blank=True, default="")
    points = models.PositiveIntegerField(default=1)
    order = models.PositiveIntegerField()

    class Meta:
        ordering = ["order", "id"]

    def __str__(self):
        return self.question_text[:50]

    def as_dict(self, include_answer=True):
        data = {
            "id": self.pk,
            "type": self.type,
            "question": self.question_text,
            "options": self.options,
            "points": self.points,
            "order": self.order,
            "originalQuestionId": self.original_question_id,
        }
        if include_answer:
            data["correctAnswer"] = self.correct_answer
        return data
