from django.conf import settings
from django.db import models
from django.db.models import Count, Sum

MULTIPLE_CHOICE = "multiple-choice"
TRUE_FALSE = "true-false"
FILL_IN_THE_BLANKS = "fill-in-the-blanks"
ESSAY = "essay"

QUESTION_TYPE_CHOICES = [
    (MULTIPLE_CHOICE, "Multiple choice"),
    (TRUE_FALSE, "True / false"),
    (FILL_IN_THE_BLANKS, "Fill in the blanks"),
    (ESSAY, "Essay"),
]


class QuestionSet(models.Model):
    title = models.CharField(max_length=255)
    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.PROTECT,
                                   related_name="question_sets")
    is_active = models.BooleanField(default=True)
    total_points = models.PositiveIntegerField(default=0)
    question_count = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at", "-id"]

    def __str__(self):
        return self.title

    def as_dict(self, include_questions=True):
        data = {
            "id": self.pk,
            "title": self.title,
            "isActive": self.is_active,
            "totalPoints": self.total_points,
            "questionCount": self.question_count,
            "createdBy": {"id": self.created_by_id, "email": self.created_by.email},
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }
        if include_questions:
            data["questions"] = [question.as_dict() for question in self.questions.all()]
        return data

    def recalculate_totals(self, commit=True):
        totals = self.questions.aggregate(points=Sum("points"), count=Count("id"))
        self.total_points = totals["points"] or 0
        self.question_count = totals["count"]
        if commit:
            self.save(update_fields=["total_points", "question_count", "updated_at"])

    def save(self, *args, **kwargs):
        if self.pk and "update_fields" not in kwargs:
            self.recalculate_totals(commit=False)
        super().save(*args, **kwargs)


class Question(models.Model):
    question_set = models.ForeignKey(QuestionSet, on_delete=models.CASCADE, related_name="questions")
    type = models.CharField(max_length=32, choices=QUESTION_TYPE_CHOICES)
    question_text = models.TextField()
    options = models.JSONField(default=list, blank=True)
    correct_answer = models.TextField(blank=True, default="")
    points = models.PositiveIntegerField(default=1)
    order = models.PositiveIntegerField()

    class Meta:
        ordering = ["order", "id"]

    def __str__(self):
        return f"{self.question_set_id}#{self.order}: {self.question_text[:50]}"

    def as_dict(self, include_answer=True):
        data = {
            "id": self.pk,
            "type": self.type,
            "question": self.question_text,
            "options": self.options,
            "points": self.points,
            "order": self.order,
        }
        if include_answer:
            data["correctAnswer"] = self.correct_answer
        return data

    def save(self, *args, **kwargs):
        super().save(*args, **kwargs)
        self.question_set.recalculate_totals()

    def delete(self, *args, **kwargs):
        question_set = self.question_set
        result = super().delete(*args, **kwargs)
        question_set.recalculate_totals()
        return result
