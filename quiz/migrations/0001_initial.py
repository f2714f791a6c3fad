from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


QUESTION_TYPE_CHOICES = [
    ("multiple-choice", "Multiple choice"),
    ("true-false", "True / false"),
    ("fill-in-the-blanks", "Fill in the blanks"),
    ("essay", "Essay"),
]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("questionsets", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Quiz",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("title", models.CharField(max_length=255)),
                ("description", models.TextField(blank=True, default="")),
                ("instructions", models.TextField(blank=True, default="")),
                ("cover_image", models.CharField(blank=True, default="", max_length=500)),
                ("is_quiz_challenge", models.BooleanField(default=False)),
                ("is_open_quiz", models.BooleanField(default=False)),
                ("duration_hours", models.PositiveIntegerField(default=0)),
                ("duration_minutes", models.PositiveIntegerField(default=30)),
                ("duration_seconds", models.PositiveIntegerField(default=0)),
                ("multiple_attempts", models.BooleanField(default=False)),
                ("loose_focus", models.BooleanField(default=False)),
                ("view_answer", models.BooleanField(default=True)),
                ("view_results", models.BooleanField(default=True)),
                ("display_calculator", models.BooleanField(default=False)),
                ("question_set_combination", models.JSONField(blank=True, default=list)),
                ("is_active", models.BooleanField(default=True)),
                ("total_points", models.PositiveIntegerField(default=0)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("created_by", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT,
                                                 related_name="quizzes", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["-created_at", "-id"],
                "verbose_name_plural": "quizzes",
                "constraints": [
                    models.CheckConstraint(condition=models.Q(("duration_minutes__lte", 59),
                                                              ("duration_seconds__lte", 59)),
                                           name="quiz_duration_in_range"),
                ],
            },
        ),
        migrations.CreateModel(
            name="QuizQuestionSet",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("title", models.CharField(max_length=255)),
                ("total_points", models.PositiveIntegerField(default=0)),
                ("order", models.PositiveSmallIntegerField()),
                ("quiz", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE,
                                           related_name="question_sets", to="quiz.quiz")),
                ("question_set", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT,
                                                   related_name="quiz_snapshots", to="questionsets.questionset")),
            ],
            options={
                "ordering": ["order"],
                "constraints": [
                    models.UniqueConstraint(fields=("quiz", "order"), name="unique_slot_per_quiz"),
                    models.UniqueConstraint(fields=("quiz", "question_set"), name="unique_question_set_per_quiz"),
                    models.CheckConstraint(condition=models.Q(("order__gte", 1), ("order__lte", 4)),
                                           name="quiz_question_set_slot_in_range"),
                ],
            },
        ),
        migrations.CreateModel(
            name="QuizQuestion",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("type", models.CharField(choices=QUESTION_TYPE_CHOICES, max_length=32)),
                ("question_text", models.TextField()),
                ("options", models.JSONField(blank=True, default=list)),
                ("correct_answer", models.TextField(blank=True, default="")),
                ("points", models.PositiveIntegerField(default=1)),
                ("order", models.PositiveIntegerField()),
                ("quiz_question_set", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE,
                                                        related_name="questions", to="quiz.quizquestionset")),
                ("original_question", models.ForeignKey(blank=True, null=True,
                                                        on_delete=django.db.models.deletion.SET_NULL,
                                                        related_name="quiz_copies", to="questionsets.question")),
            ],
            options={
                "ordering": ["order", "id"],
            },
        ),
    ]
