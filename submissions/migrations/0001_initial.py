from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion
import django.utils.timezone


QUESTION_TYPE_CHOICES = [
    ("multiple-choice", "Multiple choice"),
    ("true-false", "True / false"),
    ("fill-in-the-blanks", "Fill in the blanks"),
    ("essay", "Essay"),
]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("quiz", "0001_initial"),
        ("quiztakers", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="QuizSubmission",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("version", models.PositiveIntegerField(default=0)),
                ("started_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("submitted_at", models.DateTimeField(blank=True, null=True)),
                ("time_taken", models.PositiveIntegerField(default=0)),
                ("score", models.PositiveIntegerField(default=0)),
                ("total_points", models.PositiveIntegerField(default=0)),
                ("percentage", models.PositiveSmallIntegerField(default=0)),
                ("status", models.CharField(choices=[("in-progress", "In progress"), ("auto-graded", "Auto graded"),
                                                     ("pending-manual-grading", "Pending manual grading"),
                                                     ("graded", "Graded")],
                                            default="in-progress", max_length=32)),
                ("question_set_order_used", models.JSONField(blank=True, default=list)),
                ("graded_at", models.DateTimeField(blank=True, null=True)),
                ("feedback", models.TextField(blank=True, default="")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("graded_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL,
                                                related_name="graded_submissions", to=settings.AUTH_USER_MODEL)),
                ("quiz", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT,
                                           related_name="submissions", to="quiz.quiz")),
                ("quiz_taker", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE,
                                                 related_name="submissions", to="quiztakers.quiztaker")),
            ],
            options={
                "ordering": ["-submitted_at", "-id"],
                "constraints": [
                    models.UniqueConstraint(condition=models.Q(("status", "in-progress")),
                                            fields=("quiz", "quiz_taker"),
                                            name="one_open_submission_per_quiz_taker"),
                ],
            },
        ),
        migrations.CreateModel(
            name="SubmissionAnswer",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("question_set_order", models.PositiveSmallIntegerField()),
                ("question_type", models.CharField(choices=QUESTION_TYPE_CHOICES, max_length=32)),
                ("answer", models.JSONField(blank=True, null=True)),
                ("is_correct", models.BooleanField(blank=True, null=True)),
                ("points_awarded", models.PositiveIntegerField(default=0)),
                ("points_possible", models.PositiveIntegerField(default=0)),
                ("question", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE,
                                               related_name="+", to="quiz.quizquestion")),
                ("submission", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE,
                                                 related_name="answers", to="submissions.quizsubmission")),
            ],
            options={
                "ordering": ["question_set_order", "question__order", "id"],
                "constraints": [
                    models.UniqueConstraint(fields=("submission", "question"), name="one_answer_per_question"),
                ],
            },
        ),
        migrations.CreateModel(
            name="QuestionSetSubmission",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("question_set_order", models.PositiveSmallIntegerField()),
                ("submitted_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("score", models.PositiveIntegerField(default=0)),
                ("total_points", models.PositiveIntegerField(default=0)),
                ("order_answered", models.PositiveSmallIntegerField(blank=True, null=True)),
                ("is_final", models.BooleanField(default=False)),
                ("submission", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE,
                                                 related_name="question_set_submissions",
                                                 to="submissions.quizsubmission")),
            ],
            options={
                "ordering": ["question_set_order"],
                "constraints": [
                    models.UniqueConstraint(fields=("submission", "question_set_order"),
                                            name="one_entry_per_submission_slot"),
                    models.CheckConstraint(condition=models.Q(("question_set_order__gte", 1),
                                                              ("question_set_order__lte", 4)),
                                           name="submission_slot_in_range"),
                ],
            },
        ),
    ]
