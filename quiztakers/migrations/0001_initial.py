from django.db import migrations, models
import django.db.models.deletion
import django.utils.timezone
import quiztakers.models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("quiz", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="QuizTaker",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("version", models.PositiveIntegerField(default=0)),
                ("email", models.EmailField(max_length=254, unique=True)),
                ("name", models.CharField(blank=True, default="", max_length=255)),
                ("account_type", models.CharField(choices=[("premium", "Premium"), ("regular", "Regular")],
                                                  default="premium", max_length=16)),
                ("is_active", models.BooleanField(default=True)),
                ("access_code", models.CharField(blank=True, max_length=9, null=True, unique=True)),
                ("question_set_combination", models.JSONField(blank=True, default=list)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "ordering": ["-created_at", "-id"],
                "constraints": [
                    models.CheckConstraint(condition=models.Q(("account_type", "regular"),
                                                              ("access_code__isnull", False), _connector="OR"),
                                           name="premium_taker_has_access_code"),
                ],
            },
        ),
        migrations.CreateModel(
            name="AssignedQuiz",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("status", models.CharField(choices=[("pending", "Pending"), ("in-progress", "In progress"),
                                                     ("completed", "Completed")],
                                            default="pending", max_length=16)),
                ("assigned_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("started_at", models.DateTimeField(blank=True, null=True)),
                ("completed_at", models.DateTimeField(blank=True, null=True)),
                ("question_set_order", models.JSONField(default=quiztakers.models.default_question_set_order)),
                ("current_question_set", models.PositiveSmallIntegerField(blank=True, null=True)),
                ("quiz", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE,
                                           related_name="assignments", to="quiz.quiz")),
                ("quiz_taker", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE,
                                                 related_name="assigned_quizzes", to="quiztakers.quiztaker")),
            ],
            options={
                "ordering": ["-assigned_at", "-id"],
                "constraints": [
                    models.UniqueConstraint(fields=("quiz_taker", "quiz"), name="unique_assignment_per_quiz"),
                ],
            },
        ),
        migrations.CreateModel(
            name="QuestionSetProgress",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("slot", models.PositiveSmallIntegerField()),
                ("custom_position", models.PositiveSmallIntegerField()),
                ("status", models.CharField(choices=[("not-started", "Not started"), ("in-progress", "In progress"),
                                                     ("completed", "Completed")],
                                            default="not-started", max_length=16)),
                ("started_at", models.DateTimeField(blank=True, null=True)),
                ("completed_at", models.DateTimeField(blank=True, null=True)),
                ("score", models.PositiveIntegerField(default=0)),
                ("total_points", models.PositiveIntegerField(default=0)),
                ("assigned_quiz", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE,
                                                    related_name="progress", to="quiztakers.assignedquiz")),
            ],
            options={
                "ordering": ["custom_position", "slot"],
                "verbose_name_plural": "question set progress",
                "constraints": [
                    models.UniqueConstraint(fields=("assigned_quiz", "slot"), name="unique_progress_per_slot"),
                    models.CheckConstraint(condition=models.Q(("slot__gte", 1), ("slot__lte", 4)),
                                           name="progress_slot_in_range"),
                ],
            },
        ),
        migrations.CreateModel(
            name="QuizTakenEntry",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("score", models.PositiveIntegerField(default=0)),
                ("completed_at", models.DateTimeField()),
                ("quiz", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE,
                                           related_name="+", to="quiz.quiz")),
                ("quiz_taker", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE,
                                                 related_name="quizzes_taken", to="quiztakers.quiztaker")),
            ],
            options={
                "ordering": ["-completed_at", "-id"],
                "verbose_name_plural": "quizzes taken",
            },
        ),
    ]
