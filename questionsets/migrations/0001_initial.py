from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="QuestionSet",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("title", models.CharField(max_length=255)),
                ("is_active", models.BooleanField(default=True)),
                ("total_points", models.PositiveIntegerField(default=0)),
                ("question_count", models.PositiveIntegerField(default=0)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("created_by", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT,
                                                 related_name="question_sets", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["-created_at", "-id"],
            },
        ),
        migrations.CreateModel(
            name="Question",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("type", models.CharField(choices=[("multiple-choice", "Multiple choice"),
                                                   ("true-false", "True / false"),
                                                   ("fill-in-the-blanks", "Fill in the blanks"),
                                                   ("essay", "Essay")], max_length=32)),
                ("question_text", models.TextField()),
                ("options", models.JSONField(blank=True, default=list)),
                ("correct_answer", models.TextField(blank=True, default="")),
                ("points", models.PositiveIntegerField(default=1)),
                ("order", models.PositiveIntegerField()),
                ("question_set", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE,
                                                   related_name="questions", to="questionsets.questionset")),
            ],
            options={
                "ordering": ["order", "id"],
            },
        ),
    ]
