from django.apps import AppConfig


class QuestionSetsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "questionsets"
