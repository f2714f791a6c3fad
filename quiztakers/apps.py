from django.apps import AppConfig


class QuizTakersConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "quiztakers"
