from django.urls import path

from public import views

urlpatterns = [
    path("quiz/available", views.available_quizzes, name="public_available_quizzes"),
    path("quiz/<int:quiz_id>", views.quiz_detail, name="public_quiz_detail"),
    path("quiz/<int:quiz_id>/question-set/<int:slot>", views.question_set_questions,
         name="public_question_set"),
    path("quiz/<int:quiz_id>/submit", views.submit, name="public_submit_quiz"),
    path("submission/<int:pk>", views.submission_result, name="public_submission_result"),
]
