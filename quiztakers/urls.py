from django.urls import path

from quiztakers import views

urlpatterns = [
    path("admin/quiztaker", views.create_quiz_taker, name="admin_create_quiz_taker"),
    path("admin/quiztakers", views.list_quiz_takers, name="admin_list_quiz_takers"),
    path("admin/quiztaker/<int:pk>", views.quiz_taker_detail, name="admin_quiz_taker_detail"),
    path("admin/quiztaker/<int:pk>/assign", views.assign_quiz, name="admin_assign_quiz"),
    path("admin/quiztaker/<int:pk>/assign/<int:quiz_pk>", views.unassign_quiz, name="admin_unassign_quiz"),
    path("quiztaker/dashboard", views.dashboard, name="quiztaker_dashboard"),
    path("quiztaker/profile", views.profile, name="quiztaker_profile"),
    path("quiztaker/quiz/<int:quiz_id>", views.quiz_overview, name="quiztaker_quiz_overview"),
    path("quiztaker/quiz/<int:quiz_id>/start", views.start, name="quiztaker_start_quiz"),
    path("quiztaker/quiz/<int:quiz_id>/order", views.set_question_set_order, name="quiztaker_question_set_order"),
    path("quiztaker/quiz/<int:quiz_id>/question-set/<int:slot>", views.question_set_questions,
         name="quiztaker_question_set"),
    path("quiztaker/quiz/<int:quiz_id>/question-set/<int:slot>/start", views.start_slot,
         name="quiztaker_start_question_set"),
]
