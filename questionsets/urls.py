from django.urls import path

from questionsets import views

urlpatterns = [
    path("", views.question_set_collection, name="question_set_collection"),
    path("<int:pk>", views.question_set_detail, name="question_set_detail"),
    path("<int:pk>/toggle-active", views.toggle_active, name="question_set_toggle_active"),
    path("<int:pk>/questions", views.add_questions, name="question_set_add_questions"),
    path("<int:pk>/questions/<int:question_pk>", views.question_detail, name="question_set_question_detail"),
]
