from django.urls import path

from quiz import views

urlpatterns = [
    path("", views.quiz_collection, name="quiz_collection"),
    path("<int:pk>", views.quiz_detail, name="quiz_detail"),
    path("<int:pk>/question-sets", views.replace_question_sets, name="quiz_replace_question_sets"),
    path("<int:pk>/toggle-active", views.toggle_active, name="quiz_toggle_active"),
    path("<int:pk>/statistics", views.statistics, name="quiz_statistics"),
]
