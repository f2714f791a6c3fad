from django.urls import path

from submissions import views

urlpatterns = [
    path("quiztaker/quiz/<int:quiz_id>/submit", views.submit_quiz, name="quiztaker_submit_quiz"),
    path("quiztaker/submission/<int:pk>", views.my_submission, name="quiztaker_submission"),
    path("quiztaker/my-submissions", views.my_submissions, name="quiztaker_my_submissions"),
    path("admin/quiz/<int:quiz_id>/submissions", views.quiz_submissions, name="admin_quiz_submissions"),
    path("admin/quiz/<int:quiz_id>/report", views.report, name="admin_quiz_report"),
    path("admin/submission/<int:pk>", views.submission_detail, name="admin_submission_detail"),
    path("admin/submission/<int:pk>/grade", views.grade_submission, name="admin_grade_submission"),
]
