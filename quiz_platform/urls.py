from django.contrib import admin
from django.urls import include, path

from quiz_platform.views import health

urlpatterns = [
    path("", health, name="health"),
    path("django-admin/", admin.site.urls),
    path("api/auth/", include("accounts.urls")),
    path("api/questionset/", include("questionsets.urls")),
    path("api/quiz/", include("quiz.urls")),
    path("api/", include("quiztakers.urls")),
    path("api/", include("submissions.urls")),
    path("api/public/", include("public.urls")),
]
