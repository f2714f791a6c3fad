from django.urls import path

from accounts import views

urlpatterns = [
    path("admin/register", views.admin_register, name="admin_register"),
    path("admin/login", views.admin_login, name="admin_login"),
    path("quiztaker/login", views.quiztaker_login, name="quiztaker_login"),
]
