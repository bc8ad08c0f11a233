# accounts/urls.py
"""
URL configuration for the auth API.

Endpoints:
- /auth/login/ - Email + password -> JWT pair
- /auth/refresh/ - Refresh JWT
- /auth/me/ - Current user and effective permissions
"""

from django.urls import path

from .views import LoginView, MeView, RefreshView

app_name = "accounts"

urlpatterns = [
    path("auth/login/", LoginView.as_view(), name="login"),
    path("auth/refresh/", RefreshView.as_view(), name="token-refresh"),
    path("auth/me/", MeView.as_view(), name="me"),
]
