from django.contrib import admin
from django.urls import include, path

urlpatterns = [
    # Operations endpoints (no auth required)
    path("_health/", include("ops.urls")),

    # Admin and API
    path("admin/", admin.site.urls),
    path("api/", include("accounts.urls")),
    path("api/finance/", include("finance.urls")),
    path("api/dues/", include("dues.urls")),
]
