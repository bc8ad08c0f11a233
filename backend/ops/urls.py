"""
Operations endpoints.

Unauthenticated; protect at network level (internal only) in production.
"""
from django.urls import path

from ops.health import FullHealthView, LivenessView, ReadinessView

urlpatterns = [
    path("live", LivenessView.as_view(), name="health-live"),
    path("ready", ReadinessView.as_view(), name="health-ready"),
    path("full", FullHealthView.as_view(), name="health-full"),
]
