# dues/urls.py

from django.urls import path

from .views import BulkAssignView, DuesAssignmentListView, PayAssignmentView

app_name = "dues"

urlpatterns = [
    path(
        "assignments/",
        DuesAssignmentListView.as_view(),
        name="assignment-list",
    ),
    path(
        "assignments/bulk/",
        BulkAssignView.as_view(),
        name="assignment-bulk",
    ),
    path(
        "assignments/<int:pk>/pay/",
        PayAssignmentView.as_view(),
        name="assignment-pay",
    ),
]
