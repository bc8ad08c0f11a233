# dues/admin.py

from django.contrib import admin

from finance.admin import ReadOnlyModelAdmin
from .models import DuesAssignment


@admin.register(DuesAssignment)
class DuesAssignmentAdmin(ReadOnlyModelAdmin):
    """Dues are assigned and paid through the API only (read-only)."""

    list_display = [
        "id", "year", "type", "scope", "person_type", "person_id",
        "amount_cents", "paid", "paid_on", "payment_method", "transaction",
    ]
    list_filter = ["year", "type", "person_type", "paid"]
    ordering = ["-year", "type", "person_type", "person_id"]
