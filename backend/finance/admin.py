# finance/admin.py
"""
Django admin configuration for treasury models.

IMPORTANT: The admin is for viewing only. Transactions are append-only
and debts change state through finance/commands.py, which keeps the
ledger and the debt status consistent inside one atomic unit.
"""

from django.contrib import admin

from .models import Account, Category, Debt, Transaction


class ReadOnlyModelAdmin(admin.ModelAdmin):
    """
    Base admin class for models that only the command layer may modify.

    To modify these models, use the API (finance/commands.py).
    """

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(Account)
class AccountAdmin(ReadOnlyModelAdmin):
    list_display = ["id", "name", "kind", "active", "created_at"]
    list_filter = ["kind", "active"]
    search_fields = ["name"]
    ordering = ["id"]


@admin.register(Category)
class CategoryAdmin(ReadOnlyModelAdmin):
    list_display = ["id", "name", "kind", "active"]
    list_filter = ["kind", "active"]
    search_fields = ["name"]
    ordering = ["kind", "name"]


@admin.register(Transaction)
class TransactionAdmin(ReadOnlyModelAdmin):
    """Ledger view (read-only)."""

    list_display = [
        "id", "date", "kind", "method", "amount_cents",
        "account", "category", "chef", "linked_debt",
    ]
    list_filter = ["kind", "method", "account", "date"]
    search_fields = ["description", "category__name"]
    date_hierarchy = "date"
    list_select_related = ["account", "category", "chef"]
    ordering = ["-date", "-id"]


@admin.register(Debt)
class DebtAdmin(ReadOnlyModelAdmin):
    list_display = [
        "id", "chef", "amount_cents", "reason", "status",
        "created_at", "settled_at", "settlement_tx",
    ]
    list_filter = ["status"]
    search_fields = ["reason", "chef__email"]
    list_select_related = ["chef", "settlement_tx"]
