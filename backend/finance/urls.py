# finance/urls.py
"""
URL configuration for the treasury API.

Endpoints:
- /accounts/ - Accounts with derived balance, deactivation
- /categories/ - Income/expense categories
- /transactions/ - Ledger (append-only), xlsx/csv export
- /debts/ - Chef debts, summary and settlement
"""

from django.urls import path

from .views import (
    AccountListCreateView,
    AccountDeactivateView,
    CategoryListCreateView,
    TransactionListCreateView,
    TransactionExportView,
    DebtListCreateView,
    DebtSummaryView,
    DebtSettleView,
)

app_name = "finance"

urlpatterns = [
    # ==========================================================================
    # Accounts
    # ==========================================================================
    path(
        "accounts/",
        AccountListCreateView.as_view(),
        name="account-list-create",
    ),
    path(
        "accounts/<int:pk>/deactivate/",
        AccountDeactivateView.as_view(),
        name="account-deactivate",
    ),

    # ==========================================================================
    # Categories
    # ==========================================================================
    path(
        "categories/",
        CategoryListCreateView.as_view(),
        name="category-list-create",
    ),

    # ==========================================================================
    # Transactions
    # ==========================================================================
    path(
        "transactions/",
        TransactionListCreateView.as_view(),
        name="transaction-list-create",
    ),
    path(
        "transactions/export/",
        TransactionExportView.as_view(),
        name="transaction-export",
    ),

    # ==========================================================================
    # Debts
    # ==========================================================================
    path(
        "debts/",
        DebtListCreateView.as_view(),
        name="debt-list-create",
    ),
    path(
        "debts/summary/",
        DebtSummaryView.as_view(),
        name="debt-summary",
    ),
    path(
        "debts/<int:pk>/settle/",
        DebtSettleView.as_view(),
        name="debt-settle",
    ),
]
