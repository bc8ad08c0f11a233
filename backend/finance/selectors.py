# finance/selectors.py
"""
Read-side queries for the treasury.

Selectors never write. They return querysets (or plain dicts for
aggregates) that views hand to serializers.
"""

from django.conf import settings
from django.db.models import BigIntegerField, Count, F, Q, Sum
from django.db.models.functions import Coalesce

from finance.models import Account, Category, Debt, Kind, Method, Transaction


def list_accounts():
    """Active accounts ordered by id, annotated with ``balance_cents``."""
    return Account.objects.active().with_balance().order_by("id")


def account_balance(account_id: int) -> int:
    """Derived balance of one account in cents (0 when it has no transactions)."""
    row = Account.objects.filter(pk=account_id).with_balance().values("balance_cents").first()
    return row["balance_cents"] if row else 0


def list_categories():
    return Category.objects.filter(active=True).order_by("kind", "name")


def _clamp_limit(limit) -> int:
    default = getattr(settings, "FINANCE_TRANSACTIONS_PAGE_LIMIT", 200)
    maximum = getattr(settings, "FINANCE_TRANSACTIONS_MAX_LIMIT", 1000)
    if limit is None:
        return default
    return max(1, min(int(limit), maximum))


def list_transactions(
    *,
    start=None,
    end=None,
    kind: str = None,
    method: str = None,
    category_id: int = None,
    chef_id: int = None,
    limit: int = None,
    offset: int = 0,
):
    """
    Transactions newest first (date desc, id desc).

    Unknown ``kind`` / ``method`` values are ignored rather than rejected.
    ``limit`` defaults to FINANCE_TRANSACTIONS_PAGE_LIMIT and is capped at
    FINANCE_TRANSACTIONS_MAX_LIMIT.
    """
    qs = Transaction.objects.select_related("account", "category", "chef")

    if start:
        qs = qs.filter(date__gte=start)
    if end:
        qs = qs.filter(date__lte=end)
    if kind in Kind.values:
        qs = qs.filter(kind=kind)
    if method in Method.values:
        qs = qs.filter(method=method)
    if category_id:
        qs = qs.filter(category_id=category_id)
    if chef_id:
        qs = qs.filter(chef_id=chef_id)

    limit = _clamp_limit(limit)
    offset = max(0, int(offset or 0))
    return qs.order_by("-date", "-id")[offset:offset + limit]


def list_debts(*, status: str = None, chef_id: int = None):
    """Debts ordered by status (OPEN first), then newest first."""
    qs = Debt.objects.select_related("chef")
    if status in Debt.Status.values:
        qs = qs.filter(status=status)
    if chef_id:
        qs = qs.filter(chef_id=chef_id)
    return qs.order_by("status", "-created_at", "-id")


def summarize_debts_by_chef() -> list:
    """
    Per-chef debt totals, largest open balance first.

    Returns:
        List of dicts: chef_id, chef_email, open_cents, settled_cents, items
    """
    rows = (
        Debt.objects.values("chef_id", chef_email=F("chef__email"))
        .annotate(
            open_cents=Coalesce(
                Sum("amount_cents", filter=Q(status=Debt.Status.OPEN)), 0,
                output_field=BigIntegerField(),
            ),
            settled_cents=Coalesce(
                Sum("amount_cents", filter=Q(status=Debt.Status.SETTLED)), 0,
                output_field=BigIntegerField(),
            ),
            items=Count("id"),
        )
        .order_by("-open_cents", "chef_id")
    )
    return list(rows)
