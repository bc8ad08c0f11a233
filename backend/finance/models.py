# finance/models.py
"""
Treasury models for ScoutDesk.

All mutations go through the command layer (finance/commands.py).

Models:
- Account: Bank or cash account. Balance is derived from transactions,
  never stored. Accounts are deactivated, never deleted.
- Category: Income/expense category. The name is the natural key.
- Transaction: A money movement. Append-only.
- Debt: An amount a chef owes the troop, OPEN until SETTLED.
"""

from django.conf import settings
from django.db import models
from django.db.models import Case, F, Q, Sum, When
from django.db.models.functions import Coalesce


class Method(models.TextChoices):
    """Payment method. Doubles as the account kind it draws on."""
    BANK = "BANK", "Bank"
    CASH = "CASH", "Cash"


class Kind(models.TextChoices):
    INCOME = "INCOME", "Income"
    EXPENSE = "EXPENSE", "Expense"


def signed_amount_sum(prefix: str = ""):
    """
    Sum of INCOME minus EXPENSE amounts, 0 when there are no rows.

    ``prefix`` is the lookup path to the transaction, e.g. "transactions__"
    when aggregating from Account.
    """
    return Coalesce(
        Sum(
            Case(
                When(**{f"{prefix}kind": Kind.INCOME}, then=F(f"{prefix}amount_cents")),
                When(**{f"{prefix}kind": Kind.EXPENSE}, then=-F(f"{prefix}amount_cents")),
                default=0,
                output_field=models.BigIntegerField(),
            )
        ),
        0,
        output_field=models.BigIntegerField(),
    )


class AccountQuerySet(models.QuerySet):
    def active(self):
        return self.filter(active=True)

    def with_balance(self):
        return self.annotate(balance_cents=signed_amount_sum("transactions__"))


class Account(models.Model):
    name = models.CharField(max_length=100, unique=True)
    kind = models.CharField(max_length=10, choices=Method.choices)
    active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = AccountQuerySet.as_manager()

    class Meta:
        ordering = ["id"]

    def __str__(self):
        return f"{self.name} ({self.kind})"

    @property
    def balance(self) -> int:
        """Derived balance in cents, computed fresh from the ledger."""
        return self.transactions.aggregate(total=signed_amount_sum())["total"]

    def delete(self, *args, **kwargs):
        raise RuntimeError("Accounts are never deleted. Deactivate them instead.")


class Category(models.Model):
    name = models.CharField(max_length=100, unique=True)
    kind = models.CharField(max_length=10, choices=Kind.choices)
    active = models.BooleanField(default=True)

    class Meta:
        db_table = "transaction_categories"
        verbose_name_plural = "categories"

    def __str__(self):
        return self.name


class TransactionQuerySet(models.QuerySet):
    def delete(self):
        raise RuntimeError("Transactions are append-only and cannot be deleted.")


class Transaction(models.Model):
    """
    A single money movement on one account.

    Append-only: rows are never deleted and never edited, except for
    ``linked_debt`` which is set once, in the atomic unit that created
    the debt (finance.commands.record_expense_with_debt).
    """

    date = models.DateField()
    amount_cents = models.BigIntegerField()
    kind = models.CharField(max_length=10, choices=Kind.choices)
    method = models.CharField(max_length=10, choices=Method.choices)
    account = models.ForeignKey(Account, on_delete=models.PROTECT, related_name="transactions")
    category = models.ForeignKey(Category, on_delete=models.PROTECT, related_name="transactions")
    description = models.TextField(blank=True, default="")
    chef = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="chef_transactions",
    )
    linked_debt = models.ForeignKey(
        "Debt",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="originating_transactions",
    )
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="created_transactions",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    objects = TransactionQuerySet.as_manager()

    class Meta:
        ordering = ["-date", "-id"]
        constraints = [
            models.CheckConstraint(
                condition=Q(amount_cents__gt=0),
                name="transaction_amount_positive",
            ),
        ]
        indexes = [
            models.Index(fields=["date", "id"], name="transaction_date_id_idx"),
            models.Index(fields=["account", "kind"], name="transaction_account_kind_idx"),
        ]

    def __str__(self):
        return f"#{self.pk} {self.date} {self.kind} {self.amount_cents}"

    def save(self, *args, **kwargs):
        if self.pk is not None and not self._state.adding:
            raise RuntimeError("Transactions are append-only and cannot be modified.")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise RuntimeError("Transactions are append-only and cannot be deleted.")


class Debt(models.Model):
    """
    An amount a chef owes the troop.

    OPEN -> SETTLED is one-way. A settled debt always points to the
    INCOME transaction that reimbursed it (enforced by a check constraint).
    """

    class Status(models.TextChoices):
        OPEN = "OPEN", "Open"
        SETTLED = "SETTLED", "Settled"

    chef = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="debts",
    )
    amount_cents = models.BigIntegerField()
    reason = models.TextField()
    status = models.CharField(max_length=10, choices=Status.choices, default=Status.OPEN)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="created_debts",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    settled_at = models.DateTimeField(null=True, blank=True)
    settled_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="settled_debts",
    )
    settlement_tx = models.OneToOneField(
        Transaction,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="settled_debt",
    )
    notes = models.TextField(blank=True, default="")

    class Meta:
        db_table = "chef_debts"
        ordering = ["status", "-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=Q(amount_cents__gt=0),
                name="debt_amount_positive",
            ),
            models.CheckConstraint(
                condition=(
                    Q(status="SETTLED", settlement_tx__isnull=False)
                    | Q(status="OPEN", settlement_tx__isnull=True)
                ),
                name="debt_settled_has_settlement_tx",
            ),
        ]
        indexes = [
            models.Index(fields=["chef", "status"], name="debt_chef_status_idx"),
        ]

    def __str__(self):
        return f"Debt #{self.pk} chef={self.chef_id} {self.amount_cents} {self.status}"

    @property
    def is_open(self) -> bool:
        return self.status == self.Status.OPEN
