# tests/test_debts.py
"""
Tests for chef debts.

Tests cover:
- create_debt / record_expense_with_debt
- settle_debt, including double settlement and lost races
- Per-chef summary
"""

import threading
from datetime import date
from unittest import mock

import pytest
from django.db import IntegrityError, connection, transaction as db_transaction
from django.utils import timezone

from accounts.authz import ActorContext
from finance import commands as finance_commands
from finance.commands import create_debt, record_expense_with_debt, settle_debt
from finance.defaults import DEBT_REIMBURSEMENT_CATEGORY
from finance.models import Debt, Transaction
from finance.selectors import list_debts, summarize_debts_by_chef


# =============================================================================
# Creating debts
# =============================================================================

@pytest.mark.django_db
class TestCreateDebt:

    def test_creates_open_debt(self, treasurer_actor, chef):
        debt = create_debt(treasurer_actor, chef.id, "20.00", "Material").unwrap()

        assert debt.status == Debt.Status.OPEN
        assert debt.amount_cents == 2000
        assert debt.chef == chef
        assert debt.settlement_tx is None
        assert Transaction.objects.count() == 0

    def test_unknown_chef(self, treasurer_actor):
        result = create_debt(treasurer_actor, 999999, "20.00", "Material")

        assert result.error_code == "not_found"

    @pytest.mark.parametrize("amount, reason", [
        ("0", "Material"),
        ("-3", "Material"),
        ("5", "  "),
        ("99999999999999999999", "Material"),
    ])
    def test_validation(self, treasurer_actor, chef, amount, reason):
        result = create_debt(treasurer_actor, chef.id, amount, reason)

        assert result.error_code == "validation_error"
        assert not Debt.objects.exists()

    def test_settled_requires_settlement_tx_in_database(self, chef):
        debt = Debt.objects.create(chef=chef, amount_cents=100, reason="x")

        with pytest.raises(IntegrityError):
            with db_transaction.atomic():
                Debt.objects.filter(pk=debt.pk).update(status=Debt.Status.SETTLED)


@pytest.mark.django_db
class TestRecordExpenseWithDebt:

    def test_expense_and_debt_are_linked(self, treasurer_actor, chef, cash_account):
        result = record_expense_with_debt(
            treasurer_actor,
            date=date(2024, 1, 10),
            amount="50.00",
            method="CASH",
            category_name="Matériel",
            chef_id=chef.id,
            reason="Camp gear",
        )

        assert result.success
        tx = result.data["transaction"]
        debt = result.data["debt"]

        assert Transaction.objects.count() == 1
        assert Debt.objects.count() == 1
        assert tx.kind == "EXPENSE"
        assert tx.amount_cents == 5000
        assert tx.account == cash_account
        assert debt.amount_cents == 5000
        assert debt.status == Debt.Status.OPEN
        assert debt.chef == chef
        assert Transaction.objects.get(pk=tx.pk).linked_debt_id == debt.id

    def test_nothing_written_when_debt_part_fails(self, treasurer_actor, seeded):
        result = record_expense_with_debt(
            treasurer_actor,
            date=date(2024, 1, 10),
            amount="50.00",
            method="CASH",
            category_name="Matériel",
            chef_id=999999,
            reason="Camp gear",
        )

        assert result.error_code == "not_found"
        assert Transaction.objects.count() == 0
        assert Debt.objects.count() == 0

    @pytest.mark.parametrize("overrides", [
        {"amount": "0"},
        {"reason": ""},
        {"chef_id": None},
    ])
    def test_validation(self, treasurer_actor, chef, seeded, overrides):
        kwargs = {
            "date": date(2024, 1, 10),
            "amount": "50.00",
            "method": "CASH",
            "category_name": "Matériel",
            "chef_id": chef.id,
            "reason": "Camp gear",
        }
        kwargs.update(overrides)

        result = record_expense_with_debt(treasurer_actor, **kwargs)

        assert result.error_code == "validation_error"
        assert Transaction.objects.count() == 0
        assert Debt.objects.count() == 0

    def test_missing_default_account_rolls_back(self, treasurer_actor, chef, cash_account):
        finance_commands.deactivate_account(treasurer_actor, cash_account.id).unwrap()

        result = record_expense_with_debt(
            treasurer_actor,
            date=date(2024, 1, 10),
            amount="50.00",
            method="CASH",
            category_name="Matériel",
            chef_id=chef.id,
            reason="Camp gear",
        )

        assert result.error_code == "configuration_error"
        assert Debt.objects.count() == 0


# =============================================================================
# Settlement
# =============================================================================

@pytest.mark.django_db
class TestSettleDebt:

    @pytest.fixture
    def debt(self, treasurer_actor, chef, seeded):
        return create_debt(treasurer_actor, chef.id, "20.00", "Material").unwrap()

    def test_settlement_creates_income_on_cash_default(self, treasurer_actor, treasurer, chef, cash_account, debt):
        result = settle_debt(treasurer_actor, debt.id, date=date(2024, 1, 15), method="CASH")

        assert result.success
        settled = result.data
        tx = settled.settlement_tx

        assert settled.status == Debt.Status.SETTLED
        assert settled.settled_by == treasurer
        assert settled.settled_at is not None
        assert tx.kind == "INCOME"
        assert tx.amount_cents == 2000
        assert tx.account == cash_account
        assert tx.method == "CASH"
        assert tx.date == date(2024, 1, 15)
        assert tx.category.name == DEBT_REIMBURSEMENT_CATEGORY
        assert tx.category.kind == "INCOME"
        assert tx.chef == chef
        assert tx.description == "Remboursement dette: Material"

    def test_custom_description(self, treasurer_actor, debt):
        settled = settle_debt(
            treasurer_actor, debt.id, date="2024-01-15", method="BANK", description="Virement",
        ).unwrap()

        assert settled.settlement_tx.description == "Virement"
        assert settled.settlement_tx.account.name == "Banque"

    def test_reimbursement_category_is_auto_created(self, treasurer_actor, debt):
        from finance.models import Category

        Category.objects.filter(name=DEBT_REIMBURSEMENT_CATEGORY).update(name="Old name")

        settled = settle_debt(treasurer_actor, debt.id, date="2024-01-15", method="CASH").unwrap()

        assert settled.settlement_tx.category.name == DEBT_REIMBURSEMENT_CATEGORY

    def test_settling_twice_is_conflict(self, treasurer_actor, debt):
        first = settle_debt(treasurer_actor, debt.id, date="2024-01-15", method="CASH")
        second = settle_debt(treasurer_actor, debt.id, date="2024-01-16", method="CASH")

        assert first.success
        assert not second.success
        assert second.error_code == "conflict"
        assert Transaction.objects.filter(category__name=DEBT_REIMBURSEMENT_CATEGORY).count() == 1
        assert Debt.objects.get(pk=debt.id).settlement_tx_id == first.data.settlement_tx_id

    def test_unknown_debt(self, treasurer_actor, seeded):
        result = settle_debt(treasurer_actor, 999999, date="2024-01-15", method="CASH")

        assert result.error_code == "not_found"

    def test_invalid_method(self, treasurer_actor, debt):
        result = settle_debt(treasurer_actor, debt.id, date="2024-01-15", method="CHEQUE")

        assert result.error_code == "validation_error"
        assert Debt.objects.get(pk=debt.id).is_open

    def test_missing_default_account_leaves_debt_open(self, treasurer_actor, cash_account, debt):
        finance_commands.deactivate_account(treasurer_actor, cash_account.id).unwrap()

        result = settle_debt(treasurer_actor, debt.id, date="2024-01-15", method="CASH")

        assert result.error_code == "configuration_error"
        assert Debt.objects.get(pk=debt.id).is_open
        assert Transaction.objects.count() == 0

    def test_lost_race_rolls_back_settlement_transaction(self, treasurer_actor, debt):
        """
        Another request settles the debt between our read and our update.

        The guarded UPDATE matches no row, so the command reports a
        conflict and its own INCOME transaction is rolled back.
        """
        real_record_transaction = finance_commands.record_transaction

        def record_then_lose_race(actor, **kwargs):
            ours = real_record_transaction(actor, **kwargs)
            theirs = real_record_transaction(actor, **kwargs).unwrap()
            Debt.objects.filter(pk=debt.pk).update(
                status=Debt.Status.SETTLED,
                settlement_tx=theirs,
                settled_at=timezone.now(),
            )
            return ours

        with mock.patch.object(finance_commands, "record_transaction", side_effect=record_then_lose_race):
            result = settle_debt(treasurer_actor, debt.id, date="2024-01-15", method="CASH")

        assert not result.success
        assert result.error_code == "conflict"
        assert Transaction.objects.count() == 0
        assert Debt.objects.get(pk=debt.id).is_open


@pytest.mark.django_db(transaction=True)
@pytest.mark.skipif(connection.vendor != "postgresql", reason="needs row-level locking (PostgreSQL)")
def test_concurrent_settlements_only_one_wins(treasurer, chef, seeded):
    """Two simultaneous settle_debt calls: exactly one succeeds."""
    actor = ActorContext.for_user(treasurer)
    debt = create_debt(actor, chef.id, "20.00", "Material").unwrap()

    barrier = threading.Barrier(2)
    results = []

    def worker():
        try:
            barrier.wait()
            results.append(settle_debt(actor, debt.id, date="2024-01-15", method="CASH"))
        finally:
            connection.close()

    threads = [threading.Thread(target=worker) for _ in range(2)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert sorted(r.success for r in results) == [False, True]
    assert [r.error_code for r in results if not r.success] == ["conflict"]
    assert Transaction.objects.filter(category__name=DEBT_REIMBURSEMENT_CATEGORY).count() == 1
    assert Debt.objects.get(pk=debt.id).status == Debt.Status.SETTLED


# =============================================================================
# Listing & summary
# =============================================================================

@pytest.mark.django_db
class TestDebtQueries:

    @pytest.fixture
    def debts(self, treasurer_actor, chef, other_chef, seeded):
        a = create_debt(treasurer_actor, chef.id, "10.00", "Tente").unwrap()
        b = create_debt(treasurer_actor, chef.id, "5.00", "Cordes").unwrap()
        c = create_debt(treasurer_actor, other_chef.id, "30.00", "Réchaud").unwrap()
        settle_debt(treasurer_actor, b.id, date="2024-01-15", method="CASH").unwrap()
        return a, b, c

    def test_list_orders_open_first(self, debts):
        a, b, c = debts

        statuses = [d.status for d in list_debts()]

        assert statuses == ["OPEN", "OPEN", "SETTLED"]

    def test_list_filters(self, debts, chef):
        a, b, c = debts

        assert [d.id for d in list_debts(status="SETTLED")] == [b.id]
        assert {d.id for d in list_debts(chef_id=chef.id)} == {a.id, b.id}
        assert len(list_debts(status="WHATEVER")) == 3

    def test_summary_by_chef(self, debts, chef, other_chef):
        rows = summarize_debts_by_chef()

        assert rows == [
            {
                "chef_id": other_chef.id,
                "chef_email": other_chef.email,
                "open_cents": 3000,
                "settled_cents": 0,
                "items": 1,
            },
            {
                "chef_id": chef.id,
                "chef_email": chef.email,
                "open_cents": 1000,
                "settled_cents": 500,
                "items": 2,
            },
        ]
