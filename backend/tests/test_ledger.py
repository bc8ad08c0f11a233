# tests/test_ledger.py
"""
Tests for the ledger: accounts, categories and transactions.

Tests cover:
- Derived account balances
- Account creation / deactivation and default account resolution
- Category get-or-create and kind consistency
- record_transaction validation and resolution rules
- Append-only transactions
- Transaction listing filters and limits
"""

import pytest
from datetime import date

from django.db import IntegrityError, transaction as db_transaction

from finance.commands import (
    create_account,
    create_category,
    deactivate_account,
    get_or_create_category,
    record_transaction,
    resolve_default_account,
)
from finance.exceptions import ConfigurationError
from finance.models import Account, Category, Transaction
from finance.selectors import account_balance, list_accounts, list_categories, list_transactions


def _record(actor, **overrides):
    kwargs = {
        "date": date(2024, 1, 15),
        "amount": "10.00",
        "kind": "INCOME",
        "method": "CASH",
        "category_name": "Don",
    }
    kwargs.update(overrides)
    return record_transaction(actor, **kwargs)


# =============================================================================
# Balances
# =============================================================================

@pytest.mark.django_db
class TestDerivedBalance:

    def test_new_account_has_zero_balance(self, treasurer_actor, seeded):
        account = create_account(treasurer_actor, "Livret", "BANK").unwrap()

        assert account.balance == 0
        assert account_balance(account.id) == 0

    def test_balance_is_income_minus_expense(self, treasurer_actor, cash_account):
        _record(treasurer_actor, amount="100.00").unwrap()
        _record(treasurer_actor, amount="25.50", kind="EXPENSE", category_name="Matériel").unwrap()
        _record(treasurer_actor, amount="0.50").unwrap()

        assert cash_account.balance == 10000 - 2550 + 50
        assert account_balance(cash_account.id) == 7500

    def test_list_accounts_annotates_balance(self, treasurer_actor, bank_account, cash_account):
        _record(treasurer_actor, amount="40.00", method="BANK").unwrap()
        _record(treasurer_actor, amount="15.00", kind="EXPENSE", method="CASH", category_name="Activité").unwrap()

        balances = {a.name: a.balance_cents for a in list_accounts()}

        assert balances["Banque"] == 4000
        assert balances["Caisse"] == -1500

    def test_list_accounts_hides_inactive(self, treasurer_actor, seeded):
        extra = create_account(treasurer_actor, "Ancienne caisse", "CASH").unwrap()
        deactivate_account(treasurer_actor, extra.id).unwrap()

        assert "Ancienne caisse" not in [a.name for a in list_accounts()]


# =============================================================================
# Accounts
# =============================================================================

@pytest.mark.django_db
class TestAccountCommands:

    def test_create_account(self, treasurer_actor):
        result = create_account(treasurer_actor, "Compte épargne", "BANK")

        assert result.success
        assert result.data.kind == "BANK"
        assert result.data.active is True

    def test_invalid_kind_rejected(self, treasurer_actor):
        result = create_account(treasurer_actor, "Coffre", "SAFE")

        assert not result.success
        assert result.error_code == "validation_error"

    def test_blank_name_rejected(self, treasurer_actor):
        result = create_account(treasurer_actor, "   ", "CASH")

        assert result.error_code == "validation_error"

    def test_duplicate_name_is_conflict(self, treasurer_actor, seeded):
        result = create_account(treasurer_actor, "Banque", "BANK")

        assert result.error_code == "conflict"
        assert Account.objects.filter(name="Banque").count() == 1

    def test_deactivate_missing_account(self, treasurer_actor):
        result = deactivate_account(treasurer_actor, 999999)

        assert result.error_code == "not_found"

    def test_accounts_are_never_deleted(self, bank_account):
        with pytest.raises(RuntimeError):
            bank_account.delete()


@pytest.mark.django_db
class TestDefaultAccount:

    def test_first_active_account_by_id(self, treasurer_actor, cash_account):
        second = create_account(treasurer_actor, "Caisse camp", "CASH").unwrap()

        assert resolve_default_account("CASH") == cash_account

        deactivate_account(treasurer_actor, cash_account.id).unwrap()
        assert resolve_default_account("CASH") == second

    def test_missing_default_account_is_configuration_error(self, treasurer_actor, cash_account):
        deactivate_account(treasurer_actor, cash_account.id).unwrap()

        with pytest.raises(ConfigurationError):
            resolve_default_account("CASH")

        result = _record(treasurer_actor, method="CASH")
        assert result.error_code == "configuration_error"
        assert Transaction.objects.count() == 0


# =============================================================================
# Categories
# =============================================================================

@pytest.mark.django_db
class TestCategories:

    def test_get_or_create_is_idempotent(self, treasurer_actor):
        first = get_or_create_category(treasurer_actor, "Camp d'été", "EXPENSE").unwrap()
        second = get_or_create_category(treasurer_actor, "Camp d'été", "EXPENSE").unwrap()

        assert first.pk == second.pk
        assert Category.objects.filter(name="Camp d'été").count() == 1

    def test_name_is_authoritative_over_kind(self, treasurer_actor, seeded):
        category = get_or_create_category(treasurer_actor, "Don", "EXPENSE").unwrap()

        assert category.kind == "INCOME"

    def test_create_category_duplicate_is_conflict(self, treasurer_actor, seeded):
        result = create_category(treasurer_actor, "Subvention", "INCOME")

        assert result.error_code == "conflict"

    def test_create_category_bad_kind(self, treasurer_actor):
        result = create_category(treasurer_actor, "Divers", "OTHER")

        assert result.error_code == "validation_error"

    def test_unique_name_enforced_by_database(self, seeded):
        with pytest.raises(IntegrityError):
            with db_transaction.atomic():
                Category.objects.create(name="Don", kind="INCOME")

    def test_list_categories_ordered_by_kind_then_name(self, seeded):
        rows = [(c.kind, c.name) for c in list_categories()]

        assert rows == sorted(rows)


# =============================================================================
# record_transaction
# =============================================================================

@pytest.mark.django_db
class TestRecordTransaction:

    def test_records_on_default_account(self, treasurer_actor, cash_account, treasurer):
        tx = _record(treasurer_actor, amount="12,50", description="Vente de gaufres").unwrap()

        assert tx.amount_cents == 1250
        assert tx.account == cash_account
        assert tx.category.name == "Don"
        assert tx.created_by == treasurer
        assert tx.linked_debt is None

    def test_explicit_account(self, treasurer_actor, seeded):
        savings = create_account(treasurer_actor, "Livret", "BANK").unwrap()

        tx = _record(treasurer_actor, method="BANK", account_id=savings.id).unwrap()

        assert tx.account == savings

    def test_explicit_inactive_account_rejected(self, treasurer_actor, seeded):
        old = create_account(treasurer_actor, "Vieux compte", "BANK").unwrap()
        deactivate_account(treasurer_actor, old.id).unwrap()

        result = _record(treasurer_actor, method="BANK", account_id=old.id)

        assert result.error_code == "validation_error"

    def test_unknown_account_and_category(self, treasurer_actor, seeded):
        assert _record(treasurer_actor, account_id=999999).error_code == "not_found"
        assert _record(treasurer_actor, category_id=999999).error_code == "not_found"

    def test_unknown_chef(self, treasurer_actor, seeded):
        assert _record(treasurer_actor, chef_id=999999).error_code == "not_found"

    def test_auto_creates_category_with_transaction_kind(self, treasurer_actor, seeded):
        tx = _record(treasurer_actor, kind="EXPENSE", category_name="Location minibus").unwrap()

        assert tx.category.kind == "EXPENSE"

    def test_category_kind_mismatch_rejected(self, treasurer_actor, material_category):
        result = _record(treasurer_actor, kind="INCOME", category_id=material_category.id)

        assert result.error_code == "validation_error"
        assert Transaction.objects.count() == 0

    @pytest.mark.parametrize("amount", ["0", "-5", "abc", "", "0.004", "1e20", "99999999999999999999", 1e20])
    def test_invalid_amounts(self, treasurer_actor, seeded, amount):
        result = _record(treasurer_actor, amount=amount)

        assert result.error_code == "validation_error"
        assert Transaction.objects.count() == 0

    @pytest.mark.parametrize("field, value", [
        ("kind", "GIFT"),
        ("method", "CHEQUE"),
        ("date", ""),
        ("date", "15/01/2024"),
    ])
    def test_invalid_enums_and_dates(self, treasurer_actor, seeded, field, value):
        result = _record(treasurer_actor, **{field: value})

        assert result.error_code == "validation_error"

    def test_category_is_required(self, treasurer_actor, seeded):
        result = _record(treasurer_actor, category_name="")

        assert result.error_code == "validation_error"

    def test_accepts_iso_date_string(self, treasurer_actor, seeded):
        tx = _record(treasurer_actor, date="2024-03-01").unwrap()

        assert tx.date == date(2024, 3, 1)


@pytest.mark.django_db
class TestAppendOnly:

    def test_transaction_cannot_be_edited(self, treasurer_actor, seeded):
        tx = _record(treasurer_actor).unwrap()
        tx.amount_cents = 1

        with pytest.raises(RuntimeError):
            tx.save()

    def test_transaction_cannot_be_deleted(self, treasurer_actor, seeded):
        tx = _record(treasurer_actor).unwrap()

        with pytest.raises(RuntimeError):
            tx.delete()
        with pytest.raises(RuntimeError):
            Transaction.objects.filter(pk=tx.pk).delete()

        assert Transaction.objects.filter(pk=tx.pk).exists()

    def test_positive_amount_enforced_by_database(self, cash_account, material_category):
        with pytest.raises(IntegrityError):
            with db_transaction.atomic():
                Transaction.objects.create(
                    date=date(2024, 1, 1),
                    amount_cents=0,
                    kind="EXPENSE",
                    method="CASH",
                    account=cash_account,
                    category=material_category,
                )


# =============================================================================
# list_transactions
# =============================================================================

@pytest.mark.django_db
class TestListTransactions:

    @pytest.fixture
    def ledger(self, treasurer_actor, chef, seeded):
        return [
            _record(treasurer_actor, date="2024-01-10", amount="5").unwrap(),
            _record(treasurer_actor, date="2024-02-10", amount="6", method="BANK").unwrap(),
            _record(treasurer_actor, date="2024-02-10", amount="7", kind="EXPENSE",
                    category_name="Matériel", chef_id=chef.id).unwrap(),
            _record(treasurer_actor, date="2024-03-10", amount="8").unwrap(),
        ]

    def test_newest_first(self, ledger):
        ids = [tx.id for tx in list_transactions()]

        assert ids == [ledger[3].id, ledger[2].id, ledger[1].id, ledger[0].id]

    def test_date_range(self, ledger):
        rows = list(list_transactions(start=date(2024, 2, 1), end=date(2024, 2, 28)))

        assert {tx.id for tx in rows} == {ledger[1].id, ledger[2].id}

    def test_filters(self, ledger, chef):
        assert [tx.id for tx in list_transactions(kind="EXPENSE")] == [ledger[2].id]
        assert [tx.id for tx in list_transactions(method="BANK")] == [ledger[1].id]
        assert [tx.id for tx in list_transactions(chef_id=chef.id)] == [ledger[2].id]
        assert [tx.id for tx in list_transactions(category_id=ledger[2].category_id)] == [ledger[2].id]

    def test_unknown_enum_filters_are_ignored(self, ledger):
        assert len(list_transactions(kind="BOGUS", method="CHEQUE")) == 4

    def test_limit_and_offset(self, ledger):
        page = list(list_transactions(limit=2, offset=1))

        assert [tx.id for tx in page] == [ledger[2].id, ledger[1].id]

    def test_limit_is_capped(self, ledger, settings):
        settings.FINANCE_TRANSACTIONS_MAX_LIMIT = 3

        assert len(list_transactions(limit=500)) == 3

    def test_default_limit(self, ledger, settings):
        settings.FINANCE_TRANSACTIONS_PAGE_LIMIT = 2

        assert len(list_transactions()) == 2
