# finance/commands.py
"""
Command layer for treasury operations.

Commands are the single point where ledger and debt state changes.
Views call commands; commands validate input and perform the
operation as one atomic unit.

Pattern:
1. Validate input (raise ValidationError before any write)
2. Load and lock the rows the operation depends on
3. Perform the writes inside transaction.atomic
4. Return CommandResult

Any FinanceError raised inside the atomic block rolls back every write
of the unit; the @command decorator turns it into CommandResult.fail()
once the transaction is gone. Composite commands call other commands
and use ``.unwrap()`` so a nested failure aborts the outer unit too.

Role checks are NOT done here. Views gate access (accounts.authz.require);
the actor is only recorded as creator/settler.
"""

import functools
import logging
from datetime import date as date_cls

from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction
from django.utils import timezone
from django.utils.dateparse import parse_date

from accounts.authz import ActorContext
from finance.defaults import DEBT_REIMBURSEMENT_CATEGORY
from finance.exceptions import (
    ConfigurationError,
    ConflictError,
    FinanceError,
    NotFoundError,
    ValidationError,
)
from finance.models import Account, Category, Debt, Kind, Method, Transaction
from finance.money import from_cents, to_cents

logger = logging.getLogger(__name__)

User = get_user_model()


class CommandResult:
    """
    Wrapper for command results with success/failure info.

    Usage:
        result = settle_debt(actor, debt_id, date=..., method="CASH")
        if result.success:
            debt = result.data
        else:
            error_message = result.error
            error_code = result.error_code  # "conflict", "not_found", ...
    """

    def __init__(self, success: bool, data=None, error: str = None, error_code: str = None, exception=None):
        self.success = success
        self.data = data
        self.error = error
        self.error_code = error_code
        self.exception = exception

    @classmethod
    def ok(cls, data=None):
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, exc: FinanceError):
        return cls(success=False, error=exc.message, error_code=exc.code, exception=exc)

    def unwrap(self):
        """Return data, or re-raise the failure (aborting the caller's atomic unit)."""
        if not self.success:
            raise self.exception
        return self.data


def command(func):
    """Convert FinanceError raised by a command into CommandResult.fail()."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except FinanceError as exc:
            if not getattr(exc, "_logged", False):
                exc._logged = True
                extra = {"command": func.__name__, "error_code": exc.code}
                if isinstance(exc, ConfigurationError):
                    logger.error("Treasury misconfiguration: %s", exc.message, extra=extra)
                elif isinstance(exc, ConflictError):
                    logger.warning("Command conflict: %s", exc.message, extra=extra)
                else:
                    logger.info("Command rejected: %s", exc.message, extra=extra)
            return CommandResult.fail(exc)

    return wrapper


# =============================================================================
# Validation helpers
# =============================================================================

def validate_choice(value, choices, field: str) -> str:
    if value not in choices.values:
        raise ValidationError(f"Invalid {field} '{value}'. Must be one of: {', '.join(choices.values)}")
    return value


def validate_date(value) -> date_cls:
    if isinstance(value, date_cls):
        return value
    if not value:
        raise ValidationError("date is required.")
    try:
        parsed = parse_date(str(value))
    except ValueError:
        parsed = None
    if parsed is None:
        raise ValidationError(f"Invalid date '{value}'. Expected YYYY-MM-DD.")
    return parsed


def validate_positive_cents(amount) -> int:
    cents = to_cents(amount)
    if cents <= 0:
        raise ValidationError("Amount must be greater than zero.")
    return cents


def _required_text(value, field: str) -> str:
    text = (value or "").strip()
    if not text:
        raise ValidationError(f"{field} is required.")
    return text


def _get_user(user_id, label: str = "User"):
    try:
        return User.objects.get(pk=user_id)
    except (User.DoesNotExist, ValueError, TypeError):
        raise NotFoundError(f"{label} {user_id} not found.")


# =============================================================================
# Account Commands
# =============================================================================

@command
@transaction.atomic
def create_account(actor: ActorContext, name: str, kind: str) -> CommandResult:
    """
    Create a bank or cash account.

    Returns:
        CommandResult with the created Account, or a validation_error /
        conflict (name already taken) failure
    """
    name = _required_text(name, "Account name")
    validate_choice(kind, Method, "kind")

    if Account.objects.filter(name=name).exists():
        raise ConflictError(f"Account '{name}' already exists.")
    try:
        with transaction.atomic():
            account = Account.objects.create(name=name, kind=kind)
    except IntegrityError:
        raise ConflictError(f"Account '{name}' already exists.")

    logger.info(
        "Account created",
        extra={"account_id": account.id, "kind": kind, "user_id": actor.user_id},
    )
    return CommandResult.ok(account)


@command
@transaction.atomic
def deactivate_account(actor: ActorContext, account_id: int) -> CommandResult:
    """Deactivate an account. Accounts are never deleted."""
    try:
        account = Account.objects.select_for_update().get(pk=account_id)
    except Account.DoesNotExist:
        raise NotFoundError(f"Account {account_id} not found.")

    if account.active:
        account.active = False
        account.save(update_fields=["active", "updated_at"])
        logger.info(
            "Account deactivated",
            extra={"account_id": account.id, "user_id": actor.user_id},
        )
    return CommandResult.ok(account)


def resolve_default_account(method: str) -> Account:
    """
    Default account for a payment method: first active account of that
    kind by ascending id.

    Raises:
        ConfigurationError: no active account of that kind exists. The
            deployment must seed one BANK and one CASH account.
    """
    validate_choice(method, Method, "method")
    account = Account.objects.active().filter(kind=method).order_by("id").first()
    if account is None:
        raise ConfigurationError(f"No default account configured for method {method}.")
    return account


# =============================================================================
# Category Commands
# =============================================================================

@command
@transaction.atomic
def create_category(actor: ActorContext, name: str, kind: str) -> CommandResult:
    """Explicitly create a category. Duplicate names are a conflict."""
    name = _required_text(name, "Category name")
    validate_choice(kind, Kind, "kind")

    if Category.objects.filter(name=name).exists():
        raise ConflictError(f"Category '{name}' already exists.")
    try:
        with transaction.atomic():
            category = Category.objects.create(name=name, kind=kind)
    except IntegrityError:
        raise ConflictError(f"Category '{name}' already exists.")

    logger.info(
        "Category created",
        extra={"category_id": category.id, "kind": kind, "user_id": actor.user_id},
    )
    return CommandResult.ok(category)


@command
@transaction.atomic
def get_or_create_category(actor: ActorContext, name: str, kind: str) -> CommandResult:
    """
    Return the category with this name, creating it with ``kind`` if missing.

    The name is authoritative: an existing category is returned even if
    its kind differs from the requested one (the mismatch is logged).
    Safe under a concurrent insert of the same name.
    """
    name = _required_text(name, "Category name")
    validate_choice(kind, Kind, "kind")

    category = Category.objects.filter(name=name).first()
    if category is None:
        try:
            with transaction.atomic():
                category = Category.objects.create(name=name, kind=kind)
            logger.info(
                "Category auto-created",
                extra={"category_id": category.id, "kind": kind, "user_id": actor.user_id},
            )
        except IntegrityError:
            category = Category.objects.get(name=name)

    if category.kind != kind:
        logger.warning(
            "Category kind mismatch",
            extra={"category_id": category.id, "category_kind": category.kind, "requested_kind": kind},
        )
    return CommandResult.ok(category)


# =============================================================================
# Transaction Commands
# =============================================================================

@command
@transaction.atomic
def record_transaction(
    actor: ActorContext,
    *,
    date,
    amount,
    kind: str,
    method: str,
    category_id: int = None,
    category_name: str = "",
    account_id: int = None,
    description: str = "",
    chef_id: int = None,
) -> CommandResult:
    """
    Record a money movement. This is the only write path for transactions.

    Args:
        actor: The actor context (recorded as created_by)
        date: Calendar date (date or "YYYY-MM-DD")
        amount: Decimal amount (string or number), rounded half away from zero
        kind: INCOME or EXPENSE
        method: BANK or CASH
        category_id: Explicit category; otherwise category_name is
            resolved with get_or_create_category
        account_id: Explicit account; otherwise the method's default account
        description: Free text
        chef_id: Optional chef (user) the movement relates to

    Returns:
        CommandResult with the created Transaction or error
    """
    amount_cents = validate_positive_cents(amount)
    validate_choice(kind, Kind, "kind")
    validate_choice(method, Method, "method")
    tx_date = validate_date(date)
    if not category_id and not (category_name or "").strip():
        raise ValidationError("category_id or category_name is required.")

    chef = _get_user(chef_id, "Chef") if chef_id else None

    if account_id:
        try:
            account = Account.objects.get(pk=account_id)
        except Account.DoesNotExist:
            raise NotFoundError(f"Account {account_id} not found.")
        if not account.active:
            raise ValidationError(f"Account '{account.name}' is inactive.")
    else:
        account = resolve_default_account(method)

    if category_id:
        try:
            category = Category.objects.get(pk=category_id)
        except Category.DoesNotExist:
            raise NotFoundError(f"Category {category_id} not found.")
    else:
        category = get_or_create_category(actor, category_name, kind).unwrap()

    if category.kind != kind:
        raise ValidationError(
            f"Category '{category.name}' is an {category.kind} category and cannot be used for {kind}."
        )

    tx = Transaction.objects.create(
        date=tx_date,
        amount_cents=amount_cents,
        kind=kind,
        method=method,
        account=account,
        category=category,
        description=description or "",
        chef=chef,
        created_by=actor.user,
    )

    logger.info(
        "Transaction recorded",
        extra={
            "transaction_id": tx.id,
            "kind": kind,
            "method": method,
            "amount_cents": amount_cents,
            "account_id": account.id,
            "user_id": actor.user_id,
        },
    )
    return CommandResult.ok(tx)


# =============================================================================
# Debt Commands
# =============================================================================

@command
@transaction.atomic
def create_debt(actor: ActorContext, chef_id: int, amount, reason: str) -> CommandResult:
    """Record an OPEN debt owed by a chef. No ledger side effects."""
    if not chef_id:
        raise ValidationError("chef_id is required.")
    amount_cents = validate_positive_cents(amount)
    reason = _required_text(reason, "Debt reason")
    chef = _get_user(chef_id, "Chef")

    debt = Debt.objects.create(
        chef=chef,
        amount_cents=amount_cents,
        reason=reason,
        created_by=actor.user,
    )

    logger.info(
        "Debt created",
        extra={"debt_id": debt.id, "chef_id": chef.id, "amount_cents": amount_cents, "user_id": actor.user_id},
    )
    return CommandResult.ok(debt)


@command
@transaction.atomic
def record_expense_with_debt(
    actor: ActorContext,
    *,
    date,
    amount,
    method: str,
    chef_id: int,
    reason: str,
    category_id: int = None,
    category_name: str = "",
    account_id: int = None,
    description: str = "",
) -> CommandResult:
    """
    Record an expense paid on behalf of a chef and the debt it creates.

    One atomic unit: EXPENSE transaction, OPEN debt for the same chef and
    amount, then the transaction's linked_debt. All three or nothing.

    Returns:
        CommandResult with {"transaction": Transaction, "debt": Debt}
    """
    if not chef_id:
        raise ValidationError("chef_id is required to create a debt.")
    reason = _required_text(reason, "Debt reason")

    tx = record_transaction(
        actor,
        date=date,
        amount=amount,
        kind=Kind.EXPENSE,
        method=method,
        category_id=category_id,
        category_name=category_name,
        account_id=account_id,
        description=description,
        chef_id=chef_id,
    ).unwrap()

    debt = Debt.objects.create(
        chef_id=tx.chef_id,
        amount_cents=tx.amount_cents,
        reason=reason,
        created_by=actor.user,
    )

    linked = Transaction.objects.filter(pk=tx.pk, linked_debt__isnull=True).update(linked_debt=debt)
    if linked != 1:
        raise ConflictError(f"Transaction {tx.pk} is already linked to a debt.")
    tx.linked_debt = debt

    logger.info(
        "Expense recorded with debt",
        extra={"transaction_id": tx.id, "debt_id": debt.id, "chef_id": tx.chef_id, "user_id": actor.user_id},
    )
    return CommandResult.ok({"transaction": tx, "debt": debt})


@command
@transaction.atomic
def settle_debt(
    actor: ActorContext,
    debt_id: int,
    *,
    date,
    method: str,
    description: str = "",
) -> CommandResult:
    """
    Settle an OPEN debt with a reimbursement INCOME transaction.

    The debt row is locked, the transaction is recorded on the method's
    default account, then the debt moves to SETTLED with a guarded update
    (WHERE status = OPEN). If the guard matches no row another request won
    and the whole unit is rolled back with a conflict.

    Returns:
        CommandResult with the settled Debt (settlement_tx populated)
    """
    validate_choice(method, Method, "method")
    settle_date = validate_date(date)

    try:
        debt = Debt.objects.select_for_update().get(pk=debt_id)
    except Debt.DoesNotExist:
        raise NotFoundError(f"Debt {debt_id} not found.")
    if debt.status != Debt.Status.OPEN:
        raise ConflictError(f"Debt {debt_id} is already settled.")

    tx = record_transaction(
        actor,
        date=settle_date,
        amount=from_cents(debt.amount_cents),
        kind=Kind.INCOME,
        method=method,
        category_name=DEBT_REIMBURSEMENT_CATEGORY,
        description=description or f"Remboursement dette: {debt.reason}",
        chef_id=debt.chef_id,
    ).unwrap()

    updated = Debt.objects.filter(pk=debt.pk, status=Debt.Status.OPEN).update(
        status=Debt.Status.SETTLED,
        settled_at=timezone.now(),
        settled_by=actor.user,
        settlement_tx=tx,
    )
    if updated != 1:
        raise ConflictError(f"Debt {debt_id} was settled by another request.")

    debt.refresh_from_db()
    logger.info(
        "Debt settled",
        extra={"debt_id": debt.id, "settlement_tx_id": tx.id, "method": method, "user_id": actor.user_id},
    )
    return CommandResult.ok(debt)
