# dues/commands.py
"""
Command layer for membership dues.

- bulk_assign: create or re-price assignments for many people in one unit
- pay_assignment: record the payment INCOME and mark the assignment paid

Both follow the finance command conventions (see finance/commands.py):
FinanceError raised inside the atomic block rolls everything back and is
returned as CommandResult.fail().
"""

import logging

from django.contrib.auth import get_user_model
from django.db import transaction

from accounts.authz import ActorContext
from dues.models import DuesAssignment
from finance.commands import (
    CommandResult,
    command,
    record_transaction,
    validate_choice,
    validate_date,
    validate_positive_cents,
)
from finance.defaults import ASSURANCE_CATEGORY, COTISATION_CATEGORY
from finance.exceptions import ConflictError, NotFoundError, ValidationError
from finance.models import Kind, Method
from finance.money import from_cents

logger = logging.getLogger(__name__)

User = get_user_model()

MIN_YEAR = 2000
MAX_YEAR = 2100
# PositiveIntegerField upper bound
MAX_PERSON_ID = 2**31 - 1

CATEGORY_BY_TYPE = {
    DuesAssignment.Type.COTISATION: COTISATION_CATEGORY,
    DuesAssignment.Type.ASSURANCE: ASSURANCE_CATEGORY,
}


def _person_ids(person_ids) -> list:
    """Validate and de-duplicate person ids, keeping first-seen order."""
    if not isinstance(person_ids, (list, tuple)) or not person_ids:
        raise ValidationError("person_ids must be a non-empty list.")

    ids = []
    seen = set()
    for raw in person_ids:
        if isinstance(raw, bool):
            raise ValidationError(f"Invalid person id {raw!r}.")
        try:
            pid = int(raw)
        except (TypeError, ValueError):
            raise ValidationError(f"Invalid person id {raw!r}.")
        if not 0 < pid <= MAX_PERSON_ID:
            raise ValidationError(f"Invalid person id {raw!r}.")
        if pid not in seen:
            seen.add(pid)
            ids.append(pid)
    return ids


def _year(value) -> int:
    try:
        year = int(value)
    except (TypeError, ValueError):
        raise ValidationError("year is required.")
    if not MIN_YEAR <= year <= MAX_YEAR:
        raise ValidationError(f"year must be between {MIN_YEAR} and {MAX_YEAR}.")
    return year


@command
@transaction.atomic
def bulk_assign(
    actor: ActorContext,
    *,
    person_type: str,
    person_ids,
    dues_type: str,
    scope: str,
    year,
    amount,
) -> CommandResult:
    """
    Create or update one assignment per person for (type, year).

    Idempotent on (person_type, person_id, type, year): existing rows get
    the new amount, missing rows are inserted unpaid. A paid assignment
    keeps its amount; asking to change it aborts the whole batch.

    Args:
        actor: The actor context
        person_type: CHEF or CHILD
        person_ids: Non-empty list of positive ids (duplicates collapsed).
            For CHEF every id must be an existing user.
        dues_type: ASSURANCE or COTISATION
        scope: UNIT or SECTION (stored on insert only)
        year: Calendar year
        amount: Decimal amount per person

    Returns:
        CommandResult with {"count", "created", "updated"}
    """
    validate_choice(person_type, DuesAssignment.PersonType, "person_type")
    validate_choice(dues_type, DuesAssignment.Type, "type")
    validate_choice(scope, DuesAssignment.Scope, "scope")
    ids = _person_ids(person_ids)
    year = _year(year)
    amount_cents = validate_positive_cents(amount)

    if person_type == DuesAssignment.PersonType.CHEF:
        known = set(User.objects.filter(pk__in=ids).values_list("pk", flat=True))
        missing = [pid for pid in ids if pid not in known]
        if missing:
            raise NotFoundError(f"Chef(s) not found: {', '.join(str(pid) for pid in missing)}.")

    existing = {
        row.person_id: row
        for row in DuesAssignment.objects.select_for_update().filter(
            person_type=person_type,
            type=dues_type,
            year=year,
            person_id__in=ids,
        )
    }

    locked_paid = [
        row.person_id for row in existing.values()
        if row.paid and row.amount_cents != amount_cents
    ]
    if locked_paid:
        raise ConflictError(
            "Cannot change the amount of paid assignment(s) for person id(s): "
            f"{', '.join(str(pid) for pid in sorted(locked_paid))}."
        )

    DuesAssignment.objects.bulk_create(
        [
            DuesAssignment(
                person_type=person_type,
                person_id=pid,
                type=dues_type,
                scope=scope,
                year=year,
                amount_cents=amount_cents,
            )
            for pid in ids
        ],
        update_conflicts=True,
        unique_fields=["person_type", "person_id", "type", "year"],
        update_fields=["amount_cents"],
    )

    summary = {
        "count": len(ids),
        "created": len(ids) - len(existing),
        "updated": len(existing),
    }
    logger.info(
        "Dues assigned",
        extra={
            "person_type": person_type,
            "type": dues_type,
            "year": year,
            "amount_cents": amount_cents,
            "user_id": actor.user_id,
            "assigned_count": summary["count"],
            "created_count": summary["created"],
            "updated_count": summary["updated"],
        },
    )
    return CommandResult.ok(summary)


@command
@transaction.atomic
def pay_assignment(
    actor: ActorContext,
    assignment_id: int,
    *,
    method: str,
    date,
    description: str = "",
) -> CommandResult:
    """
    Mark an assignment paid and record the matching INCOME.

    The transaction lands on the method's default account under the
    "Cotisation" or "Assurance" category; the chef is set only when the
    assignee is a chef. The paid flag flips with a guarded update
    (WHERE paid = false); a lost race rolls the transaction back.

    Returns:
        CommandResult with the paid DuesAssignment
    """
    validate_choice(method, Method, "method")
    paid_on = validate_date(date)

    try:
        assignment = DuesAssignment.objects.select_for_update().get(pk=assignment_id)
    except DuesAssignment.DoesNotExist:
        raise NotFoundError(f"Assignment {assignment_id} not found.")
    if assignment.paid:
        raise ConflictError(f"Assignment {assignment_id} is already paid.")

    category_name = CATEGORY_BY_TYPE[assignment.type]
    is_chef = assignment.person_type == DuesAssignment.PersonType.CHEF

    tx = record_transaction(
        actor,
        date=paid_on,
        amount=from_cents(assignment.amount_cents),
        kind=Kind.INCOME,
        method=method,
        category_name=category_name,
        description=description or f"{category_name} {assignment.year}",
        chef_id=assignment.person_id if is_chef else None,
    ).unwrap()

    updated = DuesAssignment.objects.filter(pk=assignment.pk, paid=False).update(
        paid=True,
        paid_on=paid_on,
        payment_method=method,
        transaction=tx,
    )
    if updated != 1:
        raise ConflictError(f"Assignment {assignment_id} was paid by another request.")

    assignment.refresh_from_db()
    logger.info(
        "Dues assignment paid",
        extra={
            "assignment_id": assignment.id,
            "transaction_id": tx.id,
            "method": method,
            "user_id": actor.user_id,
        },
    )
    return CommandResult.ok(assignment)
