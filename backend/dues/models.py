# dues/models.py
"""
Membership dues.

A DuesAssignment says that a person (chef or child) owes a cotisation or
an assurance for a given year. It is created or re-priced in bulk and
paid exactly once; payment records an INCOME transaction in the ledger.
"""

from django.db import models
from django.db.models import Q

from finance.models import Method, Transaction


class DuesAssignment(models.Model):

    class PersonType(models.TextChoices):
        CHEF = "CHEF", "Chef"
        CHILD = "CHILD", "Child"

    class Type(models.TextChoices):
        ASSURANCE = "ASSURANCE", "Assurance"
        COTISATION = "COTISATION", "Cotisation"

    class Scope(models.TextChoices):
        UNIT = "UNIT", "Unit"
        SECTION = "SECTION", "Section"

    person_type = models.CharField(max_length=10, choices=PersonType.choices)
    # User id for CHEF, child id for CHILD
    person_id = models.PositiveIntegerField()
    type = models.CharField(max_length=12, choices=Type.choices)
    scope = models.CharField(max_length=10, choices=Scope.choices)
    year = models.PositiveSmallIntegerField()
    amount_cents = models.BigIntegerField()
    paid = models.BooleanField(default=False)
    paid_on = models.DateField(null=True, blank=True)
    payment_method = models.CharField(max_length=10, choices=Method.choices, blank=True, default="")
    transaction = models.OneToOneField(
        Transaction,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="dues_assignment",
    )

    class Meta:
        db_table = "dues_assignments"
        ordering = ["type", "person_type", "person_id"]
        constraints = [
            models.UniqueConstraint(
                fields=["person_type", "person_id", "type", "year"],
                name="dues_assignment_unique_person_type_year",
            ),
            models.CheckConstraint(
                condition=Q(amount_cents__gt=0),
                name="dues_assignment_amount_positive",
            ),
            models.CheckConstraint(
                condition=(
                    Q(paid=True, transaction__isnull=False)
                    | Q(paid=False, transaction__isnull=True)
                ),
                name="dues_assignment_paid_has_transaction",
            ),
        ]
        indexes = [
            models.Index(fields=["year", "type"], name="dues_year_type_idx"),
        ]

    def __str__(self):
        return f"{self.type} {self.year} {self.person_type}#{self.person_id}"
