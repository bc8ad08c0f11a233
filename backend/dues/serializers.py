# dues/serializers.py
"""Serializers for the dues API (input validation and output formatting)."""

from rest_framework import serializers

from dues.commands import MAX_PERSON_ID
from dues.models import DuesAssignment
from finance.models import Method
from finance.serializers import MoneyField


class DuesAssignmentSerializer(serializers.ModelSerializer):
    amount = MoneyField(source="amount_cents", read_only=True)

    class Meta:
        model = DuesAssignment
        fields = [
            "id", "person_type", "person_id", "type", "scope", "year",
            "amount_cents", "amount", "paid", "paid_on", "payment_method",
            "transaction",
        ]
        read_only_fields = fields


class DuesAssignmentFilterSerializer(serializers.Serializer):
    year = serializers.IntegerField(required=False)
    person_type = serializers.CharField(required=False, allow_blank=True)
    type = serializers.CharField(required=False, allow_blank=True)
    paid = serializers.BooleanField(required=False, allow_null=True, default=None)


class BulkAssignSerializer(serializers.Serializer):
    person_type = serializers.ChoiceField(choices=DuesAssignment.PersonType.choices)
    person_ids = serializers.ListField(
        child=serializers.IntegerField(min_value=1, max_value=MAX_PERSON_ID),
        allow_empty=False,
    )
    type = serializers.ChoiceField(choices=DuesAssignment.Type.choices)
    scope = serializers.ChoiceField(choices=DuesAssignment.Scope.choices)
    year = serializers.IntegerField()
    amount = MoneyField()


class PayAssignmentSerializer(serializers.Serializer):
    method = serializers.ChoiceField(choices=Method.choices)
    date = serializers.DateField()
    description = serializers.CharField(required=False, allow_blank=True, default="")
