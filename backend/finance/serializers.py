# finance/serializers.py
"""
Serializers for the treasury API.

Note: These serializers are used for:
1. Input validation (shape, types, enums)
2. Output formatting

Business rules live in commands.py. Input serializers only make sure a
command receives well-formed arguments.
"""

from rest_framework import serializers

from finance.exceptions import FinanceError
from finance.models import Account, Category, Debt, Kind, Method, Transaction
from finance.money import from_cents, to_cents


class MoneyField(serializers.Field):
    """
    Decimal amount in, integer cents out.

    Accepts numbers and strings ("12.50", "12,50"); renders cents as a
    two-decimal string.
    """

    default_error_messages = {
        "positive": "Amount must be greater than zero.",
    }

    def __init__(self, positive=True, **kwargs):
        self.positive = positive
        super().__init__(**kwargs)

    def to_internal_value(self, data):
        try:
            cents = to_cents(data)
        except FinanceError as exc:
            raise serializers.ValidationError(exc.message)
        if self.positive and cents <= 0:
            self.fail("positive")
        return cents

    def to_representation(self, value):
        return str(from_cents(value))


# =============================================================================
# Account / Category Serializers
# =============================================================================

class AccountSerializer(serializers.ModelSerializer):
    balance_cents = serializers.SerializerMethodField()

    class Meta:
        model = Account
        fields = ["id", "name", "kind", "active", "balance_cents", "created_at"]
        read_only_fields = fields

    def get_balance_cents(self, obj):
        # Annotated by selectors.list_accounts, else computed fresh
        if hasattr(obj, "balance_cents"):
            return obj.balance_cents
        return obj.balance


class AccountCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=100)
    kind = serializers.ChoiceField(choices=Method.choices)


class CategorySerializer(serializers.ModelSerializer):
    class Meta:
        model = Category
        fields = ["id", "name", "kind", "active"]
        read_only_fields = fields


class CategoryCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=100)
    kind = serializers.ChoiceField(choices=Kind.choices)


# =============================================================================
# Transaction Serializers
# =============================================================================

class TransactionSerializer(serializers.ModelSerializer):
    account_name = serializers.CharField(source="account.name", read_only=True)
    category_name = serializers.CharField(source="category.name", read_only=True)
    amount = MoneyField(source="amount_cents", read_only=True)

    class Meta:
        model = Transaction
        fields = [
            "id", "date", "amount_cents", "amount", "kind", "method",
            "account", "account_name", "category", "category_name",
            "description", "chef", "linked_debt", "created_by", "created_at",
        ]
        read_only_fields = fields


class TransactionFilterSerializer(serializers.Serializer):
    """
    Query-string filters for the transaction list.

    kind/method are free text on purpose: out-of-enum values are ignored
    by the selector instead of failing the request.
    """
    start = serializers.DateField(required=False)
    end = serializers.DateField(required=False)
    kind = serializers.CharField(required=False, allow_blank=True)
    method = serializers.CharField(required=False, allow_blank=True)
    category_id = serializers.IntegerField(required=False, min_value=1)
    chef_id = serializers.IntegerField(required=False, min_value=1)
    limit = serializers.IntegerField(required=False, min_value=1)
    offset = serializers.IntegerField(required=False, min_value=0, default=0)


class TransactionCreateSerializer(serializers.Serializer):
    """
    Input for POST /transactions/.

    ``create_debt`` routes the request to record_expense_with_debt, which
    also needs ``chef_id`` and ``reason``. ``debt_reason`` is accepted as an
    alias for ``reason``.
    """
    date = serializers.DateField()
    amount = MoneyField()
    kind = serializers.ChoiceField(choices=Kind.choices)
    method = serializers.ChoiceField(choices=Method.choices)
    category_id = serializers.IntegerField(required=False, allow_null=True, min_value=1)
    category_name = serializers.CharField(required=False, allow_blank=True, default="")
    account_id = serializers.IntegerField(required=False, allow_null=True, min_value=1)
    description = serializers.CharField(required=False, allow_blank=True, default="")
    chef_id = serializers.IntegerField(required=False, allow_null=True, min_value=1)
    create_debt = serializers.BooleanField(required=False, default=False)
    reason = serializers.CharField(required=False, allow_blank=True, default="")
    debt_reason = serializers.CharField(required=False, allow_blank=True, write_only=True)

    def validate(self, attrs):
        alias = attrs.pop("debt_reason", "")
        if not attrs.get("reason", "").strip():
            attrs["reason"] = alias
        if not attrs.get("category_id") and not attrs.get("category_name", "").strip():
            raise serializers.ValidationError(
                {"category_id": "Provide category_id or category_name."}
            )
        if attrs.get("create_debt"):
            errors = {}
            if attrs.get("kind") != Kind.EXPENSE:
                errors["kind"] = "A debt can only originate from an EXPENSE."
            if not attrs.get("chef_id"):
                errors["chef_id"] = "Required when create_debt is true."
            if not attrs.get("reason", "").strip():
                errors["reason"] = "Required when create_debt is true."
            if errors:
                raise serializers.ValidationError(errors)
        return attrs


# =============================================================================
# Debt Serializers
# =============================================================================

class DebtSerializer(serializers.ModelSerializer):
    chef_email = serializers.EmailField(source="chef.email", read_only=True)
    amount = MoneyField(source="amount_cents", read_only=True)

    class Meta:
        model = Debt
        fields = [
            "id", "chef", "chef_email", "amount_cents", "amount", "reason",
            "status", "created_by", "created_at", "settled_at", "settled_by",
            "settlement_tx", "notes",
        ]
        read_only_fields = fields


class DebtCreateSerializer(serializers.Serializer):
    chef_id = serializers.IntegerField(min_value=1)
    amount = MoneyField()
    reason = serializers.CharField()


class DebtSettleSerializer(serializers.Serializer):
    date = serializers.DateField()
    method = serializers.ChoiceField(choices=Method.choices)
    description = serializers.CharField(required=False, allow_blank=True, default="")


class DebtFilterSerializer(serializers.Serializer):
    status = serializers.CharField(required=False, allow_blank=True)
    chef_id = serializers.IntegerField(required=False, min_value=1)


class DebtSummarySerializer(serializers.Serializer):
    chef_id = serializers.IntegerField()
    chef_email = serializers.EmailField(allow_null=True)
    open_cents = serializers.IntegerField()
    settled_cents = serializers.IntegerField()
    items = serializers.IntegerField()
