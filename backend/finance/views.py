# finance/views.py
"""
Thin views that delegate to the commands layer.

Views handle: HTTP parsing, authentication, role gating, response formatting.
Commands handle: business logic, validation, atomicity.

CRITICAL: All mutations MUST go through commands. Views should never call
.save() on models directly.
"""

from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.authz import require, resolve_actor
from . import selectors
from .commands import (
    # Account commands
    create_account,
    deactivate_account,
    # Category commands
    create_category,
    # Transaction commands
    record_transaction,
    record_expense_with_debt,
    # Debt commands
    create_debt,
    settle_debt,
)
from .money import from_cents
from .serializers import (
    AccountSerializer,
    AccountCreateSerializer,
    CategorySerializer,
    CategoryCreateSerializer,
    TransactionSerializer,
    TransactionFilterSerializer,
    TransactionCreateSerializer,
    DebtSerializer,
    DebtCreateSerializer,
    DebtSettleSerializer,
    DebtFilterSerializer,
    DebtSummarySerializer,
)


STATUS_BY_ERROR_CODE = {
    "validation_error": status.HTTP_400_BAD_REQUEST,
    "not_found": status.HTTP_404_NOT_FOUND,
    "conflict": status.HTTP_409_CONFLICT,
    "configuration_error": status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def error_response(result) -> Response:
    """Render a failed CommandResult as {"detail", "code"}."""
    return Response(
        {"detail": result.error, "code": result.error_code},
        status=STATUS_BY_ERROR_CODE.get(result.error_code, status.HTTP_400_BAD_REQUEST),
    )


# =============================================================================
# Account Views
# =============================================================================

class AccountListCreateView(APIView):
    """
    GET /api/finance/accounts/ -> active accounts with derived balance
    POST /api/finance/accounts/ -> create account
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "finance.view")

        serializer = AccountSerializer(selectors.list_accounts(), many=True)
        return Response(serializer.data)

    def post(self, request):
        actor = resolve_actor(request)
        require(actor, "finance.manage")

        input_serializer = AccountCreateSerializer(data=request.data)
        input_serializer.is_valid(raise_exception=True)

        result = create_account(actor, **input_serializer.validated_data)
        if not result.success:
            return error_response(result)

        return Response(AccountSerializer(result.data).data, status=status.HTTP_201_CREATED)


class AccountDeactivateView(APIView):
    """POST /api/finance/accounts/<id>/deactivate/"""
    permission_classes = [IsAuthenticated]

    def post(self, request, pk):
        actor = resolve_actor(request)
        require(actor, "finance.manage")

        result = deactivate_account(actor, pk)
        if not result.success:
            return error_response(result)

        return Response(AccountSerializer(result.data).data)


# =============================================================================
# Category Views
# =============================================================================

class CategoryListCreateView(APIView):
    """
    GET /api/finance/categories/ -> active categories by kind, name
    POST /api/finance/categories/ -> create category
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "finance.view")

        serializer = CategorySerializer(selectors.list_categories(), many=True)
        return Response(serializer.data)

    def post(self, request):
        actor = resolve_actor(request)
        require(actor, "finance.manage")

        input_serializer = CategoryCreateSerializer(data=request.data)
        input_serializer.is_valid(raise_exception=True)

        result = create_category(actor, **input_serializer.validated_data)
        if not result.success:
            return error_response(result)

        return Response(CategorySerializer(result.data).data, status=status.HTTP_201_CREATED)


# =============================================================================
# Transaction Views
# =============================================================================

class TransactionListCreateView(APIView):
    """
    GET /api/finance/transactions/ -> filtered, paginated ledger
    POST /api/finance/transactions/ -> record a transaction

    With ``create_debt=true`` the POST records the expense and the chef
    debt it originates in one unit and returns both.
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "finance.view")

        filters = TransactionFilterSerializer(data=request.query_params)
        filters.is_valid(raise_exception=True)

        transactions = selectors.list_transactions(**filters.validated_data)
        return Response(TransactionSerializer(transactions, many=True).data)

    def post(self, request):
        actor = resolve_actor(request)
        require(actor, "finance.write")

        input_serializer = TransactionCreateSerializer(data=request.data)
        input_serializer.is_valid(raise_exception=True)
        data = dict(input_serializer.validated_data)

        amount = from_cents(data.pop("amount"))
        create_debt_flag = data.pop("create_debt")
        reason = data.pop("reason")

        if create_debt_flag:
            data.pop("kind")
            result = record_expense_with_debt(actor, amount=amount, reason=reason, **data)
            if not result.success:
                return error_response(result)
            return Response(
                {
                    "transaction": TransactionSerializer(result.data["transaction"]).data,
                    "debt": DebtSerializer(result.data["debt"]).data,
                },
                status=status.HTTP_201_CREATED,
            )

        result = record_transaction(actor, amount=amount, **data)
        if not result.success:
            return error_response(result)

        return Response(TransactionSerializer(result.data).data, status=status.HTTP_201_CREATED)


class TransactionExportView(APIView):
    """
    GET /api/finance/transactions/export/ -> download the ledger

    Query params:
        file_format: xlsx or csv (default: xlsx)
        plus the transaction list filters (start, end, kind, method, ...)
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        from .exports import (
            create_export_response,
            prepare_transaction_export_data,
            TRANSACTION_EXPORT_COLUMNS,
            ExportFormat,
        )

        actor = resolve_actor(request)
        require(actor, "finance.view")

        export_format = request.query_params.get("file_format", ExportFormat.EXCEL)
        if export_format not in ExportFormat.CHOICES:
            return Response(
                {
                    "detail": f"Invalid format. Must be one of: {', '.join(ExportFormat.CHOICES)}",
                    "code": "validation_error",
                },
                status=status.HTTP_400_BAD_REQUEST,
            )

        filters = TransactionFilterSerializer(data=request.query_params)
        filters.is_valid(raise_exception=True)

        transactions = selectors.list_transactions(**filters.validated_data)
        data = prepare_transaction_export_data(transactions)

        return create_export_response(
            data=data,
            columns=TRANSACTION_EXPORT_COLUMNS,
            format=export_format,
            filename="transactions",
        )


# =============================================================================
# Debt Views
# =============================================================================

class DebtListCreateView(APIView):
    """
    GET /api/finance/debts/ -> debts, OPEN first
    POST /api/finance/debts/ -> create an OPEN debt (no ledger effect)
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "finance.view")

        filters = DebtFilterSerializer(data=request.query_params)
        filters.is_valid(raise_exception=True)

        debts = selectors.list_debts(**filters.validated_data)
        return Response(DebtSerializer(debts, many=True).data)

    def post(self, request):
        actor = resolve_actor(request)
        require(actor, "finance.write")

        input_serializer = DebtCreateSerializer(data=request.data)
        input_serializer.is_valid(raise_exception=True)
        data = input_serializer.validated_data

        result = create_debt(
            actor,
            chef_id=data["chef_id"],
            amount=from_cents(data["amount"]),
            reason=data["reason"],
        )
        if not result.success:
            return error_response(result)

        return Response(DebtSerializer(result.data).data, status=status.HTTP_201_CREATED)


class DebtSummaryView(APIView):
    """GET /api/finance/debts/summary/ -> per-chef open/settled totals"""
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "finance.view")

        rows = selectors.summarize_debts_by_chef()
        return Response(DebtSummarySerializer(rows, many=True).data)


class DebtSettleView(APIView):
    """
    POST /api/finance/debts/<id>/settle/

    Records the reimbursement INCOME and marks the debt SETTLED.
    409 if the debt is already settled (including by a concurrent request).
    """
    permission_classes = [IsAuthenticated]

    def post(self, request, pk):
        actor = resolve_actor(request)
        require(actor, "finance.write")

        input_serializer = DebtSettleSerializer(data=request.data)
        input_serializer.is_valid(raise_exception=True)

        result = settle_debt(actor, pk, **input_serializer.validated_data)
        if not result.success:
            return error_response(result)

        debt = result.data
        return Response(
            {
                "debt": DebtSerializer(debt).data,
                "transaction": TransactionSerializer(debt.settlement_tx).data,
            }
        )
