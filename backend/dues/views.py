# dues/views.py
"""
Thin views for membership dues. Mutations go through dues/commands.py.
"""

from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.authz import require, resolve_actor
from finance.money import from_cents
from finance.serializers import TransactionSerializer
from finance.views import error_response
from .commands import bulk_assign, pay_assignment
from .selectors import list_assignments
from .serializers import (
    BulkAssignSerializer,
    DuesAssignmentFilterSerializer,
    DuesAssignmentSerializer,
    PayAssignmentSerializer,
)


class DuesAssignmentListView(APIView):
    """GET /api/dues/assignments/?year=&person_type=&type=&paid="""
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "dues.view")

        filters = DuesAssignmentFilterSerializer(data=request.query_params)
        filters.is_valid(raise_exception=True)
        data = filters.validated_data

        assignments = list_assignments(
            year=data.get("year"),
            person_type=data.get("person_type"),
            dues_type=data.get("type"),
            paid=data.get("paid"),
        )
        return Response(DuesAssignmentSerializer(assignments, many=True).data)


class BulkAssignView(APIView):
    """
    POST /api/dues/assignments/bulk/

    Creates missing assignments and re-prices existing ones in one unit.
    Returns {"count", "created", "updated"}.
    """
    permission_classes = [IsAuthenticated]

    def post(self, request):
        actor = resolve_actor(request)
        require(actor, "dues.assign")

        input_serializer = BulkAssignSerializer(data=request.data)
        input_serializer.is_valid(raise_exception=True)
        data = input_serializer.validated_data

        result = bulk_assign(
            actor,
            person_type=data["person_type"],
            person_ids=data["person_ids"],
            dues_type=data["type"],
            scope=data["scope"],
            year=data["year"],
            amount=from_cents(data["amount"]),
        )
        if not result.success:
            return error_response(result)

        return Response(result.data)


class PayAssignmentView(APIView):
    """
    PATCH|POST /api/dues/assignments/<id>/pay/

    Records the INCOME transaction and marks the assignment paid.
    409 if it is already paid.
    """
    permission_classes = [IsAuthenticated]

    def patch(self, request, pk):
        actor = resolve_actor(request)
        require(actor, "dues.pay")

        input_serializer = PayAssignmentSerializer(data=request.data)
        input_serializer.is_valid(raise_exception=True)

        result = pay_assignment(actor, pk, **input_serializer.validated_data)
        if not result.success:
            return error_response(result)

        assignment = result.data
        return Response(
            {
                "assignment": DuesAssignmentSerializer(assignment).data,
                "transaction": TransactionSerializer(assignment.transaction).data,
                "transaction_id": assignment.transaction_id,
            }
        )

    def post(self, request, pk):
        return self.patch(request, pk)
