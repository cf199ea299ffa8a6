# apps/api/v1/views/cashflow.py
"""
Cash flow ledger endpoints and balance reconciliation.
"""
from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.views import APIView
from drf_spectacular.utils import extend_schema, extend_schema_view, OpenApiParameter

from apps.cashflow.reconciliation import BalanceReconciliationService
from apps.cashflow.services import CashFlowService
from apps.api.permissions import IsAccountsTeam, IsAdmin
from apps.api.v1.serializers.cashflow import (
    CashFlowTransactionSerializer, CashFlowWriteSerializer,
    OpeningBalanceSerializer, BalanceDriftSerializer,
)
from .base import ServiceViewMixin


@extend_schema_view(
    list=extend_schema(tags=['cash-flow'], summary='List transactions (optional start_date/end_date)'),
    retrieve=extend_schema(tags=['cash-flow'], summary='Get a transaction'),
    create=extend_schema(tags=['cash-flow'], summary='Record a transaction', request=CashFlowWriteSerializer),
    update=extend_schema(tags=['cash-flow'], summary='Edit a transaction', request=CashFlowWriteSerializer),
    destroy=extend_schema(tags=['cash-flow'], summary='Delete a transaction'),
)
class CashFlowViewSet(ServiceViewMixin, viewsets.ModelViewSet):
    """
    ViewSet for CashFlowTransaction.

    Update accepts any subset of fields.
    """
    serializer_class = CashFlowTransactionSerializer
    permission_classes = [IsAccountsTeam]
    http_method_names = ['get', 'post', 'put', 'delete', 'head', 'options']

    def get_service(self):
        return CashFlowService(self.actor)

    def get_queryset(self):
        start_date, end_date = self.date_range()
        return self.get_service().list_transactions(start_date, end_date)

    def get_object(self):
        return self.get_service().get_transaction(self.kwargs['pk'])

    def create(self, request, *args, **kwargs):
        serializer = CashFlowWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        txn = self.get_service().create_transaction(**serializer.validated_data)
        return Response(CashFlowTransactionSerializer(txn).data, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        serializer = CashFlowWriteSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        txn = self.get_service().update_transaction(kwargs['pk'], **serializer.validated_data)
        return Response(CashFlowTransactionSerializer(txn).data)

    def destroy(self, request, *args, **kwargs):
        self.get_service().delete_transaction(kwargs['pk'])
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(
        tags=['cash-flow'],
        parameters=[OpenApiParameter('date', str, required=True, description='YYYY-MM-DD')],
        responses={200: OpeningBalanceSerializer},
    )
    @action(detail=False, methods=['get'], url_path='opening-balance')
    def opening_balance(self, request):
        """Cash and bank position at the start of the given day."""
        as_of = request.query_params.get('date')
        if not as_of:
            return Response({'error': 'date parameter is required'}, status=status.HTTP_400_BAD_REQUEST)
        balance = self.get_service().get_opening_balance(as_of)
        return Response(OpeningBalanceSerializer(dict(balance, date=as_of)).data)


@extend_schema(
    tags=['reconciliation'],
    responses={200: BalanceDriftSerializer(many=True)},
    description="Buyers and suppliers whose stored outstanding differs from the ledger",
)
class BalanceDriftView(APIView):
    """Read-only drift report; repairs run through the reconcile_balances command."""
    permission_classes = [IsAdmin]

    def get(self, request):
        drifts = BalanceReconciliationService().find_drift()
        return Response(BalanceDriftSerializer([drift.as_dict() for drift in drifts], many=True).data)
