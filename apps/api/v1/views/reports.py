# apps/api/v1/views/reports.py
"""
Party statements and balance reports.

Date query params use YYYY-MM-DD:
- ledger: ?party_type=buyer|supplier&party_id=N[&start_date=&end_date=]
- buyer-balances, supplier-balances, invoice-aging: [?as_of_date=]
"""
from datetime import datetime

from django.utils import timezone
from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, OpenApiParameter

from apps.api.permissions import IsAccountsTeam
from apps.reporting.services import PARTY_TYPES, PartyReportService

DATE_ERROR = {'error': 'Invalid date format. Use YYYY-MM-DD.'}

AS_OF = OpenApiParameter('as_of_date', str, description='YYYY-MM-DD, defaults to today')


def _parse(value):
    return datetime.strptime(value, '%Y-%m-%d').date() if value else None


class ReportViewSet(viewsets.ViewSet):
    """Read-only reports over buyer and supplier balances."""
    permission_classes = [IsAccountsTeam]

    def parse_dates(self, request):
        """Parse optional start_date and end_date; either may be left open."""
        try:
            start_date = _parse(request.query_params.get('start_date'))
            end_date = _parse(request.query_params.get('end_date'))
        except ValueError:
            return None, None, Response(DATE_ERROR, status=status.HTTP_400_BAD_REQUEST)
        return start_date, end_date, None

    def parse_as_of(self, request):
        try:
            as_of_date = _parse(request.query_params.get('as_of_date')) or timezone.localdate()
        except ValueError:
            return None, Response(DATE_ERROR, status=status.HTTP_400_BAD_REQUEST)
        return as_of_date, None

    @extend_schema(
        tags=['reports'],
        summary='Party ledger with running balance',
        parameters=[
            OpenApiParameter('party_type', str, required=True, enum=list(PARTY_TYPES)),
            OpenApiParameter('party_id', int, required=True),
            OpenApiParameter('start_date', str, description='YYYY-MM-DD'),
            OpenApiParameter('end_date', str, description='YYYY-MM-DD'),
        ],
    )
    @action(detail=False, methods=['get'])
    def ledger(self, request):
        party_id = request.query_params.get('party_id')
        if not party_id:
            return Response({'error': 'party_id parameter is required'}, status=status.HTTP_400_BAD_REQUEST)
        start_date, end_date, err = self.parse_dates(request)
        if err:
            return err

        report = PartyReportService.get_ledger(
            request.query_params.get('party_type', 'buyer'), party_id, start_date, end_date,
        )
        return Response(dict(
            report,
            start_date=str(start_date) if start_date else None,
            end_date=str(end_date) if end_date else None,
        ))

    @extend_schema(tags=['reports'], summary='Buyer balance sheet', parameters=[AS_OF])
    @action(detail=False, methods=['get'], url_path='buyer-balances')
    def buyer_balances(self, request):
        as_of_date, err = self.parse_as_of(request)
        if err:
            return err
        return Response(PartyReportService.get_buyer_balance_sheet(as_of_date))

    @extend_schema(tags=['reports'], summary='Supplier balance sheet', parameters=[AS_OF])
    @action(detail=False, methods=['get'], url_path='supplier-balances')
    def supplier_balances(self, request):
        as_of_date, err = self.parse_as_of(request)
        if err:
            return err
        return Response(PartyReportService.get_supplier_balance_sheet(as_of_date))

    @extend_schema(tags=['reports'], summary='Buyer invoice aging', parameters=[AS_OF])
    @action(detail=False, methods=['get'], url_path='invoice-aging')
    def invoice_aging(self, request):
        as_of_date, err = self.parse_as_of(request)
        if err:
            return err
        return Response(PartyReportService.get_invoice_aging(as_of_date))
