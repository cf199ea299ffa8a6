# apps/api/v1/views/invoicing.py
"""
ViewSets for buyer invoices and supplier settlements.
"""
from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, extend_schema_view

from apps.invoicing.services import BuyerInvoiceService, SupplierInvoiceService
from apps.api.permissions import IsAccountsTeam
from apps.api.v1.serializers.entries import EntryItemSerializer
from apps.api.v1.serializers.invoicing import (
    InvoiceListSerializer, InvoiceDetailSerializer, InvoiceWriteSerializer,
    SupplierInvoiceSerializer, SupplierInvoiceWriteSerializer,
)
from .base import ServiceViewMixin


@extend_schema_view(
    list=extend_schema(tags=['invoicing'], summary='List buyer invoices (optional start_date/end_date)'),
    retrieve=extend_schema(tags=['invoicing'], summary='Get buyer invoice details'),
    create=extend_schema(tags=['invoicing'], summary='Bill a buyer', request=InvoiceWriteSerializer),
    update=extend_schema(tags=['invoicing'], summary='Rewrite a buyer invoice', request=InvoiceWriteSerializer),
    destroy=extend_schema(tags=['invoicing'], summary='Delete a buyer invoice'),
)
class InvoiceViewSet(ServiceViewMixin, viewsets.ModelViewSet):
    """
    ViewSet for buyer invoices.

    Every write reverts and reapplies the buyer balance and item links
    inside BuyerInvoiceService.
    """
    permission_classes = [IsAccountsTeam]
    http_method_names = ['get', 'post', 'put', 'delete', 'head', 'options']

    def get_service(self):
        return BuyerInvoiceService(self.actor)

    def get_queryset(self):
        start_date, end_date = self.date_range()
        return self.get_service().list_invoices(start_date, end_date)

    def get_object(self):
        return self.get_service().get_invoice(self.kwargs['pk'])

    def get_serializer_class(self):
        if self.action == 'list':
            return InvoiceListSerializer
        return InvoiceDetailSerializer

    def create(self, request, *args, **kwargs):
        serializer = InvoiceWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        invoice = self.get_service().create_invoice(**serializer.validated_data)
        return Response(InvoiceDetailSerializer(invoice).data, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        serializer = InvoiceWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = dict(serializer.validated_data)
        data.pop('payments', None)
        invoice = self.get_service().update_invoice(kwargs['pk'], **data)
        return Response(InvoiceDetailSerializer(invoice).data)

    def destroy(self, request, *args, **kwargs):
        self.get_service().delete_invoice(kwargs['pk'])
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(tags=['invoicing'], responses={200: EntryItemSerializer(many=True)})
    @action(detail=False, methods=['get'], url_path=r'uninvoiced-items/(?P<buyer_id>\d+)')
    def uninvoiced_items(self, request, buyer_id=None):
        """Auctioned items the buyer has not been billed for yet."""
        items = self.get_service().get_uninvoiced_items_for_buyer(buyer_id)
        return Response(EntryItemSerializer(items, many=True).data)

    @extend_schema(tags=['invoicing'], description="Totals over every invoice issued to the buyer")
    @action(detail=False, methods=['get'], url_path=r'buyers/(?P<buyer_id>\d+)/stats')
    def buyer_stats(self, request, buyer_id=None):
        return Response(self.get_service().get_buyer_stats(buyer_id))


@extend_schema_view(
    list=extend_schema(tags=['supplier-invoicing'], summary='List supplier invoices'),
    retrieve=extend_schema(tags=['supplier-invoicing'], summary='Get supplier invoice details'),
    create=extend_schema(
        tags=['supplier-invoicing'], summary='Settle entries for a supplier', request=SupplierInvoiceWriteSerializer,
    ),
    update=extend_schema(
        tags=['supplier-invoicing'], summary='Rewrite a settlement', request=SupplierInvoiceWriteSerializer,
    ),
    destroy=extend_schema(tags=['supplier-invoicing'], summary='Delete a settlement'),
)
class SupplierInvoiceViewSet(ServiceViewMixin, viewsets.ModelViewSet):
    """ViewSet for supplier settlements."""
    serializer_class = SupplierInvoiceSerializer
    permission_classes = [IsAccountsTeam]
    http_method_names = ['get', 'post', 'put', 'delete', 'head', 'options']

    def get_service(self):
        return SupplierInvoiceService(self.actor)

    def get_queryset(self):
        start_date, end_date = self.date_range()
        return self.get_service().list_invoices(start_date, end_date)

    def get_object(self):
        return self.get_service().get_invoice(self.kwargs['pk'])

    def create(self, request, *args, **kwargs):
        serializer = SupplierInvoiceWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = dict(serializer.validated_data)
        data.pop('status', None)
        invoice = self.get_service().create_invoice(**data)
        return Response(SupplierInvoiceSerializer(invoice).data, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        serializer = SupplierInvoiceWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        invoice = self.get_service().update_invoice(kwargs['pk'], **serializer.validated_data)
        return Response(SupplierInvoiceSerializer(invoice).data)

    def destroy(self, request, *args, **kwargs):
        self.get_service().delete_invoice(kwargs['pk'])
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(tags=['supplier-invoicing'], description="Settlement totals and top suppliers")
    @action(detail=False, methods=['get'])
    def analytics(self, request):
        return Response(self.get_service().get_analytics())
