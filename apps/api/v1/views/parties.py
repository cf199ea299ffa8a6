# apps/api/v1/views/parties.py
"""
ViewSets for master data: Buyer, Supplier, Product.

Deleting a buyer or supplier goes through PartyService, which refuses
while a balance is outstanding.
"""
from django.db.models import ProtectedError
from rest_framework import viewsets, filters, status
from rest_framework.response import Response
from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import extend_schema, extend_schema_view

from apps.parties.models import Buyer, Supplier, Product
from apps.parties.services import PartyService
from apps.api.permissions import ReadOnlyOrAccounts
from apps.api.v1.serializers.parties import BuyerSerializer, SupplierSerializer, ProductSerializer
from shared.exceptions import ConflictError
from .base import ServiceViewMixin


@extend_schema_view(
    list=extend_schema(tags=['parties'], summary='List buyers'),
    retrieve=extend_schema(tags=['parties'], summary='Get buyer details'),
    create=extend_schema(tags=['parties'], summary='Create a buyer'),
    update=extend_schema(tags=['parties'], summary='Update a buyer'),
    partial_update=extend_schema(tags=['parties'], summary='Partially update a buyer'),
    destroy=extend_schema(tags=['parties'], summary='Delete a settled buyer'),
)
class BuyerViewSet(ServiceViewMixin, viewsets.ModelViewSet):
    """ViewSet for Buyer model."""
    serializer_class = BuyerSerializer
    permission_classes = [ReadOnlyOrAccounts]
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    search_fields = ['buyer_name', 'display_name', 'alias', 'token_number']
    ordering_fields = ['buyer_name', 'outstanding', 'created_at']
    ordering = ['buyer_name']

    def get_queryset(self):
        return Buyer.objects.all()

    def destroy(self, request, *args, **kwargs):
        PartyService(self.actor).delete_buyer(kwargs['pk'])
        return Response(status=status.HTTP_204_NO_CONTENT)


@extend_schema_view(
    list=extend_schema(tags=['parties'], summary='List suppliers'),
    retrieve=extend_schema(tags=['parties'], summary='Get supplier details'),
    create=extend_schema(tags=['parties'], summary='Create a supplier'),
    update=extend_schema(tags=['parties'], summary='Update a supplier'),
    partial_update=extend_schema(tags=['parties'], summary='Partially update a supplier'),
    destroy=extend_schema(tags=['parties'], summary='Delete a settled supplier'),
)
class SupplierViewSet(ServiceViewMixin, viewsets.ModelViewSet):
    """ViewSet for Supplier model."""
    serializer_class = SupplierSerializer
    permission_classes = [ReadOnlyOrAccounts]
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    search_fields = ['supplier_name', 'display_name', 'place']
    ordering_fields = ['supplier_name', 'outstanding', 'created_at']
    ordering = ['supplier_name']

    def get_queryset(self):
        return Supplier.objects.all()

    def destroy(self, request, *args, **kwargs):
        PartyService(self.actor).delete_supplier(kwargs['pk'])
        return Response(status=status.HTTP_204_NO_CONTENT)


@extend_schema_view(
    list=extend_schema(tags=['parties'], summary='List products'),
    retrieve=extend_schema(tags=['parties'], summary='Get product details'),
)
class ProductViewSet(viewsets.ModelViewSet):
    """ViewSet for Product model."""
    serializer_class = ProductSerializer
    permission_classes = [ReadOnlyOrAccounts]
    filter_backends = [filters.SearchFilter, filters.OrderingFilter]
    search_fields = ['product_name', 'display_name']
    ordering = ['product_name']

    def get_queryset(self):
        return Product.objects.all()

    def perform_destroy(self, instance):
        try:
            instance.delete()
        except ProtectedError:
            raise ConflictError(f"Product '{instance}' is used by entries or invoices")
