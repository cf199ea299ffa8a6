# apps/api/v1/views/entries.py
"""
ViewSet for supplier entries and the auction floor.

Writes go through EntryService and AuctionSession; the viewset only shapes
requests and responses.
"""
from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, extend_schema_view

from apps.auction.services import AuctionSession
from apps.entries.services import EntryService
from apps.api.permissions import IsAuctionTeam
from apps.api.v1.serializers.entries import (
    EntrySerializer, EntryCreateSerializer, EntryUpdateSerializer,
    AuctionSessionSerializer, AuctionItemSerializer,
    AuctionSaveItemSerializer, AuctionRemoveItemSerializer,
)
from .base import ServiceViewMixin


@extend_schema_view(
    list=extend_schema(tags=['entries'], summary='List entries (optional start_date/end_date)'),
    retrieve=extend_schema(tags=['entries'], summary='Get entry with items'),
    create=extend_schema(tags=['entries'], summary='Record a supplier delivery', request=EntryCreateSerializer),
    update=extend_schema(tags=['entries'], summary='Rewrite entry items', request=EntryUpdateSerializer),
    destroy=extend_schema(tags=['entries'], summary='Delete an unbilled entry'),
)
class EntryViewSet(ServiceViewMixin, viewsets.ModelViewSet):
    """
    ViewSet for Entry.

    Supports:
    - List/retrieve entries with items
    - Create (one per supplier per day), update with version check, delete
    - Auction floor: view, save one item, remove one item
    """
    serializer_class = EntrySerializer
    permission_classes = [IsAuctionTeam]
    http_method_names = ['get', 'post', 'put', 'delete', 'head', 'options']

    def get_queryset(self):
        start_date, end_date = self.date_range()
        return EntryService(self.actor).list_entries(start_date, end_date)

    def get_object(self):
        return EntryService(self.actor).get_entry(self.kwargs['pk'])

    def create(self, request, *args, **kwargs):
        serializer = EntryCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        entry = EntryService(self.actor).create_entry(
            supplier_id=data['supplier_id'],
            items=data['items'],
            entry_date=data.get('entry_date'),
        )
        return Response(EntrySerializer(entry).data, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        serializer = EntryUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        entry = EntryService(self.actor).update_entry(
            kwargs['pk'],
            serializer.validated_data['items'],
            expected_version=serializer.validated_data.get('expected_version'),
        )
        return Response(EntrySerializer(entry).data)

    def destroy(self, request, *args, **kwargs):
        EntryService(self.actor).delete_entry(kwargs['pk'])
        return Response(status=status.HTTP_204_NO_CONTENT)

    # ===== AUCTION =====

    @extend_schema(tags=['auction'], responses={200: AuctionSessionSerializer})
    @action(detail=True, methods=['get'])
    def auction(self, request, pk=None):
        """Current auction view of the entry, including its version."""
        session = AuctionSession.load(pk, actor=self.actor)
        return Response(AuctionSessionSerializer(session).data)

    @extend_schema(
        tags=['auction'],
        request=AuctionSaveItemSerializer,
        responses={200: AuctionSessionSerializer},
        description="Apply field changes to one item and save it. Fails with 409 if the entry "
                    "moved past expected_version.",
    )
    @action(detail=True, methods=['post'], url_path='auction/save-item')
    def save_item(self, request, pk=None):
        serializer = AuctionSaveItemSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        session = AuctionSession.load(pk, actor=self.actor, expected_version=data['expected_version'])
        item = session.get_item(data['item_id']) if data.get('item_id') else session.add_item()
        for field, value in data['changes'].items():
            session.update_item(item.id, field, value)
        saved = session.save_item(item.id)

        payload = AuctionSessionSerializer(session).data
        payload['saved_item'] = AuctionItemSerializer(saved).data
        return Response(payload)

    @extend_schema(tags=['auction'], request=AuctionRemoveItemSerializer, responses={200: AuctionSessionSerializer})
    @action(detail=True, methods=['post'], url_path='auction/remove-item')
    def remove_item(self, request, pk=None):
        serializer = AuctionRemoveItemSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        session = AuctionSession.load(pk, actor=self.actor, expected_version=data['expected_version'])
        session.remove_item(data['item_id'])
        return Response(AuctionSessionSerializer(session).data)
