# apps/api/v1/urls.py
"""
URL routing for API v1.

All API endpoints are mounted under /api/v1/
"""
from django.urls import path, include
from rest_framework.routers import DefaultRouter
from rest_framework_simplejwt.views import (
    TokenObtainPairView,
    TokenRefreshView,
    TokenVerifyView,
)

from .views.audit import AuditLogViewSet
from .views.cashflow import CashFlowViewSet, BalanceDriftView
from .views.entries import EntryViewSet
from .views.health import health_check
from .views.invoicing import InvoiceViewSet, SupplierInvoiceViewSet
from .views.parties import BuyerViewSet, SupplierViewSet, ProductViewSet
from .views.reports import ReportViewSet

# Create router and register viewsets
router = DefaultRouter()

# Master data
router.register(r'buyers', BuyerViewSet, basename='buyer')
router.register(r'suppliers', SupplierViewSet, basename='supplier')
router.register(r'products', ProductViewSet, basename='product')

# Intake and auction
router.register(r'entries', EntryViewSet, basename='entry')

# Invoicing
router.register(r'invoices', InvoiceViewSet, basename='invoice')
router.register(r'supplier-invoices', SupplierInvoiceViewSet, basename='supplier-invoice')

# Ledger
router.register(r'cash-flow', CashFlowViewSet, basename='cash-flow')
router.register(r'audit-logs', AuditLogViewSet, basename='audit-log')

# Reports
router.register(r'reports', ReportViewSet, basename='report')

urlpatterns = [
    path('', include(router.urls)),

    # Authentication
    path('auth/token/', TokenObtainPairView.as_view(), name='token_obtain_pair'),
    path('auth/token/refresh/', TokenRefreshView.as_view(), name='token_refresh'),
    path('auth/token/verify/', TokenVerifyView.as_view(), name='token_verify'),

    path('reconciliation/drift/', BalanceDriftView.as_view(), name='balance-drift'),
    path('health/', health_check, name='health'),
]
