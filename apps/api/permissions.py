# apps/api/permissions.py
"""
Role-based permissions for the REST API.

Roles are Django groups seeded by users/migrations/0002:
- Admin: everything
- Auction: supplier intake and the auction floor
- Accounts: invoicing, cash flow and party balances

Superusers and members of Admin pass every group check.
"""
from rest_framework import permissions


class IsInGroup(permissions.BasePermission):
    """Base class for group-based permissions."""
    group_name = None
    # Let any authenticated user read
    read_open = False

    def has_permission(self, request, view):
        if not request.user or not request.user.is_authenticated:
            return False
        if request.user.is_superuser:
            return True
        if self.read_open and request.method in permissions.SAFE_METHODS:
            return True
        return request.user.groups.filter(name__in=[self.group_name, 'Admin']).exists()


class IsAdmin(IsInGroup):
    """User must be in Admin group or superuser."""
    group_name = 'Admin'


class IsAuctionTeam(IsInGroup):
    """Intake and auction writes; anyone signed in may read entries."""
    group_name = 'Auction'
    read_open = True


class IsAccountsTeam(IsInGroup):
    """User must be in Accounts or Admin group (invoices, cash flow)."""
    group_name = 'Accounts'


class ReadOnlyOrAccounts(IsInGroup):
    """Master data: read for everyone, write for Accounts."""
    group_name = 'Accounts'
    read_open = True
