# users/migrations/0002_create_rbac_groups.py
"""Create initial RBAC groups with permissions."""
from django.db import migrations


def create_groups(apps, schema_editor):
    Group = apps.get_model('auth', 'Group')
    Permission = apps.get_model('auth', 'Permission')

    # Define groups and their permission codenames
    groups_config = {
        'Admin': None,  # Gets all permissions
        'Auction': [
            # Intake and auction floor
            'view_entry', 'add_entry', 'change_entry', 'delete_entry',
            'view_entryitem', 'add_entryitem', 'change_entryitem', 'delete_entryitem',
            # Master data (view only)
            'view_buyer', 'view_supplier', 'view_product',
        ],
        'Accounts': [
            # Buyer invoices
            'view_invoice', 'add_invoice', 'change_invoice', 'delete_invoice',
            # Supplier invoices
            'view_supplierinvoice', 'add_supplierinvoice', 'change_supplierinvoice', 'delete_supplierinvoice',
            # Cash flow
            'view_cashflowtransaction', 'add_cashflowtransaction',
            'change_cashflowtransaction', 'delete_cashflowtransaction',
            # Parties
            'view_buyer', 'add_buyer', 'change_buyer',
            'view_supplier', 'add_supplier', 'change_supplier',
            # Entries (view only)
            'view_entry',
        ],
    }

    for group_name, codenames in groups_config.items():
        group, _ = Group.objects.get_or_create(name=group_name)

        if codenames is None:
            # Admin gets all permissions
            group.permissions.set(Permission.objects.all())
        else:
            perms = Permission.objects.filter(codename__in=codenames)
            group.permissions.set(perms)


def remove_groups(apps, schema_editor):
    Group = apps.get_model('auth', 'Group')
    Group.objects.filter(name__in=['Admin', 'Auction', 'Accounts']).delete()


class Migration(migrations.Migration):
    dependencies = [
        ('users', '0001_initial'),
    ]

    operations = [
        migrations.RunPython(create_groups, remove_groups),
    ]
