from decimal import Decimal

import django.db.models.deletion
import django.utils.timezone
import simple_history.models
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Buyer',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('buyer_name', models.CharField(help_text='Primary name', max_length=255)),
                ('display_name', models.CharField(blank=True, help_text='Name shown on invoices (defaults to buyer_name)', max_length=255)),
                ('alias', models.CharField(blank=True, max_length=100)),
                ('token_number', models.CharField(blank=True, help_text='Bidding token issued on the auction floor', max_length=50)),
                ('description', models.TextField(blank=True)),
                ('contact_number', models.CharField(blank=True, max_length=50)),
                ('place', models.CharField(blank=True, max_length=255)),
                ('outstanding', models.DecimalField(decimal_places=2, default=Decimal('0.00'), help_text='Signed receivable: positive means the buyer owes us', max_digits=14)),
            ],
            options={
                'ordering': ['buyer_name'],
            },
        ),
        migrations.CreateModel(
            name='Supplier',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('supplier_name', models.CharField(help_text='Primary name', max_length=255)),
                ('display_name', models.CharField(blank=True, help_text='Name shown on settlements (defaults to supplier_name)', max_length=255)),
                ('contact_number', models.CharField(blank=True, max_length=50)),
                ('place', models.CharField(blank=True, max_length=255)),
                ('bank_account_details', models.TextField(blank=True)),
                ('outstanding', models.DecimalField(decimal_places=2, default=Decimal('0.00'), help_text='Signed payable: negative means we owe the supplier', max_digits=14)),
            ],
            options={
                'ordering': ['supplier_name'],
            },
        ),
        migrations.CreateModel(
            name='Product',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('product_name', models.CharField(max_length=255)),
                ('display_name', models.CharField(blank=True, max_length=255)),
            ],
            options={
                'ordering': ['product_name'],
            },
        ),
        migrations.CreateModel(
            name='HistoricalBuyer',
            fields=[
                ('id', models.BigIntegerField(auto_created=True, blank=True, db_index=True, verbose_name='ID')),
                ('created_at', models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                ('updated_at', models.DateTimeField(blank=True, editable=False)),
                ('buyer_name', models.CharField(help_text='Primary name', max_length=255)),
                ('display_name', models.CharField(blank=True, help_text='Name shown on invoices (defaults to buyer_name)', max_length=255)),
                ('alias', models.CharField(blank=True, max_length=100)),
                ('token_number', models.CharField(blank=True, help_text='Bidding token issued on the auction floor', max_length=50)),
                ('description', models.TextField(blank=True)),
                ('contact_number', models.CharField(blank=True, max_length=50)),
                ('place', models.CharField(blank=True, max_length=255)),
                ('outstanding', models.DecimalField(decimal_places=2, default=Decimal('0.00'), help_text='Signed receivable: positive means the buyer owes us', max_digits=14)),
                ('history_id', models.AutoField(primary_key=True, serialize=False)),
                ('history_date', models.DateTimeField(db_index=True)),
                ('history_change_reason', models.CharField(max_length=100, null=True)),
                ('history_type', models.CharField(choices=[('+', 'Created'), ('~', 'Changed'), ('-', 'Deleted')], max_length=1)),
                ('history_user', models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'historical buyer',
                'verbose_name_plural': 'historical buyers',
                'ordering': ('-history_date', '-history_id'),
                'get_latest_by': ('history_date', 'history_id'),
            },
            bases=(simple_history.models.HistoricalChanges, models.Model),
        ),
        migrations.CreateModel(
            name='HistoricalSupplier',
            fields=[
                ('id', models.BigIntegerField(auto_created=True, blank=True, db_index=True, verbose_name='ID')),
                ('created_at', models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                ('updated_at', models.DateTimeField(blank=True, editable=False)),
                ('supplier_name', models.CharField(help_text='Primary name', max_length=255)),
                ('display_name', models.CharField(blank=True, help_text='Name shown on settlements (defaults to supplier_name)', max_length=255)),
                ('contact_number', models.CharField(blank=True, max_length=50)),
                ('place', models.CharField(blank=True, max_length=255)),
                ('bank_account_details', models.TextField(blank=True)),
                ('outstanding', models.DecimalField(decimal_places=2, default=Decimal('0.00'), help_text='Signed payable: negative means we owe the supplier', max_digits=14)),
                ('history_id', models.AutoField(primary_key=True, serialize=False)),
                ('history_date', models.DateTimeField(db_index=True)),
                ('history_change_reason', models.CharField(max_length=100, null=True)),
                ('history_type', models.CharField(choices=[('+', 'Created'), ('~', 'Changed'), ('-', 'Deleted')], max_length=1)),
                ('history_user', models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'historical supplier',
                'verbose_name_plural': 'historical suppliers',
                'ordering': ('-history_date', '-history_id'),
                'get_latest_by': ('history_date', 'history_id'),
            },
            bases=(simple_history.models.HistoricalChanges, models.Model),
        ),
    ]
