from decimal import Decimal

import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='CashFlowTransaction',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('date', models.DateField(db_index=True, default=django.utils.timezone.localdate)),
                ('type', models.CharField(choices=[('Income', 'Income'), ('Expense', 'Expense'), ('Transfer', 'Transfer')], max_length=20)),
                ('category', models.CharField(blank=True, max_length=100, null=True)),
                ('entity_id', models.CharField(blank=True, help_text='Buyer id for Income, supplier id for Expense', max_length=64, null=True)),
                ('entity_name', models.CharField(blank=True, max_length=255)),
                ('amount', models.DecimalField(decimal_places=2, max_digits=14)),
                ('discount', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=14)),
                ('method', models.CharField(choices=[('Cash', 'Cash'), ('Bank', 'Bank')], max_length=10)),
                ('to_method', models.CharField(blank=True, choices=[('Cash', 'Cash'), ('Bank', 'Bank')], help_text='Transfer destination', max_length=10, null=True)),
                ('reference', models.CharField(blank=True, max_length=255)),
                ('description', models.TextField(blank=True)),
                ('related_entry_ids', models.JSONField(blank=True, default=list)),
                ('related_invoice_ids', models.JSONField(blank=True, default=list)),
            ],
            options={
                'ordering': ['-date', '-id'],
            },
        ),
    ]
