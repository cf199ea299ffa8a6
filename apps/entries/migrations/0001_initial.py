from decimal import Decimal

import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('parties', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Entry',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('serial_number', models.CharField(help_text='Daily sequence MMDD-NNN', max_length=20)),
                ('entry_date', models.DateField(db_index=True, default=django.utils.timezone.localdate, help_text='Calendar day of intake (one entry per supplier per day)')),
                ('total_quantities', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('total_amount', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=14)),
                ('status', models.CharField(choices=[('Pending', 'Pending'), ('Draft', 'Auctioned, awaiting buyer invoice'), ('Auctioned', 'Buyer invoiced'), ('Invoiced', 'Supplier invoiced'), ('Cancelled', 'Cancelled')], default='Pending', max_length=20)),
                ('last_sub_serial_number', models.PositiveIntegerField(default=0, help_text='Highest item number handed out; frozen numbering continues from here')),
                ('version', models.PositiveIntegerField(default=1, help_text='Incremented on every change to the entry or its items')),
                ('supplier', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='entries', to='parties.supplier')),
            ],
            options={
                'verbose_name_plural': 'entries',
                'ordering': ['-created_at', '-id'],
            },
        ),
        migrations.CreateModel(
            name='EntryItem',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('sub_serial_number', models.PositiveIntegerField()),
                ('quantity', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('gross_weight', models.DecimalField(decimal_places=3, default=Decimal('0.000'), max_digits=12)),
                ('shute_weight', models.DecimalField(decimal_places=3, default=Decimal('0.000'), help_text='Tare deducted from gross weight', max_digits=12)),
                ('nett_weight', models.DecimalField(decimal_places=3, default=Decimal('0.000'), max_digits=12)),
                ('rate_per_quantity', models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                ('sub_total', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=14)),
                ('buyer', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='entry_items', to='parties.buyer')),
                ('entry', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='items', to='entries.entry')),
                ('product', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='entry_items', to='parties.product')),
            ],
            options={
                'ordering': ['entry', 'sub_serial_number', 'id'],
            },
        ),
        migrations.AddConstraint(
            model_name='entry',
            constraint=models.UniqueConstraint(fields=('supplier', 'entry_date'), name='unique_entry_per_supplier_per_day'),
        ),
        migrations.AddConstraint(
            model_name='entry',
            constraint=models.UniqueConstraint(fields=('entry_date', 'serial_number'), name='unique_entry_serial_per_day'),
        ),
    ]
