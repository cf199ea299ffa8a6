import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ('entries', '0001_initial'),
        ('invoicing', '0001_initial'),
    ]

    operations = [
        migrations.AddField(
            model_name='entryitem',
            name='invoice',
            field=models.ForeignKey(blank=True, help_text='Buyer invoice this item is billed on', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='entry_items', to='invoicing.invoice'),
        ),
        migrations.AddField(
            model_name='entryitem',
            name='supplier_invoice',
            field=models.ForeignKey(blank=True, help_text='Supplier invoice this item is settled on', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='entry_items', to='invoicing.supplierinvoice'),
        ),
    ]
