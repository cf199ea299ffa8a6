# apps/entries/migrations/0003_entryitem_has_weight.py
"""Store the weight toggle on entry items; rows with a gross weight were priced by weight."""
from django.db import migrations, models


def mark_weighed_items(apps, schema_editor):
    EntryItem = apps.get_model('entries', 'EntryItem')
    EntryItem.objects.filter(gross_weight__gt=0).update(has_weight=True)


class Migration(migrations.Migration):

    dependencies = [
        ('entries', '0002_item_invoice_links'),
    ]

    operations = [
        migrations.AddField(
            model_name='entryitem',
            name='has_weight',
            field=models.BooleanField(default=False, help_text='Priced on nett weight instead of quantity'),
        ),
        migrations.RunPython(mark_weighed_items, migrations.RunPython.noop),
    ]
