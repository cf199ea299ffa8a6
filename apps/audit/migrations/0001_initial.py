import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='AuditLog',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('actor_id', models.CharField(help_text="Identifier of the user (or 'system') who acted", max_length=64)),
                ('actor_name', models.CharField(help_text='Display name snapshot at the time of the action', max_length=255)),
                ('action', models.CharField(choices=[('Create', 'Create'), ('Update', 'Update'), ('Delete', 'Delete')], max_length=20)),
                ('feature', models.CharField(db_index=True, help_text='Feature area, e.g. Entries, BuyerInvoices, CashFlow', max_length=50)),
                ('description', models.TextField()),
                ('timestamp', models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
            ],
            options={
                'ordering': ['-timestamp', '-id'],
            },
        ),
    ]
