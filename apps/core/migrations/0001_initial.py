import uuid

import django.core.validators
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Counter',
            fields=[
                ('public_id', models.UUIDField(db_index=True, default=uuid.uuid4, editable=False, unique=True, verbose_name='Public ID')),
                ('created_at', models.DateTimeField(auto_now_add=True, verbose_name='Created At')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='Updated At')),
                ('name', models.CharField(max_length=50, primary_key=True, serialize=False, verbose_name='Sequence Name')),
                ('sequence_value', models.PositiveBigIntegerField(default=0, validators=[django.core.validators.MinValueValidator(0)], verbose_name='Current Value')),
                ('prefix', models.CharField(blank=True, max_length=10, verbose_name='Prefix')),
                ('description', models.CharField(blank=True, max_length=255, verbose_name='Description')),
                ('reset_frequency', models.CharField(choices=[('never', 'Never'), ('daily', 'Daily'), ('monthly', 'Monthly'), ('yearly', 'Yearly')], default='never', max_length=10, verbose_name='Reset Frequency')),
                ('last_reset_at', models.DateTimeField(blank=True, null=True, verbose_name='Last Reset At')),
            ],
            options={
                'verbose_name': 'Counter',
                'verbose_name_plural': 'Counters',
                'db_table': 'counters',
                'ordering': ['name'],
            },
        ),
    ]
