import uuid

import django.core.validators
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Member',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('public_id', models.UUIDField(db_index=True, default=uuid.uuid4, editable=False, unique=True, verbose_name='Public ID')),
                ('created_at', models.DateTimeField(auto_now_add=True, verbose_name='Created At')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='Updated At')),
                ('is_active', models.BooleanField(default=True, verbose_name='Active')),
                ('mahal_id', models.CharField(db_index=True, help_text='Household identifier, e.g. 1/2.', max_length=20, validators=[django.core.validators.RegexValidator(message='Mahal ID must be in format: number/number (e.g., 1/2).', regex='^\\d+/\\d+$')], verbose_name='Mahal ID')),
                ('name', models.CharField(max_length=200, verbose_name='Full Name')),
                ('relation', models.CharField(choices=[('head', 'The Head of the Household'), ('spouse', 'Spouse'), ('son', 'Son'), ('daughter', 'Daughter'), ('father', 'Father'), ('mother', 'Mother'), ('other', 'Other')], default='other', max_length=20, verbose_name='Relation')),
                ('address', models.TextField(blank=True, verbose_name='Address')),
                ('mobile', models.CharField(blank=True, max_length=20, verbose_name='Mobile Number')),
            ],
            options={
                'verbose_name': 'Member',
                'verbose_name_plural': 'Members',
                'ordering': ['mahal_id', 'id'],
                'indexes': [models.Index(fields=['mahal_id', 'is_active'], name='member_household_idx')],
            },
        ),
    ]
