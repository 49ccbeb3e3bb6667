import decimal
import uuid

import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Bill',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('public_id', models.UUIDField(db_index=True, default=uuid.uuid4, editable=False, unique=True, verbose_name='Public ID')),
                ('created_at', models.DateTimeField(auto_now_add=True, verbose_name='Created At')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='Updated At')),
                ('receipt_no', models.PositiveBigIntegerField(editable=False, help_text='Sequential receipt number. Assigned once, never reused.', unique=True, verbose_name='Receipt Number')),
                ('bill_date', models.DateTimeField(default=django.utils.timezone.now, verbose_name='Bill Date')),
                ('mahal_id', models.CharField(help_text='Paying household, e.g. 5/10.', max_length=20, validators=[django.core.validators.RegexValidator(message='Mahal ID must be in format: number/number (e.g., 1/2).', regex='^\\d+/\\d+$')], verbose_name='Mahal ID')),
                ('member_name', models.CharField(max_length=200, verbose_name='Member Name')),
                ('member_address', models.TextField(blank=True, help_text='Name, address, Mahal ID and phone as printed on the receipt.', verbose_name='Member Address')),
                ('amount', models.DecimalField(decimal_places=2, max_digits=12, validators=[django.core.validators.MinValueValidator(decimal.Decimal('0.01'))], verbose_name='Amount')),
                ('amount_in_words', models.CharField(blank=True, max_length=500, verbose_name='Amount in Words')),
                ('account_type', models.CharField(choices=[('Dua_Friday', 'Dua Friday'), ('Donation', 'Donation'), ('Sunnath Fee', 'Sunnath Fee'), ('Marriage Fee', 'Marriage Fee'), ('Product Turnover', 'Product Turnover'), ('Rental_Basis', 'Rental Basis'), ('Devotional Dedication', 'Devotional Dedication'), ('Dead Fee', 'Dead Fee'), ('New Membership', 'New Membership'), ('Certificate Fee', 'Certificate Fee'), ('Eid ul Adha', 'Eid ul Adha'), ('Eid al-Fitr', 'Eid al-Fitr'), ('Madrassa', 'Madrassa'), ('Sadhu', 'Sadhu'), ('Land', 'Land'), ('Nercha', 'Nercha')], max_length=30, verbose_name='Account Type')),
                ('kind', models.CharField(choices=[('general', 'General'), ('land', 'Land'), ('madrassa', 'Madrassa'), ('nercha', 'Nercha'), ('sadhu', 'Sadhu')], default='general', max_length=10, verbose_name='Account Kind')),
                ('sub_category', models.CharField(blank=True, max_length=50, verbose_name='Sub-category')),
                ('payment_method', models.CharField(choices=[('Cash', 'Cash'), ('UPI', 'UPI'), ('Card', 'Card'), ('Bank Transfer', 'Bank Transfer'), ('Cheque', 'Cheque')], default='Cash', max_length=20, verbose_name='Payment Method')),
                ('notes', models.TextField(blank=True, validators=[django.core.validators.MaxLengthValidator(500)], verbose_name='Notes')),
                ('financial_year', models.CharField(help_text='April to March, e.g. 2024-25.', max_length=7, verbose_name='Financial Year')),
                ('status', models.CharField(choices=[('active', 'Active'), ('voided', 'Voided'), ('deleted', 'Deleted')], default='active', max_length=10, verbose_name='Status')),
                ('voided_at', models.DateTimeField(blank=True, null=True, verbose_name='Voided At')),
                ('void_reason', models.TextField(blank=True, verbose_name='Void Reason')),
                ('deleted_at', models.DateTimeField(blank=True, null=True, verbose_name='Deleted At')),
                ('delete_reason', models.TextField(blank=True, verbose_name='Delete Reason')),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='bill_created', to=settings.AUTH_USER_MODEL, verbose_name='Recorded By')),
                ('updated_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='bill_updated', to=settings.AUTH_USER_MODEL, verbose_name='Last Changed By')),
                ('voided_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='voided_bills', to=settings.AUTH_USER_MODEL, verbose_name='Voided By')),
                ('deleted_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='deleted_bills', to=settings.AUTH_USER_MODEL, verbose_name='Deleted By')),
            ],
            options={
                'verbose_name': 'Bill',
                'verbose_name_plural': 'Bills',
                'ordering': ['-bill_date', '-id'],
                'indexes': [
                    models.Index(fields=['mahal_id', '-bill_date'], name='bill_household_date_idx'),
                    models.Index(fields=['account_type', '-bill_date'], name='bill_account_date_idx'),
                    models.Index(fields=['financial_year', 'account_type'], name='bill_fy_account_idx'),
                    models.Index(fields=['status'], name='bill_status_idx'),
                    models.Index(fields=['bill_date'], name='bill_date_idx'),
                ],
                'constraints': [
                    models.CheckConstraint(condition=models.Q(('amount__gt', 0)), name='bill_amount_positive'),
                ],
            },
        ),
        migrations.CreateModel(
            name='BillAudit',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('public_id', models.UUIDField(db_index=True, default=uuid.uuid4, editable=False, unique=True, verbose_name='Public ID')),
                ('created_at', models.DateTimeField(auto_now_add=True, verbose_name='Created At')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='Updated At')),
                ('action', models.CharField(choices=[('CREATED', 'Created'), ('UPDATED', 'Updated'), ('VOIDED', 'Voided'), ('DELETED', 'Deleted')], max_length=20, verbose_name='Action')),
                ('old_status', models.CharField(blank=True, max_length=10, verbose_name='Old Status')),
                ('new_status', models.CharField(blank=True, max_length=10, verbose_name='New Status')),
                ('changed_fields', models.JSONField(blank=True, default=dict, verbose_name='Changed Fields')),
                ('changed_at', models.DateTimeField(auto_now_add=True, verbose_name='Changed At')),
                ('remarks', models.TextField(blank=True, verbose_name='Remarks')),
                ('bill', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='audit_trail', to='billing.bill', verbose_name='Bill')),
                ('changed_by', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='bill_audits', to=settings.AUTH_USER_MODEL, verbose_name='Changed By')),
            ],
            options={
                'verbose_name': 'Bill Audit',
                'verbose_name_plural': 'Bill Audits',
                'ordering': ['-changed_at', '-id'],
                'indexes': [
                    models.Index(fields=['bill', '-changed_at'], name='billaudit_bill_idx'),
                    models.Index(fields=['action', '-changed_at'], name='billaudit_action_idx'),
                ],
            },
        ),
    ]
