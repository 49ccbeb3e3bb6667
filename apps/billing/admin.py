"""
-------------------------------------------------------------------------
System: KMJ Billing System
Client: Kalloor Muslim Jamaath
Description: Billing Admin Configuration. Bills are read-only here;
             changes go through BillingService so they are audited.
-------------------------------------------------------------------------
"""
from django.contrib import admin

from .models import Bill, BillAudit


class BillAuditInline(admin.TabularInline):
    model = BillAudit
    extra = 0
    can_delete = False
    fields = ('action', 'old_status', 'new_status', 'changed_fields', 'changed_by', 'changed_at', 'remarks')
    readonly_fields = fields
    
    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Bill)
class BillAdmin(admin.ModelAdmin):
    """Admin configuration for Bill model."""
    
    list_display = (
        'receipt_no', 'bill_date', 'mahal_id', 'member_name', 'account_type',
        'amount', 'payment_method', 'status', 'financial_year'
    )
    list_filter = ('status', 'account_type', 'payment_method', 'financial_year', 'bill_date')
    search_fields = ('receipt_no', 'mahal_id', 'member_name', 'notes')
    ordering = ('-bill_date',)
    date_hierarchy = 'bill_date'
    inlines = [BillAuditInline]
    
    fieldsets = (
        (None, {
            'fields': ('receipt_no', 'bill_date', 'financial_year', 'status')
        }),
        ('Household', {
            'fields': ('mahal_id', 'member_name', 'member_address'),
        }),
        ('Payment', {
            'fields': ('amount', 'amount_in_words', 'account_type', 'kind', 'sub_category',
                       'payment_method', 'notes'),
        }),
        ('Void / Delete', {
            'fields': ('voided_by', 'voided_at', 'void_reason',
                       'deleted_by', 'deleted_at', 'delete_reason'),
            'classes': ('collapse',),
        }),
        ('System', {
            'fields': ('public_id', 'created_by', 'created_at', 'updated_by', 'updated_at'),
            'classes': ('collapse',),
        }),
    )
    
    def get_readonly_fields(self, request, obj=None):
        return [field.name for field in Bill._meta.fields]
    
    def has_add_permission(self, request):
        return False
    
    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(BillAudit)
class BillAuditAdmin(admin.ModelAdmin):
    """Read-only view of the bill audit trail."""
    
    list_display = ('bill', 'action', 'old_status', 'new_status', 'changed_by', 'changed_at')
    list_filter = ('action', 'changed_at')
    search_fields = ('bill__receipt_no', 'bill__mahal_id', 'remarks')
    ordering = ('-changed_at',)
    
    def get_readonly_fields(self, request, obj=None):
        return [field.name for field in BillAudit._meta.fields]
    
    def has_add_permission(self, request):
        return False
    
    def has_delete_permission(self, request, obj=None):
        return False
