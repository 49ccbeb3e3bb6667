"""
-------------------------------------------------------------------------
System: KMJ Billing System
Client: Kalloor Muslim Jamaath
Description: Django admin configuration for sequence counters.
-------------------------------------------------------------------------
"""
from django.contrib import admin
from django.utils.translation import gettext_lazy as _

from apps.core.models import Counter


@admin.register(Counter)
class CounterAdmin(admin.ModelAdmin):
    """
    Admin configuration for Counter model.

    Values are changed through Counter.reset / set_value so the row lock
    is always taken; the admin is view-only for the value itself.
    """
    
    list_display = ['name', 'prefix', 'sequence_value', 'formatted_value',
                    'reset_frequency', 'last_reset_at']
    list_filter = ['reset_frequency']
    search_fields = ['name', 'description']
    ordering = ['name']
    readonly_fields = ['sequence_value', 'last_reset_at', 'public_id',
                       'created_at', 'updated_at']
    
    fieldsets = (
        (None, {'fields': ('name', 'prefix', 'description')}),
        (_('Sequence'), {'fields': ('sequence_value', 'reset_frequency', 'last_reset_at')}),
        (_('Timestamps'), {'fields': ('public_id', 'created_at', 'updated_at')}),
    )
    
    def formatted_value(self, obj: Counter) -> str:
        """Current value with its display prefix."""
        return obj.format_value()
    formatted_value.short_description = _('Formatted')
    
    def has_delete_permission(self, request, obj=None) -> bool:
        return False
