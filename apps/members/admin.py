"""
-------------------------------------------------------------------------
System: KMJ Billing System
Client: Kalloor Muslim Jamaath
Description: Admin configuration for the member registry.
-------------------------------------------------------------------------
"""
from django.contrib import admin
from django.utils.translation import gettext_lazy as _

from apps.members.models import Member


@admin.register(Member)
class MemberAdmin(admin.ModelAdmin):
    """Admin configuration for Member model."""
    
    list_display = ['mahal_id', 'name', 'relation', 'mobile', 'is_active']
    list_filter = ['relation', 'is_active']
    search_fields = ['mahal_id', 'name', 'mobile']
    ordering = ['mahal_id', 'id']
    readonly_fields = ['public_id', 'created_at', 'updated_at']
    
    fieldsets = (
        (None, {'fields': ('mahal_id', 'name', 'relation')}),
        (_('Contact'), {'fields': ('address', 'mobile')}),
        (_('Status'), {'fields': ('is_active',)}),
        (_('Timestamps'), {'fields': ('public_id', 'created_at', 'updated_at')}),
    )
