"""
-------------------------------------------------------------------------
System: KMJ Billing System
Client: Kalloor Muslim Jamaath
Description: Admin configuration for CustomUser model.
-------------------------------------------------------------------------
"""
from django.contrib import admin
from django.contrib.auth.admin import UserAdmin
from django.utils.translation import gettext_lazy as _

from .models import CustomUser


@admin.register(CustomUser)
class CustomUserAdmin(UserAdmin):
    """Admin configuration for CustomUser model."""
    
    model = CustomUser
    
    list_display = (
        'email', 'first_name', 'last_name', 'role', 'mahal_id',
        'is_active', 'is_staff', 'public_id'
    )
    list_display_links = ('email',)
    list_filter = ('role', 'is_active', 'is_staff')
    search_fields = ('email', 'first_name', 'last_name', 'mahal_id', 'phone')
    ordering = ('first_name', 'last_name')
    filter_horizontal = ('groups', 'user_permissions')
    
    readonly_fields = ('public_id',)
    
    fieldsets = (
        (None, {'fields': ('public_id', 'email', 'password')}),
        (_('Personal Info'), {
            'fields': ('first_name', 'last_name', 'phone')
        }),
        (_('Role & Household'), {
            'fields': ('role', 'mahal_id')
        }),
        (_('Permissions'), {
            'fields': ('is_active', 'is_staff', 'is_superuser', 'groups', 'user_permissions'),
        }),
        (_('Important Dates'), {
            'fields': ('last_login', 'date_joined'),
        }),
    )
    
    add_fieldsets = (
        (None, {
            'classes': ('wide',),
            'fields': (
                'email', 'first_name', 'last_name', 'role', 'mahal_id',
                'password1', 'password2'
            ),
        }),
    )
