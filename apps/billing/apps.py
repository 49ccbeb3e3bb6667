"""
-------------------------------------------------------------------------
System: KMJ Billing System
Client: Kalloor Muslim Jamaath
Description: Billing app configuration.
-------------------------------------------------------------------------
"""
from django.apps import AppConfig


class BillingConfig(AppConfig):
    """Configuration for the billing application."""
    
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.billing'
    verbose_name = 'Billing Ledger'
