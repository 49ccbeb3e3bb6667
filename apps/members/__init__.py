"""
-------------------------------------------------------------------------
System: KMJ Billing System
Client: Kalloor Muslim Jamaath
Description: Members app. Minimal household registry consumed by billing.
-------------------------------------------------------------------------
"""
