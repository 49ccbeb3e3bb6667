"""
-------------------------------------------------------------------------
System: KMJ Billing System
Client: Kalloor Muslim Jamaath
Description: Core app. Contains shared mixins, exceptions and the
             sequence counter.
-------------------------------------------------------------------------
"""
