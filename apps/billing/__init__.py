"""
-------------------------------------------------------------------------
System: KMJ Billing System
Client: Kalloor Muslim Jamaath
Description: Billing app. Receipts (bills) recorded against households,
             with voiding, soft deletion and dashboard statistics.
-------------------------------------------------------------------------
"""
