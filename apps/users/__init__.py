"""
-------------------------------------------------------------------------
System: KMJ Billing System
Client: Kalloor Muslim Jamaath
Description: Users app initialization. Handles identity and the two
             billing roles.
-------------------------------------------------------------------------
"""
