"""
-------------------------------------------------------------------------
System: KMJ Billing System
Client: Kalloor Muslim Jamaath
Description: Centralized logging for billing operations.
-------------------------------------------------------------------------
"""
import logging
from typing import Any, Dict, Iterable

logger = logging.getLogger('billing')


class BillingLogger:
    """Centralized logging for billing operations"""

    @staticmethod
    def log_bill_created(bill, user):
        """Log bill creation with full context"""
        logger.info(
            f"Bill created: Receipt {bill.receipt_no} | "
            f"Household: {bill.mahal_id} ({bill.member_name}) | "
            f"Account: {bill.account_type} | "
            f"Amount: Rs {bill.amount} | "
            f"Created by: {user.email}",
            extra={
                'bill_id': bill.pk,
                'receipt_no': bill.receipt_no,
                'mahal_id': bill.mahal_id,
                'account_type': bill.account_type,
                'amount': str(bill.amount),
                'financial_year': bill.financial_year,
                'user_id': user.pk,
            }
        )

    @staticmethod
    def log_bill_updated(bill, user, fields: Iterable[str]):
        """Log change of notes or payment method"""
        fields = list(fields)
        logger.info(
            f"Bill updated: Receipt {bill.receipt_no} | "
            f"Fields: {', '.join(fields)} | "
            f"Updated by: {user.email}",
            extra={
                'bill_id': bill.pk,
                'receipt_no': bill.receipt_no,
                'fields': fields,
                'user_id': user.pk,
            }
        )

    @staticmethod
    def log_bill_voided(bill, user, reason: str):
        """Log bill voiding"""
        logger.warning(
            f"Bill voided: Receipt {bill.receipt_no} | "
            f"Household: {bill.mahal_id} | "
            f"Amount: Rs {bill.amount} | "
            f"Reason: {reason} | "
            f"Voided by: {user.email}",
            extra={
                'bill_id': bill.pk,
                'receipt_no': bill.receipt_no,
                'amount': str(bill.amount),
                'reason': reason,
                'user_id': user.pk,
            }
        )

    @staticmethod
    def log_bill_deleted(bill, user, reason: str):
        """Log soft deletion"""
        logger.warning(
            f"Bill deleted: Receipt {bill.receipt_no} | "
            f"Household: {bill.mahal_id} | "
            f"Amount: Rs {bill.amount} | "
            f"Reason: {reason or '-'} | "
            f"Deleted by: {user.email}",
            extra={
                'bill_id': bill.pk,
                'receipt_no': bill.receipt_no,
                'amount': str(bill.amount),
                'reason': reason,
                'user_id': user.pk,
            }
        )

    @staticmethod
    def log_access_denied(user, operation: str, mahal_id: str = ''):
        """Log a rejected role or household check"""
        logger.warning(
            f"Access denied: {operation} | "
            f"User: {user.email} | "
            f"Household: {mahal_id or '-'}",
            extra={
                'operation': operation,
                'user_id': user.pk,
                'mahal_id': mahal_id,
            }
        )

    @staticmethod
    def log_validation_error(operation: str, error: Exception, context: Dict[str, Any]):
        """Log rejected input"""
        logger.warning(
            f"Validation failed in {operation}: {error}",
            extra=context
        )

    @staticmethod
    def log_error(operation: str, error: Exception, context: Dict[str, Any]):
        """Log errors with context"""
        logger.error(
            f"Billing error in {operation}: {str(error)}",
            extra=context,
            exc_info=True
        )
