"""
-------------------------------------------------------------------------
System: KMJ Billing System
Client: Kalloor Muslim Jamaath
Description: Custom exceptions for the KMJ billing core. These provide
             specific error codes for validation, lookup, authorization
             and storage failures.
-------------------------------------------------------------------------
"""
from typing import Optional


class KMJException(Exception):
    """Base exception for all KMJ billing specific errors."""

    error_code: str = "ERR_KMJ_GENERIC"
    default_message: str = "An error occurred in the billing system."
    http_status: int = 400
    retryable: bool = False

    def __init__(self, message: Optional[str] = None, details: Optional[dict] = None) -> None:
        """
        Initialize KMJ exception.

        Args:
            message: Custom error message. If None, uses default_message.
            details: Additional context dictionary for debugging.
        """
        self.message = message or self.default_message
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict:
        """Convert exception to dictionary for API responses."""
        return {
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
            "retryable": self.retryable,
        }


# Validation Exceptions
class ValidationException(KMJException):
    """Raised when input fails validation. No state is mutated."""

    error_code = "ERR_VALIDATION"
    default_message = "The submitted data is invalid."


class InvalidAmountException(ValidationException):
    """Raised when a bill amount is not a positive 2-decimal number."""

    error_code = "ERR_INVALID_AMOUNT"
    default_message = "Amount must be greater than zero with at most 2 decimal places."


class InvalidAccountTypeException(ValidationException):
    """Raised when the account type or sub-category is not recognised."""

    error_code = "ERR_INVALID_ACCOUNT_TYPE"
    default_message = "Invalid account type."


class InvalidHouseholdIdException(ValidationException):
    """Raised when a Mahal ID is not in ward/house format."""

    error_code = "ERR_INVALID_MAHAL_ID"
    default_message = "Mahal ID must be in format: number/number (e.g., 1/2)."


class ImmutableFieldException(ValidationException):
    """Raised when a financial field of an existing bill is changed."""

    error_code = "ERR_IMMUTABLE_FIELD"
    default_message = "Only notes and payment method can be changed on a recorded bill."


# Lookup Exceptions
class NotFoundException(KMJException):
    """Raised when a requested record does not exist."""

    error_code = "ERR_NOT_FOUND"
    default_message = "Resource not found."
    http_status = 404


class HouseholdNotFoundException(NotFoundException):
    """Raised when a Mahal ID has no active members in the registry."""

    error_code = "ERR_HOUSEHOLD_NOT_FOUND"
    default_message = "Member not found."


class BillNotFoundException(NotFoundException):
    """Raised when a bill id or receipt number does not exist."""

    error_code = "ERR_BILL_NOT_FOUND"
    default_message = "Bill not found."


# Authorization Exceptions
class UnauthorizedRoleException(KMJException):
    """Raised when a user lacks the required role for an action."""

    error_code = "ERR_UNAUTHORIZED_ROLE"
    default_message = "You do not have the required role to perform this action."
    http_status = 403


class HouseholdAccessDeniedException(UnauthorizedRoleException):
    """Raised when a non-admin touches another household's records."""

    error_code = "ERR_HOUSEHOLD_ACCESS_DENIED"
    default_message = "Not authorized to access bills for this household."


# Workflow Exceptions
class WorkflowTransitionException(KMJException):
    """Raised when an invalid status transition is attempted."""

    error_code = "ERR_INVALID_TRANSITION"
    default_message = "Invalid status transition attempted."
    http_status = 409


class HardDeleteNotAllowedException(KMJException):
    """Raised when code tries to physically remove a financial record."""

    error_code = "ERR_HARD_DELETE"
    default_message = "Financial records cannot be deleted. Void or soft-delete the bill instead."
    http_status = 409


# Storage Exceptions
class StorageUnavailableException(KMJException):
    """Raised when the database fails during a write. Safe to retry."""

    error_code = "ERR_STORAGE_UNAVAILABLE"
    default_message = "The billing store is temporarily unavailable. Please retry."
    http_status = 503
    retryable = True


class SequenceUnavailableException(StorageUnavailableException):
    """Raised when a receipt number could not be drawn from its counter."""

    error_code = "ERR_SEQUENCE_UNAVAILABLE"
    default_message = "Could not generate a receipt number. Please retry."
