"""
Exception handling for the API.

Domain errors are raised by services and carry a message that is safe to show
to the caller. Routes turn them into HTTP errors through BusinessError, which
logs internally and never leaks stack traces or SQL to users.
"""
from fastapi import HTTPException, status
import logging

logger = logging.getLogger(__name__)


class SaleInvoiceError(Exception):
    """A sale could not be recorded. The whole transaction was rolled back."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidSaleInputError(SaleInvoiceError):
    pass


class MedicineNotFoundError(SaleInvoiceError):
    def __init__(self, medicine_id):
        super().__init__(f"Medicine with ID {medicine_id} not found")
        self.medicine_id = medicine_id


class InsufficientStockError(SaleInvoiceError):
    def __init__(self, medicine_name: str):
        super().__init__(f"Insufficient inventory for medicine: {medicine_name}")
        self.medicine_name = medicine_name


class IdempotencyConflictError(SaleInvoiceError):
    """Idempotency key already used by a different employee."""

    status_code = status.HTTP_409_CONFLICT


class BusinessError:
    """Factory for HTTP errors with safe (non-leaky) messages."""

    @staticmethod
    def not_found(detail: str = "Resource not found") -> HTTPException:
        return HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=detail,
        )

    @staticmethod
    def unauthorized(detail: str = "Authentication failed", reason: str = "") -> HTTPException:
        """
        Generic 401 for authentication failures.

        Same response for wrong password and unknown user, so usernames
        cannot be enumerated.
        """
        logger.warning(f"Unauthorized access attempt: {reason or detail}")
        return HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )

    @staticmethod
    def bad_request(detail: str) -> HTTPException:
        """
        400 for input validation / business rule errors.

        OK to include specific details here since the caller caused the issue.
        """
        logger.info(f"Bad request: {detail}")
        return HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
        )

    @staticmethod
    def conflict(detail: str) -> HTTPException:
        logger.info(f"Conflict: {detail}")
        return HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=detail,
        )

    @staticmethod
    def from_sale_error(error: SaleInvoiceError) -> HTTPException:
        logger.info(f"Sale rejected: {error.message}")
        return HTTPException(status_code=error.status_code, detail=error.message)

    @staticmethod
    def server_error(original_error: Exception = None) -> HTTPException:
        """
        Generic 500 - logs actual error internally, hides it from the user.
        """
        if original_error:
            logger.error(
                f"Internal server error: {type(original_error).__name__}: {str(original_error)}",
                exc_info=original_error,
            )
        else:
            logger.error("Internal server error occurred")

        return HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An internal error occurred. Please try again later.",
        )

