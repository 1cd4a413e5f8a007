# core/errors.py

from fastapi import HTTPException
from pymongo.errors import DuplicateKeyError


class BMSError(Exception):
    """
    Base class for business-rule failures raised by the service layer.
    Carries a human-readable message and the HTTP status it maps to.
    """

    status_code = 400

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def __str__(self):
        return self.message


class ValidationError(BMSError):
    status_code = 400


class PermissionDeniedError(BMSError):
    status_code = 403


class NotFoundError(BMSError):
    status_code = 404


class ConflictError(BMSError):
    status_code = 409


def extract_db_error(error: Exception) -> str:
    """
    Safely extract readable details from pymongo errors.
    Handles:
      • OperationFailure / WriteError (have .details)
      • Generic Python exceptions
    """
    details = getattr(error, "details", None)
    if isinstance(details, dict) and details.get("errmsg"):
        return str(details["errmsg"])

    if error.args:
        return str(error.args[0])

    return str(error) or "Unknown database error"


def handle_db_error(error: Exception, operation: str = "Database operation", status_code: int = 500) -> HTTPException:
    """
    Handle database errors with consistent formatting.
    Returns HTTPException (doesn't raise) so caller can customize or re-raise.

    Args:
        error: The exception that occurred
        operation: Description of what operation failed (e.g., "Failed to create lease")
        status_code: HTTP status code (default 500)

    Returns:
        HTTPException with standardized error message
    """
    from core.logging_config import logger

    error_detail = extract_db_error(error)
    logger.error(f"{operation}: {error_detail}")

    if isinstance(error, DuplicateKeyError) or "duplicate key" in error_detail.lower():
        return HTTPException(status_code=400, detail=f"{operation}: Record already exists")
    return HTTPException(status_code=status_code, detail=f"{operation} failed")
