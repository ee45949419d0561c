"""
Domain exceptions for the stock ledger.

Provides specific exception types for different error scenarios. Each kind
implies a different corrective action for the caller (fix input, fix product
data, retry, or pick another product), so none of them is caught internally.
"""

from typing import Any


class StockLedgerError(Exception):
    """Base exception for all stock ledger errors."""

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict:
        """Convert to dictionary for collaborator error reporting."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


# Storage Exceptions
class StorageError(StockLedgerError):
    """Base exception for storage operations."""

    pass


class ProductNotFoundError(StorageError):
    """Product not found in storage."""

    def __init__(self, product_id: str):
        super().__init__(
            f"Product not found: {product_id}",
            code="PRODUCT_NOT_FOUND",
            details={"product_id": product_id},
        )


class PersistenceError(StorageError):
    """Storage operation failed. A failed write applied nothing."""

    def __init__(self, operation: str, error: str):
        super().__init__(
            f"Persistence error during {operation}: {error}",
            code="PERSISTENCE_ERROR",
            details={"operation": operation, "error": error},
        )


class StockConflictError(StorageError):
    """Stock kept changing underneath a reconciliation attempt."""

    def __init__(self, product_id: str, attempts: int):
        super().__init__(
            f"Stock for product {product_id} changed during reconciliation "
            f"({attempts} attempts)",
            code="STOCK_CONFLICT",
            details={"product_id": product_id, "attempts": attempts},
        )


class SchemaError(StorageError):
    """Database schema differs from the migrations shipped with this package."""

    def __init__(self, version: str, reason: str):
        super().__init__(
            f"Schema migration v{version}: {reason}",
            code="SCHEMA_ERROR",
            details={"version": version, "reason": reason},
        )


# Validation Exceptions
class ValidationError(StockLedgerError):
    """Input validation failed."""

    def __init__(self, field: str, message: str, value: Any = None):
        super().__init__(
            f"Validation error for '{field}': {message}",
            code="VALIDATION_ERROR",
            details={
                "field": field,
                "message": message,
                "value": str(value)[:100] if value is not None else None,
            },
        )


class NonPositiveQuantityError(ValidationError):
    """Quantity is zero or negative."""

    def __init__(self, quantity: float):
        super().__init__(
            field="quantity",
            message=f"Quantity must be positive, got {quantity}",
            value=quantity,
        )
        self.code = "NON_POSITIVE_QUANTITY"
        self.details["quantity"] = quantity


class InvalidMovementTypeError(ValidationError):
    """Movement type is not one of the known types."""

    def __init__(self, movement_type: str, allowed: list[str]):
        super().__init__(
            field="movement_type",
            message=f"Unknown movement type '{movement_type}'. Allowed: {', '.join(allowed)}",
            value=movement_type,
        )
        self.code = "INVALID_MOVEMENT_TYPE"
        self.details["allowed"] = allowed


# Unit Exceptions
class InvalidUnitConfigurationError(StockLedgerError):
    """Product conversion factors are missing, zero or negative."""

    def __init__(self, product_id: str, field: str, value: Any):
        super().__init__(
            f"Invalid unit configuration for product {product_id}: "
            f"{field}={value!r} must be a positive number",
            code="INVALID_UNIT_CONFIGURATION",
            details={"product_id": product_id, "field": field, "value": value},
        )
