"""Custom exception hierarchy for ContaPyme.

Every domain failure is one of five kinds, each mapped by the API layer to a
status code:

- ValidationError (400): malformed or out-of-range input
- NotFoundError (404): entity missing or not visible to the caller
- PermissionDeniedError (403): entity exists but belongs to another business
- ConflictError (409): duplicates, stock shortfalls, mutation of filed records
- InternalError (500): persistence failures and misconfiguration

Error codes follow pattern: [CATEGORY][NUMBER]
- VAL: validation (000-099)
- NFD: not found (000-099)
- PRM: permission (000-099)
- CON: conflict (000-099)
- INT: internal (000-099)
"""

from __future__ import annotations

from typing import Any


class ContaPymeException(Exception):
    """Base exception for all ContaPyme application errors."""

    def __init__(
        self,
        message: str,
        code: str,
        status_code: int = 400,
        details: dict[str, Any] | None = None,
    ):
        """Initialize exception with user-facing message and metadata.

        Args:
            message: Human-readable error message
            code: Unique error code (e.g., "CON001")
            status_code: HTTP status code the boundary should answer with
            details: Optional additional context
        """
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to API response format."""
        return {
            "error": {
                "message": self.message,
                "code": self.code,
                "details": self.details,
            }
        }


# ============================================================================
# VALIDATION ERRORS (VAL000-099)
# ============================================================================

class ValidationError(ContaPymeException):
    """Input is malformed or out of range."""

    def __init__(self, message: str, code: str = "VAL000", details: dict[str, Any] | None = None):
        super().__init__(message=message, code=code, status_code=400, details=details)


class InvalidPeriodError(ValidationError):
    """Month or year outside the accepted filing window."""

    def __init__(self, field: str, value: Any, minimum: int, maximum: int):
        super().__init__(
            message=f"{field.capitalize()} must be between {minimum} and {maximum}",
            code="VAL001",
            details={"field": field, "value": value, "minimum": minimum, "maximum": maximum},
        )


class InvalidRutError(ValidationError):
    """National tax id (RUT) fails the mod-11 checksum."""

    def __init__(self, rut: str):
        super().__init__(
            message=f"Invalid RUT: {rut}",
            code="VAL002",
            details={"rut": rut},
        )


class InvalidAmountError(ValidationError):
    """Monetary amount or quantity is not acceptable."""

    def __init__(self, field: str, value: Any, reason: str):
        super().__init__(
            message=f"Invalid {field}: {reason}",
            code="VAL003",
            details={"field": field, "value": value},
        )


# ============================================================================
# NOT FOUND ERRORS (NFD000-099)
# ============================================================================

class NotFoundError(ContaPymeException):
    """Referenced entity does not exist for the caller."""

    def __init__(self, resource: str, identifier: Any = None, code: str = "NFD000"):
        message = f"{resource} not found" if identifier is None else f"{resource} {identifier} not found"
        super().__init__(
            message=message,
            code=code,
            status_code=404,
            details={"resource": resource, "id": identifier} if identifier is not None else {"resource": resource},
        )


class BusinessNotFoundError(NotFoundError):
    """Authenticated user has not registered a business yet."""

    def __init__(self, user_id: int | None = None):
        super().__init__("Business", code="NFD001")
        if user_id is not None:
            self.details["user_id"] = user_id


# ============================================================================
# PERMISSION ERRORS (PRM000-099)
# ============================================================================

class PermissionDeniedError(ContaPymeException):
    """Entity exists but is owned by a different business."""

    def __init__(self, resource: str, identifier: Any = None):
        super().__init__(
            message=f"You do not have permission to access this {resource.lower()}",
            code="PRM000",
            status_code=403,
            details={"resource": resource, "id": identifier},
        )


# ============================================================================
# CONFLICT ERRORS (CON000-099)
# ============================================================================

class ConflictError(ContaPymeException):
    """Request conflicts with the current state of a record."""

    def __init__(self, message: str, code: str = "CON000", details: dict[str, Any] | None = None):
        super().__init__(message=message, code=code, status_code=409, details=details)


class InsufficientStockError(ConflictError):
    """Sale requests more units than the product holds."""

    def __init__(self, product_name: str, available: int, requested: int):
        super().__init__(
            message=(
                f"Insufficient stock for {product_name}. "
                f"Available: {available}, requested: {requested}"
            ),
            code="CON001",
            details={
                "product": product_name,
                "available": available,
                "requested": requested,
                "shortfall": requested - available,
            },
        )


class FilingAlreadyFiledError(ConflictError):
    """Amounts of a filed declaration cannot change."""

    def __init__(self, form: str, filing_id: int):
        super().__init__(
            message=f"{form} {filing_id} is already filed and cannot be modified",
            code="CON002",
            details={"form": form, "filing_id": filing_id},
        )


class DuplicateSettlementError(ConflictError):
    """A worker already has a settlement for the period."""

    def __init__(self, worker_id: int, month: int, year: int):
        super().__init__(
            message=f"A settlement already exists for worker {worker_id} in {month:02d}/{year}",
            code="CON003",
            details={"worker_id": worker_id, "month": month, "year": year},
        )


class SettlementAlreadyPaidError(ConflictError):
    """Paid is a terminal settlement state."""

    def __init__(self, settlement_id: int):
        super().__init__(
            message=f"Settlement {settlement_id} is already paid",
            code="CON004",
            details={"settlement_id": settlement_id},
        )


class DuplicateRutError(ConflictError):
    """RUT is already registered."""

    def __init__(self, rut: str):
        super().__init__(
            message=f"RUT {rut} is already registered",
            code="CON005",
            details={"rut": rut},
        )


# ============================================================================
# INTERNAL ERRORS (INT000-099)
# ============================================================================

class InternalError(ContaPymeException):
    """Unexpected failure the caller cannot fix."""

    def __init__(self, message: str = "Internal server error", code: str = "INT000", details: dict[str, Any] | None = None):
        super().__init__(message=message, code=code, status_code=500, details=details)


class TaxTableConfigurationError(InternalError):
    """No usable tax parameters are configured."""

    def __init__(self, reason: str):
        super().__init__(
            message=f"Tax table configuration error: {reason}",
            code="INT001",
            details={"reason": reason},
        )
