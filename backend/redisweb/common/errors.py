"""
Error Definitions

Defines custom exception classes used in the application for unified error handling.
Every failure of the explorer surfaces as one of these, each carrying an error
type, a stable code and the HTTP status the API layer answers with.
"""

from typing import Any, Optional


class AppError(Exception):
    """
    Application Base Exception

    Base class for all custom exceptions, containing error message, type, and code.
    """

    def __init__(
        self,
        message: str,
        error_type: str = "app_error",
        code: str = "internal_error",
        details: Optional[dict[str, Any]] = None,
        status_code: int = 500,
    ):
        """
        Initialize exception

        Args:
            message: Error message
            error_type: Error type
            code: Error code
            details: Extra error details
            status_code: HTTP status code
        """
        super().__init__(message)
        self.message = message
        self.error_type = error_type
        self.code = code
        self.details = details or {}
        self.status_code = status_code

    def to_dict(self, include_details: bool = True) -> dict[str, Any]:
        """
        Convert to dictionary format (for API response)

        Args:
            include_details: Whether to attach the details dictionary

        Returns:
            dict: Error information dictionary
        """
        result = {
            "error": {
                "message": self.message,
                "type": self.error_type,
                "code": self.code,
            }
        }
        if include_details and self.details:
            result["error"]["details"] = self.details
        return result


class NotFoundError(AppError):
    """
    Resource Not Found Error

    Raised when requested resource (e.g., key, server) does not exist.
    """

    def __init__(
        self,
        message: str = "Resource not found",
        code: str = "not_found",
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            error_type="not_found_error",
            code=code,
            details=details,
            status_code=404,
        )


class ConflictError(AppError):
    """
    Resource Conflict Error

    Raised when resource already exists or changed shape underneath the request.
    """

    def __init__(
        self,
        message: str = "Resource conflict",
        code: str = "conflict",
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            error_type="conflict_error",
            code=code,
            details=details,
            status_code=409,
        )


class ValidationError(AppError):
    """
    Parameter Validation Error

    Raised when request parameters do not meet requirements.
    """

    def __init__(
        self,
        message: str = "Validation failed",
        code: str = "validation_error",
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            error_type="validation_error",
            code=code,
            details=details,
            status_code=422,
        )


class ServiceError(AppError):
    """
    Service Error

    Raised when internal service processing fails.
    """

    def __init__(
        self,
        message: str = "Service error",
        code: str = "service_error",
        details: Optional[dict[str, Any]] = None,
        status_code: int = 503,
    ):
        super().__init__(
            message=message,
            error_type="service_error",
            code=code,
            details=details,
            status_code=status_code,
        )


# ============ TTL ============


class TTLParseError(ValidationError):
    """Raised when a TTL expression such as "1d" or "10s" cannot be parsed"""

    def __init__(self, expr: str, reason: Optional[str] = None):
        shown = expr if len(expr) <= 40 else expr[:40] + "..."
        super().__init__(
            message=f"Invalid TTL expression {shown!r}, "
            + (reason or "expected forms like 10s, 5m, 1h, 1d or -1s"),
            code="invalid_ttl_format",
            details={"ttl": shown},
        )


# ============ Content decoding ============


class DecodeError(ValidationError):
    """
    Content Decode Error

    Raised when display text cannot be turned back into a store value.
    Nothing is written to the store when this is raised.
    """

    def __init__(
        self,
        message: str,
        code: str = "decode_error",
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message=message, code=code, details=details)


class MalformedJSONError(DecodeError):
    """Text is not JSON, or JSON of a kind no store type accepts"""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message=message, code="malformed_json", details=details)


class MalformedQuotingError(DecodeError):
    """A quoted token is unterminated or contains an invalid escape"""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message=message, code="malformed_quoting", details=details)


class TypeMismatchError(DecodeError):
    """Decoded shape does not fit the key's type"""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message=message, code="type_mismatch", details=details)


# ============ Mutations ============


class KeyExistsError(ConflictError):
    """Raised when creating a key that is already present"""

    def __init__(self, key: str):
        super().__init__(
            message=f"Key '{key}' already exists",
            code="key_exists",
            details={"key": key},
        )


class KeyNotFoundError(NotFoundError):
    """Raised when updating a key that does not exist"""

    def __init__(self, key: str):
        super().__init__(
            message=f"Key '{key}' does not exist",
            code="key_not_found",
            details={"key": key},
        )


class TypeConflictError(ConflictError):
    """Raised when the key's store type changed between validation and write"""

    def __init__(self, key: str, expected: str, actual: str):
        super().__init__(
            message=f"Key '{key}' is now of type {actual}, expected {expected}",
            code="type_conflict",
            details={"key": key, "expected": expected, "actual": actual},
        )


class PartialTTLFailureError(AppError):
    """
    Partial TTL Failure

    The value was written but applying its expiration failed.
    The key exists in the store without the requested TTL.
    """

    def __init__(self, key: str, reason: str):
        super().__init__(
            message=f"Key '{key}' was written but setting its TTL failed: {reason}",
            error_type="partial_failure",
            code="partial_ttl_failure",
            details={"key": key, "value_written": True},
            status_code=500,
        )


# ============ Store ============


class StoreUnavailableError(ServiceError):
    """Raised when the Redis server cannot be reached or times out"""

    def __init__(self, message: str = "Store unavailable"):
        super().__init__(message=message, code="store_unavailable")


class StoreCommandError(ServiceError):
    """Raised when Redis rejects a command issued by the explorer itself"""

    def __init__(self, message: str):
        super().__init__(message=message, code="store_error", status_code=502)


class InvalidPatternError(ValidationError):
    """Raised when the store rejects a key match pattern"""

    def __init__(self, pattern: str, reason: str):
        super().__init__(
            message=f"Invalid key pattern {pattern!r}: {reason}",
            code="invalid_pattern",
            details={"pattern": pattern},
        )


class UnknownServerError(NotFoundError):
    """Raised when a request names a server that is not configured"""

    def __init__(self, server: str):
        super().__init__(
            message=f"Server '{server}' is not configured",
            code="unknown_server",
            details={"server": server},
        )
