"""
OrderCloud SDK Error Classes

Every error raised by the SDK derives from OrderCloudError. Failed API
responses are normalized into ApiError regardless of how the transport
failed (JSON error list, HTML/plain-text error page, empty body).
"""

import logging
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Dict, List, Optional

if TYPE_CHECKING:
    from .transport import TransportResult


logger = logging.getLogger("ordercloud.errors")

# Code used when the API did not return a structured error
DEFAULT_ERROR_CODE = "OrderCloudError"

# Maximum length of a raw text body used as an error message
MAX_TEXT_MESSAGE_LENGTH = 200

BYTE_ORDER_MARK = "\ufeff"


class OrderCloudError(Exception):
    """Base error class for the OrderCloud SDK."""

    def __init__(
        self,
        code: str,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}
        self.timestamp = datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging/serialization."""
        return {
            "name": self.__class__.__name__,
            "code": self.code,
            "message": self.message,
            "details": self.details,
            "timestamp": self.timestamp,
        }

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"


class ApiError(OrderCloudError):
    """Normalized error for a non-success response from the API."""

    def __init__(
        self,
        message: str,
        error_code: str = DEFAULT_ERROR_CODE,
        status: int = 0,
        status_text: str = "",
        errors: Optional[List[Dict[str, Any]]] = None,
        request: Any = None,
        response: Any = None,
        request_type: Optional[str] = None,
    ):
        super().__init__(error_code, message, {"status": status})
        self.error_code = error_code
        self.status = status
        self.status_text = status_text
        self.errors = errors or []
        self.request = request
        self.response = response
        self.request_type = request_type

    def to_dict(self) -> Dict[str, Any]:
        result = super().to_dict()
        result.update(
            {
                "status": self.status,
                "status_text": self.status_text,
                "errors": self.errors,
                "request_type": self.request_type,
            }
        )
        return result


class MalformedTokenError(OrderCloudError):
    """A token could not be stored because it is not decodable."""

    def __init__(self, message: str = "Token is malformed", details: Optional[Dict[str, Any]] = None):
        super().__init__("MALFORMED_TOKEN", message, details)


class InvalidTokenError(OrderCloudError):
    """A token could not be decoded."""

    def __init__(self, message: str = "Invalid token", details: Optional[Dict[str, Any]] = None):
        super().__init__("INVALID_TOKEN", message, details)


class CancellationError(OrderCloudError):
    """Request was cancelled or exceeded its timeout."""

    def __init__(self, message: str = "Request cancelled", details: Optional[Dict[str, Any]] = None):
        super().__init__("REQUEST_CANCELLED", message, details)
        self.is_cancelled = True


class ConfigurationError(OrderCloudError):
    """Configuration error."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__("CONFIGURATION_ERROR", message, details)


class ValidationError(OrderCloudError):
    """Invalid arguments passed to an SDK method."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__("VALIDATION_ERROR", message, details)


def is_ordercloud_error(error: Any) -> bool:
    """Check if error is an OrderCloudError."""
    return isinstance(error, OrderCloudError)


def is_cancel(error: Any) -> bool:
    """Check if error represents a cancelled or timed out request."""
    return isinstance(error, CancellationError)


# =============================================================================
# Normalization
# =============================================================================

def strip_bom(text: str) -> str:
    """Remove a leading UTF-8 byte order mark."""
    if text and text[0] == BYTE_ORDER_MARK:
        return text[1:]
    return text


def _safe_parse_errors(data: Any) -> List[Dict[str, Any]]:
    if not isinstance(data, dict):
        return []
    errors = data.get("Errors")
    if not isinstance(errors, list):
        return []
    return [error for error in errors if isinstance(error, dict)]


def _get_message(first_error: Optional[Dict[str, Any]], text: Optional[str], status_text: str) -> str:
    if first_error is None:
        if text:
            text = text.strip()
            if text:
                if len(text) > MAX_TEXT_MESSAGE_LENGTH:
                    return text[:MAX_TEXT_MESSAGE_LENGTH] + "..."
                return text
        return status_text or "Unknown error"

    if first_error.get("ErrorCode") == "NotFound":
        data = first_error.get("Data")
        if isinstance(data, dict):
            return f"{data.get('ObjectType')} {data.get('ObjectID')} not found"
    return first_error.get("Message") or status_text or "Unknown error"


def normalize_error(result: "TransportResult", request_type: Optional[str] = None) -> ApiError:
    """
    Convert a failed HTTP exchange into an ApiError.

    Args:
        result: Transport result tagged as an HTTP error
        request_type: Optional caller-supplied tag, kept for diagnostics

    Returns:
        ApiError carrying the message, code, structured error list and status
    """
    errors = _safe_parse_errors(result.data)
    first_error = errors[0] if errors else None  # usually the only one
    error_code = DEFAULT_ERROR_CODE
    if first_error is not None and first_error.get("ErrorCode"):
        error_code = first_error["ErrorCode"]

    response = result.response
    status = response.status_code if response is not None else 0
    status_text = response.reason_phrase if response is not None else "Unknown error"

    error = ApiError(
        message=_get_message(first_error, result.text, status_text),
        error_code=error_code,
        status=status,
        status_text=status_text,
        errors=errors,
        request=result.request,
        response=response,
        request_type=request_type,
    )
    logger.debug(
        "API error status=%s code=%s message=%s errors=%d",
        error.status,
        error.error_code,
        error.message,
        len(errors),
    )
    return error
