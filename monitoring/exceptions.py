"""Exception handling for the Google Calendar gateway."""

import logging
import traceback
from datetime import datetime, timezone
from typing import Optional, Dict, Any
from functools import wraps
from enum import Enum

import requests
from google.auth.exceptions import GoogleAuthError


class ErrorKind(Enum):
    """Who is to blame for an error."""

    USER = "user"
    INFRASTRUCTURE = "infrastructure"


class ErrorCode(Enum):
    """Standard error codes for the application."""

    # User input errors
    DOMAIN_UNKNOWN = "DOMAIN_UNKNOWN"
    MISSING_EVENT_ID = "MISSING_EVENT_ID"
    MISSING_DATES = "MISSING_DATES"
    MISSING_TITLE = "MISSING_TITLE"
    INVALID_ID = "INVALID_ID"
    INVALID_PAYLOAD = "INVALID_PAYLOAD"
    INVALID_QUERY = "INVALID_QUERY"

    # Configuration errors
    CONFIG_INVALID = "CONFIG_INVALID"

    # Remote calendar errors
    REMOTE_API_ERROR = "REMOTE_API_ERROR"
    REMOTE_AUTH_ERROR = "REMOTE_AUTH_ERROR"

    # Internal errors
    INTERNAL_ERROR = "INTERNAL_ERROR"

    @property
    def kind(self) -> ErrorKind:
        if self in _USER_CODES:
            return ErrorKind.USER
        return ErrorKind.INFRASTRUCTURE


_USER_CODES = frozenset({
    ErrorCode.DOMAIN_UNKNOWN,
    ErrorCode.MISSING_EVENT_ID,
    ErrorCode.MISSING_DATES,
    ErrorCode.MISSING_TITLE,
    ErrorCode.INVALID_ID,
    ErrorCode.INVALID_PAYLOAD,
    ErrorCode.INVALID_QUERY,
})


class CalendarGatewayError(Exception):
    """Base exception for the Google Calendar gateway."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        self.cause = cause
        self.timestamp = datetime.now(timezone.utc)

    @property
    def kind(self) -> ErrorKind:
        return self.error_code.kind

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/monitoring."""
        return {
            'error_code': self.error_code.value,
            'kind': self.kind.value,
            'message': self.message,
            'details': self.details,
            'timestamp': self.timestamp.isoformat(),
            'cause': str(self.cause) if self.cause else None,
            'traceback': traceback.format_exc() if self.cause else None
        }


class UserInputError(CalendarGatewayError):
    """Malformed or missing caller input. Never reaches the remote service."""

    def __init__(self, message: str, error_code: ErrorCode, details: Optional[Dict[str, Any]] = None):
        if error_code.kind is not ErrorKind.USER:
            raise ValueError(f"{error_code.value} is not a user error code")
        super().__init__(message, error_code, details)


class DomainUnknownError(UserInputError):
    """The requested domain has no credential in the registry."""

    def __init__(self, domain: str):
        super().__init__(
            "provided domain name unknown",
            ErrorCode.DOMAIN_UNKNOWN,
            {'domain': domain}
        )


class ConfigurationError(CalendarGatewayError):
    """Configuration related errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None, cause: Optional[Exception] = None):
        super().__init__(message, ErrorCode.CONFIG_INVALID, details, cause)


class RemoteServiceError(CalendarGatewayError):
    """Failure reported by, or while talking to, the remote calendar service."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.REMOTE_API_ERROR,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None
    ):
        super().__init__(message, error_code, details, cause)

    @property
    def status_code(self) -> Optional[int]:
        return self.details.get('status_code')

    @classmethod
    def from_exception(cls, error: Exception) -> 'RemoteServiceError':
        """Wrap a transport or auth failure, keeping its message."""
        if isinstance(error, GoogleAuthError):
            return cls(str(error), ErrorCode.REMOTE_AUTH_ERROR, cause=error)

        message = str(error)
        details = {}
        response = getattr(error, 'response', None)
        if response is not None:
            details['status_code'] = response.status_code
            details['response'] = response.text
            remote_message = _remote_error_message(response)
            if remote_message:
                message = f"{message} - {remote_message}"
        return cls(message, ErrorCode.REMOTE_API_ERROR, details, error)


def _remote_error_message(response: requests.Response) -> Optional[str]:
    """Pull ``error.message`` out of a Google API error body, if there is one."""
    try:
        body = response.json()
    except ValueError:
        return None
    if not isinstance(body, dict) or not isinstance(body.get('error'), dict):
        return None
    return body['error'].get('message')


# Messages for the input validation failures raised by the connector
MISSING_EVENT_ID_MESSAGE = "missing event ID"
MISSING_DATES_MESSAGE = "missing start or end date"
MISSING_TITLE_MESSAGE = "event has no title"
INVALID_ID_MESSAGE = (
    "provided ID invalid, must be length 5 to 1024, "
    "and contain only lowercase letters and numbers 0-9"
)


class ErrorHandler:
    """Centralized error handling and logging."""

    def __init__(self):
        self.logger = logging.getLogger(__name__)
        self._error_counts = {}
        self._last_errors = {}

    def handle_error(
        self,
        error: Exception,
        context: str = "unknown",
        extra_details: Optional[Dict[str, Any]] = None
    ) -> CalendarGatewayError:
        """Handle and log an error, converting to CalendarGatewayError if needed."""

        # Convert to our custom exception type if needed
        if isinstance(error, CalendarGatewayError):
            gateway_error = error
        elif isinstance(error, (requests.RequestException, GoogleAuthError)):
            gateway_error = RemoteServiceError.from_exception(error)
        else:
            gateway_error = CalendarGatewayError(
                message=str(error),
                error_code=ErrorCode.INTERNAL_ERROR,
                details=extra_details or {},
                cause=error
            )

        # Add context to details
        gateway_error.details['context'] = context
        if extra_details:
            gateway_error.details.update(extra_details)

        # Track error statistics
        error_key = f"{context}:{gateway_error.error_code.value}"
        self._error_counts[error_key] = self._error_counts.get(error_key, 0) + 1
        self._last_errors[error_key] = gateway_error.to_dict()

        # Log the error
        if gateway_error.kind is ErrorKind.INFRASTRUCTURE:
            self.logger.error(
                f"[{context}] {gateway_error.message}",
                extra={
                    'error_code': gateway_error.error_code.value,
                    'details': gateway_error.details,
                    'error_count': self._error_counts[error_key]
                },
                exc_info=gateway_error.cause
            )
        else:
            self.logger.warning(
                f"[{context}] {gateway_error.message}",
                extra={
                    'error_code': gateway_error.error_code.value,
                    'details': gateway_error.details,
                    'error_count': self._error_counts[error_key]
                }
            )

        return gateway_error

    def get_error_stats(self) -> Dict[str, Any]:
        """Get error statistics for monitoring."""
        return {
            'error_counts': self._error_counts.copy(),
            'last_errors': self._last_errors.copy(),
            'total_errors': sum(self._error_counts.values())
        }

    def reset_stats(self):
        """Reset error statistics."""
        self._error_counts.clear()
        self._last_errors.clear()


# Global error handler instance
error_handler = ErrorHandler()


def handle_exceptions(context: str = "unknown"):
    """Decorator that logs every failure and re-raises it as a CalendarGatewayError."""

    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except Exception as e:
                handled_error = error_handler.handle_error(e, context)
                if handled_error is e:
                    raise
                raise handled_error from e

        return wrapper

    return decorator
