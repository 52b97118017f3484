"""Monitoring and error handling for the Google Calendar gateway."""

from .exceptions import (
    ErrorKind, ErrorCode, CalendarGatewayError, UserInputError,
    DomainUnknownError, ConfigurationError, RemoteServiceError,
    ErrorHandler, error_handler, handle_exceptions
)
from .health import HealthStatus, HealthChecker

__all__ = [
    'ErrorKind', 'ErrorCode', 'CalendarGatewayError', 'UserInputError',
    'DomainUnknownError', 'ConfigurationError', 'RemoteServiceError',
    'ErrorHandler', 'error_handler', 'handle_exceptions',
    'HealthStatus', 'HealthChecker'
]
