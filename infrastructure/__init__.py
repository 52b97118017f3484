"""Infrastructure implementations for the Google Calendar gateway."""

from .credentials import CredentialRegistry, PLACEHOLDER_SUBJECT
from .repositories import GoogleCalendarRepository, DEFAULT_BASE_URL

__all__ = [
    'CredentialRegistry', 'PLACEHOLDER_SUBJECT',
    'GoogleCalendarRepository', 'DEFAULT_BASE_URL'
]
