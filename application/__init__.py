"""Application services for the Google Calendar gateway."""

from .services import (
    EventConnector, merge_event_fields, validate_new_event,
    is_valid_event_id, DEFAULT_TIMEZONE
)

__all__ = [
    'EventConnector', 'merge_event_fields', 'validate_new_event',
    'is_valid_event_id', 'DEFAULT_TIMEZONE'
]
