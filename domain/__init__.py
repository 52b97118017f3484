"""Domain layer for the Google Calendar gateway."""

from .entities import Event, ConnectorOptions
from .interfaces import CalendarClient

__all__ = [
    'Event', 'ConnectorOptions', 'CalendarClient'
]
