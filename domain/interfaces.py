"""Domain interfaces for the Google Calendar gateway."""

from abc import ABC, abstractmethod
from typing import Dict, Any


class CalendarClient(ABC):
    """Abstract client for one remote calendar.

    Events are exchanged in the remote service's JSON representation.
    """

    @abstractmethod
    def insert_event(self, body: Dict[str, Any], send_updates: bool = False) -> Dict[str, Any]:
        """Create an event and return it as stored remotely."""
        pass

    @abstractmethod
    def get_event(self, event_id: str) -> Dict[str, Any]:
        """Get event by ID."""
        pass

    @abstractmethod
    def update_event(self, event_id: str, body: Dict[str, Any], send_updates: bool = False) -> Dict[str, Any]:
        """Replace the whole event."""
        pass

    @abstractmethod
    def patch_event(self, event_id: str, body: Dict[str, Any], send_updates: bool = False) -> Dict[str, Any]:
        """Change only the fields present in body."""
        pass

    @abstractmethod
    def delete_event(self, event_id: str, send_updates: bool = False) -> None:
        """Delete event by ID."""
        pass

    @abstractmethod
    def list_events(self, time_min: str = "", time_max: str = "", show_deleted: bool = False) -> Dict[str, Any]:
        """List events, recurring ones expanded into single instances."""
        pass

    def close(self) -> None:
        """Release any connections held by the client."""
        pass
