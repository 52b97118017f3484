"""Domain entities for the Google Calendar gateway."""

from dataclasses import dataclass
from typing import Optional, Dict, List, Any

from monitoring.exceptions import UserInputError, ErrorCode


_STRING_FIELDS = ('id', 'title', 'location', 'description', 'start', 'end')


@dataclass
class Event:
    """Partial event as received from a caller.

    ``None`` means "not specified"; any other value, including an empty
    string, is an explicit value to apply to the remote event.
    """

    id: Optional[str] = None
    title: Optional[str] = None
    location: Optional[str] = None
    description: Optional[str] = None
    start: Optional[str] = None
    end: Optional[str] = None
    participants: Optional[List[str]] = None
    organizer: Optional[Dict[str, Any]] = None

    @classmethod
    def from_dict(cls, data: Any) -> 'Event':
        """Create Event from a decoded JSON body. Unknown keys are ignored."""
        if not isinstance(data, dict):
            raise UserInputError("event body must be a JSON object", ErrorCode.INVALID_PAYLOAD)

        for name in _STRING_FIELDS:
            value = data.get(name)
            if value is not None and not isinstance(value, str):
                raise UserInputError(
                    f"event field '{name}' must be a string",
                    ErrorCode.INVALID_PAYLOAD,
                    {'field': name}
                )

        participants = data.get('participants')
        if participants is not None:
            if not isinstance(participants, list) or not all(isinstance(p, str) for p in participants):
                raise UserInputError(
                    "event field 'participants' must be a list of email addresses",
                    ErrorCode.INVALID_PAYLOAD,
                    {'field': 'participants'}
                )

        organizer = data.get('organizer')
        if organizer is not None and not isinstance(organizer, dict):
            raise UserInputError(
                "event field 'organizer' must be an object",
                ErrorCode.INVALID_PAYLOAD,
                {'field': 'organizer'}
            )

        return cls(
            id=data.get('id'),
            title=data.get('title'),
            location=data.get('location'),
            description=data.get('description'),
            start=data.get('start'),
            end=data.get('end'),
            participants=list(participants) if participants is not None else None,
            organizer=organizer
        )


@dataclass(frozen=True)
class ConnectorOptions:
    """Per-request behaviour flags. ``None`` leaves the remote default alone."""

    guests_can_modify: Optional[bool] = None
    auto_accept: Optional[bool] = None
    guests_can_invite_others: Optional[bool] = None
    guests_can_see_other_guests: Optional[bool] = None
    private_event: Optional[bool] = None
    notify_guests: Optional[bool] = None

    @property
    def send_updates(self) -> bool:
        """Whether guests should be mailed about the change."""
        return bool(self.notify_guests)

    @property
    def response_status(self) -> str:
        """Invitation status given to attendees set through the field merge."""
        return 'accepted' if self.auto_accept else 'needsAction'
