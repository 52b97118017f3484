"""Application services for the Google Calendar gateway."""

import logging
import re
from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterable, Iterator, Optional

from domain import Event, ConnectorOptions, CalendarClient
from monitoring.exceptions import (
    UserInputError, ErrorCode, handle_exceptions,
    MISSING_EVENT_ID_MESSAGE, MISSING_DATES_MESSAGE,
    MISSING_TITLE_MESSAGE, INVALID_ID_MESSAGE
)


DEFAULT_TIMEZONE = "Europe/Oslo"

EVENT_ID_PATTERN = re.compile(r'^[a-z0-9]+$')
EVENT_ID_MIN_LENGTH = 5
EVENT_ID_MAX_LENGTH = 1024

ClientFactory = Callable[[Any], CalendarClient]


def is_valid_event_id(event_id: str) -> bool:
    """Check a caller chosen event ID against the remote service's rules."""
    if not EVENT_ID_MIN_LENGTH <= len(event_id) <= EVENT_ID_MAX_LENGTH:
        return False
    return EVENT_ID_PATTERN.match(event_id) is not None


def validate_new_event(event: Event) -> None:
    """Raise if an event lacks the fields needed to create or replace it."""
    if not event.start or not event.end:
        raise UserInputError(MISSING_DATES_MESSAGE, ErrorCode.MISSING_DATES)
    if not event.title:
        raise UserInputError(MISSING_TITLE_MESSAGE, ErrorCode.MISSING_TITLE)


def _require_event_id(event_id: Optional[str]) -> str:
    if not event_id:
        raise UserInputError(MISSING_EVENT_ID_MESSAGE, ErrorCode.MISSING_EVENT_ID)
    return event_id


def merge_event_fields(
    event: Event,
    options: ConnectorOptions,
    target: Dict[str, Any],
    timezone: str = DEFAULT_TIMEZONE
) -> Dict[str, Any]:
    """Copy the specified event fields and set options onto a remote event.

    Fields that are neither present in ``event`` nor set in ``options``
    are left as they are in ``target``. Returns ``target``.
    """
    if options.guests_can_modify is not None:
        target['guestsCanModify'] = options.guests_can_modify

    if options.private_event is not None:
        target['visibility'] = 'private' if options.private_event else 'default'

    if options.guests_can_invite_others is not None:
        target['guestsCanInviteOthers'] = options.guests_can_invite_others

    if options.guests_can_see_other_guests is not None:
        target['guestsCanSeeOtherGuests'] = options.guests_can_see_other_guests

    if event.title:
        target['summary'] = event.title

    # Empty strings clear these
    if event.location is not None:
        target['location'] = event.location

    if event.description is not None:
        target['description'] = event.description

    if event.start is not None:
        target['start'] = {'dateTime': event.start, 'timeZone': timezone}

    if event.end is not None:
        target['end'] = {'dateTime': event.end, 'timeZone': timezone}

    if event.participants is not None:
        response_status = options.response_status
        target['attendees'] = [
            {'email': email, 'responseStatus': response_status}
            for email in event.participants
        ]

    if event.organizer is not None:
        target['organizer'] = event.organizer

    return target


class EventConnector:
    """Performs one calendar operation on behalf of a domain.

    A connector is built per request with the caller's options and
    discarded afterwards. The domain is resolved against the credential
    registry before any remote call is made.
    """

    def __init__(
        self,
        domain: str,
        credential_registry,
        client_factory: ClientFactory,
        options: Optional[ConnectorOptions] = None,
        timezone: str = DEFAULT_TIMEZONE
    ):
        self.domain = domain
        self.credential_registry = credential_registry
        self.client_factory = client_factory
        self.options = options or ConnectorOptions()
        self.timezone = timezone
        self.logger = logging.getLogger(__name__)

    @contextmanager
    def _calendar_client(self) -> Iterator[CalendarClient]:
        credentials = self.credential_registry.lookup(self.domain)
        client = self.client_factory(credentials)
        try:
            yield client
        finally:
            client.close()

    def _merge(self, event: Event, target: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        return merge_event_fields(event, self.options, {} if target is None else target, self.timezone)

    @handle_exceptions("connector.create_event")
    def create_event(self, event: Event) -> str:
        """Create an event and return the ID the remote service assigned to it."""
        validate_new_event(event)
        if event.id is not None and not is_valid_event_id(event.id):
            raise UserInputError(INVALID_ID_MESSAGE, ErrorCode.INVALID_ID, {'id': event.id})

        with self._calendar_client() as client:
            body = {}
            if event.id is not None:
                body['id'] = event.id
            self._merge(event, body)

            created = client.insert_event(body, send_updates=self.options.send_updates)

        self.logger.info(f"Created event {created.get('id')} for domain {self.domain}")
        return created.get('id')

    @handle_exceptions("connector.delete_event")
    def delete_event(self, event_id: str) -> None:
        _require_event_id(event_id)
        with self._calendar_client() as client:
            client.delete_event(event_id, send_updates=self.options.send_updates)
        self.logger.info(f"Deleted event {event_id} for domain {self.domain}")

    @handle_exceptions("connector.update_event")
    def update_event(self, event: Event) -> None:
        """Replace the whole remote event with the given one."""
        event_id = _require_event_id(event.id)
        validate_new_event(event)
        with self._calendar_client() as client:
            client.update_event(event_id, self._merge(event), send_updates=self.options.send_updates)
        self.logger.info(f"Updated event {event_id} for domain {self.domain}")

    @handle_exceptions("connector.patch_event")
    def patch_event(self, event: Event) -> None:
        """Change only the fields present in the given event."""
        event_id = _require_event_id(event.id)
        with self._calendar_client() as client:
            client.patch_event(event_id, self._merge(event), send_updates=self.options.send_updates)
        self.logger.info(f"Patched event {event_id} for domain {self.domain}")

    @handle_exceptions("connector.remove_participants")
    def remove_participants(self, event_id: str, emails: Iterable[str]) -> None:
        """Drop attendees by email.

        A patch cannot empty the attendee list, so removing the last
        attendees replaces the whole fetched event instead.
        """
        _require_event_id(event_id)
        with self._calendar_client() as client:
            to_remove = set(emails)

            existing = client.get_event(event_id)
            attendees = [
                attendee for attendee in existing.get('attendees') or []
                if attendee.get('email') not in to_remove
            ]

            if attendees:
                client.patch_event(
                    event_id, {'attendees': attendees}, send_updates=self.options.send_updates
                )
            else:
                existing['attendees'] = []
                client.update_event(event_id, existing, send_updates=self.options.send_updates)

        self.logger.info(
            f"Removed participants from event {event_id} for domain {self.domain}, "
            f"{len(attendees)} remaining"
        )

    @handle_exceptions("connector.add_participants")
    def add_participants(self, event_id: str, emails: Iterable[str]) -> None:
        """Append attendees not already invited, keeping existing ones untouched."""
        _require_event_id(event_id)
        with self._calendar_client() as client:
            existing = client.get_event(event_id)
            attendees = list(existing.get('attendees') or [])
            known = {attendee.get('email') for attendee in attendees}

            for email in emails:
                if email not in known:
                    attendees.append({'email': email})
                    known.add(email)

            client.patch_event(
                event_id, {'attendees': attendees}, send_updates=self.options.send_updates
            )

        self.logger.info(
            f"Event {event_id} for domain {self.domain} now has {len(attendees)} participants"
        )

    @handle_exceptions("connector.get_calendar_event")
    def get_calendar_event(self, event_id: str) -> Dict[str, Any]:
        with self._calendar_client() as client:
            _require_event_id(event_id)
            return client.get_event(event_id)

    @handle_exceptions("connector.get_events")
    def get_events(self, time_min: str = "", time_max: str = "", show_deleted: bool = False) -> Dict[str, Any]:
        """List events between time_min and time_max; empty bounds are open."""
        with self._calendar_client() as client:
            return client.list_events(time_min, time_max, show_deleted)
