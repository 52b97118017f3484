"""Event route handlers for the Google Calendar gateway."""

import logging
from functools import wraps
from typing import List, Optional

from flask import request, jsonify

from domain import Event, ConnectorOptions
from monitoring.exceptions import (
    CalendarGatewayError, UserInputError, ErrorCode, ErrorKind
)


logger = logging.getLogger(__name__)

_TRUE_VALUES = {'1', 't', 'T', 'TRUE', 'true', 'True'}
_FALSE_VALUES = {'0', 'f', 'F', 'FALSE', 'false', 'False'}

# Query parameter name -> ConnectorOptions field
OPTION_PARAMETERS = {
    'broadcastChanges': 'notify_guests',
    'guestsCanModify': 'guests_can_modify',
    'guestsMayInvite': 'guests_can_invite_others',
    'guestsVisible': 'guests_can_see_other_guests',
    'guestsAutoAccept': 'auto_accept',
    'privateEvent': 'private_event',
}


def parse_optional_bool(name: str, value: Optional[str]) -> Optional[bool]:
    """Parse a tri-state query flag; absent or empty means unset."""
    if value is None or value == '':
        return None
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise UserInputError(
        f"invalid boolean value {value!r} for query parameter {name}",
        ErrorCode.INVALID_QUERY,
        {'parameter': name}
    )


def parse_connector_options(args) -> ConnectorOptions:
    """Build connector options from request query arguments."""
    values = {
        option: parse_optional_bool(parameter, args.get(parameter))
        for parameter, option in OPTION_PARAMETERS.items()
    }
    return ConnectorOptions(**values)


def parse_participants(raw: str) -> List[str]:
    """Split a comma separated email list from a URL path segment."""
    return [email.strip() for email in raw.split(',') if email.strip()]


def status_for(error: CalendarGatewayError) -> int:
    if error.error_code is ErrorCode.INVALID_PAYLOAD:
        return 422
    if error.kind is ErrorKind.USER:
        return 400
    return 500


def gateway_response(failure_payload: dict):
    """Render a view's result as JSON, or a classified error with failure_payload."""

    def decorator(view):
        @wraps(view)
        def wrapped(*args, **kwargs):
            try:
                payload = view(*args, **kwargs)
            except CalendarGatewayError as e:
                status = status_for(e)
                logger.debug(f"{view.__name__} failed with {status}: {e.message}")
                return jsonify({**failure_payload, 'error': e.message}), status
            return jsonify({**payload, 'error': None})
        return wrapped

    return decorator


def register_event_routes(app, build_connector):
    """Register calendar event routes.

    ``build_connector(domain, options)`` returns a fresh EventConnector.
    """

    def event_from_body() -> Event:
        return Event.from_dict(request.get_json(silent=True))

    def connector_for(domain: str):
        return build_connector(domain, parse_connector_options(request.args))

    @app.route('/<domain>/event/create', methods=['POST'])
    @gateway_response({'id': ''})
    def create_event(domain):
        """Create an event and return its remote ID."""
        event = event_from_body()
        event_id = connector_for(domain).create_event(event)
        return {'id': event_id}

    @app.route('/<domain>/event/delete/<event_id>', methods=['DELETE'])
    @gateway_response({'deleted': False})
    def delete_event(domain, event_id):
        connector_for(domain).delete_event(event_id)
        return {'deleted': True}

    @app.route('/<domain>/event/update', methods=['PUT'])
    @gateway_response({'success': False})
    def update_event(domain):
        """Overwrite an existing event."""
        event = event_from_body()
        connector_for(domain).update_event(event)
        return {'success': True}

    @app.route('/<domain>/event/patch', methods=['PATCH'])
    @gateway_response({'success': False})
    def patch_event(domain):
        """Change only the given fields of an existing event."""
        event = event_from_body()
        connector_for(domain).patch_event(event)
        return {'success': True}

    @app.route('/<domain>/event/participants/<event_id>/<participants>', methods=['POST'])
    @gateway_response({'success': False})
    def add_participants(domain, event_id, participants):
        connector_for(domain).add_participants(event_id, parse_participants(participants))
        return {'success': True}

    @app.route('/<domain>/event/participants/<event_id>/<participants>', methods=['DELETE'])
    @gateway_response({'success': False})
    def remove_participants(domain, event_id, participants):
        connector_for(domain).remove_participants(event_id, parse_participants(participants))
        return {'success': True}

    @app.route('/<domain>/event/get/<event_id>', methods=['GET'])
    @gateway_response({'event': None})
    def get_event(domain, event_id):
        event = build_connector(domain, ConnectorOptions()).get_calendar_event(event_id)
        return {'event': event}

    @app.route('/<domain>/event/list', methods=['GET'])
    @app.route('/<domain>/event/list/<start_time_min>', methods=['GET'])
    @app.route('/<domain>/event/list/<start_time_min>/<end_time_max>', methods=['GET'])
    @gateway_response({'events': None})
    def list_events(domain, start_time_min='', end_time_max=''):
        """List events starting after start_time_min and ending before end_time_max."""
        try:
            show_deleted = bool(parse_optional_bool('showDeleted', request.args.get('showDeleted')))
        except UserInputError:
            show_deleted = False

        events = build_connector(domain, ConnectorOptions()).get_events(
            start_time_min, end_time_max, show_deleted
        )
        return {'events': events}
