"""Shared fixtures for the Google Calendar gateway tests."""

import copy
import sys
from pathlib import Path
from typing import Any, Dict, List, Tuple

import pytest

# Project modules live at the repository root
root_path = Path(__file__).parent.parent
if str(root_path) not in sys.path:
    sys.path.insert(0, str(root_path))

from application import EventConnector  # noqa: E402
from domain import CalendarClient, ConnectorOptions  # noqa: E402
from infrastructure import CredentialRegistry  # noqa: E402
from monitoring import error_handler  # noqa: E402


DOMAIN = "example.org"


class FakeCalendarClient(CalendarClient):
    """In-memory calendar that records every call made to it."""

    def __init__(self, events: Dict[str, Dict[str, Any]] = None):
        self.events = events or {}
        self.calls: List[Tuple[str, tuple, dict]] = []
        self.next_id = "generated1"
        self.close_count = 0

    def _record(self, name, *args, **kwargs):
        self.calls.append((name, args, kwargs))

    def insert_event(self, body, send_updates=False):
        self._record('insert', copy.deepcopy(body), send_updates=send_updates)
        created = dict(body)
        created.setdefault('id', self.next_id)
        self.events[created['id']] = created
        return created

    def get_event(self, event_id):
        self._record('get', event_id)
        return copy.deepcopy(self.events[event_id])

    def update_event(self, event_id, body, send_updates=False):
        self._record('update', event_id, copy.deepcopy(body), send_updates=send_updates)
        self.events[event_id] = dict(body)
        return body

    def patch_event(self, event_id, body, send_updates=False):
        self._record('patch', event_id, copy.deepcopy(body), send_updates=send_updates)
        self.events.setdefault(event_id, {}).update(body)
        return self.events[event_id]

    def delete_event(self, event_id, send_updates=False):
        self._record('delete', event_id, send_updates=send_updates)
        self.events.pop(event_id, None)

    def list_events(self, time_min="", time_max="", show_deleted=False):
        self._record('list', time_min, time_max, show_deleted)
        return {'kind': 'calendar#events', 'items': list(self.events.values())}

    def close(self):
        self.close_count += 1

    @property
    def call_names(self) -> List[str]:
        return [name for name, _, _ in self.calls]


@pytest.fixture(autouse=True)
def reset_error_stats():
    error_handler.reset_stats()
    yield
    error_handler.reset_stats()


@pytest.fixture
def fake_client() -> FakeCalendarClient:
    return FakeCalendarClient()


@pytest.fixture
def credentials() -> object:
    return object()


@pytest.fixture
def registry(credentials) -> CredentialRegistry:
    return CredentialRegistry({DOMAIN: credentials})


@pytest.fixture
def client_factory(fake_client):
    """Client factory that hands out fake_client and remembers the credentials it got."""
    received = []

    def factory(credentials):
        received.append(credentials)
        return fake_client

    factory.received = received
    return factory


@pytest.fixture
def make_connector(registry, client_factory):
    def _make(domain: str = DOMAIN, **options) -> EventConnector:
        return EventConnector(
            domain, registry, client_factory, options=ConnectorOptions(**options)
        )
    return _make
