"""Google Calendar implementation of the remote calendar client."""

import logging
from typing import Any, Dict, Optional
from urllib.parse import quote

import requests
from google.auth.transport.requests import AuthorizedSession

from domain import CalendarClient


DEFAULT_BASE_URL = "https://www.googleapis.com/calendar/v3"


class GoogleCalendarRepository(CalendarClient):
    """Google Calendar v3 REST implementation of CalendarClient.

    Every call is a single blocking request; failures surface as
    ``requests.HTTPError`` (or the transport exception) without retry.
    """

    def __init__(
        self,
        credentials=None,
        calendar_id: str = "primary",
        base_url: str = DEFAULT_BASE_URL,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None
    ):
        if session is None and credentials is None:
            raise ValueError("Either credentials or a session is required")

        self.calendar_id = calendar_id
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self._owns_session = session is None
        self.session = AuthorizedSession(credentials) if self._owns_session else session
        self.logger = logging.getLogger(__name__)

    def _events_url(self, event_id: Optional[str] = None) -> str:
        url = f"{self.base_url}/calendars/{quote(self.calendar_id, safe='')}/events"
        if event_id is not None:
            url += f"/{quote(event_id, safe='')}"
        return url

    @staticmethod
    def _write_params(send_updates: bool) -> Dict[str, str]:
        return {'sendUpdates': 'all'} if send_updates else {}

    def _request(self, method: str, url: str, **kwargs) -> requests.Response:
        self.logger.debug(f"{method} {url} params={kwargs.get('params')}")
        response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        response.raise_for_status()
        return response

    def insert_event(self, body: Dict[str, Any], send_updates: bool = False) -> Dict[str, Any]:
        response = self._request(
            'POST', self._events_url(), json=body, params=self._write_params(send_updates)
        )
        return response.json()

    def get_event(self, event_id: str) -> Dict[str, Any]:
        return self._request('GET', self._events_url(event_id)).json()

    def update_event(self, event_id: str, body: Dict[str, Any], send_updates: bool = False) -> Dict[str, Any]:
        response = self._request(
            'PUT', self._events_url(event_id), json=body, params=self._write_params(send_updates)
        )
        return response.json()

    def patch_event(self, event_id: str, body: Dict[str, Any], send_updates: bool = False) -> Dict[str, Any]:
        response = self._request(
            'PATCH', self._events_url(event_id), json=body, params=self._write_params(send_updates)
        )
        return response.json()

    def delete_event(self, event_id: str, send_updates: bool = False) -> None:
        self._request('DELETE', self._events_url(event_id), params=self._write_params(send_updates))

    def list_events(self, time_min: str = "", time_max: str = "", show_deleted: bool = False) -> Dict[str, Any]:
        """Fetch every page of the event list and return it as one listing."""
        params = {
            'singleEvents': 'true',
            'showDeleted': 'true' if show_deleted else 'false'
        }
        if time_min:
            params['timeMin'] = time_min
        if time_max:
            params['timeMax'] = time_max

        items = []
        while True:
            listing = self._request('GET', self._events_url(), params=params).json()
            items.extend(listing.get('items', []))

            page_token = listing.get('nextPageToken')
            if not page_token:
                break
            params['pageToken'] = page_token

        listing['items'] = items
        self.logger.debug(f"Listed {len(items)} events from calendar {self.calendar_id}")
        return listing

    def close(self) -> None:
        """Close the authorized session this client opened; injected sessions stay open."""
        if self._owns_session:
            self.session.close()
