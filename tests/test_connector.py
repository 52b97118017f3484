"""Tests for the event connector operations."""

import pytest
import requests

from domain import Event
from monitoring import (
    UserInputError, DomainUnknownError, RemoteServiceError, ErrorCode, ErrorKind
)


def _complete_event(**fields):
    values = dict(title='Planning', start='2024-05-01T09:00:00', end='2024-05-01T10:00:00')
    values.update(fields)
    return Event(**values)


def test_create_event_returns_remote_id(make_connector, fake_client, client_factory, credentials):
    event_id = make_connector().create_event(_complete_event(location='Room 2'))

    assert event_id == 'generated1'
    name, (body,), kwargs = fake_client.calls[0]
    assert name == 'insert'
    assert body == {
        'summary': 'Planning',
        'location': 'Room 2',
        'start': {'dateTime': '2024-05-01T09:00:00', 'timeZone': 'Europe/Oslo'},
        'end': {'dateTime': '2024-05-01T10:00:00', 'timeZone': 'Europe/Oslo'},
    }
    assert kwargs == {'send_updates': False}
    assert client_factory.received == [credentials]


def test_create_event_keeps_caller_id_and_notifies(make_connector, fake_client):
    event_id = make_connector(notify_guests=True).create_event(_complete_event(id='abc123'))

    assert event_id == 'abc123'
    _, (body,), kwargs = fake_client.calls[0]
    assert body['id'] == 'abc123'
    assert kwargs == {'send_updates': True}


@pytest.mark.parametrize("event, code", [
    (Event(title='t', end='e'), ErrorCode.MISSING_DATES),
    (Event(title='t', start='s'), ErrorCode.MISSING_DATES),
    (Event(start='s', end='e'), ErrorCode.MISSING_TITLE),
    (_complete_event(id='abc'), ErrorCode.INVALID_ID),
    (_complete_event(id='Has-Dash'), ErrorCode.INVALID_ID),
])
def test_create_event_rejects_bad_input_without_remote_call(make_connector, fake_client, client_factory, event, code):
    with pytest.raises(UserInputError) as exc_info:
        make_connector().create_event(event)

    assert exc_info.value.error_code is code
    assert exc_info.value.kind is ErrorKind.USER
    assert fake_client.calls == []
    assert client_factory.received == []


def test_create_event_unknown_domain(make_connector, fake_client):
    with pytest.raises(DomainUnknownError):
        make_connector('unknown.org').create_event(_complete_event())

    assert fake_client.calls == []


def test_delete_event(make_connector, fake_client):
    fake_client.events['abcde'] = {'id': 'abcde'}

    make_connector(notify_guests=True).delete_event('abcde')

    assert fake_client.calls == [('delete', ('abcde',), {'send_updates': True})]
    assert 'abcde' not in fake_client.events


def test_delete_event_requires_id(make_connector, fake_client):
    with pytest.raises(UserInputError) as exc_info:
        make_connector().delete_event('')

    assert exc_info.value.error_code is ErrorCode.MISSING_EVENT_ID
    assert fake_client.calls == []


def test_update_event_replaces_from_blank(make_connector, fake_client):
    make_connector(private_event=True).update_event(_complete_event(id='evt01'))

    name, (event_id, body), kwargs = fake_client.calls[0]
    assert name == 'update'
    assert event_id == 'evt01'
    assert body == {
        'visibility': 'private',
        'summary': 'Planning',
        'start': {'dateTime': '2024-05-01T09:00:00', 'timeZone': 'Europe/Oslo'},
        'end': {'dateTime': '2024-05-01T10:00:00', 'timeZone': 'Europe/Oslo'},
    }


def test_update_event_requires_id_before_fields(make_connector, fake_client):
    with pytest.raises(UserInputError) as exc_info:
        make_connector().update_event(Event(title='no dates'))

    assert exc_info.value.error_code is ErrorCode.MISSING_EVENT_ID


@pytest.mark.parametrize("event, code", [
    (Event(id='evt01', title='t'), ErrorCode.MISSING_DATES),
    (Event(id='evt01', start='s', end='e'), ErrorCode.MISSING_TITLE),
])
def test_update_event_validates_like_create(make_connector, fake_client, event, code):
    with pytest.raises(UserInputError) as exc_info:
        make_connector().update_event(event)

    assert exc_info.value.error_code is code
    assert fake_client.calls == []


def test_patch_event_sends_only_given_fields(make_connector, fake_client):
    make_connector().patch_event(Event(id='evt01', description=''))

    assert fake_client.calls == [('patch', ('evt01', {'description': ''}), {'send_updates': False})]


def test_patch_event_with_only_id_sends_options(make_connector, fake_client):
    make_connector(guests_can_modify=True).patch_event(Event(id='evt01'))

    assert fake_client.calls == [('patch', ('evt01', {'guestsCanModify': True}), {'send_updates': False})]


@pytest.mark.parametrize("event_id", [None, ''])
def test_patch_event_requires_id(make_connector, fake_client, event_id):
    with pytest.raises(UserInputError) as exc_info:
        make_connector().patch_event(Event(id=event_id, title='t'))

    assert exc_info.value.error_code is ErrorCode.MISSING_EVENT_ID
    assert fake_client.calls == []


def test_add_participants_skips_existing_and_appends_new(make_connector, fake_client):
    fake_client.events['e1'] = {
        'id': 'e1',
        'summary': 'Planning',
        'attendees': [{'email': 'a@x.com', 'responseStatus': 'accepted'}],
    }

    make_connector().add_participants('e1', ['a@x.com', 'b@x.com'])

    name, (event_id, body), _ = fake_client.calls[-1]
    assert name == 'patch'
    assert event_id == 'e1'
    assert body == {
        'attendees': [
            {'email': 'a@x.com', 'responseStatus': 'accepted'},
            {'email': 'b@x.com'},
        ]
    }


def test_add_participants_ignores_repeated_input_and_keeps_case(make_connector, fake_client):
    fake_client.events['e1'] = {'id': 'e1'}

    make_connector().add_participants('e1', ['b@x.com', 'b@x.com', 'B@x.com'])

    _, (_, body), _ = fake_client.calls[-1]
    assert body == {'attendees': [{'email': 'b@x.com'}, {'email': 'B@x.com'}]}


def test_add_participants_honors_notify_option(make_connector, fake_client):
    fake_client.events['e1'] = {'id': 'e1', 'attendees': []}

    make_connector(notify_guests=True).add_participants('e1', ['a@x.com'])

    assert fake_client.calls[-1][2] == {'send_updates': True}


def test_add_participants_requires_id(make_connector, fake_client):
    with pytest.raises(UserInputError) as exc_info:
        make_connector().add_participants('', ['a@x.com'])

    assert exc_info.value.error_code is ErrorCode.MISSING_EVENT_ID
    assert fake_client.calls == []


def test_remove_participants_patches_remaining(make_connector, fake_client):
    fake_client.events['e1'] = {
        'id': 'e1',
        'attendees': [{'email': 'a@x.com'}, {'email': 'b@x.com', 'responseStatus': 'declined'}],
    }

    make_connector().remove_participants('e1', ['a@x.com'])

    assert fake_client.call_names == ['get', 'patch']
    _, (event_id, body), _ = fake_client.calls[-1]
    assert body == {'attendees': [{'email': 'b@x.com', 'responseStatus': 'declined'}]}


def test_remove_last_participants_replaces_whole_event(make_connector, fake_client):
    fake_client.events['e1'] = {
        'id': 'e1',
        'summary': 'Planning',
        'attendees': [{'email': 'a@x.com'}, {'email': 'b@x.com'}],
    }

    make_connector(notify_guests=True).remove_participants('e1', ['a@x.com', 'b@x.com'])

    assert fake_client.call_names == ['get', 'update']
    _, (event_id, body), kwargs = fake_client.calls[-1]
    assert event_id == 'e1'
    assert body == {'id': 'e1', 'summary': 'Planning', 'attendees': []}
    assert kwargs == {'send_updates': True}


def test_remove_participants_from_event_without_attendees(make_connector, fake_client):
    fake_client.events['e1'] = {'id': 'e1'}

    make_connector().remove_participants('e1', ['a@x.com'])

    assert fake_client.call_names == ['get', 'update']
    assert fake_client.events['e1']['attendees'] == []


def test_get_calendar_event(make_connector, fake_client):
    fake_client.events['e1'] = {'id': 'e1', 'summary': 'Planning'}

    assert make_connector().get_calendar_event('e1') == {'id': 'e1', 'summary': 'Planning'}


def test_get_events_passes_window_and_deleted_flag(make_connector, fake_client):
    listing = make_connector().get_events('2024-01-01T00:00:00Z', '', True)

    assert listing['items'] == []
    assert fake_client.calls == [('list', ('2024-01-01T00:00:00Z', '', True), {})]


@pytest.mark.parametrize("window", [('', ''), ('2024-01-01T00:00:00Z', '2024-02-01T00:00:00Z')])
def test_get_events_unknown_domain_makes_no_remote_call(make_connector, fake_client, client_factory, window):
    with pytest.raises(DomainUnknownError) as exc_info:
        make_connector('unknown.org').get_events(*window)

    assert exc_info.value.error_code is ErrorCode.DOMAIN_UNKNOWN
    assert fake_client.calls == []
    assert client_factory.received == []


def test_get_calendar_event_unknown_domain(make_connector, fake_client):
    with pytest.raises(DomainUnknownError):
        make_connector('unknown.org').get_calendar_event('e1')

    assert fake_client.calls == []


def test_remote_failure_becomes_infrastructure_error(make_connector, fake_client, monkeypatch):
    response = requests.Response()
    response.status_code = 404
    response._content = b'{"error": "Not Found"}'
    error = requests.HTTPError("404 Client Error: Not Found", response=response)

    def _raise(event_id):
        raise error

    monkeypatch.setattr(fake_client, 'get_event', _raise)

    with pytest.raises(RemoteServiceError) as exc_info:
        make_connector().add_participants('e1', ['a@x.com'])

    assert exc_info.value.kind is ErrorKind.INFRASTRUCTURE
    assert exc_info.value.status_code == 404
    assert exc_info.value.message == "404 Client Error: Not Found"
    assert exc_info.value.cause is error


@pytest.mark.parametrize("operation", [
    lambda connector: connector.delete_event('evt01'),
    lambda connector: connector.update_event(_complete_event(id='evt01')),
    lambda connector: connector.patch_event(Event(id='evt01', title='Moved')),
    lambda connector: connector.add_participants('evt01', ['a@x.com']),
    lambda connector: connector.remove_participants('evt01', ['a@x.com']),
], ids=['delete', 'update', 'patch', 'add_participants', 'remove_participants'])
def test_mutations_unknown_domain_make_no_remote_call(make_connector, fake_client, client_factory, operation):
    fake_client.events['evt01'] = {'id': 'evt01', 'attendees': [{'email': 'a@x.com'}]}

    with pytest.raises(DomainUnknownError):
        operation(make_connector('unknown.org'))

    assert fake_client.calls == []
    assert client_factory.received == []


def test_client_is_closed_after_each_operation(make_connector, fake_client):
    fake_client.events['e1'] = {'id': 'e1', 'attendees': [{'email': 'a@x.com'}]}
    connector = make_connector()

    connector.get_calendar_event('e1')
    connector.add_participants('e1', ['b@x.com'])
    connector.get_events()

    assert fake_client.close_count == 3


def test_client_is_closed_when_remote_call_fails(make_connector, fake_client, monkeypatch):
    def _raise(event_id, send_updates=False):
        raise requests.ConnectionError("connection reset")

    monkeypatch.setattr(fake_client, 'delete_event', _raise)

    with pytest.raises(RemoteServiceError):
        make_connector().delete_event('evt01')

    assert fake_client.close_count == 1
