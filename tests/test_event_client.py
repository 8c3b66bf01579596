import json
from datetime import datetime, timezone

import httpx
import pytest
import respx

from pioclient import EventClient, EventRecord, InvalidArgumentError
from pioclient import event_client as event_client_module

EVENT_TIME = datetime(2024, 3, 1, 12, 30, 45, 123000, tzinfo=timezone.utc)


def _created(event_id: str = "e1") -> httpx.Response:
    return httpx.Response(201, json={"eventId": event_id})


def _body(route: respx.Route) -> dict:
    return json.loads(route.calls.last.request.content)


@pytest.fixture
def events_route(event_router: respx.MockRouter) -> respx.Route:
    return event_router.post("/events.json").mock(return_value=_created())


def test_create_event(event_client: EventClient, events_route: respx.Route):
    record = EventRecord(event="rate", entity_type="user", entity_id="u1",
                         properties={"rating": 5}, event_time=EVENT_TIME)

    response = event_client.create_event(record)

    assert response.succeeded
    assert response.event_id == "e1"
    assert response.status == 201
    assert _body(events_route) == {
        "event": "rate",
        "entityType": "user",
        "entityId": "u1",
        "properties": {"rating": 5},
        "eventTime": "2024-03-01T12:30:45.123+00:00",
    }


def test_create_event_stamps_missing_time(event_client: EventClient, events_route: respx.Route,
                                          monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(event_client_module, "utc_now", lambda: EVENT_TIME)

    event_client.create_event(EventRecord(event="rate", entity_type="user", entity_id="u1"))

    assert _body(events_route)["eventTime"] == "2024-03-01T12:30:45.123+00:00"


def test_get_event(event_client: EventClient, event_router: respx.MockRouter):
    route = event_router.get("/events/abc123.json").mock(return_value=httpx.Response(200, json={
        "eventId": "abc123",
        "event": "view",
        "entityType": "user",
        "entityId": "u1",
        "targetEntityType": "item",
        "targetEntityId": "i7",
        "properties": {},
        "eventTime": "2024-03-01T12:30:45.123Z",
        "creationTime": "2024-03-01T12:30:46.000Z",
    }))

    record = event_client.get_event("abc123")

    assert route.calls.last.request.url.params["accessKey"] == "K"
    assert record.event_id == "abc123"
    assert record.event == "view"
    assert record.target_entity_id == "i7"
    assert record.event_time == EVENT_TIME


def test_get_event_requires_id(event_client: EventClient, event_router: respx.MockRouter):
    with pytest.raises(InvalidArgumentError):
        event_client.get_event("")

    assert not event_router.calls


def test_set_entity_omits_unset_fields(event_client: EventClient, events_route: respx.Route):
    event_client.set_entity("user", "u1", {"name": "ann"}, EVENT_TIME)

    assert _body(events_route) == {
        "event": "$set",
        "entityType": "user",
        "entityId": "u1",
        "properties": {"name": "ann"},
        "eventTime": "2024-03-01T12:30:45.123+00:00",
    }


def test_set_entity_with_empty_properties(event_client: EventClient, events_route: respx.Route):
    event_client.set_item("i1")

    body = _body(events_route)
    assert body["properties"] == {}
    assert body["entityType"] == "item"


def test_unset_entity_expands_names(event_client: EventClient, events_route: respx.Route):
    event_client.unset_user("u1", ["name", "age"], EVENT_TIME)

    body = _body(events_route)
    assert body["event"] == "$unset"
    assert body["properties"] == {"name": "", "age": ""}


def test_unset_entity_single_name(event_client: EventClient, events_route: respx.Route):
    event_client.unset_item("i1", "color")

    assert _body(events_route)["properties"] == {"color": ""}


@pytest.mark.parametrize("names", [[], (), iter([])])
def test_unset_entity_rejects_empty_list(event_client: EventClient, event_router: respx.MockRouter, names):
    route = event_router.post("/events.json").mock(return_value=_created())

    with pytest.raises(InvalidArgumentError):
        event_client.unset_entity("user", "u1", names)
    with pytest.raises(InvalidArgumentError):
        event_client.unset_entity_async("user", "u1", names)

    assert route.call_count == 0


def test_delete_entity(event_client: EventClient, events_route: respx.Route):
    event_client.delete_user("u1", EVENT_TIME)

    assert _body(events_route) == {
        "event": "$delete",
        "entityType": "user",
        "entityId": "u1",
        "eventTime": "2024-03-01T12:30:45.123+00:00",
    }


def test_delete_item(event_client: EventClient, events_route: respx.Route):
    event_client.delete_item("i1")

    body = _body(events_route)
    assert (body["event"], body["entityType"], body["entityId"]) == ("$delete", "item", "i1")
    assert "properties" not in body


def test_set_item_categories(event_client: EventClient, events_route: respx.Route):
    event_client.set_item_categories("i1", ("1", "2"))

    assert _body(events_route)["properties"] == {"categories": ["1", "2"]}


def test_record_action_view(event_client: EventClient, events_route: respx.Route):
    event_client.record_action("view", "u1", "i7")

    body = _body(events_route)
    assert body["event"] == "view"
    assert body["entityType"] == "user"
    assert body["entityId"] == "u1"
    assert body["targetEntityType"] == "item"
    assert body["targetEntityId"] == "i7"
    assert "properties" not in body


def test_record_action_with_properties(event_client: EventClient, events_route: respx.Route):
    event_client.record_action("rate", "u1", "i7", {"rating": 4.5}, EVENT_TIME)

    body = _body(events_route)
    assert body["properties"] == {"rating": 4.5}
    assert body["eventTime"] == "2024-03-01T12:30:45.123+00:00"


def test_view_and_buy(event_client: EventClient, events_route: respx.Route):
    event_client.view("u1", "i1")
    event_client.buy_async("u1", "i2").result()

    sent = [json.loads(call.request.content) for call in events_route.calls]
    assert [(b["event"], b["targetEntityId"]) for b in sent] == [("view", "i1"), ("buy", "i2")]


def test_default_time_resolved_per_call(event_client: EventClient, events_route: respx.Route,
                                        monkeypatch: pytest.MonkeyPatch):
    times = iter([
        datetime(2024, 1, 1, 0, 0, 0, tzinfo=timezone.utc),
        datetime(2024, 1, 1, 0, 0, 1, tzinfo=timezone.utc),
    ])
    monkeypatch.setattr(event_client_module, "utc_now", lambda: next(times))

    first = event_client.set_user_async("u1", {"a": 1})
    second = event_client.set_user_async("u1", {"a": 1})
    first.result()
    second.result()

    stamps = sorted(json.loads(call.request.content)["eventTime"] for call in events_route.calls)
    assert stamps == ["2024-01-01T00:00:00.000+00:00", "2024-01-01T00:00:01.000+00:00"]


def test_concurrent_calls_are_correlated(event_client: EventClient, event_router: respx.MockRouter):
    def echo(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        return _created(f"ev-{body['entityId']}-{body['properties']['n']}")

    event_router.post("/events.json").mock(side_effect=echo)

    futures = [event_client.set_entity_async("user", f"u{i}", {"n": i}) for i in range(100)]
    responses = [future.result(timeout=30) for future in futures]

    assert [r.event_id for r in responses] == [f"ev-u{i}-{i}" for i in range(100)]
    assert all(r.succeeded for r in responses)
