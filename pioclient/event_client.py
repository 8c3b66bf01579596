"""
pioclient Event Client
Imports events into the event server and reads them back.

Every method has a blocking form and an ``*_async`` form returning a
``concurrent.futures.Future``. When ``event_time`` is omitted the event is
stamped with the time the method was called.
"""

from concurrent.futures import Future
from datetime import datetime
from typing import Any, Iterable, Mapping, Optional
from urllib.parse import quote

import httpx

from .base import BaseClient
from .config import DEFAULT_EVENT_URL, ClientConfig
from .exceptions import InvalidArgumentError
from .schemas import ApiResponse, EventRecord
from .utils import utc_now

EVENTS_PATH = "/events.json"

SET_EVENT = "$set"
UNSET_EVENT = "$unset"
DELETE_EVENT = "$delete"

USER = "user"
ITEM = "item"


class EventClient(BaseClient):
    """
    Client for the event API.

    Usage:
        with EventClient("ACCESS_KEY") as client:
            client.set_user("u1", {"name": "ann"})
            futures = [client.view_async("u1", iid) for iid in ("i1", "i2")]
            responses = [f.result() for f in futures]
    """

    def __init__(
        self,
        access_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        config: Optional[ClientConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        config = config or ClientConfig.from_env("PIO_EVENT", DEFAULT_EVENT_URL)
        super().__init__(access_key, config.replace(base_url, timeout), transport)

    # ------------------------------------------------------------------
    # Generic events
    # ------------------------------------------------------------------

    def create_event_async(self, record: EventRecord) -> Future:
        """Send an event; resolves to an ApiResponse carrying the new event id."""
        if record.event_time is None:
            record = record.model_copy(update={"event_time": utc_now()})
        return self.execute_async(EVENTS_PATH, "POST", record.to_payload(), ApiResponse)

    def create_event(self, record: EventRecord) -> ApiResponse:
        return self._wait(self.create_event_async(record))

    def get_event_async(self, event_id: str) -> Future:
        """Fetch one event by id; resolves to an EventRecord."""
        if not event_id:
            raise InvalidArgumentError("event id cannot be empty")
        return self.execute_async(f"/events/{quote(event_id, safe='')}.json", "GET", model=EventRecord)

    def get_event(self, event_id: str) -> EventRecord:
        return self._wait(self.get_event_async(event_id))

    # ------------------------------------------------------------------
    # Entity properties
    # ------------------------------------------------------------------

    def set_entity_async(
        self,
        entity_type: str,
        entity_id: str,
        properties: Optional[Mapping[str, Any]] = None,
        event_time: Optional[datetime] = None,
    ) -> Future:
        """
        Set properties of an entity, creating it if it does not exist yet.
        Properties may be empty.
        """
        return self.create_event_async(EventRecord(
            event=SET_EVENT,
            entity_type=entity_type,
            entity_id=entity_id,
            properties=dict(properties or {}),
            event_time=event_time or utc_now(),
        ))

    def set_entity(
        self,
        entity_type: str,
        entity_id: str,
        properties: Optional[Mapping[str, Any]] = None,
        event_time: Optional[datetime] = None,
    ) -> ApiResponse:
        return self._wait(self.set_entity_async(entity_type, entity_id, properties, event_time))

    def unset_entity_async(
        self,
        entity_type: str,
        entity_id: str,
        property_names: Iterable[str],
        event_time: Optional[datetime] = None,
    ) -> Future:
        """Unset properties of an entity. The name list must not be empty."""
        if isinstance(property_names, str):
            property_names = [property_names]
        names = list(property_names)
        if not names:
            raise InvalidArgumentError("property list cannot be empty")

        # the server only reads the keys
        return self.create_event_async(EventRecord(
            event=UNSET_EVENT,
            entity_type=entity_type,
            entity_id=entity_id,
            properties={name: "" for name in names},
            event_time=event_time or utc_now(),
        ))

    def unset_entity(
        self,
        entity_type: str,
        entity_id: str,
        property_names: Iterable[str],
        event_time: Optional[datetime] = None,
    ) -> ApiResponse:
        return self._wait(self.unset_entity_async(entity_type, entity_id, property_names, event_time))

    def delete_entity_async(
        self,
        entity_type: str,
        entity_id: str,
        event_time: Optional[datetime] = None,
    ) -> Future:
        return self.create_event_async(EventRecord(
            event=DELETE_EVENT,
            entity_type=entity_type,
            entity_id=entity_id,
            event_time=event_time or utc_now(),
        ))

    def delete_entity(
        self,
        entity_type: str,
        entity_id: str,
        event_time: Optional[datetime] = None,
    ) -> ApiResponse:
        return self._wait(self.delete_entity_async(entity_type, entity_id, event_time))

    # ------------------------------------------------------------------
    # User / item shorthands
    # ------------------------------------------------------------------

    def set_user_async(self, uid: str, properties: Optional[Mapping[str, Any]] = None,
                       event_time: Optional[datetime] = None) -> Future:
        return self.set_entity_async(USER, uid, properties, event_time)

    def set_user(self, uid: str, properties: Optional[Mapping[str, Any]] = None,
                 event_time: Optional[datetime] = None) -> ApiResponse:
        return self._wait(self.set_user_async(uid, properties, event_time))

    def unset_user_async(self, uid: str, property_names: Iterable[str],
                         event_time: Optional[datetime] = None) -> Future:
        return self.unset_entity_async(USER, uid, property_names, event_time)

    def unset_user(self, uid: str, property_names: Iterable[str],
                   event_time: Optional[datetime] = None) -> ApiResponse:
        return self._wait(self.unset_user_async(uid, property_names, event_time))

    def delete_user_async(self, uid: str, event_time: Optional[datetime] = None) -> Future:
        return self.delete_entity_async(USER, uid, event_time)

    def delete_user(self, uid: str, event_time: Optional[datetime] = None) -> ApiResponse:
        return self._wait(self.delete_user_async(uid, event_time))

    def set_item_async(self, iid: str, properties: Optional[Mapping[str, Any]] = None,
                       event_time: Optional[datetime] = None) -> Future:
        return self.set_entity_async(ITEM, iid, properties, event_time)

    def set_item(self, iid: str, properties: Optional[Mapping[str, Any]] = None,
                 event_time: Optional[datetime] = None) -> ApiResponse:
        return self._wait(self.set_item_async(iid, properties, event_time))

    def unset_item_async(self, iid: str, property_names: Iterable[str],
                         event_time: Optional[datetime] = None) -> Future:
        return self.unset_entity_async(ITEM, iid, property_names, event_time)

    def unset_item(self, iid: str, property_names: Iterable[str],
                   event_time: Optional[datetime] = None) -> ApiResponse:
        return self._wait(self.unset_item_async(iid, property_names, event_time))

    def delete_item_async(self, iid: str, event_time: Optional[datetime] = None) -> Future:
        return self.delete_entity_async(ITEM, iid, event_time)

    def delete_item(self, iid: str, event_time: Optional[datetime] = None) -> ApiResponse:
        return self._wait(self.delete_item_async(iid, event_time))

    def set_item_categories_async(self, iid: str, categories: Iterable[str],
                                  event_time: Optional[datetime] = None) -> Future:
        """Set the ``categories`` property of an item."""
        return self.set_item_async(iid, {"categories": list(categories)}, event_time)

    def set_item_categories(self, iid: str, categories: Iterable[str],
                            event_time: Optional[datetime] = None) -> ApiResponse:
        return self._wait(self.set_item_categories_async(iid, categories, event_time))

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def record_action_async(
        self,
        action: str,
        uid: str,
        iid: str,
        properties: Optional[Mapping[str, Any]] = None,
        event_time: Optional[datetime] = None,
    ) -> Future:
        """Record that user ``uid`` performed ``action`` on item ``iid``."""
        return self.create_event_async(EventRecord(
            event=action,
            entity_type=USER,
            entity_id=uid,
            target_entity_type=ITEM,
            target_entity_id=iid,
            properties=dict(properties) if properties is not None else None,
            event_time=event_time or utc_now(),
        ))

    def record_action(
        self,
        action: str,
        uid: str,
        iid: str,
        properties: Optional[Mapping[str, Any]] = None,
        event_time: Optional[datetime] = None,
    ) -> ApiResponse:
        return self._wait(self.record_action_async(action, uid, iid, properties, event_time))

    def view_async(self, uid: str, iid: str) -> Future:
        return self.record_action_async("view", uid, iid)

    def view(self, uid: str, iid: str) -> ApiResponse:
        return self._wait(self.view_async(uid, iid))

    def buy_async(self, uid: str, iid: str) -> Future:
        return self.record_action_async("buy", uid, iid)

    def buy(self, uid: str, iid: str) -> ApiResponse:
        return self._wait(self.buy_async(uid, iid))
