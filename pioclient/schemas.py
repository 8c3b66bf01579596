"""
pioclient Schemas
Request and response models exchanged with the event and engine servers.

Field names are snake_case in Python and camelCase on the wire; build models
with either spelling. Optional fields that were never set are left out of
request bodies instead of being sent as explicit nulls, which the event
server relies on for ``$set`` / ``$unset`` partial updates.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    JsonValue,
    ValidationInfo,
    field_serializer,
    field_validator,
    model_validator,
)

from .utils import format_event_time


# ============================================================================
# Request Models
# ============================================================================

class EventRecord(BaseModel):
    """A single event sent to, or read back from, the event server."""

    model_config = ConfigDict(populate_by_name=True, frozen=True, coerce_numbers_to_str=True)

    # mandatory fields
    event: str = Field(..., description="Event name, e.g. $set or view")
    entity_type: str = Field(..., alias="entityType")
    entity_id: str = Field(..., alias="entityId")

    # optional fields
    target_entity_type: Optional[str] = Field(default=None, alias="targetEntityType")
    target_entity_id: Optional[str] = Field(default=None, alias="targetEntityId")
    properties: Optional[Dict[str, JsonValue]] = None
    event_time: Optional[datetime] = Field(default=None, alias="eventTime")

    # set by the server
    event_id: Optional[str] = Field(default=None, alias="eventId")
    creation_time: Optional[datetime] = Field(default=None, alias="creationTime")

    @field_serializer("event_time", "creation_time")
    def _serialize_time(self, value: Optional[datetime]) -> Optional[str]:
        if value is None:
            return None
        return format_event_time(value)

    def to_payload(self) -> Dict[str, Any]:
        """JSON-ready request body with unset optional fields omitted."""
        data = self.model_dump(mode="json", by_alias=True)
        return {key: value for key, value in data.items() if value is not None}


# ============================================================================
# Response Models
# ============================================================================

class ApiResponse(BaseModel):
    """Outcome of an event write."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    status: int = 0
    message: str = ""
    event_id: str = Field(default="", alias="eventId")

    @model_validator(mode="before")
    @classmethod
    def _status_from_response(cls, data: Any, info: ValidationInfo) -> Any:
        # The server only reports the status through the HTTP status line
        if isinstance(data, dict) and "status" not in data and info.context:
            data = {**data, "status": info.context.get("status_code", 0)}
        return data

    @field_validator("message", "event_id", mode="before")
    @classmethod
    def _null_as_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @property
    def succeeded(self) -> bool:
        return bool(self.event_id) and not self.message


class ItemScore(BaseModel):
    """One recommended item and its relevance score."""

    model_config = ConfigDict(frozen=True, coerce_numbers_to_str=True)

    item: str
    score: float


class ItemScores(BaseModel):
    """Ranked recommendation list, in the order the engine returned it."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    item_scores: List[ItemScore] = Field(default_factory=list, alias="itemScores")


class ServerStatus(BaseModel):
    """Body of the liveness check."""

    model_config = ConfigDict(extra="allow", frozen=True)

    status: str = ""
