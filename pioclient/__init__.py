"""pioclient - Python client for PredictionIO-style event and engine servers"""

import logging

from .config import (
    ClientConfig,
    DEFAULT_EVENT_CONFIG,
    DEFAULT_ENGINE_CONFIG,
)
from .exceptions import (
    PioClientError,
    InvalidArgumentError,
    TransportError,
    ParseError,
    ClientClosedError,
)
from .schemas import ApiResponse, EventRecord, ItemScore, ItemScores
from .base import BaseClient
from .event_client import EventClient
from .engine_client import EngineClient, build_query

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "1.0.0"
__all__ = [
    "ClientConfig",
    "DEFAULT_EVENT_CONFIG",
    "DEFAULT_ENGINE_CONFIG",
    "PioClientError",
    "InvalidArgumentError",
    "TransportError",
    "ParseError",
    "ClientClosedError",
    "ApiResponse",
    "EventRecord",
    "ItemScore",
    "ItemScores",
    "BaseClient",
    "EventClient",
    "EngineClient",
    "build_query",
]
