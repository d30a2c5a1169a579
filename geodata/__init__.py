"""
geodata - client for a remote geospatial processing API.

Translates parameter mappings into form-encoded requests, sends them over
HTTP (blocking or async) and unwraps the {"data"} / {"error"} envelope.

Quick Start:
    >>> from geodata import DataClient
    >>>
    >>> client = DataClient()
    >>> client.initialize("https://example.org/api")
    >>> mapid = client.get_map_id({"image": image_json, "bands": ["B4", "B3", "B2"]})
    >>> url = client.get_tile_url(mapid, x=5, y=3, z=4)

Module-level functions on a shared client live in geodata.data.
"""

from .client import DataClient
from .config import DataClientSettings, get_data_client_settings
from .exceptions import (
    DataClientError,
    MalformedResponseError,
    ServerError,
    TransportError,
)
from .models import DownloadId, MapId, TaskState, TaskStatus, ThumbId
from .query import build_query
from .response import DataResponse, handle_response
from .transport import HttpxTransport, MockTransport, Transport, TransportRequest

__version__ = "0.1.0"

__all__ = [
    "__version__",
    # Client
    "DataClient",
    "DataClientSettings",
    "get_data_client_settings",
    # Transports
    "Transport",
    "TransportRequest",
    "HttpxTransport",
    "MockTransport",
    # Envelope
    "build_query",
    "handle_response",
    "DataResponse",
    # Models
    "MapId",
    "ThumbId",
    "DownloadId",
    "TaskState",
    "TaskStatus",
    # Errors
    "DataClientError",
    "MalformedResponseError",
    "ServerError",
    "TransportError",
]
