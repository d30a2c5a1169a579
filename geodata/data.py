# ============================================================================
# MODULE CONTEXT - MODULE-LEVEL DATA API
# ============================================================================
# STATUS: Service Layer - process-wide default client
# PURPOSE: Function-style access to one shared DataClient
# EXPORTS: initialize, reset, set_timeout, set_deadline, get_* / *_async endpoint
#          functions, URL helpers, get_default_client, set_default_client, setup_mock_send
# DEPENDENCIES: geodata.client
# PATTERNS: Lazily created singleton guarded by a lock
# ============================================================================
"""
Module-level data API.

For scripts that want one process-wide client:

    from geodata import data

    data.initialize("https://example.org/api")
    info = data.get_info("users/alice/image")

Applications that need several configurations should create DataClient
instances instead; every function here just delegates to the default one.

Tests swap the network out with:

    mock = data.setup_mock_send({"/api/info": '{"data": {"id": "x"}}'})
"""

from threading import Lock
from typing import Any, Mapping, Optional

from .client import Callback, DataClient
from .transport import MockTransport

_default_client: Optional[DataClient] = None
_default_lock = Lock()


def get_default_client() -> DataClient:
    """Get or create the process-wide client."""
    global _default_client
    with _default_lock:
        if _default_client is None:
            _default_client = DataClient()
        return _default_client


def set_default_client(client: Optional[DataClient]) -> None:
    """Replace the process-wide client; None makes the next call create a fresh one."""
    global _default_client
    with _default_lock:
        _default_client = client


def setup_mock_send(calls: Optional[Mapping[str, Any]] = None) -> MockTransport:
    """
    Route the default client's requests to a MockTransport.

    Args:
        calls: URL -> response body string, or callable(request) -> body.
            Unlisted URLs echo the request back.

    The transport it replaces is closed.

    Returns:
        The installed MockTransport, whose .requests records every call
    """
    mock = MockTransport(calls)
    get_default_client().set_transport(mock)
    return mock


# ============================================================================
# Configuration
# ============================================================================

def initialize(api_base_url: Optional[str] = None, tile_base_url: Optional[str] = None) -> None:
    get_default_client().initialize(api_base_url, tile_base_url)


def reset() -> None:
    get_default_client().reset()


def set_timeout(milliseconds: int) -> None:
    get_default_client().set_timeout(milliseconds)


set_deadline = set_timeout


# ============================================================================
# Endpoints
# ============================================================================

def get_info(asset_id: str):
    return get_default_client().get_info(asset_id)


def get_info_async(asset_id: str, callback: Optional[Callback] = None):
    return get_default_client().get_info_async(asset_id, callback)


def get_list(params: Mapping[str, Any]):
    return get_default_client().get_list(params)


def get_list_async(params: Mapping[str, Any], callback: Optional[Callback] = None):
    return get_default_client().get_list_async(params, callback)


def get_map_id(params: Mapping[str, Any]):
    return get_default_client().get_map_id(params)


def get_map_id_async(params: Mapping[str, Any], callback: Optional[Callback] = None):
    return get_default_client().get_map_id_async(params, callback)


def get_value(params: Mapping[str, Any]):
    return get_default_client().get_value(params)


def get_value_async(params: Mapping[str, Any], callback: Optional[Callback] = None):
    return get_default_client().get_value_async(params, callback)


def get_thumb_id(params: Mapping[str, Any]):
    return get_default_client().get_thumb_id(params)


def get_thumb_id_async(params: Mapping[str, Any], callback: Optional[Callback] = None):
    return get_default_client().get_thumb_id_async(params, callback)


def get_download_id(params: Mapping[str, Any]):
    return get_default_client().get_download_id(params)


def get_download_id_async(params: Mapping[str, Any], callback: Optional[Callback] = None):
    return get_default_client().get_download_id_async(params, callback)


def get_algorithms():
    return get_default_client().get_algorithms()


def get_algorithms_async(callback: Optional[Callback] = None):
    return get_default_client().get_algorithms_async(callback)


def create_asset(value, path: Optional[str] = None):
    return get_default_client().create_asset(value, path)


def create_asset_async(value, path: Optional[str] = None, callback: Optional[Callback] = None):
    return get_default_client().create_asset_async(value, path, callback)


def new_task_id(count: Optional[int] = None):
    return get_default_client().new_task_id(count)


def new_task_id_async(count: Optional[int] = None, callback: Optional[Callback] = None):
    return get_default_client().new_task_id_async(count, callback)


def get_task_status(task_id):
    return get_default_client().get_task_status(task_id)


def get_task_status_async(task_id, callback: Optional[Callback] = None):
    return get_default_client().get_task_status_async(task_id, callback)


def prepare_value(task_id: str, params: Mapping[str, Any]):
    return get_default_client().prepare_value(task_id, params)


def prepare_value_async(task_id: str, params: Mapping[str, Any], callback: Optional[Callback] = None):
    return get_default_client().prepare_value_async(task_id, params, callback)


def start_processing(task_id: str, params: Mapping[str, Any]):
    return get_default_client().start_processing(task_id, params)


def start_processing_async(task_id: str, params: Mapping[str, Any], callback: Optional[Callback] = None):
    return get_default_client().start_processing_async(task_id, params, callback)


# ============================================================================
# URL helpers
# ============================================================================

def get_tile_url(mapid, x: int, y: int, z: int) -> str:
    return get_default_client().get_tile_url(mapid, x, y, z)


def make_thumb_url(thumb_id) -> str:
    return get_default_client().make_thumb_url(thumb_id)


def make_download_url(download_id) -> str:
    return get_default_client().make_download_url(download_id)
