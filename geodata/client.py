# ============================================================================
# MODULE CONTEXT - DATA CLIENT
# ============================================================================
# STATUS: Service Layer - client for the geospatial processing API
# PURPOSE: Configuration lifecycle, blocking/async dispatch, typed endpoint methods
# EXPORTS: DataClient
# DEPENDENCIES: geodata.transport (httpx), geodata.config (pydantic-settings)
# PATTERNS: Injected transport, lock-guarded runtime configuration
# ============================================================================
"""
Data Client.

Every remote operation funnels through one dispatch routine:

    endpoint method -> EndpointCall (path, encoded body, method, transform)
                    -> transport.send(TransportRequest) -> body text
                    -> handle_response(body) -> DataResponse
                    -> data returned / error raised      (blocking)
                    -> callback(data, error) + Future    (async)

Blocking and async calls are separate methods: get_info() blocks and returns
the data, get_info_async() returns a concurrent.futures.Future resolving to a
DataResponse and optionally invokes callback(data, error_message) exactly
once. Async calls never raise for server, transport or envelope errors.

Usage:
    client = DataClient()
    client.initialize("https://example.org/api")
    info = client.get_info("users/alice/image")

    future = client.get_value_async({"json": expr}, callback=print)
    future.result(timeout=30)

    client.close()
"""

import threading
import uuid
from concurrent.futures import Future
from dataclasses import replace
from threading import RLock
from typing import Any, Callable, List, Mapping, Optional, Sequence, Union
from urllib.parse import quote

from . import endpoints
from .config import ClientConfiguration, DataClientSettings, get_data_client_settings
from .endpoints import EndpointCall
from .exceptions import TransportError
from .models import DownloadId, MapId, TaskStatus, ThumbId
from .query import FORM_CONTENT_TYPE, build_query
from .response import MALFORMED_PREFIX, DataResponse, handle_response
from .transport import HttpxTransport, Transport, TransportRequest
from .util_logger import LoggerFactory, ComponentType, LogContext, log_exceptions

logger = LoggerFactory.create_logger(ComponentType.SERVICE, "DataClient")

Callback = Callable[[Any, Optional[str]], Any]
Params = Union[str, Mapping[str, Any], None]


def _field(obj: Any, name: str) -> Any:
    if isinstance(obj, Mapping):
        return obj[name]
    return getattr(obj, name)


class DataClient:
    """
    Client for the geospatial processing API.

    Holds its own ClientConfiguration; several independently configured
    clients can coexist. The configuration is lazily initialized from
    DataClientSettings on the first request.
    """

    def __init__(
        self,
        transport: Optional[Transport] = None,
        settings: Optional[DataClientSettings] = None
    ):
        """
        Initialize client.

        Args:
            transport: Transport to send requests with. Defaults to HttpxTransport.
            settings: Default URLs and timeout. Defaults to the environment settings.
        """
        self.settings = settings or get_data_client_settings()
        self.transport = transport or HttpxTransport(origin=self.settings.origin)
        self._config = ClientConfiguration(request_timeout_ms=self.settings.request_timeout_ms)
        self._lock = RLock()

    def __enter__(self) -> "DataClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        """Close the underlying transport."""
        self.transport.close()

    def set_transport(self, transport: Transport) -> None:
        """Route future requests through transport and close the previous one."""
        with self._lock:
            previous, self.transport = self.transport, transport
        if previous is not transport:
            previous.close()

    # =========================================================================
    # Configuration lifecycle
    # =========================================================================

    @property
    def config(self) -> ClientConfiguration:
        """Copy of the current configuration."""
        with self._lock:
            return replace(self._config)

    def initialize(self, api_base_url: Optional[str] = None, tile_base_url: Optional[str] = None) -> None:
        """
        Set base URLs.

        Explicit arguments always replace the stored URL. Omitted ones are set
        to the defaults only if the client was never initialized.

        Args:
            api_base_url: The (possibly proxied) API endpoint.
            tile_base_url: The (unproxied) tile and media endpoint.
        """
        with self._lock:
            self._config.apply(self.settings, api_base_url, tile_base_url)
            logger.debug(
                f"Initialized: api={self._config.api_base_url} tile={self._config.tile_base_url}"
            )

    def reset(self) -> None:
        """Clear both base URLs and the initialized flag."""
        with self._lock:
            self._config.clear()

    def set_timeout(self, milliseconds: int) -> None:
        """
        Set the per-request timeout for requests issued from now on.

        Args:
            milliseconds: Timeout in milliseconds, 0 for no limit.

        Raises:
            ValueError: If milliseconds is negative or not an integer.
        """
        if isinstance(milliseconds, bool) or not isinstance(milliseconds, int) or milliseconds < 0:
            raise ValueError(f"Timeout must be a non-negative integer, got {milliseconds!r}")
        with self._lock:
            self._config.request_timeout_ms = milliseconds

    set_deadline = set_timeout

    def _snapshot(self) -> ClientConfiguration:
        with self._lock:
            if not self._config.initialized:
                self.initialize()
            return replace(self._config)

    # =========================================================================
    # Dispatch
    # =========================================================================

    def _build_request(self, path: str, params: Params, method: str) -> TransportRequest:
        config = self._snapshot()
        body = params if isinstance(params, str) else build_query(params)
        return TransportRequest(
            method=method,
            url=config.api_base_url + path,
            body=body,
            headers={"Content-Type": FORM_CONTENT_TYPE},
            timeout_ms=config.request_timeout_ms
        )

    @staticmethod
    def _transformed(response: DataResponse, transform: Optional[Callable[[Any], Any]]) -> DataResponse:
        if transform is None or not response.success:
            return response
        try:
            return DataResponse(data=transform(response.data))
        except (TypeError, ValueError) as e:
            return DataResponse(error=f"{MALFORMED_PREFIX}{e}", malformed=True)

    def _log_result(self, context: LogContext, response: DataResponse) -> None:
        dims = context.to_dict()
        if response.success:
            logger.debug(f"{context.method} {context.path} ok", extra={'custom_dimensions': dims})
        else:
            logger.warning(
                f"{context.method} {context.path} failed: {response.error}",
                extra={'custom_dimensions': {**dims, 'malformed': response.malformed}}
            )

    def _execute(
        self,
        path: str,
        params: Params,
        method: str,
        transform: Optional[Callable[[Any], Any]] = None
    ) -> Any:
        request = self._build_request(path, params, method)
        context = LogContext(request_id=uuid.uuid4().hex[:8], method=method, path=path, mode="sync")
        logger.debug(f"Sending {method} {request.url}", extra={'custom_dimensions': context.to_dict()})

        response = self._transformed(handle_response(self.transport.send(request)), transform)
        self._log_result(context, response)
        response.raise_for_error()
        return response.data

    def _submit(
        self,
        path: str,
        params: Params,
        method: str,
        callback: Optional[Callback] = None,
        transform: Optional[Callable[[Any], Any]] = None
    ) -> "Future[DataResponse]":
        request = self._build_request(path, params, method)
        context = LogContext(request_id=uuid.uuid4().hex[:8], method=method, path=path, mode="async")
        future: "Future[DataResponse]" = Future()
        future.set_running_or_notify_cancel()
        notify = log_exceptions(logger=logger)(callback) if callback else None

        def run():
            try:
                response = handle_response(self.transport.send(request))
            except TransportError as e:
                response = DataResponse(error=e.message)
            except Exception as e:
                logger.exception(f"Unexpected transport failure for {method} {path}: {e}")
                response = DataResponse(error=f"Unexpected error: {str(e)}")

            response = self._transformed(response, transform)
            self._log_result(context, response)

            if notify is not None:
                try:
                    notify(response.data, response.error)
                except Exception as e:
                    future.set_exception(e)
                    return
            future.set_result(response)

        logger.debug(f"Sending {method} {request.url}", extra={'custom_dimensions': context.to_dict()})
        threading.Thread(target=run, name=f"geodata-{context.request_id}", daemon=True).start()
        return future

    def send(self, path: str, params: Params = None, method: str = "POST") -> Any:
        """
        Send an API call and block until the answer arrives.

        Args:
            path: API path, appended to the API base URL
            params: Encoded body string or a mapping to encode
            method: HTTP method, GET or POST

        Returns:
            The `data` member of the response envelope

        Raises:
            ServerError: The server answered with an error envelope
            MalformedResponseError: The body was not a valid envelope
            TransportError: The request failed or timed out
        """
        return self._execute(path, params, method)

    def send_async(
        self,
        path: str,
        params: Params = None,
        callback: Optional[Callback] = None,
        method: str = "POST"
    ) -> "Future[DataResponse]":
        """
        Send an API call without blocking.

        callback(data, error_message) is invoked exactly once from a worker
        thread; error_message is None on success. The returned future resolves
        to the DataResponse, or to the exception raised by callback.
        """
        return self._submit(path, params, method, callback)

    def call(self, call: EndpointCall) -> Any:
        """Run a prepared endpoint call and block for its (transformed) data."""
        return self._execute(call.path, call.body, call.method, call.transform)

    def call_async(self, call: EndpointCall, callback: Optional[Callback] = None) -> "Future[DataResponse]":
        """Run a prepared endpoint call without blocking."""
        return self._submit(call.path, call.body, call.method, callback, call.transform)

    # =========================================================================
    # Assets
    # =========================================================================

    def get_info(self, asset_id: str) -> Any:
        """Load the description of an asset."""
        return self.call(endpoints.info_call(asset_id))

    def get_info_async(self, asset_id: str, callback: Optional[Callback] = None) -> "Future[DataResponse]":
        return self.call_async(endpoints.info_call(asset_id), callback)

    def get_list(self, params: Mapping[str, Any]) -> Any:
        """
        List the contents of a collection asset.

        Args:
            params: id, and optionally starttime, endtime (msec since epoch) and fields
        """
        return self.call(endpoints.list_call(params))

    def get_list_async(self, params: Mapping[str, Any], callback: Optional[Callback] = None) -> "Future[DataResponse]":
        return self.call_async(endpoints.list_call(params), callback)

    def create_asset(self, value: Union[str, Mapping[str, Any]], path: Optional[str] = None) -> Any:
        """
        Save an asset.

        Args:
            value: JSON-serialized value of the asset, or a dict to serialize
            path: Optional desired asset ID including its full path

        Returns:
            Description of the saved asset including its generated ID
        """
        return self.call(endpoints.create_asset_call(value, path))

    def create_asset_async(
        self,
        value: Union[str, Mapping[str, Any]],
        path: Optional[str] = None,
        callback: Optional[Callback] = None
    ) -> "Future[DataResponse]":
        return self.call_async(endpoints.create_asset_call(value, path), callback)

    def get_algorithms(self) -> Any:
        """Get the list of algorithm signatures."""
        return self.call(endpoints.algorithms_call())

    def get_algorithms_async(self, callback: Optional[Callback] = None) -> "Future[DataResponse]":
        return self.call_async(endpoints.algorithms_call(), callback)

    # =========================================================================
    # Computation and rendering
    # =========================================================================

    def get_value(self, params: Mapping[str, Any]) -> Any:
        """Evaluate a computation graph given as params["json"]."""
        return self.call(endpoints.value_call(params))

    def get_value_async(self, params: Mapping[str, Any], callback: Optional[Callback] = None) -> "Future[DataResponse]":
        return self.call_async(endpoints.value_call(params), callback)

    def get_map_id(self, params: Mapping[str, Any]) -> MapId:
        """Get a tile-serving MapId for an image and visualization parameters."""
        return self.call(endpoints.map_id_call(params))

    def get_map_id_async(self, params: Mapping[str, Any], callback: Optional[Callback] = None) -> "Future[DataResponse]":
        return self.call_async(endpoints.map_id_call(params), callback)

    def get_thumb_id(self, params: Mapping[str, Any]) -> ThumbId:
        """Get a ThumbId; size may be a number or a [width, height] pair."""
        return self.call(endpoints.thumb_id_call(params))

    def get_thumb_id_async(self, params: Mapping[str, Any], callback: Optional[Callback] = None) -> "Future[DataResponse]":
        return self.call_async(endpoints.thumb_id_call(params), callback)

    def get_download_id(self, params: Mapping[str, Any]) -> DownloadId:
        """Get a DownloadId for an image export."""
        return self.call(endpoints.download_id_call(params))

    def get_download_id_async(self, params: Mapping[str, Any], callback: Optional[Callback] = None) -> "Future[DataResponse]":
        return self.call_async(endpoints.download_id_call(params), callback)

    # =========================================================================
    # Tasks
    # =========================================================================

    def new_task_id(self, count: Optional[int] = None) -> List[str]:
        """Allocate task IDs, one unless count is given."""
        return self.call(endpoints.new_task_id_call(count))

    def new_task_id_async(self, count: Optional[int] = None, callback: Optional[Callback] = None) -> "Future[DataResponse]":
        return self.call_async(endpoints.new_task_id_call(count), callback)

    def get_task_status(self, task_id: Union[str, Sequence[str]]) -> List[TaskStatus]:
        """
        Retrieve the status of one or more tasks.

        Returns:
            One TaskStatus per ID, in the same order as the input

        Raises:
            ValueError: If task_id is neither a string nor a list of strings
        """
        return self.call(endpoints.task_status_call(task_id))

    def get_task_status_async(
        self,
        task_id: Union[str, Sequence[str]],
        callback: Optional[Callback] = None
    ) -> "Future[DataResponse]":
        return self.call_async(endpoints.task_status_call(task_id), callback)

    def prepare_value(self, task_id: str, params: Mapping[str, Any]) -> Any:
        """
        Create a task that computes a value.

        Returns:
            May contain note="ALREADY_EXISTS" if an identical task exists
        """
        return self.call(endpoints.prepare_value_call(task_id, params))

    def prepare_value_async(
        self,
        task_id: str,
        params: Mapping[str, Any],
        callback: Optional[Callback] = None
    ) -> "Future[DataResponse]":
        return self.call_async(endpoints.prepare_value_call(task_id, params), callback)

    def start_processing(self, task_id: str, params: Mapping[str, Any]) -> Any:
        """
        Create a task that exports or pre-renders an image.

        Returns:
            May contain note="ALREADY_EXISTS" if an identical task exists
        """
        return self.call(endpoints.start_processing_call(task_id, params))

    def start_processing_async(
        self,
        task_id: str,
        params: Mapping[str, Any],
        callback: Optional[Callback] = None
    ) -> "Future[DataResponse]":
        return self.call_async(endpoints.start_processing_call(task_id, params), callback)

    # =========================================================================
    # URL helpers (no network)
    # =========================================================================

    def _tile_base_url(self) -> str:
        return self._snapshot().tile_base_url

    def get_tile_url(self, mapid: Union[MapId, Mapping[str, Any]], x: int, y: int, z: int) -> str:
        """
        Build the URL of one map tile.

        x is wrapped into [0, 2**z) so tiles repeat around the antimeridian.

        Raises:
            ValueError: If z is negative, or x, y or z is not an integer
        """
        for name, value in (("x", x), ("y", y), ("z", z)):
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"Tile coordinate {name} must be an integer, got {value!r}")
        if z < 0:
            raise ValueError(f"Zoom level must be non-negative, got {z}")
        width = 2 ** z
        x = x % width
        return "/".join([
            self._tile_base_url(),
            "map",
            quote(str(_field(mapid, "mapid")), safe="/"),
            str(z),
            str(x),
            str(y)
        ]) + "?token=" + quote(str(_field(mapid, "token")), safe="")

    def make_thumb_url(self, thumb_id: Union[ThumbId, Mapping[str, Any]]) -> str:
        """Build a thumbnail URL from a thumbid and token."""
        return (
            f"{self._tile_base_url()}/api/thumb"
            f"?thumbid={quote(str(_field(thumb_id, 'thumbid')), safe='')}"
            f"&token={quote(str(_field(thumb_id, 'token')), safe='')}"
        )

    def make_download_url(self, download_id: Union[DownloadId, Mapping[str, Any]]) -> str:
        """Build a download URL from a docid and token."""
        return (
            f"{self._tile_base_url()}/api/download"
            f"?docid={quote(str(_field(download_id, 'docid')), safe='')}"
            f"&token={quote(str(_field(download_id, 'token')), safe='')}"
        )
