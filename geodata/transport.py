# ============================================================================
# MODULE CONTEXT - HTTP TRANSPORTS
# ============================================================================
# STATUS: Adapter Layer - pluggable HTTP transport for DataClient
# PURPOSE: Send one form-encoded request and return the response body text
# EXPORTS: TransportRequest, Transport, HttpxTransport, MockTransport
# DEPENDENCIES: httpx (sync)
# ============================================================================
"""
HTTP Transports.

DataClient never talks to httpx directly. It hands a TransportRequest to a
Transport and gets the response body back as text:

- HttpxTransport: production transport on a lazily created httpx.Client
- MockTransport: canned answers keyed by URL, for tests and offline use

Both the blocking and the async dispatch paths of DataClient go through the
same transport object, so a mock answers both identically.

Usage:
    transport = HttpxTransport(origin="https://example.org")
    body = transport.send(TransportRequest(method="GET", url="/api/algorithms"))
    transport.close()
"""

import json
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from threading import Lock
from typing import Callable, Dict, List, Mapping, Optional, Union

import httpx

from .exceptions import TransportError
from .query import FORM_CONTENT_TYPE
from .util_logger import LoggerFactory, ComponentType

logger = LoggerFactory.create_logger(ComponentType.ADAPTER, "Transport")


@dataclass(frozen=True)
class TransportRequest:
    """A single request as handed to a transport."""
    method: str
    url: str
    body: str = ""
    headers: Dict[str, str] = field(
        default_factory=lambda: {"Content-Type": FORM_CONTENT_TYPE}
    )
    timeout_ms: int = 0


class Transport(ABC):
    """Sends a TransportRequest and returns the response body text."""

    @abstractmethod
    def send(self, request: TransportRequest) -> str:
        """
        Perform the request.

        Raises:
            TransportError: If no response body could be obtained
        """

    def close(self) -> None:
        """Release any held resources."""


class HttpxTransport(Transport):
    """
    Sync HTTP transport backed by httpx.

    HTTP error statuses are not raised: the server wraps its failures in the
    JSON envelope, so the body is returned whatever the status code.

    TransportRequest.timeout_ms is an overall deadline for the request. It is
    passed to httpx as the per-phase timeout and also checked against the
    elapsed time while the body streams in, so a server trickling bytes
    cannot hold a call open past it.

    Once closed, the transport refuses further requests.
    """

    def __init__(
        self,
        origin: Optional[str] = None,
        follow_redirects: bool = True,
        http_transport: Optional[httpx.BaseTransport] = None
    ):
        """
        Initialize transport.

        Args:
            origin: Scheme and host that relative request URLs are resolved against.
            follow_redirects: Follow HTTP redirects.
            http_transport: Optional low-level httpx transport (e.g. httpx.MockTransport).
        """
        self.origin = origin.rstrip('/') if origin else None
        self.follow_redirects = follow_redirects
        self.http_transport = http_transport
        self._client: Optional[httpx.Client] = None
        self._client_lock = Lock()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def _get_client(self) -> httpx.Client:
        """
        Get or create sync HTTP client.

        Raises:
            TransportError: If the transport was closed
        """
        with self._client_lock:
            if self._closed:
                raise TransportError("Transport is closed")
            if self._client is None:
                kwargs = {"follow_redirects": self.follow_redirects}
                if self.origin:
                    kwargs["base_url"] = self.origin
                if self.http_transport is not None:
                    kwargs["transport"] = self.http_transport
                self._client = httpx.Client(**kwargs)
            return self._client

    def close(self) -> None:
        """Close the HTTP client."""
        with self._client_lock:
            self._closed = True
            if self._client and not self._client.is_closed:
                self._client.close()

    @staticmethod
    def _timeout(timeout_ms: int) -> httpx.Timeout:
        if timeout_ms:
            return httpx.Timeout(timeout_ms / 1000.0)
        return httpx.Timeout(None)

    @staticmethod
    def _timed_out(request: TransportRequest) -> TransportError:
        logger.warning(f"Request timeout: {request.method} {request.url}")
        return TransportError(f"Request timed out after {request.timeout_ms}ms: {request.url}")

    def send(self, request: TransportRequest) -> str:
        client = self._get_client()
        content = request.body.encode("utf-8") if request.body else None
        deadline = time.monotonic() + request.timeout_ms / 1000.0 if request.timeout_ms else None

        try:
            with client.stream(
                request.method,
                request.url,
                content=content,
                headers=request.headers,
                timeout=self._timeout(request.timeout_ms)
            ) as response:
                chunks = []
                for chunk in response.iter_bytes():
                    chunks.append(chunk)
                    if deadline is not None and time.monotonic() > deadline:
                        raise self._timed_out(request)
                if deadline is not None and time.monotonic() > deadline:
                    raise self._timed_out(request)
                body = b"".join(chunks).decode(response.encoding or "utf-8", errors="replace")
        except httpx.TimeoutException as e:
            raise self._timed_out(request) from e
        except httpx.RequestError as e:
            logger.warning(f"Request error: {request.method} {request.url}: {e}")
            raise TransportError(f"Request error: {str(e)}") from e

        logger.debug(
            f"{request.method} {request.url} -> {response.status_code}",
            extra={'custom_dimensions': {'status_code': response.status_code}}
        )
        return body


MockResponder = Callable[[TransportRequest], str]


class MockTransport(Transport):
    """
    Transport answering from a mapping of URL to canned response.

    Each value is either a literal body string or a callable taking the
    TransportRequest and returning a body. URLs with no entry echo the
    request back as {"data": {"url", "method", "data"}}.

    Every request is appended to self.requests.

    Usage:
        mock = MockTransport({"/api/info": '{"data": {"id": "a"}}'})
        client = DataClient(transport=mock)
    """

    def __init__(self, calls: Optional[Mapping[str, Union[str, MockResponder]]] = None):
        self.calls: Dict[str, Union[str, MockResponder]] = dict(calls or {})
        self.requests: List[TransportRequest] = []
        self._lock = Lock()

    def send(self, request: TransportRequest) -> str:
        with self._lock:
            self.requests.append(request)

        answer = self.calls.get(request.url)
        if answer is None:
            return json.dumps({
                'data': {
                    'url': request.url,
                    'method': request.method,
                    'data': request.body
                }
            })
        if isinstance(answer, str):
            return answer
        return answer(request)
