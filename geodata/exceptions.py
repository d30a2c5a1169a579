"""
Exceptions raised by blocking data client calls.

Async calls never raise these; the message is handed to the callback and
stored on the resolved DataResponse instead.
"""


class DataClientError(RuntimeError):
    """Base class for data client errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class MalformedResponseError(DataClientError):
    """Response body was not JSON, lacked both data and error keys, or had an unexpected shape."""


class ServerError(DataClientError):
    """The server answered with an error envelope; message is the server's text."""


class TransportError(DataClientError):
    """The request never produced a response body (connection failure, timeout)."""
