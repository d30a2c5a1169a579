"""
Response envelope handling.

Every body is expected to be {"data": ...} or {"error": {"message": ...}}.
handle_response never raises; blocking callers turn the result into an
exception with DataResponse.raise_for_error().
"""

import json
from dataclasses import dataclass
from typing import Any, Optional

from .exceptions import MalformedResponseError, ServerError

MALFORMED_PREFIX = "Malformed response: "
UNSPECIFIED_SERVER_ERROR = "Server returned an error without a message"


@dataclass
class DataResponse:
    """Normalized result of one API call."""
    data: Any = None
    error: Optional[str] = None
    malformed: bool = False

    @property
    def success(self) -> bool:
        return self.error is None

    def raise_for_error(self) -> None:
        """Raise MalformedResponseError or ServerError if this response carries an error."""
        if self.error is None:
            return
        if self.malformed:
            raise MalformedResponseError(self.error)
        raise ServerError(self.error)


def malformed(body: str) -> DataResponse:
    return DataResponse(error=MALFORMED_PREFIX + body, malformed=True)


def _error_message(error: Any) -> str:
    if isinstance(error, dict):
        message = error.get("message")
    else:
        message = error
    if message is None or message == "":
        return UNSPECIFIED_SERVER_ERROR
    return str(message)


def handle_response(body: str) -> DataResponse:
    """
    Parse a response body into data or an error message.

    Args:
        body: Raw response text

    Returns:
        DataResponse with data set on success, error set otherwise
    """
    try:
        parsed = json.loads(body)
    except (TypeError, ValueError):
        return malformed(str(body))

    if not isinstance(parsed, dict) or not ("data" in parsed or "error" in parsed):
        return malformed(body)

    if "error" in parsed:
        return DataResponse(data=parsed.get("data"), error=_error_message(parsed["error"]))

    return DataResponse(data=parsed["data"])
