# ============================================================================
# MODULE CONTEXT - DATA CLIENT MODELS
# ============================================================================
# STATUS: Models - typed payloads returned by capability and task endpoints
# PURPOSE: Pydantic models for MapId, ThumbId, DownloadId and task status records
# EXPORTS: MapId, ThumbId, DownloadId, TaskState, TaskStatus
# INTERFACES: Pydantic BaseModel
# DEPENDENCIES: pydantic, typing, enum
# PATTERNS: Data Transfer Objects (DTOs)
# ============================================================================

"""
Payload models for the geospatial processing API.

Capability models (MapId, ThumbId, DownloadId) pair an opaque server ID with
a token. They keep any extra fields the server sends and can be indexed like
the plain dicts they replace (mapid["token"]).
"""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class _Capability(BaseModel):
    """Common base for server-issued ID/token pairs."""

    model_config = ConfigDict(extra="allow")

    token: str = Field(
        description="Time-limited access token issued with the ID"
    )

    def __getitem__(self, key: str) -> Any:
        try:
            return getattr(self, key)
        except AttributeError:
            raise KeyError(key) from None


class MapId(_Capability):
    """Tile-serving capability returned by /mapid."""
    mapid: str = Field(
        description="Opaque map identifier used in tile URLs"
    )


class ThumbId(_Capability):
    """Thumbnail capability returned by /thumb with getid=1."""
    thumbid: str = Field(
        description="Opaque thumbnail identifier"
    )


class DownloadId(_Capability):
    """Download capability returned by /download."""
    docid: str = Field(
        description="Opaque download document identifier"
    )


class TaskState(str, Enum):
    """State of a long-running task."""
    READY = "READY"
    RUNNING = "RUNNING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    CANCELLED = "CANCELLED"
    UNKNOWN = "UNKNOWN"


class TaskStatus(BaseModel):
    """
    One record of a /taskstatus answer.

    error_message is only set for FAILED tasks.
    """

    model_config = ConfigDict(extra="allow")

    id: str = Field(
        description="Task ID as queried"
    )
    state: TaskState = Field(
        default=TaskState.UNKNOWN,
        description="Current task state"
    )
    error_message: Optional[str] = Field(
        default=None,
        description="Failure description for FAILED tasks"
    )

    @field_validator("state", mode="before")
    @classmethod
    def coerce_state(cls, v):
        """Map states this client does not know about to UNKNOWN."""
        if isinstance(v, TaskState):
            return v
        try:
            return TaskState(str(v).upper())
        except ValueError:
            return TaskState.UNKNOWN

    @property
    def is_active(self) -> bool:
        return self.state in (TaskState.READY, TaskState.RUNNING)
