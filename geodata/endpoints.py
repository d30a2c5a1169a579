"""
Endpoint call builders.

Each builder turns caller arguments into an EndpointCall: the API path, the
encoded body, the HTTP method and an optional transform applied to the
`data` of a successful response. Builders never touch the network and never
mutate the caller's parameter mapping.
"""

import json
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Union
from urllib.parse import quote

from .models import DownloadId, MapId, TaskState, TaskStatus, ThumbId
from .query import build_query, shape_params

JSON_FORMAT = "v2"


@dataclass(frozen=True)
class EndpointCall:
    """A prepared API call."""
    path: str
    body: Optional[str] = None
    method: str = "POST"
    transform: Optional[Callable[[Any], Any]] = None


def _versioned(params: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    shaped = shape_params(params)
    shaped["json_format"] = JSON_FORMAT
    return shaped


def info_call(asset_id: str) -> EndpointCall:
    return EndpointCall("/info", build_query({"id": asset_id}))


def list_call(params: Mapping[str, Any]) -> EndpointCall:
    """
    List the contents of a collection.

    Recognized params: id, starttime and endtime (msec since epoch),
    fields (list or comma-separated string).
    """
    return EndpointCall("/list", build_query(shape_params(params)))


def map_id_call(params: Mapping[str, Any]) -> EndpointCall:
    """
    Request a tile-serving capability.

    Recognized params: image (JSON string), version, bands, min, max, gain,
    bias, gamma, palette, format ("jpg" or "png"). Per-band values may be
    given as lists.
    """
    return EndpointCall("/mapid", build_query(_versioned(params)), transform=MapId.model_validate)


def value_call(params: Mapping[str, Any]) -> EndpointCall:
    return EndpointCall("/value", build_query(_versioned(params)))


def thumb_id_call(params: Mapping[str, Any]) -> EndpointCall:
    """
    Request a thumbnail capability.

    Takes the getMapId visualization params plus size (a number or a
    [width, height] pair), region and format.
    """
    size = (params or {}).get("size")
    shaped = _versioned(params)
    if isinstance(size, (list, tuple)):
        shaped["size"] = "x".join(str(v) for v in size)
    shaped["getid"] = "1"
    return EndpointCall("/thumb", build_query(shaped), transform=ThumbId.model_validate)


def download_id_call(params: Mapping[str, Any]) -> EndpointCall:
    """
    Request a download capability.

    Recognized params: id, name, bands (list of band specs), crs,
    crs_transform, dimensions, scale, region.
    """
    return EndpointCall(
        "/download",
        build_query(_versioned(params)),
        transform=DownloadId.model_validate
    )


def algorithms_call() -> EndpointCall:
    return EndpointCall("/algorithms", method="GET")


def create_asset_call(value: Union[str, Mapping[str, Any]], path: Optional[str] = None) -> EndpointCall:
    if not isinstance(value, str):
        value = json.dumps(value)
    args: Dict[str, Any] = {"value": value, "json_format": JSON_FORMAT}
    if path is not None:
        args["id"] = path
    return EndpointCall("/create", build_query(args))


def new_task_id_call(count: Optional[int] = None) -> EndpointCall:
    params = {}
    if isinstance(count, int) and not isinstance(count, bool):
        params["count"] = count
    return EndpointCall("/newtaskid", build_query(params))


def normalize_task_ids(task_id: Union[str, Sequence[str]]) -> List[str]:
    """
    Accept one task ID or a list of them.

    Raises:
        ValueError: If task_id is neither a string nor a list/tuple of strings
    """
    if isinstance(task_id, str):
        return [task_id]
    if isinstance(task_id, (list, tuple)) and all(isinstance(t, str) for t in task_id):
        return list(task_id)
    raise ValueError("Invalid task_id: expected a string or a list of strings.")


def order_task_statuses(task_ids: Sequence[str], data: Any) -> List[TaskStatus]:
    """
    Return one TaskStatus per queried ID, in the order the IDs were given.

    IDs the server did not report come back as UNKNOWN.
    """
    if not isinstance(data, list):
        raise ValueError(f"Expected a list of task records, got {type(data).__name__}")
    by_id = {}
    for record in data:
        status = TaskStatus.model_validate(record)
        by_id.setdefault(status.id, status)
    return [
        by_id.get(tid) or TaskStatus(id=tid, state=TaskState.UNKNOWN)
        for tid in task_ids
    ]


def task_status_call(task_id: Union[str, Sequence[str]]) -> EndpointCall:
    ids = normalize_task_ids(task_id)
    # commas inside an ID are encoded; only the separators stay literal
    query = ",".join(quote(tid, safe="") for tid in ids)
    return EndpointCall(
        f"/taskstatus?q={query}",
        method="GET",
        transform=lambda data: order_task_statuses(ids, data)
    )


def prepare_value_call(task_id: str, params: Mapping[str, Any]) -> EndpointCall:
    shaped = shape_params(params)
    shaped["tid"] = task_id
    return EndpointCall("/prepare", build_query(shaped))


def start_processing_call(task_id: str, params: Mapping[str, Any]) -> EndpointCall:
    """
    Submit an export or render task.

    Common params: type ("export_image" or "render"), imageJson.
    """
    shaped = shape_params(params)
    shaped["id"] = task_id
    return EndpointCall("/processingrequest", build_query(shaped))
