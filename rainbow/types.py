"""Request, query and response types exchanged with the API and the agents.

Each type is a dataclass whose fields carry the JSON key they are read from
and written to. Embedded request parts are expressed through inheritance, so
their keys sit flat in the same JSON object.
"""

import base64
import binascii
from collections.abc import Mapping
from dataclasses import MISSING, dataclass, field, fields, is_dataclass
from datetime import date, datetime
from typing import Any, Dict, List, Type, TypeVar, get_args, get_origin

from sqlalchemy import inspect as sa_inspect

SYNC_IMAGE_INITIALIZING = "Initializing"
SYNC_IMAGE_RUNNING = "Running"
SYNC_IMAGE_ERROR = "Error"
SYNC_IMAGE_COMPLETE = "Completed"

SYNC_TASK_INITIALIZING = "initializing"

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_LIMIT = 100

T = TypeVar("T")


def _field(
    default: Any = MISSING,
    *,
    key: str = "",
    required: bool = False,
    omitempty: bool = False,
    default_factory: Any = MISSING,
) -> Any:
    metadata = {"key": key, "required": required, "omitempty": omitempty}
    if default_factory is not MISSING:
        return field(default_factory=default_factory, metadata=metadata)
    return field(default=default, metadata=metadata)


@dataclass
class UserMetaRequest:
    user_id: str = ""
    user_name: str = ""


@dataclass
class CreateDockerfileRequest:
    name: str = ""
    dockerfile: str = ""


@dataclass
class UpdateDockerfileRequest:
    id: int = 0
    resource_version: int = 0
    dockerfile: str = ""


@dataclass
class CreateLabelRequest:
    name: str = _field("", required=True)


@dataclass
class CreateLogoRequest:
    name: str = _field("", required=True)
    logo: str = ""


@dataclass
class UpdateLogoRequest:
    id: int = 0
    resource_version: int = 0
    name: str = _field("", required=True)
    logo: str = ""


@dataclass
class UpdateLabelRequest:
    id: int = 0
    resource_version: int = 0
    name: str = _field("", required=True)


@dataclass
class CreateTaskRequest:
    name: str = ""
    user_id: str = ""
    user_name: str = ""
    register_id: int = 0
    # 0: explicit image list, 1: kubernetes version
    type: int = 0
    kubernetes_version: str = ""
    images: List[str] = _field(default_factory=list)
    agent_name: str = ""
    mode: int = 0
    public_image: bool = False
    driver: str = ""
    logo: str = ""
    namespace: str = ""
    is_official: bool = False


@dataclass
class UpdateTaskRequest:
    id: int = 0
    resource_version: int = 0
    name: str = ""
    user_id: str = ""
    register_id: int = 0
    type: int = 0
    kubernetes_version: str = ""
    agent_name: str = ""
    status: str = ""
    images: List[str] = _field(default_factory=list)
    mode: int = 0
    public_image: bool = False


@dataclass
class UpdateTaskStatusRequest:
    task_id: int = 0
    status: str = ""
    message: str = ""
    process: int = 0


@dataclass
class CreateRegistryRequest:
    name: str = ""
    user_id: str = ""
    repository: str = ""
    namespace: str = ""
    username: str = ""
    password: str = ""
    role: int = 0


@dataclass
class UpdateRegistryRequest:
    id: int = 0
    resource_version: int = 0
    name: str = ""
    user_id: str = ""
    repository: str = ""
    namespace: str = ""
    username: str = ""
    password: str = ""


@dataclass
class CreateImageRequest:
    task_id: int = 0
    task_name: str = ""
    user_id: str = ""
    register_id: int = 0
    name: str = ""
    status: str = ""
    message: str = ""
    is_public: bool = False
    is_locked: bool = False


@dataclass
class CreateImagesRequest:
    task_id: int = 0
    task_name: str = ""
    names: List[str] = _field(default_factory=list)


@dataclass
class UpdateImageRequest:
    id: int = 0
    resource_version: int = 0
    name: str = ""
    namespace: str = ""
    label: str = ""
    is_public: bool = False
    logo: str = ""
    description: str = ""
    is_locked: bool = False


@dataclass
class UpdateImageStatusRequest:
    name: str = ""  # image name inside the registry, e.g. nginx
    image_id: int = 0
    task_id: int = 0
    registry_id: int = 0
    status: str = ""
    message: str = ""
    target: str = ""


@dataclass
class CreateNamespaceRequest:
    name: str = ""
    description: str = ""


@dataclass
class UpdateNamespaceRequest:
    id: int = 0
    resource_version: int = 0
    name: str = ""
    description: str = ""


@dataclass
class CreateUserRequest:
    name: str = ""
    user_id: str = ""
    user_type: str = ""
    expire_time: str = ""


@dataclass
class UpdateUserRequest(CreateUserRequest):
    resource_version: int = 0


@dataclass
class UpdateAgentRequest:
    agent_name: str = ""
    github_user: str = ""
    github_repository: str = ""
    github_token: str = ""


@dataclass
class UpdateAgentStatusRequest:
    agent_name: str = ""
    status: str = ""


@dataclass
class CreateNotificationRequest(UserMetaRequest):
    name: str = ""
    role: int = 0  # 1 administrator, 0 regular user
    enable: bool = False
    type: str = ""  # webhook, dingtalk, wecom
    url: str = ""
    content: str = ""
    short_desc: str = ""


@dataclass
class SendNotificationRequest(CreateNotificationRequest):
    email: str = ""


@dataclass
class PageRequest:
    page: int = 0
    limit: int = 0


@dataclass
class QueryOption:
    label_selector: str = _field("", key="labelSelector")
    name_selector: str = _field("", key="nameSelector")


@dataclass
class CustomMeta:
    status: int = 0
    namespace: str = ""
    agent: str = ""


@dataclass
class RemoteSearchRequest:
    hub: str = ""
    client_id: str = ""
    query: str = ""
    page: str = ""
    page_size: str = ""


@dataclass
class RemoteTagSearchRequest:
    hub: str = ""
    client_id: str = ""
    namespace: str = ""
    repository: str = ""
    query: str = ""
    page: str = ""
    page_size: str = ""


@dataclass
class RemoteTagInfoSearchRequest:
    hub: str = ""
    client_id: str = ""
    namespace: str = ""
    repository: str = ""
    tag: str = ""
    arch: str = ""
    query: str = ""
    page: str = ""
    page_size: str = ""


@dataclass
class KubernetesTagRequest:
    client_id: str = ""
    sync_all: bool = False


@dataclass
class RemoteMetaRequest:
    type: int = _field(0, key="Type")
    uid: str = ""
    repository_search_request: RemoteSearchRequest = _field(
        key="RepositorySearchRequest", default_factory=RemoteSearchRequest
    )
    tag_search_request: RemoteTagSearchRequest = _field(
        key="TagSearchRequest", default_factory=RemoteTagSearchRequest
    )
    tag_info_search_request: RemoteTagInfoSearchRequest = _field(
        key="TagInfoSearchRequest", default_factory=RemoteTagInfoSearchRequest
    )
    kubernetes_tag_request: KubernetesTagRequest = _field(
        key="KubernetesTagRequest", default_factory=KubernetesTagRequest
    )


@dataclass
class CreateTaskMessageRequest:
    id: int = 0
    message: str = ""


@dataclass
class CreateSubscribeRequest(UserMetaRequest):
    # A bare name such as nginx means library/nginx; owner/name is used as is.
    path: str = ""
    enable: bool = False
    size: int = 0  # how many of the newest versions to sync
    register_id: int = 0
    namespace: str = ""
    interval: int = 0  # sync period in nanoseconds


@dataclass
class UpdateSubscribeRequest:
    id: int = 0
    resource_version: int = 0
    enable: bool = False
    size: int = 0
    interval: int = 0


@dataclass
class IdMeta:
    id: int = _field(0, required=True)


@dataclass
class NameMeta:
    namespace: str = _field("", required=True)
    name: str = _field("", required=True)


@dataclass
class TaskMeta:
    task_id: int = 0


@dataclass
class UserMeta:
    user_id: str = ""


@dataclass
class IdNameMeta:
    id: int = _field(0, required=True)
    name: str = _field("", required=True)


@dataclass
class DownflowMeta:
    image_id: int = 0
    start_time: str = _field("", key="startTime")
    end_time: str = _field("", key="endTime")


@dataclass
class ListOptions(CustomMeta, UserMeta, TaskMeta, PageRequest, QueryOption):
    """Query options of a standard list call."""

    def set_default_page_option(self) -> None:
        """Fill in the first page and a default page size where they are unusable."""
        if self.page <= 0:
            self.page = DEFAULT_PAGE
        if self.limit <= 0 or self.limit > MAX_LIMIT:
            self.limit = DEFAULT_LIMIT


@dataclass
class PageResult(PageRequest):
    total: int = 0
    items: Any = None
    message: str = ""


@dataclass
class Response:
    code: int = 0
    result: List[Any] = _field(omitempty=True, default_factory=list)
    message: str = _field("", omitempty=True)


@dataclass
class SearchResult:
    result: bytes = _field(b"", key="Result")
    err_message: str = _field("", key="ErrMessage")
    status_code: int = _field(0, key="StatusCode")


def _key(f) -> str:
    return f.metadata.get("key") or f.name


def _lookup(data: Mapping, key: str) -> Any:
    if key in data:
        return data[key]
    lowered = key.lower()
    for name, value in data.items():
        if isinstance(name, str) and name.lower() == lowered:
            return value
    return MISSING


def _convert(tp: Any, value: Any, key: str) -> Any:
    if tp is Any:
        return value
    if isinstance(tp, type) and is_dataclass(tp):
        if not isinstance(value, Mapping):
            raise TypeError(f"{key}: expected an object, got {type(value).__name__}")
        return from_dict(tp, value)
    origin = get_origin(tp)
    if origin in (list, List):
        if not isinstance(value, list):
            raise TypeError(f"{key}: expected a list, got {type(value).__name__}")
        (item_type,) = get_args(tp) or (Any,)
        return [_convert(item_type, item, key) for item in value]
    if tp is bool:
        if not isinstance(value, bool):
            raise TypeError(f"{key}: expected a boolean, got {type(value).__name__}")
        return value
    if tp is int:
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError(f"{key}: expected an integer, got {type(value).__name__}")
        return value
    if tp is str:
        if not isinstance(value, str):
            raise TypeError(f"{key}: expected a string, got {type(value).__name__}")
        return value
    if tp is bytes:
        if isinstance(value, (bytes, bytearray)):
            return bytes(value)
        if isinstance(value, str):
            try:
                return base64.b64decode(value, validate=True)
            except (binascii.Error, ValueError) as exc:
                raise ValueError(f"{key}: invalid base64 data") from exc
        raise TypeError(f"{key}: expected base64 data, got {type(value).__name__}")
    raise TypeError(f"{key}: unsupported field type {tp!r}")


def from_dict(cls: Type[T], data: Mapping) -> T:
    """Build ``cls`` from a decoded JSON object.

    Keys match case-insensitively, unknown keys are ignored and missing or
    null values keep their defaults. A required field left at its zero value
    raises ValueError; a value of the wrong type raises TypeError.
    """
    if not (isinstance(cls, type) and is_dataclass(cls)):
        raise TypeError(f"{cls!r} is not a request type")
    if not isinstance(data, Mapping):
        raise TypeError(f"expected an object, got {type(data).__name__}")
    values = {}
    for f in fields(cls):
        key = _key(f)
        raw = _lookup(data, key)
        if raw is not MISSING and raw is not None:
            values[f.name] = _convert(f.type, raw, key)
    obj = cls(**values)
    for f in fields(cls):
        if f.metadata.get("required") and not getattr(obj, f.name):
            raise ValueError(f"{_key(f)} is required")
    return obj


def _encode(value: Any) -> Any:
    if is_dataclass(value) and not isinstance(value, type):
        return to_dict(value)
    if isinstance(value, (bytes, bytearray)):
        return base64.b64encode(bytes(value)).decode("ascii")
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Mapping):
        return {k: _encode(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_encode(item) for item in value]
    state = sa_inspect(value, raiseerr=False)
    mapper = getattr(state, "mapper", None)
    if mapper is not None and state is not mapper:
        return {attr.key: _encode(getattr(value, attr.key)) for attr in mapper.column_attrs}
    return value


def to_dict(obj: Any) -> Dict[str, Any]:
    """Return the JSON object for a request or response value."""
    if not (is_dataclass(obj) and not isinstance(obj, type)):
        raise TypeError(f"{obj!r} is not a request or response value")
    result = {}
    for f in fields(obj):
        value = getattr(obj, f.name)
        if f.metadata.get("omitempty") and not value:
            continue
        result[_key(f)] = _encode(value)
    return result