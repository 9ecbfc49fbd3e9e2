"""Wire models: the response envelope and the entity value objects.

Entities use snake_case attributes and travel as the service's camelCase JSON
(``display_name`` <-> ``displayName``). Unknown keys sent back by the service
are dropped on decode.
"""
from __future__ import annotations
import json
from dataclasses import dataclass, field, fields
from typing import Any, Dict, List, Optional, Type, TypeVar

from .exceptions import DecodeError

STATUS_OK = "ok"
AFFECTED = "Affected"

T = TypeVar("T", bound="Entity")


def _to_camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


def _reject_constant(value: str) -> Any:
    raise ValueError(f"invalid JSON constant {value}")


def loads(raw: bytes | str) -> Any:
    """Strict JSON decode: NaN and Infinity are not JSON."""
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8")
    return json.loads(raw, parse_constant=_reject_constant)


def dumps(value: Any) -> bytes:
    """Compact UTF-8 JSON encode."""
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False, allow_nan=False).encode("utf-8")


@dataclass
class Envelope:
    """Uniform response wrapper returned by every endpoint.

    Either ``status == "ok"`` and ``data`` carries the result, or ``msg``
    explains the failure.
    """
    status: str = ""
    msg: str = ""
    data: Any = None
    data2: Any = None

    @property
    def ok(self) -> bool:
        return self.status == STATUS_OK

    @property
    def affected(self) -> bool:
        """True when a mutation reported a changed row.

        Exact comparison against the "Affected" sentinel; any other payload,
        string or not, counts as not affected.
        """
        return isinstance(self.data, str) and self.data == AFFECTED

    @classmethod
    def from_bytes(cls, raw: bytes) -> "Envelope":
        """Decode a response body.

        Raises:
            DecodeError: If the body is not a JSON object of envelope shape
        """
        try:
            payload = loads(raw)
        except (UnicodeDecodeError, ValueError) as e:
            raise DecodeError(f"Response is not valid JSON: {e}") from e

        if not isinstance(payload, dict):
            raise DecodeError(f"Response is not a JSON object: {type(payload).__name__}")

        status = payload.get("status")
        msg = payload.get("msg")
        for key, value in (("status", status), ("msg", msg)):
            if value is not None and not isinstance(value, str):
                raise DecodeError(f"Envelope field '{key}' must be a string, got {type(value).__name__}")

        return cls(
            status=status or "",
            msg=msg or "",
            data=payload.get("data"),
            data2=payload.get("data2"),
        )

    def data_bytes(self) -> bytes:
        """Re-encode ``data`` as JSON bytes.

        Raises:
            DecodeError: If data cannot be serialized
        """
        try:
            return dumps(self.data)
        except (TypeError, ValueError) as e:
            raise DecodeError(f"Envelope data cannot be serialized: {e}") from e


class Entity:
    """Mixin for dataclass entities serialized with camelCase keys."""

    owner: str
    name: str

    def to_dict(self) -> Dict[str, Any]:
        return {_to_camel(f.name): getattr(self, f.name) for f in fields(self)}

    def to_json(self) -> bytes:
        return dumps(self.to_dict())

    @classmethod
    def from_dict(cls: Type[T], payload: Dict[str, Any]) -> T:
        known = {_to_camel(f.name): f.name for f in fields(cls)}
        kwargs = {known[key]: value for key, value in payload.items() if key in known}
        return cls(**kwargs)

    def get_id(self) -> str:
        return f"{self.owner}/{self.name}"


@dataclass
class User(Entity):
    owner: str = ""
    name: str = ""
    created_time: str = ""
    updated_time: str = ""
    id: str = ""
    type: str = ""
    password: str = ""
    display_name: str = ""
    first_name: str = ""
    last_name: str = ""
    avatar: str = ""
    email: str = ""
    email_verified: bool = False
    phone: str = ""
    country_code: str = ""
    region: str = ""
    location: str = ""
    affiliation: str = ""
    title: str = ""
    homepage: str = ""
    bio: str = ""
    tag: str = ""
    language: str = ""
    gender: str = ""
    birthday: str = ""
    score: int = 0
    is_online: bool = False
    is_admin: bool = False
    is_forbidden: bool = False
    is_deleted: bool = False
    signup_application: str = ""
    groups: List[str] = field(default_factory=list)
    properties: Dict[str, str] = field(default_factory=dict)

    def get_id(self) -> str:
        """Resource id: the dedicated ``id`` field, else ``owner/name``.

        Users fetched from the service usually carry a UUID in ``id``, so
        updating a fetched user targets that UUID. Use
        ``UserService.update_user_by_id`` to address it as ``owner/name``.
        """
        return self.id or super().get_id()


@dataclass
class Permission(Entity):
    owner: str = ""
    name: str = ""
    created_time: str = ""
    display_name: str = ""
    description: str = ""
    users: List[str] = field(default_factory=list)
    groups: List[str] = field(default_factory=list)
    roles: List[str] = field(default_factory=list)
    domains: List[str] = field(default_factory=list)
    model: str = ""
    adapter: str = ""
    resource_type: str = ""
    resources: List[str] = field(default_factory=list)
    actions: List[str] = field(default_factory=list)
    effect: str = ""
    is_enabled: bool = False
    submitter: str = ""
    approver: str = ""
    approve_time: str = ""
    state: str = ""


@dataclass
class Role(Entity):
    owner: str = ""
    name: str = ""
    created_time: str = ""
    display_name: str = ""
    description: str = ""
    users: List[str] = field(default_factory=list)
    groups: List[str] = field(default_factory=list)
    roles: List[str] = field(default_factory=list)
    domains: List[str] = field(default_factory=list)
    is_enabled: bool = False


def decode_entity(cls: Type[T], raw: bytes) -> Optional[T]:
    """Decode one entity from ``get_json`` bytes; JSON null gives None."""
    payload = loads(raw)
    if payload is None:
        return None
    if not isinstance(payload, dict):
        raise DecodeError(f"Expected a JSON object for {cls.__name__}, got {type(payload).__name__}")
    return cls.from_dict(payload)


def decode_entities(cls: Type[T], raw: bytes) -> List[T]:
    """Decode a list of entities; JSON null gives an empty list."""
    payload = loads(raw)
    if payload is None:
        return []
    if not isinstance(payload, list):
        raise DecodeError(f"Expected a JSON array of {cls.__name__}, got {type(payload).__name__}")
    entities = []
    for item in payload:
        if not isinstance(item, dict):
            raise DecodeError(f"Expected a JSON object for {cls.__name__}, got {type(item).__name__}")
        entities.append(cls.from_dict(item))
    return entities
