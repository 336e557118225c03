from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Sequence, Union

from .exceptions import TreeStructureError

Number = Union[int, float]

DEFAULT_MAX_DEPTH = 256


def _as_number(value: Any) -> Number:
    if value is None:
        return 0
    # bool is an int subclass but never a measure
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value
    return float(value)


@dataclass(frozen=True)
class WaterBalanceQuery:
    """
    Parameters accepted by the ``waterBalance`` remote function.

    ``stat_date`` is forwarded untouched; the remote side decides which date
    formats it understands.
    """

    group_name: str
    stat_date: str

    def as_body(self) -> Dict[str, str]:
        return {"groupName": self.group_name, "statDate": self.stat_date}


@dataclass(frozen=True)
class WaterBalanceItem:
    """
    One node of the water balance hierarchy as returned by the backend.

    Children arrive pre-nested, so ``pid`` is informational only. ``path`` is
    the hierarchical label precomputed upstream and is copied verbatim into
    the treemap output.
    """

    id: str
    name: str
    water_volume: Number = 0
    water_amount: Number = 0
    path: str = ""
    pid: Optional[str] = None
    children: Sequence["WaterBalanceItem"] = field(default_factory=tuple)

    @classmethod
    def from_payload(
        cls,
        payload: Mapping[str, Any],
        max_depth: int = DEFAULT_MAX_DEPTH,
        _trail: tuple = (),
    ) -> "WaterBalanceItem":
        """
        Parse one wire item and its nested children.

        Nesting deeper than ``max_depth`` raises :class:`TreeStructureError`
        with the ids leading to the offending item.
        """

        if not isinstance(payload, Mapping):
            raise TreeStructureError(
                f"Water balance item must be an object, got {type(payload).__name__}",
                path=_trail,
            )
        item_id = str(payload.get("id", ""))
        trail = _trail + (item_id,)
        if len(trail) > max_depth:
            raise TreeStructureError(
                f"Water balance payload is nested deeper than {max_depth} levels",
                path=trail,
            )
        raw_children = payload.get("children") or ()
        pid = payload.get("pid")
        return cls(
            id=item_id,
            pid=None if pid is None else str(pid),
            name=str(payload.get("name", "")),
            water_volume=_as_number(payload.get("waterVolume")),
            water_amount=_as_number(payload.get("waterAmount")),
            path=str(payload.get("path") or ""),
            children=tuple(cls.from_payload(child, max_depth, trail) for child in raw_children),
        )

    def as_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "pid": self.pid,
            "name": self.name,
            "waterVolume": self.water_volume,
            "waterAmount": self.water_amount,
            "path": self.path,
            "children": [child.as_dict() for child in self.children],
        }


@dataclass(frozen=True)
class WaterBalanceResponse:
    data: Sequence[WaterBalanceItem]
    success: bool

    @classmethod
    def from_payload(
        cls,
        payload: Mapping[str, Any],
        max_depth: int = DEFAULT_MAX_DEPTH,
    ) -> "WaterBalanceResponse":
        raw_items = payload.get("data") or ()
        return cls(
            data=tuple(WaterBalanceItem.from_payload(item, max_depth) for item in raw_items),
            success=bool(payload.get("success", False)),
        )

    def as_dict(self) -> Dict[str, Any]:
        return {"data": [item.as_dict() for item in self.data], "success": self.success}


@dataclass(frozen=True)
class WaterBalanceTreeNode:
    """
    Treemap node in the shape consumed by the charting widget.

    ``children`` stays ``None`` for leaves so that ``as_dict`` can omit the
    key entirely; the chart treats an empty list differently from a missing one.
    """

    name: str
    value: Number
    path: Optional[str] = None
    color: Optional[str] = None
    children: Optional[Sequence["WaterBalanceTreeNode"]] = None

    def node_count(self) -> int:
        return 1 + sum(child.node_count() for child in self.children or ())

    def as_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "name": self.name,
            "value": self.value,
            "path": self.path,
            "itemStyle": {"color": self.color},
        }
        if self.children:
            payload["children"] = [child.as_dict() for child in self.children]
        return payload


@dataclass(frozen=True)
class WaterBalanceTreeData:
    name: str
    children: Sequence[WaterBalanceTreeNode] = field(default_factory=tuple)

    def node_count(self) -> int:
        """Total real nodes below the synthetic wrapper."""
        return sum(child.node_count() for child in self.children)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "children": [child.as_dict() for child in self.children],
        }


@dataclass(frozen=True)
class LoginCredentials:
    phone: str
    password: str


@dataclass(frozen=True)
class AuthUser:
    id: str
    created_at: str
    updated_at: str
    email: Optional[str] = None
    phone: str = ""


@dataclass(frozen=True)
class LoginResult:
    token: str
    user: AuthUser

    def as_dict(self) -> Dict[str, Any]:
        return {
            "token": self.token,
            "user": {
                "id": self.user.id,
                "email": self.user.email,
                "phone": self.user.phone,
                "created_at": self.user.created_at,
                "updated_at": self.user.updated_at,
            },
        }


@dataclass(frozen=True)
class UserProfile:
    """
    Profile of the signed-in user.

    Apart from ``account_id``, ``email``, ``phone`` and ``registration_date``
    every field comes from the identity provider's free-form ``user_metadata``
    and may be missing.
    """

    account_id: str
    email: Optional[str] = None
    phone: Optional[str] = None
    registration_date: Optional[str] = None
    avatar: Optional[str] = None
    job: Optional[str] = None
    organization: Optional[str] = None
    location: Optional[str] = None
    introduction: Optional[str] = None
    personal_website: Optional[str] = None
    job_name: Optional[str] = None
    organization_name: Optional[str] = None
    location_name: Optional[str] = None
    certification: Optional[int] = None
    role: str = "user"

    def as_dict(self) -> Dict[str, Any]:
        return {
            "avatar": self.avatar,
            "job": self.job,
            "organization": self.organization,
            "location": self.location,
            "email": self.email,
            "introduction": self.introduction,
            "personalWebsite": self.personal_website,
            "jobName": self.job_name,
            "organizationName": self.organization_name,
            "locationName": self.location_name,
            "phone": self.phone,
            "registrationDate": self.registration_date,
            "accountId": self.account_id,
            "certification": self.certification,
            "role": self.role,
        }
