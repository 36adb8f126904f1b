from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .errors import MalformedWorkload

# Label/annotation convention shared with the cluster objects.
APP_LABEL = "app"
TRACK_LABEL = "track"
MANAGED_ANNOTATION = "devops-tool-htmx"
MAIN_TRACK = "main"
CANARY_TRACK = "canary"

_TRUE = {"1", "t", "T", "TRUE", "true", "True"}
_FALSE = {"0", "f", "F", "FALSE", "false", "False"}


def parse_bool(raw: str | None) -> bool:
    """Strict boolean parsing; raises ValueError on anything unrecognised."""
    if raw in _TRUE:
        return True
    if raw in _FALSE:
        return False
    raise ValueError(f"invalid boolean: {raw!r}")


@dataclass(frozen=True)
class Workload:
    name: str
    image: str
    track: str
    replicas: int
    available_replicas: int = 0

    @classmethod
    def from_object(cls, obj: dict[str, Any]) -> "Workload":
        meta = obj.get("metadata") or {}
        spec = obj.get("spec") or {}
        status = obj.get("status") or {}
        containers = (((spec.get("template") or {}).get("spec") or {}).get("containers")) or []
        if not containers:
            raise MalformedWorkload(f"Deployment '{meta.get('name')}' declares no containers.")
        replicas = spec.get("replicas")
        return cls(
            name=meta.get("name", ""),
            image=containers[0].get("image", ""),
            track=(meta.get("labels") or {}).get(TRACK_LABEL, ""),
            replicas=1 if replicas is None else int(replicas),
            available_replicas=int(status.get("availableReplicas") or 0),
        )

    def to_json(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "image": self.image,
            "track": self.track,
            "replicas": self.replicas,
            "availableReplicas": self.available_replicas,
        }


@dataclass(frozen=True)
class Endpoint:
    target_instance: str
    address: str

    @classmethod
    def from_address(cls, addr: dict[str, Any]) -> "Endpoint":
        target = addr.get("targetRef") or {}
        return cls(target_instance=target.get("name", ""), address=addr.get("ip", ""))

    def to_json(self) -> dict[str, str]:
        return {"targetPod": self.target_instance, "ip": self.address}


@dataclass(frozen=True)
class AppState:
    canary_enabled: bool
    deployments: list[Workload] = field(default_factory=list)
    endpoints: list[Endpoint] = field(default_factory=list)

    def to_json(self) -> dict[str, Any]:
        return {
            "canaryEnabled": self.canary_enabled,
            "deployments": [d.to_json() for d in self.deployments],
            "endpoints": [e.to_json() for e in self.endpoints],
        }


def canary_enabled(selector: dict[str, str] | None) -> bool:
    """Traffic is split across tracks unless the selector pins `track=main`."""
    return (selector or {}).get(TRACK_LABEL) != MAIN_TRACK


def is_managed(obj: dict[str, Any]) -> bool:
    meta = obj.get("metadata") or {}
    try:
        managed = parse_bool((meta.get("annotations") or {}).get(MANAGED_ANNOTATION))
    except ValueError:
        return False
    return managed and bool((meta.get("labels") or {}).get(TRACK_LABEL))


def endpoints_of(endpoint_set: dict[str, Any]) -> list[Endpoint]:
    subsets = endpoint_set.get("subsets") or []
    if not subsets:
        return []
    return [Endpoint.from_address(a) for a in subsets[0].get("addresses") or []]
