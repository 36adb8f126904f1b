from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Protocol

import structlog
import urllib3
from kubernetes import client, config
from kubernetes.client.exceptions import ApiException

from .errors import GatewayError, NotFound
from .settings import Settings

logger = structlog.get_logger(__name__)


def format_selector(labels: dict[str, str]) -> str:
    """`{"app": "nginx", "track": "main"}` -> `"app=nginx,track=main"`."""
    return ",".join(f"{k}={v}" for k, v in labels.items())


@dataclass(frozen=True)
class SelectorPatch:
    """One change to a Service's `spec.selector`: add/overwrite or remove a key."""

    op: str  # add|remove
    key: str
    value: str | None = None

    @classmethod
    def add(cls, key: str, value: str) -> "SelectorPatch":
        return cls(op="add", key=key, value=value)

    @classmethod
    def remove(cls, key: str) -> "SelectorPatch":
        return cls(op="remove", key=key)

    def to_body(self) -> dict[str, Any]:
        """Strategic-merge body. A null value deletes the key and is a no-op if it is absent."""
        value = self.value if self.op == "add" else None
        return {"spec": {"selector": {self.key: value}}}


class ClusterGateway(Protocol):
    """Namespace-scoped access to the objects the core reads and writes.

    Objects are plain Kubernetes JSON dicts (camelCase keys).
    """

    def list_workloads(self, label_selector: str | None = None) -> list[dict[str, Any]]: ...

    def get_workload(self, name: str) -> dict[str, Any]: ...

    def create_workload(self, body: dict[str, Any]) -> dict[str, Any]: ...

    def get_routing_service(self, name: str) -> dict[str, Any]: ...

    def patch_service_selector(self, name: str, patch: SelectorPatch) -> dict[str, Any]: ...

    def get_endpoint_set(self, name: str) -> dict[str, Any]: ...

    def list_pods(self, label_selector: str) -> list[dict[str, Any]]: ...


def load_kube_config(kubeconfig: str | None = None) -> None:
    if kubeconfig:
        config.load_kube_config(config_file=kubeconfig)
        return
    try:
        config.load_incluster_config()
    except config.ConfigException:
        config.load_kube_config()


class KubeGateway:
    """ClusterGateway backed by the official kubernetes client."""

    def __init__(
        self,
        namespace: str,
        apps: client.AppsV1Api | None = None,
        core: client.CoreV1Api | None = None,
        timeout_s: float = 10,
    ):
        self.namespace = namespace
        self.apps = apps or client.AppsV1Api()
        self.core = core or client.CoreV1Api()
        self.timeout_s = timeout_s
        self._serializer = client.ApiClient()

    @classmethod
    def from_settings(cls, s: Settings) -> "KubeGateway":
        load_kube_config(s.kubeconfig)
        return cls(namespace=s.namespace, timeout_s=s.gateway_timeout_s)

    def _call(self, what: str, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        try:
            result = fn(*args, _request_timeout=self.timeout_s, **kwargs)
        except ApiException as e:
            if e.status == 404:
                raise NotFound(f"{what} not found in namespace '{self.namespace}'.") from e
            logger.warning("gateway_error", what=what, status=e.status, reason=e.reason)
            raise GatewayError(f"{what}: {e.status} {e.reason}", status=e.status) from e
        except urllib3.exceptions.HTTPError as e:
            logger.warning("gateway_unreachable", what=what, error=str(e))
            raise GatewayError(f"{what}: {type(e).__name__}: {e}") from e
        return self._serializer.sanitize_for_serialization(result)

    def list_workloads(self, label_selector: str | None = None) -> list[dict[str, Any]]:
        kwargs = {"label_selector": label_selector} if label_selector else {}
        res = self._call("Deployments", self.apps.list_namespaced_deployment, self.namespace, **kwargs)
        return res.get("items") or []

    def get_workload(self, name: str) -> dict[str, Any]:
        return self._call(f"Deployment '{name}'", self.apps.read_namespaced_deployment, name, self.namespace)

    def create_workload(self, body: dict[str, Any]) -> dict[str, Any]:
        name = (body.get("metadata") or {}).get("name")
        return self._call(f"Deployment '{name}'", self.apps.create_namespaced_deployment, self.namespace, body)

    def get_routing_service(self, name: str) -> dict[str, Any]:
        return self._call(f"Service '{name}'", self.core.read_namespaced_service, name, self.namespace)

    def patch_service_selector(self, name: str, patch: SelectorPatch) -> dict[str, Any]:
        return self._call(
            f"Service '{name}'", self.core.patch_namespaced_service, name, self.namespace, patch.to_body()
        )

    def get_endpoint_set(self, name: str) -> dict[str, Any]:
        return self._call(f"Endpoints '{name}'", self.core.read_namespaced_endpoints, name, self.namespace)

    def list_pods(self, label_selector: str) -> list[dict[str, Any]]:
        res = self._call("Pods", self.core.list_namespaced_pod, self.namespace, label_selector=label_selector)
        return res.get("items") or []
