import copy
import os
import sys

import pytest

# Ensure project root is importable (so `import main` / `import cli` work reliably across environments)
_project_root = os.path.dirname(os.path.dirname(__file__))
if _project_root not in sys.path:
    sys.path.insert(0, _project_root)

from dth.errors import GatewayError, NotFound  # noqa: E402


def _parse_selector(label_selector):
    if not label_selector:
        return {}
    return dict(part.split("=", 1) for part in label_selector.split(","))


def _matches(labels, selector):
    labels = labels or {}
    return all(labels.get(k) == v for k, v in selector.items())


def make_deployment(name, app, track="main", image="nginx:1.25.0-alpine", replicas=3, available=None, annotations=None):
    labels = {"app": app}
    if track is not None:
        labels["track"] = track
    selector = {"app": app}
    if track is not None:
        selector["track"] = track
    return {
        "apiVersion": "apps/v1",
        "kind": "Deployment",
        "metadata": {
            "name": name,
            "labels": labels,
            "annotations": {"devops-tool-htmx": "true"} if annotations is None else annotations,
        },
        "spec": {
            "replicas": replicas,
            "selector": {"matchLabels": dict(selector)},
            "template": {
                "metadata": {"labels": dict(selector)},
                "spec": {
                    "containers": [
                        {
                            "name": app,
                            "image": image,
                            "ports": [{"containerPort": 80}],
                            "env": [{"name": "MODE", "value": "prod"}],
                            "resources": {"limits": {"cpu": "250m", "memory": "128Mi"}},
                        }
                    ]
                },
            },
        },
        "status": {"availableReplicas": replicas if available is None else available},
    }


def make_pod(name, app, track, ip, ready=True):
    return {
        "metadata": {"name": name, "labels": {"app": app, "track": track}},
        "status": {
            "podIP": ip,
            "conditions": [{"type": "Ready", "status": "True" if ready else "False"}],
        },
    }


def make_service(name, selector):
    return {"metadata": {"name": name}, "spec": {"selector": dict(selector), "ports": [{"port": 80}]}}


class FakeGateway:
    """In-memory cluster: label selection, selector patches and a lagging endpoint controller.

    `reconcile_lag` is the number of Endpoints reads that still return the old
    addresses after a selector patch.
    """

    def __init__(self, reconcile_lag=0):
        self.deployments = []
        self.services = {}
        self.endpoints = {}
        self.pods = []
        self.reconcile_lag = reconcile_lag
        self._pending = {}
        self.fail = {}  # method name -> exception
        self.calls = []

    def _enter(self, method):
        self.calls.append(method)
        exc = self.fail.get(method)
        if exc is not None:
            raise exc

    def reconcile(self, name):
        selector = self.services[name]["spec"].get("selector") or {}
        addresses = [
            {"ip": p["status"]["podIP"], "targetRef": {"kind": "Pod", "name": p["metadata"]["name"]}}
            for p in self.pods
            if _matches(p["metadata"]["labels"], selector)
            and p["status"]["conditions"][0]["status"] == "True"
        ]
        subsets = [{"addresses": addresses, "ports": [{"port": 80}]}] if addresses else []
        self.endpoints[name] = {"metadata": {"name": name}, "subsets": subsets}

    # ClusterGateway

    def list_workloads(self, label_selector=None):
        self._enter("list_workloads")
        selector = _parse_selector(label_selector)
        return [copy.deepcopy(d) for d in self.deployments if _matches(d["metadata"].get("labels"), selector)]

    def get_workload(self, name):
        self._enter("get_workload")
        for d in self.deployments:
            if d["metadata"]["name"] == name:
                return copy.deepcopy(d)
        raise NotFound(f"Deployment '{name}' not found")

    def create_workload(self, body):
        self._enter("create_workload")
        name = body["metadata"]["name"]
        if any(d["metadata"]["name"] == name for d in self.deployments):
            raise GatewayError(f"Deployment '{name}': 409 Conflict", status=409)
        obj = copy.deepcopy(body)
        obj["status"] = {}
        self.deployments.append(obj)
        return copy.deepcopy(obj)

    def get_routing_service(self, name):
        self._enter("get_routing_service")
        if name not in self.services:
            raise NotFound(f"Service '{name}' not found")
        return copy.deepcopy(self.services[name])

    def patch_service_selector(self, name, patch):
        self._enter("patch_service_selector")
        if name not in self.services:
            raise NotFound(f"Service '{name}' not found")
        selector = self.services[name]["spec"].setdefault("selector", {})
        for key, value in patch.to_body()["spec"]["selector"].items():
            if value is None:
                selector.pop(key, None)
            else:
                selector[key] = value
        if self.reconcile_lag:
            self._pending[name] = self.reconcile_lag
        else:
            self.reconcile(name)
        return copy.deepcopy(self.services[name])

    def get_endpoint_set(self, name):
        self._enter("get_endpoint_set")
        if name not in self.endpoints:
            raise NotFound(f"Endpoints '{name}' not found")
        if self._pending.get(name):
            self._pending[name] -= 1
            stale = copy.deepcopy(self.endpoints[name])
            if not self._pending[name]:
                self.reconcile(name)
            return stale
        return copy.deepcopy(self.endpoints[name])

    def list_pods(self, label_selector):
        self._enter("list_pods")
        selector = _parse_selector(label_selector)
        return [copy.deepcopy(p) for p in self.pods if _matches(p["metadata"]["labels"], selector)]


def add_canary_pods(gw, app="nginx", count=1):
    for i in range(count):
        gw.pods.append(make_pod(f"{app}-canary-pod-{i}", app, "canary", f"10.0.1.{i + 1}"))


@pytest.fixture
def gateway():
    """The nginx application from the deploy manifest: 3 main pods, Service pinned to main."""
    gw = FakeGateway()
    gw.deployments.append(make_deployment("nginx", "nginx"))
    for i, suffix in enumerate("abc"):
        gw.pods.append(make_pod(f"nginx-{suffix}", "nginx", "main", f"10.0.0.{i + 1}"))
    gw.services["nginx"] = make_service("nginx", {"app": "nginx", "track": "main"})
    gw.reconcile("nginx")
    return gw
