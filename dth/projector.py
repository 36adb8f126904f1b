from __future__ import annotations

from threading import Event

import structlog

from .errors import check_cancelled
from .gateway import ClusterGateway, format_selector
from .models import APP_LABEL, AppState, Workload, canary_enabled, endpoints_of, is_managed

logger = structlog.get_logger(__name__)


def project_state(gateway: ClusterGateway, app: str, cancel: Event | None = None) -> AppState:
    """Build the application view from the cluster.

    Deployments are selected by the `app` label and kept only when they opt in
    via the managed annotation and carry a track label. The Service and
    Endpoints are fetched by exact name; both must exist.
    """
    check_cancelled(cancel)
    objs = gateway.list_workloads(format_selector({APP_LABEL: app}))

    deployments: list[Workload] = []
    for obj in objs:
        if not is_managed(obj):
            logger.debug("workload_skipped", app=app, name=(obj.get("metadata") or {}).get("name"))
            continue
        deployments.append(Workload.from_object(obj))

    check_cancelled(cancel)
    endpoint_set = gateway.get_endpoint_set(app)
    check_cancelled(cancel)
    svc = gateway.get_routing_service(app)

    return AppState(
        canary_enabled=canary_enabled((svc.get("spec") or {}).get("selector")),
        deployments=deployments,
        endpoints=endpoints_of(endpoint_set),
    )


def list_apps(gateway: ClusterGateway, cancel: Event | None = None) -> list[str]:
    """Distinct `app` label values over every Deployment in the namespace."""
    check_cancelled(cancel)
    apps = {
        ((obj.get("metadata") or {}).get("labels") or {}).get(APP_LABEL)
        for obj in gateway.list_workloads()
    }
    return sorted(a for a in apps if a)
