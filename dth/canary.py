from __future__ import annotations

import copy
from threading import Event
from typing import Any, Callable

import structlog

from .errors import InvalidTag, MalformedWorkload, check_cancelled
from .gateway import ClusterGateway
from .models import APP_LABEL, CANARY_TRACK, MANAGED_ANNOTATION, TRACK_LABEL, Workload
from .names import random_name

logger = structlog.get_logger(__name__)


def canary_image(image: str, tag: str) -> str:
    """Replace everything after the first ':' with `tag` (or append it)."""
    repo = image.split(":", 1)[0]
    return f"{repo}:{tag}"


def canary_name(app: str, token: str) -> str:
    return f"{app}-canary-{token}"


def build_canary(primary: dict[str, Any], app: str, tag: str, replicas: int, name: str) -> dict[str, Any]:
    """Derive the canary Deployment body from the primary Deployment object.

    The whole spec is inherited. The track label must agree in metadata, the
    selector and the pod template or the API server rejects the object.
    """
    spec = copy.deepcopy(primary.get("spec") or {})
    containers = ((spec.get("template") or {}).get("spec") or {}).get("containers") or []
    if not containers:
        raise MalformedWorkload(f"Deployment '{app}' declares no containers.")

    spec.setdefault("selector", {}).setdefault("matchLabels", {})[TRACK_LABEL] = CANARY_TRACK
    spec["template"].setdefault("metadata", {}).setdefault("labels", {})[TRACK_LABEL] = CANARY_TRACK
    spec["replicas"] = replicas
    containers[0]["image"] = canary_image(containers[0].get("image", ""), tag)

    return {
        "apiVersion": "apps/v1",
        "kind": "Deployment",
        "metadata": {
            "name": name,
            "labels": {APP_LABEL: app, TRACK_LABEL: CANARY_TRACK},
            "annotations": {MANAGED_ANNOTATION: "true"},
        },
        "spec": spec,
    }


def spawn_canary(
    gateway: ClusterGateway,
    app: str,
    tag: str,
    replicas: int,
    name_factory: Callable[[], str] = random_name,
    cancel: Event | None = None,
) -> Workload:
    """Create a canary Deployment for `app` running image tag `tag`.

    Returns as soon as the API server accepted the object; readiness is not awaited.
    A name collision surfaces as a GatewayError (409); callers may simply retry.
    """
    if not tag:
        raise InvalidTag("Image tag must be a non-empty string.")

    check_cancelled(cancel)
    primary = gateway.get_workload(app)
    body = build_canary(primary, app, tag, int(replicas), canary_name(app, name_factory()))

    check_cancelled(cancel)
    created = gateway.create_workload(body)
    workload = Workload.from_object(created)
    logger.info(
        "canary_created",
        app=app,
        name=workload.name,
        image=workload.image,
        replicas=workload.replicas,
    )
    return workload
