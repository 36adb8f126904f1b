from __future__ import annotations

import time
from threading import Event
from typing import Any

import structlog

from .errors import check_cancelled
from .gateway import ClusterGateway, SelectorPatch, format_selector
from .models import MAIN_TRACK, TRACK_LABEL, AppState
from .projector import project_state
from .settings import settings

logger = structlog.get_logger(__name__)


def selector_patch(enabled: bool) -> SelectorPatch:
    # No track key -> the Service matches every track.
    if enabled:
        return SelectorPatch.remove(TRACK_LABEL)
    return SelectorPatch.add(TRACK_LABEL, MAIN_TRACK)


def _pod_ready(pod: dict[str, Any]) -> bool:
    if (pod.get("metadata") or {}).get("deletionTimestamp"):
        return False
    for cond in (pod.get("status") or {}).get("conditions") or []:
        if cond.get("type") == "Ready":
            return cond.get("status") == "True"
    return False


def _endpoint_targets(endpoint_set: dict[str, Any]) -> set[str]:
    names: set[str] = set()
    for subset in endpoint_set.get("subsets") or []:
        for addr in subset.get("addresses") or []:
            names.add((addr.get("targetRef") or {}).get("name", ""))
    return names


def endpoints_converged(gateway: ClusterGateway, app: str, selector: dict[str, str]) -> bool:
    """True when the Endpoints object lists exactly the ready pods the selector matches."""
    if not selector:
        # Selector-less Services have manually managed Endpoints.
        return True
    pods = gateway.list_pods(format_selector(selector))
    expected = {(p.get("metadata") or {}).get("name", "") for p in pods if _pod_ready(p)}
    return _endpoint_targets(gateway.get_endpoint_set(app)) == expected


def wait_for_endpoints(
    gateway: ClusterGateway,
    app: str,
    selector: dict[str, str],
    timeout_s: float,
    poll_s: float,
    cancel: Event | None = None,
) -> bool:
    """Poll until the endpoint controller caught up with `selector` or `timeout_s` elapsed.

    Returns False on timeout; the caller's next read may then show stale endpoints.
    """
    if timeout_s <= 0:
        return False
    t0 = time.monotonic()
    polls = 0
    while True:
        check_cancelled(cancel)
        polls += 1
        if endpoints_converged(gateway, app, selector):
            logger.info("endpoints_converged", app=app, polls=polls)
            return True
        remaining = timeout_s - (time.monotonic() - t0)
        if remaining <= 0:
            logger.warning("endpoints_not_converged", app=app, timeout_s=timeout_s, polls=polls)
            return False
        delay = min(poll_s, remaining)
        if cancel is not None:
            cancel.wait(delay)
        else:
            time.sleep(delay)


def set_canary_traffic(
    gateway: ClusterGateway,
    app: str,
    enabled: bool,
    timeout_s: float | None = None,
    poll_s: float | None = None,
    cancel: Event | None = None,
) -> AppState:
    """Route to both tracks (`enabled`) or pin the Service to `track=main`, then re-read state.

    Both directions are idempotent.
    """
    timeout_s = settings.propagation_timeout_s if timeout_s is None else timeout_s
    poll_s = settings.propagation_poll_s if poll_s is None else poll_s

    check_cancelled(cancel)
    svc = gateway.patch_service_selector(app, selector_patch(enabled))
    selector = (svc.get("spec") or {}).get("selector") or {}
    logger.info("canary_traffic_set", app=app, enabled=enabled, selector=selector)

    wait_for_endpoints(gateway, app, selector, timeout_s, poll_s, cancel=cancel)
    return project_state(gateway, app, cancel=cancel)
