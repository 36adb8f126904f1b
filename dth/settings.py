from __future__ import annotations

import os
from dataclasses import dataclass


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    # Cluster
    namespace: str = os.getenv("DTH_NAMESPACE", "default")
    kubeconfig: str | None = os.getenv("DTH_KUBECONFIG")
    gateway_timeout_s: int = _env_int("DTH_GATEWAY_TIMEOUT_S", 10)

    # HTTP
    host: str = os.getenv("DTH_HOST", "0.0.0.0")
    port: int = _env_int("DTH_PORT", 3000)
    request_timeout_s: int = _env_int("DTH_REQUEST_TIMEOUT_S", 30)

    # Endpoint propagation after a selector patch.
    # 0 disables the wait; the returned view may then show stale endpoints.
    propagation_timeout_s: float = _env_float("DTH_PROPAGATION_TIMEOUT_S", 2.0)
    propagation_poll_s: float = _env_float("DTH_PROPAGATION_POLL_S", 0.1)

    default_canary_replicas: int = _env_int("DTH_DEFAULT_CANARY_REPLICAS", 1)


settings = Settings()
