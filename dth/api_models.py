from __future__ import annotations

from pydantic import BaseModel, Field

from .settings import settings


class CanaryCreateRequest(BaseModel):
    tag: str = Field(..., description="Image tag for the canary (replaces the primary's tag)")
    replicas: int = Field(settings.default_canary_replicas, ge=0, le=100)


class WorkloadOut(BaseModel):
    name: str
    image: str
    track: str
    replicas: int
    availableReplicas: int


class EndpointOut(BaseModel):
    targetPod: str
    ip: str


class AppStateOut(BaseModel):
    canaryEnabled: bool
    deployments: list[WorkloadOut]
    endpoints: list[EndpointOut]


class AppsOut(BaseModel):
    apps: list[str]
