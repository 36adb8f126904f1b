from __future__ import annotations

from contextlib import contextmanager
from functools import lru_cache
from threading import Event, Timer
from typing import Iterator
from urllib.parse import quote

import structlog
from fastapi import Depends, FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.exceptions import RequestValidationError
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse
from pydantic import ValidationError

from dth.api_models import AppsOut, AppStateOut, CanaryCreateRequest
from dth.canary import spawn_canary
from dth.errors import DthError
from dth.gateway import ClusterGateway, KubeGateway
from dth.models import AppState, parse_bool
from dth.projector import list_apps, project_state
from dth.render import render_app, render_index
from dth.settings import settings
from dth.traffic import set_canary_traffic

logger = structlog.get_logger("dth.http")

app = FastAPI(title="devops-tool-htmx")


@lru_cache(maxsize=1)
def get_gateway() -> ClusterGateway:
    return KubeGateway.from_settings(settings)


@contextmanager
def request_deadline(timeout_s: float = settings.request_timeout_s) -> Iterator[Event]:
    """Cancellation event that fires when the request runs past `timeout_s`."""
    cancel = Event()
    timer = Timer(timeout_s, cancel.set)
    timer.daemon = True
    timer.start()
    try:
        yield cancel
    finally:
        timer.cancel()


def _is_htmx(request: Request) -> bool:
    try:
        return parse_bool(request.headers.get("HX-Request", "false"))
    except ValueError:
        return False


def _respond(request: Request, name: str, state: AppState):
    if _is_htmx(request):
        return HTMLResponse(render_app(name, state))
    return JSONResponse(state.to_json())


@app.middleware("http")
async def log_requests(request: Request, call_next):
    client = request.client
    ip, port = (client.host, client.port) if client else ("-", "-")
    try:
        response = await call_next(request)
    except Exception as e:
        logger.error("request", ip=ip, port=port, method=request.method, path=request.url.path, error=str(e))
        raise
    logger.info(
        "request",
        ip=ip,
        port=port,
        status=response.status_code,
        method=request.method,
        path=request.url.path,
    )
    return response


@app.exception_handler(DthError)
async def dth_error_handler(request: Request, exc: DthError):
    return JSONResponse(status_code=exc.status_code, content={"detail": str(exc)})


@app.get("/healthz")
def healthz() -> dict[str, str]:
    return {"status": "healthy"}


@app.get("/", response_class=HTMLResponse)
def index(gateway: ClusterGateway = Depends(get_gateway)):
    with request_deadline() as cancel:
        apps = list_apps(gateway, cancel=cancel)
    return HTMLResponse(render_index(apps))


@app.get("/apps", response_model=AppsOut)
def apps(gateway: ClusterGateway = Depends(get_gateway)):
    with request_deadline() as cancel:
        return {"apps": list_apps(gateway, cancel=cancel)}


@app.get("/app")
def app_lookup(name: str):
    return RedirectResponse(url=f"/app/{quote(name, safe='')}", status_code=302)


@app.get("/app/{name}", response_model=AppStateOut)
def get_app(name: str, request: Request, gateway: ClusterGateway = Depends(get_gateway)):
    with request_deadline() as cancel:
        state = project_state(gateway, name, cancel=cancel)
    return _respond(request, name, state)


@app.post("/app/{name}/create_canary", response_model=AppStateOut)
async def create_canary(name: str, request: Request, gateway: ClusterGateway = Depends(get_gateway)):
    # Accept JSON (API clients) and form posts (htmx).
    if request.headers.get("content-type", "").startswith("application/json"):
        try:
            raw = await request.json()
        except ValueError as e:
            raise RequestValidationError(
                [{"type": "json_invalid", "loc": ("body",), "msg": f"Invalid JSON body: {e}", "input": None}]
            ) from e
    else:
        raw = dict(await request.form())
    try:
        req = CanaryCreateRequest.model_validate(raw)
    except ValidationError as e:
        raise RequestValidationError(e.errors()) from e

    def _run() -> AppState:
        with request_deadline() as cancel:
            spawn_canary(gateway, name, req.tag, req.replicas, cancel=cancel)
            return project_state(gateway, name, cancel=cancel)

    state = await run_in_threadpool(_run)
    return _respond(request, name, state)


@app.get("/app/{name}/set_canary", response_model=AppStateOut)
def set_canary(name: str, request: Request, enabled: bool = False, gateway: ClusterGateway = Depends(get_gateway)):
    with request_deadline() as cancel:
        state = set_canary_traffic(gateway, name, enabled, cancel=cancel)
    return _respond(request, name, state)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=settings.host, port=settings.port)
