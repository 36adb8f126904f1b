from __future__ import annotations

from html import escape

from .models import MAIN_TRACK, AppState
from .settings import settings

_HEAD = """
    <meta charset="UTF-8">
    <title>devops-tool-htmx</title>
    <script src="https://unpkg.com/htmx.org@1.9.12"></script>
    <link href="https://cdn.jsdelivr.net/npm/bootstrap@5.3.0/dist/css/bootstrap.min.css" rel="stylesheet">
"""


def render_index(apps: list[str]) -> str:
    items = "".join(
        f"<li class='list-group-item'><a href='#' hx-get='/app/{escape(a)}' hx-target='#app'>{escape(a)}</a></li>"
        for a in apps
    )
    return f"""<!DOCTYPE html>
<html lang="en">
<head>{_HEAD}</head>
<body class="container py-4">
    <h2>Applications</h2>
    <form class="d-flex gap-2 mb-3" hx-get="/app" hx-target="#app" hx-push-url="false">
        <input class="form-control" name="name" placeholder="application name">
        <button class="btn btn-primary" type="submit">Open</button>
    </form>
    <ul class="list-group mb-4">{items}</ul>
    <div id="app"></div>
</body>
</html>
"""


def render_app(name: str, state: AppState) -> str:
    """HTML fragment swapped into #app by htmx."""
    n = escape(name)
    deployments = "".join(
        "<tr"
        + (" class='table-warning'" if d.track != MAIN_TRACK else "")
        + f"><td>{escape(d.name)}</td><td>{escape(d.track)}</td><td><code>{escape(d.image)}</code></td>"
        f"<td>{d.available_replicas}/{d.replicas}</td></tr>"
        for d in state.deployments
    )
    endpoints = "".join(
        f"<tr><td>{escape(e.target_instance)}</td><td>{escape(e.address)}</td></tr>" for e in state.endpoints
    )
    if state.canary_enabled:
        toggle = (
            f"<button class='btn btn-outline-secondary' hx-get='/app/{n}/set_canary?enabled=false' "
            f"hx-target='#app'>Route to main only</button>"
        )
        mode = "<span class='badge bg-warning text-dark'>traffic split across tracks</span>"
    else:
        toggle = (
            f"<button class='btn btn-warning' hx-get='/app/{n}/set_canary?enabled=true' "
            f"hx-target='#app'>Enable canary traffic</button>"
        )
        mode = "<span class='badge bg-success'>main track only</span>"

    return f"""
<div class="card p-3">
    <div class="d-flex justify-content-between align-items-center mb-3">
        <h4 class="mb-0">{n}</h4>
        <div>{mode} <button class='btn btn-sm btn-link' hx-get='/app/{n}' hx-target='#app'>refresh</button></div>
    </div>
    <h5>Deployments</h5>
    <table class="table table-sm">
        <thead><tr><th>Name</th><th>Track</th><th>Image</th><th>Available</th></tr></thead>
        <tbody>{deployments}</tbody>
    </table>
    <h5>Endpoints</h5>
    <table class="table table-sm">
        <thead><tr><th>Pod</th><th>IP</th></tr></thead>
        <tbody>{endpoints}</tbody>
    </table>
    <div class="d-flex gap-3 align-items-end">
        {toggle}
        <form class="d-flex gap-2" hx-post="/app/{n}/create_canary" hx-target="#app">
            <input class="form-control" name="tag" placeholder="image tag" required>
            <input class="form-control" name="replicas" type="number" min="0" value="{settings.default_canary_replicas}" style="width:6em">
            <button class="btn btn-primary" type="submit">Create canary</button>
        </form>
    </div>
</div>
"""
