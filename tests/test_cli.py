import json

import cli


class _Resp:
    def __init__(self, payload, status_code=200):
        self._payload = payload
        self.status_code = status_code
        self.text = json.dumps(payload)

    @property
    def ok(self):
        return self.status_code < 400

    def json(self):
        return self._payload


def test_state_prints_json(monkeypatch, capsys):
    seen = {}

    def fake_get(url, params=None, timeout=None):
        seen["url"] = url
        return _Resp({"canaryEnabled": False, "deployments": [], "endpoints": []})

    monkeypatch.setattr(cli.requests, "get", fake_get)
    assert cli.main(["--api", "http://dth:3000/", "state", "nginx"]) == 0
    assert seen["url"] == "http://dth:3000/app/nginx"
    assert json.loads(capsys.readouterr().out)["canaryEnabled"] is False


def test_create_canary_posts_tag_and_replicas(monkeypatch):
    seen = {}

    def fake_post(url, json=None, timeout=None):
        seen.update(url=url, json=json)
        return _Resp({"detail": "Deployment 'nginx' not found"}, status_code=404)

    monkeypatch.setattr(cli.requests, "post", fake_post)
    rc = cli.main(["create-canary", "nginx", "--tag", "beta", "--replicas", "2"])
    assert rc == 1
    assert seen == {"url": "http://localhost:3000/app/nginx/create_canary", "json": {"tag": "beta", "replicas": 2}}


def test_set_canary_sends_enabled_flag(monkeypatch):
    calls = []

    def fake_get(url, params=None, timeout=None):
        calls.append((url, params))
        return _Resp({"canaryEnabled": True, "deployments": [], "endpoints": []})

    monkeypatch.setattr(cli.requests, "get", fake_get)
    assert cli.main(["set-canary", "nginx", "--enable"]) == 0
    assert cli.main(["set-canary", "nginx", "--disable"]) == 0
    assert calls == [
        ("http://localhost:3000/app/nginx/set_canary", {"enabled": "true"}),
        ("http://localhost:3000/app/nginx/set_canary", {"enabled": "false"}),
    ]
