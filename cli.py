from __future__ import annotations

import argparse
import json
import sys

import requests


def _print(obj) -> None:
    print(json.dumps(obj, indent=2, ensure_ascii=False))


def _emit(r: requests.Response) -> int:
    try:
        _print(r.json())
    except ValueError:
        print(r.text)
    return 0 if r.ok else 1


def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(description="devops-tool-htmx CLI")
    p.add_argument("--api", default="http://localhost:3000", help="API base URL")
    sub = p.add_subparsers(dest="cmd", required=True)

    sub.add_parser("apps", help="List applications")

    s_state = sub.add_parser("state", help="Show deployments, endpoints and traffic mode of an application")
    s_state.add_argument("name")

    s_canary = sub.add_parser("create-canary", help="Create a canary deployment from the primary one")
    s_canary.add_argument("name")
    s_canary.add_argument("--tag", required=True, help="Image tag for the canary")
    s_canary.add_argument("--replicas", type=int, default=1)

    s_set = sub.add_parser("set-canary", help="Split traffic across tracks or pin it to main")
    s_set.add_argument("name")
    mode = s_set.add_mutually_exclusive_group(required=True)
    mode.add_argument("--enable", action="store_true", help="Route to both main and canary pods")
    mode.add_argument("--disable", action="store_true", help="Route to main pods only")

    args = p.parse_args(argv)

    base = args.api.rstrip("/")

    if args.cmd == "apps":
        return _emit(requests.get(f"{base}/apps", timeout=10))

    if args.cmd == "state":
        return _emit(requests.get(f"{base}/app/{args.name}", timeout=10))

    if args.cmd == "create-canary":
        payload = {"tag": args.tag, "replicas": args.replicas}
        return _emit(requests.post(f"{base}/app/{args.name}/create_canary", json=payload, timeout=30))

    if args.cmd == "set-canary":
        params = {"enabled": "true" if args.enable else "false"}
        return _emit(requests.get(f"{base}/app/{args.name}/set_canary", params=params, timeout=30))

    return 2


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
