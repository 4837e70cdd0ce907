"""Lightweight REST client for the top20 API."""

from __future__ import annotations

import argparse
import json
from pathlib import Path

import httpx


def _load_players(path: Path) -> list[dict]:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise SystemExit(f"Invalid players JSON: {exc}") from exc
    if isinstance(data, dict):
        data = data.get("players", [])
    if data and all(isinstance(item, str) for item in data):
        return [{"position": index, "name": name} for index, name in enumerate(data, start=1)]
    return data


def _check(resp: httpx.Response) -> None:
    if resp.status_code < 400:
        return
    try:
        body = resp.json()
    except ValueError:
        raise SystemExit(f"{resp.status_code}: {resp.text}")
    message = body.get("message") or body.get("error") or resp.text
    raise SystemExit(f"{resp.status_code}: {message}")


def main() -> None:
    parser = argparse.ArgumentParser(description="Interact with the top20 REST API")
    parser.add_argument("base_url", help="Base URL of the API, e.g. http://localhost:3000")
    sub = parser.add_subparsers(dest="command", required=True)

    submit = sub.add_parser("submit", help="Submit a ranking")
    submit.add_argument("players", type=Path, help="JSON file: list of names or {position, name} objects")
    submit.add_argument("--by", required=True, help="Submitter name")

    list_cmd = sub.add_parser("list", help="List submissions")
    list_cmd.add_argument("--by", default=None, help="Only show submissions from this submitter")

    stats = sub.add_parser("stats", help="Show position breakdown for a player")
    stats.add_argument("name", help="Player name (case-insensitive)")

    sub.add_parser("health", help="Check API and database health")

    args = parser.parse_args()

    with httpx.Client(base_url=args.base_url) as client:
        if args.command == "submit":
            payload = {"players": _load_players(args.players), "submittedBy": args.by}
            resp = client.post("/api/submissions", json=payload)
            _check(resp)
            print("Submission stored")
        elif args.command == "list":
            params = {"submittedBy": args.by} if args.by else None
            resp = client.get("/api/submissions", params=params)
            _check(resp)
            print(json.dumps(resp.json(), indent=2))
        elif args.command == "stats":
            resp = client.get("/api/players/stats", params={"name": args.name})
            _check(resp)
            print(json.dumps(resp.json(), indent=2))
        else:
            resp = client.get("/api/health")
            print(json.dumps(resp.json(), indent=2))
            _check(resp)


if __name__ == "__main__":
    main()
