"""Lightweight REST client for the pytiers API."""

from __future__ import annotations

import argparse
import json
from pathlib import Path

import httpx

from pytiers.ingest import load_tables


def main() -> None:
    parser = argparse.ArgumentParser(description="Interact with the pytiers REST API")
    parser.add_argument("base_url", help="Base URL of the API, e.g. http://localhost:8000")
    parser.add_argument("tables", type=Path, nargs="?", help="Matchup tables (.json or .csv)")
    parser.add_argument("--sort-by", type=int, default=0, help="Table index that drives the ranking")
    parser.add_argument("--iters", type=int, default=None, help="Maximum solver iterations")
    parser.add_argument("--ratingupdate", action="store_true", help="Ask the server to fetch ratingupdate.info itself")
    parser.add_argument("--export-path", type=Path, help="Download the scores as CSV to this path")
    args = parser.parse_args()

    with httpx.Client(base_url=args.base_url, timeout=120.0) as client:
        if args.ratingupdate:
            resp = client.post("/tiers/ratingupdate", json={"sort_by": args.sort_by, "max_iters": args.iters})
            resp.raise_for_status()
            print(json.dumps(resp.json(), indent=2))
            return

        if args.tables is None:
            raise SystemExit("a tables file is required unless using --ratingupdate")

        payload = {
            "tables": [table.model_dump() for table in load_tables(args.tables)],
            "sort_by": args.sort_by,
            "max_iters": args.iters,
        }
        if args.export_path:
            resp = client.post("/tiers/export.csv", json=payload)
            resp.raise_for_status()
            args.export_path.write_text(resp.text, encoding="utf-8")
            print(f"CSV export saved to {args.export_path}")
            return

        resp = client.post("/tiers", json=payload)
        if resp.status_code == 400:
            raise SystemExit(f"request rejected: {resp.json().get('detail')}")
        resp.raise_for_status()
        body = resp.json()
        print("Ranking:", ", ".join(body["ranking"]))
        for result in body["results"]:
            print(
                f"{result['name'] or '-'}: {result['status']} after {result['iterations']} rounds "
                f"(grand multiplier {result['grand_multiplier']:.4f})"
            )


if __name__ == "__main__":
    main()
