#!/usr/bin/env python3
"""Live directory probe against the configured Supabase project and AMap.

Runs one reconciliation pass, prints where the list came from and a
facet summary, then optionally geocodes an address and plans a route to
one place.

Configuration comes from ``SFM_*`` environment variables (see
``SfmConfig.from_env``) and the persisted override in the state file.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from dataclasses import dataclass
from pathlib import Path

_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from sfmap import Coordinates, JsonFileStorage, SfmClient, SfmError, TravelMode  # noqa: E402
from sfmap.handoff import build_handoff_uri  # noqa: E402
from sfmap.models import PlaceDraft, Platform  # noqa: E402


@dataclass(frozen=True)
class ProbeResult:
    name: str
    ok: bool
    detail: str


def _print_results(results: list[ProbeResult]) -> None:
    width = max((len(r.name) for r in results), default=10)
    print("\nProbe report")
    print("-" * (width + 24))
    for result in results:
        status = "OK" if result.ok else "FAIL"
        print(f"{result.name:<{width}}  {status:<4}  {result.detail}")
    print("-" * (width + 24))
    failures = [r for r in results if not r.ok]
    print(f"Summary: {len(results) - len(failures)} OK, {len(failures)} FAIL")


def _parse_origin(value: str) -> Coordinates:
    try:
        lng, lat = (float(part) for part in value.split(","))
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"expected 'lng,lat', got {value!r}") from exc
    return Coordinates(lng=lng, lat=lat)


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Probe the live place directory and AMap services")
    parser.add_argument(
        "--state",
        type=Path,
        default=Path.home() / ".sfmap" / "state.json",
        help="State file holding the config override, snapshot and log level",
    )
    parser.add_argument("--prefer-local", action="store_true", help="Use the local snapshot when it has items")
    parser.add_argument("--geocode", metavar="ADDRESS", help="Resolve ADDRESS through the geocoder")
    parser.add_argument("--route-to", metavar="PLACE_ID", help="Plan a route to PLACE_ID")
    parser.add_argument("--origin", type=_parse_origin, help="Route origin as 'lng,lat' (required with --route-to)")
    parser.add_argument("--walking", action="store_true", help="Plan a walking route instead of driving")
    parser.add_argument("--json", action="store_true", help="Dump the adopted list as JSON")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args()


async def _run(args: argparse.Namespace) -> int:
    results: list[ProbeResult] = []
    mode = TravelMode.WALKING if args.walking else TravelMode.DRIVING

    async with SfmClient(JsonFileStorage(args.state)) as client:
        if args.verbose:
            logging.getLogger("sfmap").setLevel(logging.DEBUG)
        items = await client.boot(prefer_local=args.prefer_local)
        provenance = client.directory.provenance
        results.append(ProbeResult("directory.load", bool(items), f"{len(items)} places from {provenance}"))
        results.append(
            ProbeResult(
                "directory.facets",
                True,
                ", ".join(f"{city}={count}" for city, count in client.city_facets()) or "<none>",
            )
        )

        if args.json:
            print(json.dumps([p.to_snapshot_row() for p in items], indent=2, ensure_ascii=False))

        if args.geocode:
            try:
                coords = await client.relocate(PlaceDraft(address=args.geocode))
            except SfmError as exc:
                results.append(ProbeResult("geocode", False, str(exc)))
            else:
                results.append(ProbeResult("geocode", True, coords.as_param()))

        if args.route_to:
            place = client.directory.find(args.route_to)
            if place is None:
                results.append(ProbeResult("route", False, f"unknown place {args.route_to}"))
            elif args.origin is None:
                results.append(ProbeResult("route", False, "--origin is required"))
            else:
                try:
                    route = await client.planner.plan_route(place, mode, origin=args.origin)
                except SfmError as exc:
                    results.append(ProbeResult("route", False, str(exc)))
                else:
                    results.append(ProbeResult("route", True, f"{len(route.points)} points ({route.mode})"))
                for platform in Platform:
                    try:
                        uri = build_handoff_uri(place, mode, platform)
                    except SfmError as exc:
                        results.append(ProbeResult(f"handoff.{platform}", False, str(exc)))
                    else:
                        results.append(ProbeResult(f"handoff.{platform}", True, uri))

    _print_results(results)
    return 0 if all(r.ok for r in results) else 1


def main() -> int:
    args = _parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    return asyncio.run(_run(args))


if __name__ == "__main__":
    raise SystemExit(main())
