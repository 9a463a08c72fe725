#!/usr/bin/env python3
"""
SmartBagan CLI Tool.

Command-line interface to the optimization engine:
- Fleet analysis and single move checks from JSON files
- Zone recommendations
- Serving and health-checking the API

Usage:
    python -m api.cli optimize --input fleet.json
    python -m api.cli quick-check --input check.json
    python -m api.cli zones --date 2025-06-01
    python -m api.cli serve --port 5000
    python -m api.cli check-health
"""
import argparse
import asyncio
import json
import sys
from datetime import date as date_type
from pathlib import Path
from typing import List, Optional

import pydantic


def _load_json(path: str) -> dict:
    try:
        return json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        print(f"\nError: could not read {path}: {e}")
        sys.exit(1)


def _print_json(data) -> None:
    print(json.dumps(data, indent=2, default=str))


def optimize(input_path: str) -> None:
    """Run a fleet analysis on a JSON request file."""
    from api.routers.optimization import analyze
    from api.schemas import AnalyzeRequest

    request = AnalyzeRequest.model_validate(_load_json(input_path))
    response = asyncio.run(analyze(request))
    _print_json(response.model_dump(mode="json", by_alias=True))


def quick_check(input_path: str) -> None:
    """Check a single bagan/site pair from a JSON request file."""
    from api.routers.optimization import quick_check as check
    from api.schemas import QuickCheckRequest

    request = QuickCheckRequest.model_validate(_load_json(input_path))
    response = asyncio.run(check(request))
    _print_json(response.model_dump(mode="json", by_alias=True))


def zones(day: Optional[date_type]) -> None:
    """Print the ranked zone recommendations."""
    from api.state import get_engine_state

    day = day or date_type.today()
    ranked = asyncio.run(get_engine_state().zone_service.get_recommendations(day))

    print("\n" + "=" * 64)
    print(f"ZONE RECOMMENDATIONS {day.isoformat()}")
    print("=" * 64)
    print(f"{'Zone':<10} {'Score':<8} {'Catch (kg)':<14} {'Recommendation':<22}")
    print("-" * 64)
    for rec in ranked:
        catch = f"{rec.predicted_catch_min}-{rec.predicted_catch_max}"
        flag = " *" if rec.readings.degraded else ""
        print(f"{rec.zone.name:<10} {rec.score.total:<8} {catch:<14} {rec.label:<22}{flag}")
    print("=" * 64)
    if any(r.readings.degraded for r in ranked):
        print("* scored partly on estimated data")
    print()


def serve(host: str, port: int) -> None:
    import uvicorn

    uvicorn.run("api.main:app", host=host, port=port)


def check_health(url: str) -> None:
    """Check API health."""
    import requests

    try:
        response = requests.get(url, timeout=5)
        if response.status_code == 200:
            data = response.json()
            print(f"\nAPI Status: {data.get('status', 'unknown')}")
            print(f"Version: {data.get('version', 'unknown')}")
            print(f"Timestamp: {data.get('timestamp', 'unknown')}")
        else:
            print(f"\nAPI returned status code: {response.status_code}")
            sys.exit(1)
    except requests.exceptions.ConnectionError:
        print("\nError: Could not connect to API. Is the server running?")
        sys.exit(1)


def main(argv: Optional[List[str]] = None):
    from api.config import settings
    from src.optimization.errors import OptimizationError

    parser = argparse.ArgumentParser(
        description="SmartBagan CLI Tool",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  Analyze a fleet (candidate sites optional, scanned when omitted):
    python -m api.cli optimize --input fleet.json

  Check one bagan against one site:
    python -m api.cli quick-check --input check.json

  Zone recommendations for a date:
    python -m api.cli zones --date 2025-06-01

  Start the API server:
    python -m api.cli serve --port 5000
        """
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    optimize_parser = subparsers.add_parser("optimize", help="Analyze a fleet from a JSON file")
    optimize_parser.add_argument("--input", required=True, help="Path to the analyze request JSON")

    check_parser = subparsers.add_parser("quick-check", help="Check one bagan/site pair")
    check_parser.add_argument("--input", required=True, help="Path to the quick-check request JSON")

    zones_parser = subparsers.add_parser("zones", help="Rank the fishing zones")
    zones_parser.add_argument(
        "--date",
        type=date_type.fromisoformat,
        help="Date to score (YYYY-MM-DD, default: today)"
    )

    serve_parser = subparsers.add_parser("serve", help="Run the API server")
    serve_parser.add_argument("--host", default=settings.api_host)
    serve_parser.add_argument("--port", type=int, default=settings.api_port)

    health_parser = subparsers.add_parser("check-health", help="Check API health")
    health_parser.add_argument(
        "--url", default=f"http://localhost:{settings.api_port}/api/health"
    )

    args = parser.parse_args(argv)

    try:
        if args.command == "optimize":
            optimize(args.input)
        elif args.command == "quick-check":
            quick_check(args.input)
        elif args.command == "zones":
            zones(args.date)
        elif args.command == "serve":
            serve(args.host, args.port)
        elif args.command == "check-health":
            check_health(args.url)
        else:
            parser.print_help()
            sys.exit(1)
    except (OptimizationError, pydantic.ValidationError) as e:
        print(f"\nError: {e}")
        sys.exit(2)


if __name__ == "__main__":
    main()
