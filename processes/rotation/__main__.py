"""CLI for generating game rotations."""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence
from pathlib import Path

from rotation.types import RotationError

from .adapter import run_rotation, season_frame, season_recommendations


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="python -m processes.rotation",
        description="Generate a fair quarter-by-quarter rotation for a youth soccer game",
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    run_parser = subparsers.add_parser("run", help="Generate one game's rotation")
    run_parser.add_argument("--roster", type=Path, required=True, help="Roster CSV or JSON")
    run_parser.add_argument("--history", type=Path, help="Saved games JSON for season balancing")
    run_parser.add_argument("--config", type=Path)
    run_parser.add_argument("--config-kv", nargs="*", help="Inline overrides key=value (weights.jitter=0)")
    run_parser.add_argument("--seed", type=int)
    run_parser.add_argument("--game-name", type=str, help="Name stored in the saved game record")
    run_parser.add_argument("--out-root", type=Path, default=Path("data"))
    run_parser.add_argument(
        "--schemas-root",
        type=Path,
        help="Override schemas root (defaults to repo-relative pipeline/schemas)",
    )
    run_parser.add_argument("--no-validate", action="store_true")
    run_parser.add_argument("--verbose", action="store_true")

    season_parser = subparsers.add_parser("season", help="Print season totals and next-game priorities")
    season_parser.add_argument("--history", type=Path, required=True)
    season_parser.add_argument("--roster", type=Path, help="Limit recommendations to this roster's available players")
    return parser


def cmd_run(args: argparse.Namespace) -> int:
    try:
        result = run_rotation(
            roster_path=args.roster,
            config_path=args.config,
            config_kv=args.config_kv,
            out_root=args.out_root,
            history_path=args.history,
            seed=args.seed,
            game_name=args.game_name,
            schemas_root=args.schemas_root,
            validate=not args.no_validate,
        )
    except RotationError as e:
        print(f"[rotation] ✗ {e.code.value}: {e.user_message}", file=sys.stderr)
        return 1

    status = "accepted" if result["accepted"] else "best effort"
    print(f"[rotation] ✓ {status} after {result['attempts']} attempts (seed={result['seed']})")
    print(f"[rotation] Run ID: {result['run_id']}")
    print(f"[rotation] Result: {result['result_path']}")
    for quarter in result["lineup"]:
        on_field = ", ".join(f"{pos}={name}" for pos, name in quarter["positions"].items())
        sitting = ", ".join(quarter["sitting"]) or "-"
        print(f"[rotation] Q{quarter['quarter']}: {on_field} | sitting: {sitting}")
    if result["captains"]:
        print(f"[rotation] Captains: {', '.join(result['captains'])}")
    for v in result["violations"]:
        print(f"[rotation] ! {v['rule']} ({v['severity']}): {v['detail']}")
    return 0


RECOMMENDATION_LABELS = {
    "should_sit": "Should sit more",
    "should_keep": "Next in goal",
    "should_captain": "Next captains",
    "needs_offense": "Needs offense",
    "needs_defense": "Needs defense",
    "position_variety": "Needs position variety",
}


def cmd_season(args: argparse.Namespace) -> int:
    try:
        df = season_frame(args.history)
        recommendations = season_recommendations(args.history, args.roster)
    except RotationError as e:
        print(f"[rotation] ✗ {e.code.value}: {e.user_message}", file=sys.stderr)
        return 1
    if df.empty:
        print("[rotation] No saved games")
        return 0
    print(df.to_string(index=False))
    if recommendations is None:
        return 0
    for key, entries in recommendations.to_dict().items():
        if entries:
            names = ", ".join(e["name"] for e in entries)
            print(f"[rotation] {RECOMMENDATION_LABELS[key]}: {names}")
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "run":
        logging.basicConfig(level=logging.INFO if args.verbose else logging.WARNING, format="%(name)s %(message)s")
        return cmd_run(args)
    if args.command == "season":
        return cmd_season(args)
    parser.print_help()
    return 1


if __name__ == "__main__":  # pragma: no cover - CLI entry
    raise SystemExit(main())
