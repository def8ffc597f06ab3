from __future__ import annotations

import hashlib
import json
from collections.abc import Mapping, Sequence
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import pandas as pd
from pydantic import BaseModel, ValidationError

from pipeline.io.files import ensure_dir, write_csv, write_json
from pipeline.io.validate import validate_artifact
from roster.formations import (
    DEFAULT_FIELD_SIZE,
    Formation,
    custom_formation,
    field_size_for_division,
    get_formation,
)
from roster.models import Player, PlayerStatus
from roster.season import (
    GameRecord,
    LineupRecommendations,
    SeasonSummary,
    recommend_lineup,
    summarize_games,
)
from rotation.engine import RotationResult, generate_rotation
from rotation.types import ErrorCodes, RotationError, RotationSettings
from validators import Severity

# Resolve repo root (two levels up from this file) and schemas root
REPO_ROOT = Path(__file__).resolve().parents[2]
SCHEMAS_ROOT = REPO_ROOT / "pipeline" / "schemas"

NESTED_SECTIONS = ("weights", "rules")


class PlayerRow(BaseModel):  # type: ignore[misc]
    name: str
    number: int | None = None
    must_rest: bool = False
    no_keeper: bool = False
    status: PlayerStatus = PlayerStatus.AVAILABLE


def _utc_now_iso() -> str:
    now = datetime.now(timezone.utc)
    ms = int(now.microsecond / 1000)
    return f"{now.strftime('%Y-%m-%dT%H:%M:%S')}.{ms:03d}Z"


def _sha256_of_path(path: Path) -> str:
    h = hashlib.sha256()
    with path.open("rb") as f:
        for chunk in iter(lambda: f.read(8192), b""):
            h.update(chunk)
    return h.hexdigest()


def _coerce_scalar(val: str) -> int | float | bool | str:
    lower = val.lower()
    if lower in ("true", "false"):
        return lower == "true"
    try:
        if "." in val:
            return float(val)
        return int(val)
    except ValueError:
        return val


def _config_error(message: str, **details: Any) -> RotationError:
    return RotationError(ErrorCodes.CONFIG_ERROR, message, details=details)


def _read_json(path: Path, what: str) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise _config_error(f"Failed to parse {what} JSON {path}: {e}", path=str(path)) from e


def load_config(
    config_path: Path | None, inline_kv: Sequence[str] | None = None
) -> dict[str, Any]:
    """Read a YAML/JSON config and apply inline ``key=value`` overrides.

    Dotted keys (``weights.jitter=0``) land in the matching nested section.
    """
    cfg: dict[str, Any] = {}
    if config_path:
        if not config_path.exists():
            raise _config_error(f"Config not found: {config_path}", path=str(config_path))
        text = config_path.read_text(encoding="utf-8")
        if config_path.suffix.lower() in (".yaml", ".yml"):
            import yaml  # lazy

            try:
                loaded = yaml.safe_load(text) or {}
            except yaml.YAMLError as e:
                raise _config_error(f"Failed to parse YAML config {config_path}: {e}") from e
        else:
            loaded = _read_json(config_path, "config")
        if not isinstance(loaded, dict):
            raise _config_error(f"Config {config_path} must be a mapping", path=str(config_path))
        cfg = dict(loaded)
    if inline_kv:
        for item in inline_kv:
            if "=" not in item:
                continue
            k, v = item.split("=", 1)
            k = k.strip()
            section, _, sub = k.partition(".")
            if sub and section in NESTED_SECTIONS:
                cfg.setdefault(section, {})[sub] = _coerce_scalar(v.strip())
            else:
                cfg[k] = _coerce_scalar(v.strip())
    return cfg


def resolve_formation(config: Mapping[str, Any]) -> Formation:
    """Pick the formation from ``formation``, ``field_size`` or ``division``.

    ``formation`` may be a built-in shape name or an explicit position list.
    """
    shape = config.get("formation")
    if isinstance(shape, list):
        return custom_formation([str(p) for p in shape], name=str(config.get("formation_name", "custom")))
    try:
        if "field_size" in config:
            field_size = int(config["field_size"])
        elif "division" in config:
            field_size = field_size_for_division(str(config["division"]))
        else:
            field_size = DEFAULT_FIELD_SIZE
        return get_formation(field_size, str(shape) if shape is not None else None)
    except (KeyError, ValueError) as e:
        raise _config_error(str(e)) from e


def map_config_to_settings(config: Mapping[str, Any], seed: int | None = None) -> RotationSettings:
    try:
        settings = RotationSettings.from_dict(dict(config))
    except (TypeError, ValueError) as e:
        raise _config_error(f"Invalid rotation settings: {e}") from e
    if seed is not None:
        settings.seed = int(seed)
    return settings


def load_roster(path: Path) -> list[Player]:
    """Read roster rows from CSV or JSON (a list, or ``{"players": [...]}``)."""
    if not path.exists():
        raise _config_error(f"Roster not found: {path}", path=str(path))
    if path.suffix.lower() == ".json":
        data = _read_json(path, "roster")
        records = data.get("players", []) if isinstance(data, dict) else data
        if not isinstance(records, list):
            raise _config_error(f"Roster {path} must hold a list of players", path=str(path))
    else:
        try:
            df = pd.read_csv(path)
        except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
            raise _config_error(f"Failed to parse roster CSV {path}: {e}", path=str(path)) from e
        df = df.astype(object).where(pd.notna(df), None)
        records = df.to_dict(orient="records")
    players: list[Player] = []
    for i, rec in enumerate(records, start=1):
        if not isinstance(rec, dict):
            raise _config_error(f"Invalid roster row {i} in {path}: expected an object", row=i)
        try:
            row = PlayerRow(**rec)
        except ValidationError as e:
            raise _config_error(f"Invalid roster row {i} in {path}: {e}", row=i) from e
        players.append(Player(**row.model_dump()))
    return players


def load_history(path: Path) -> dict[str, SeasonSummary]:
    """Fold saved games into season summaries.

    Accepts a list of game records, ``{"games": [...]}``, or a single record
    as written to ``game_record.json``.
    """
    if not path.exists():
        raise _config_error(f"History not found: {path}", path=str(path))
    data = _read_json(path, "history")
    if isinstance(data, dict):
        raw = [data] if "players" in data else data.get("games", [])
    else:
        raw = data
    if not isinstance(raw, list) or not all(isinstance(g, dict) for g in raw):
        raise _config_error(f"History {path} must hold game records", path=str(path))
    try:
        games = [GameRecord(**g) for g in raw]
    except ValidationError as e:
        raise _config_error(f"Invalid game record in {path}: {e}") from e
    return summarize_games(games)


def player_frame(result: RotationResult) -> pd.DataFrame:
    """One row per rostered player summarizing the generated game."""
    rows: list[dict[str, Any]] = []
    for p in result.players:
        state = result.states.get(p.name)
        if state is None:
            rows.append({"name": p.name, "number": p.number, "status": p.status.value,
                         "played": 0, "sat": 0, "sitting_quarters": "", "keeper": None,
                         "defense": 0, "offense": 0, "positions": "", "captain": False})
            continue
        rows.append({
            "name": p.name,
            "number": p.number,
            "status": p.status.value,
            "played": len(state.quarters_played),
            "sat": len(state.quarters_sitting),
            "sitting_quarters": ",".join(str(q) for q in sorted(state.quarters_sitting)),
            "keeper": state.keeper_quarter,
            "defense": state.defensive_quarters,
            "offense": state.offensive_quarters,
            "positions": "; ".join(f"Q{q} {pos}" for q, pos in sorted(state.positions_played)),
            "captain": p.name in result.captains,
        })
    return pd.DataFrame(rows)


def _build_metrics(run_id: str, created_ts: str, result: RotationResult, frame: pd.DataFrame) -> dict[str, Any]:
    available = frame[frame["status"] == PlayerStatus.AVAILABLE.value]
    return {
        "run_id": run_id,
        "created_ts": created_ts,
        "seed": result.seed,
        "attempts": result.attempts,
        "accepted": result.accepted,
        "violation_count": len(result.violations),
        "hard_violation_count": sum(1 for v in result.violations if v.severity == Severity.HARD),
        "players": [
            {
                "name": str(r["name"]),
                "played": int(r["played"]),
                "sat": int(r["sat"]),
                "keeper": r["keeper"] is not None and not pd.isna(r["keeper"]),
                "defense": int(r["defense"]),
                "offense": int(r["offense"]),
                "captain": bool(r["captain"]),
            }
            for r in available.to_dict(orient="records")
        ],
    }


def run_rotation(
    *,
    roster_path: Path,
    config_path: Path | None = None,
    config_kv: Sequence[str] | None = None,
    out_root: Path,
    history_path: Path | None = None,
    seed: int | None = None,
    game_name: str | None = None,
    schemas_root: Path | None = None,
    validate: bool = True,
) -> dict[str, Any]:
    """Generate one game's rotation and write its artifacts.

    Raises:
        RotationError: for unreadable inputs, bad config or failed preconditions
    """
    created_ts = _utc_now_iso()
    schemas_root = schemas_root or SCHEMAS_ROOT

    players = load_roster(roster_path)
    season = load_history(history_path) if history_path else None
    cfg = load_config(config_path, config_kv)
    formation = resolve_formation(cfg)
    settings = map_config_to_settings(cfg, seed)

    result = generate_rotation(players, formation, season=season, settings=settings)

    # Deterministic run_id: timestamp + short hash over inputs + cfg + seed
    cfg_sha = hashlib.sha256(
        json.dumps(cfg, sort_keys=True, separators=(",", ":"), default=str).encode("utf-8")
    ).hexdigest()
    ts = datetime.now(timezone.utc)
    short_hash = hashlib.sha256(
        json.dumps(
            {"roster": _sha256_of_path(roster_path), "cfg": cfg_sha, "seed": result.seed},
            sort_keys=True,
        ).encode("utf-8")
    ).hexdigest()[:8]
    run_id = f"{ts.strftime('%Y%m%d_%H%M%S')}_{short_hash}"

    # Build artifacts in-memory and validate (fail-fast) before any writes
    payload = {"run_id": run_id, "created_ts": created_ts, **result.to_dict()}
    frame = player_frame(result)
    metrics = _build_metrics(run_id, created_ts, result, frame)
    if validate:
        validate_artifact("rotation_result", payload, schemas_root)
        validate_artifact("rotation_metrics", metrics, schemas_root)

    run_dir = out_root / "runs" / "rotation" / run_id
    ensure_dir(run_dir)
    result_path = run_dir / "rotation_result.json"
    metrics_path = run_dir / "metrics.json"
    players_path = run_dir / "players.csv"
    record_path = run_dir / "game_record.json"
    write_json(payload, result_path)
    write_json(metrics, metrics_path)
    write_csv(frame, players_path)
    write_json(result.to_record(game_name), record_path)

    return {
        "run_id": run_id,
        "result_path": str(result_path),
        "metrics_path": str(metrics_path),
        "players_path": str(players_path),
        "record_path": str(record_path),
        "seed": result.seed,
        "attempts": result.attempts,
        "accepted": result.accepted,
        "violations": [v.to_dict() for v in result.violations],
        "lineup": [q.to_dict() for q in result.lineup],
        "captains": list(result.captains),
    }


SEASON_COLUMNS = [
    "name", "games_played", "games_absent", "games_injured", "attendance_pct", "total_quarters",
    "total_sitting", "sitting_pct", "avg_sitting", "goalkeeper_quarters", "captain_games",
    "defense", "offense", "top_positions",
]


def season_frame(history_path: Path) -> pd.DataFrame:
    """Season stats table for players who attended at least one game.

    Sorted by games attended (most first), then name.
    """
    season = load_history(history_path)
    rows = [
        {
            "name": name,
            "games_played": s.games_played,
            "games_absent": s.games_absent,
            "games_injured": s.games_injured,
            "attendance_pct": s.attendance_pct,
            "total_quarters": s.total_quarters,
            "total_sitting": s.total_sitting,
            "sitting_pct": s.sitting_pct(),
            "avg_sitting": round(s.avg_sitting, 2),
            "goalkeeper_quarters": s.goalkeeper_quarters,
            "captain_games": s.captain_games,
            "defense": s.defensive_quarters,
            "offense": s.offensive_quarters,
            "top_positions": "; ".join(f"{pos}({count})" for pos, count in s.top_positions()),
        }
        for name, s in season.items()
        if s.games_played > 0
    ]
    df = pd.DataFrame(rows, columns=SEASON_COLUMNS)
    return df.sort_values(["games_played", "name"], ascending=[False, True]).reset_index(drop=True)


def season_recommendations(
    history_path: Path, roster_path: Path | None = None
) -> LineupRecommendations | None:
    """Next-game priorities from saved games.

    Without a roster, everyone in the history counts as available.
    """
    season = load_history(history_path)
    if roster_path is not None:
        players = load_roster(roster_path)
    else:
        players = [Player(name) for name in season]
    return recommend_lineup(season, players)
