from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from dealboard.domain.stages import DEFAULT_STAGES

WORKSPACES_DIR = Path("workspaces")
CURRENT_WORKSPACE_FILE = WORKSPACES_DIR / ".current"
WORKSPACE_FILENAME = "workspace.yaml"
DEFAULT_SEED_FILENAME = "board.yaml"


@dataclass(frozen=True)
class BoardConfig:
    seed_path: Path
    stages: list[dict[str, str]] | None


@dataclass(frozen=True)
class WorkspaceConfig:
    name: str
    board: BoardConfig
    events_enabled: bool
    path: Path

    @property
    def events_path(self) -> Path:
        return self.path / "events.ndjson"


class WorkspaceError(RuntimeError):
    pass


def ensure_workspaces_dir() -> None:
    WORKSPACES_DIR.mkdir(parents=True, exist_ok=True)


def set_current_workspace(name: str) -> None:
    ensure_workspaces_dir()
    CURRENT_WORKSPACE_FILE.write_text(f"{name}\n", encoding="utf-8")


def get_current_workspace_name() -> str:
    if not CURRENT_WORKSPACE_FILE.exists():
        raise WorkspaceError("No active workspace. Run `dealboard workspace use <name>`.")
    return CURRENT_WORKSPACE_FILE.read_text(encoding="utf-8").strip()


def workspace_path(name: str) -> Path:
    return WORKSPACES_DIR / name


def workspace_config_path(name: str) -> Path:
    return workspace_path(name) / WORKSPACE_FILENAME


def load_workspace(name: str | None = None) -> WorkspaceConfig:
    if name is None:
        name = get_current_workspace_name()
    return load_workspace_file(workspace_config_path(name), name)


def load_workspace_file(config_path: Path, name: str | None = None) -> WorkspaceConfig:
    if not config_path.exists():
        raise WorkspaceError(f"Workspace config not found: {config_path}")
    data = yaml.safe_load(config_path.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise WorkspaceError("Workspace config must be a mapping.")
    board = _parse_board(data.get("board"), config_path)
    events = data.get("events") or {}
    if not isinstance(events, dict):
        raise WorkspaceError("Workspace events must be a mapping.")
    return WorkspaceConfig(
        name=name or str(data.get("workspace") or config_path.parent.name),
        board=board,
        events_enabled=bool(events.get("enabled", True)),
        path=config_path.parent,
    )


def write_workspace_config(name: str, with_stages: bool = False) -> Path:
    ensure_workspaces_dir()
    ws_dir = workspace_path(name)
    ws_dir.mkdir(parents=True, exist_ok=True)
    board: dict[str, Any] = {"seed_path": f"./{DEFAULT_SEED_FILENAME}"}
    if with_stages:
        board["stages"] = [
            {"id": stage_id.value, "name": label, "color": color}
            for stage_id, label, color in DEFAULT_STAGES
        ]
    config = {
        "workspace": name,
        "board": board,
        "events": {"enabled": True},
    }
    config_path = workspace_config_path(name)
    config_path.write_text(yaml.safe_dump(config, sort_keys=False), encoding="utf-8")
    return config_path


def _parse_board(board_data: Any, config_path: Path) -> BoardConfig:
    if board_data is None:
        board_data = {}
    if not isinstance(board_data, dict):
        raise WorkspaceError("Invalid workspace board configuration.")
    seed_path = _resolve_seed_path(board_data.get("seed_path", f"./{DEFAULT_SEED_FILENAME}"), config_path)
    if seed_path is None:
        raise WorkspaceError("Workspace board.seed_path must be a string.")
    stages = board_data.get("stages")
    if stages is not None and not isinstance(stages, list):
        raise WorkspaceError("Workspace board.stages must be a list.")
    return BoardConfig(seed_path=seed_path, stages=stages)


def _resolve_seed_path(seed_path_raw: Any, config_path: Path) -> Path | None:
    if not isinstance(seed_path_raw, str):
        return None
    raw_path = Path(seed_path_raw)
    if raw_path.is_absolute():
        return raw_path
    workspace_dir = config_path.parent
    if raw_path.parts and raw_path.parts[0] == WORKSPACES_DIR.name:
        # Paths written from the repo root already include "workspaces/...".
        return (workspace_dir.parent.parent / raw_path).resolve()
    return (workspace_dir / raw_path).resolve()
