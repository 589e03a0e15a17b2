from __future__ import annotations

import json
from pathlib import Path

import typer

from dealboard import __version__
from dealboard.board import aggregates
from dealboard.board.drag import OutcomeKind
from dealboard.board.pipeline import PipelineBoard
from dealboard.config import (
    WorkspaceConfig,
    WorkspaceError,
    ensure_workspaces_dir,
    load_workspace,
    set_current_workspace,
    workspace_config_path,
    write_workspace_config,
)
from dealboard.domain import rules
from dealboard.domain.models import Deal
from dealboard.domain.rules import BoardError, ValidationError
from dealboard.domain.stages import StageCatalog
from dealboard.services import exports, seed
from dealboard.services.events import EventLogger
from dealboard.services.seed import SeedError
from dealboard.services.utils import format_money, format_score, round_half_up, today_iso

app = typer.Typer(help="Dealboard CLI")
workspace_app = typer.Typer(help="Workspace management")
board_app = typer.Typer(help="Pipeline board operations (in memory, nothing is written back)")
export_app = typer.Typer(help="Exports")

app.add_typer(workspace_app, name="workspace")
app.add_typer(board_app, name="board")
app.add_typer(export_app, name="export")


@app.callback(invoke_without_command=True)
def version_callback(version: bool = typer.Option(False, "--version", help="Show version and exit.")):
    if version:
        typer.echo(__version__)
        raise typer.Exit()


@app.command("init")
def init() -> None:
    """Initialize directories for workspaces and outputs."""
    ensure_workspaces_dir()
    Path("exports").mkdir(exist_ok=True)
    typer.echo("Initialized dealboard directories.")


@workspace_app.command("add")
def workspace_add(
    name: str = typer.Argument(...),
    stages: bool = typer.Option(
        False, "--stages", help="Write the default stage list into workspace.yaml."
    ),
    sample: bool = typer.Option(True, "--sample/--empty", help="Seed the board with sample deals."),
    use: bool = typer.Option(True, "--use/--no-use", help="Set as current workspace."),
    force: bool = typer.Option(
        False, "--force", help="Overwrite existing workspace config if it exists."
    ),
) -> None:
    config_path = workspace_config_path(name)
    if config_path.exists() and not force:
        raise typer.BadParameter(
            f"Workspace already exists: {config_path}. Use --force to overwrite."
        )
    config_path = write_workspace_config(name, with_stages=stages)
    ws = load_workspace(name)
    seed.write_board_file(ws.board.seed_path, seed.SAMPLE_DEALS if sample else [])
    if use:
        set_current_workspace(name)
    typer.echo(f"Workspace created: {config_path}")


@workspace_app.command("use")
def workspace_use(name: str = typer.Argument(...)) -> None:
    if not workspace_config_path(name).exists():
        raise typer.BadParameter(f"Workspace config not found: {workspace_config_path(name)}")
    set_current_workspace(name)
    typer.echo(f"Active workspace: {name}")


@board_app.command("show")
def board_show(
    stage: str | None = typer.Option(None, "--stage", help="Only show one stage."),
) -> None:
    board = _load_board(False)
    try:
        if stage:
            board.catalog.get_stage(stage)
    except BoardError as exc:
        _exit_with_error(str(exc))
    _echo_board(board, stage)


@board_app.command("stats")
def board_stats(
    json_output: bool = typer.Option(False, "--json", help="Emit JSON output."),
) -> None:
    board = _load_board(False)
    summary = board.summary()
    if json_output:
        payload = {
            "total_value": summary.total,
            "weighted_value": round_half_up(summary.weighted),
            "deal_count": summary.deal_count,
            "average_score": (
                round_half_up(summary.average_score) if summary.average_score is not None else None
            ),
            "stages": [
                {
                    "stage": column.stage.stage_id,
                    "deals": column.summary.count,
                    "value": column.summary.value,
                }
                for column in board.columns()
            ],
        }
        typer.echo(json.dumps(payload, indent=2))
        return
    typer.echo(f"Total pipeline: {format_money(summary.total)}")
    typer.echo(f"Weighted value: {format_money(summary.weighted)}")
    typer.echo(f"Active deals: {summary.deal_count}")
    typer.echo(f"Avg. score: {format_score(summary.average_score)}")


@board_app.command("add")
def board_add(
    deal_id: str = typer.Option(..., "--id"),
    title: str = typer.Option(..., "--title"),
    company: str = typer.Option(..., "--company"),
    stage: str = typer.Option("lead", "--stage"),
    contact: str | None = typer.Option(None, "--contact"),
    value: int = typer.Option(0, "--value"),
    probability: int = typer.Option(30, "--probability"),
    score: int = typer.Option(0, "--score"),
    due: str | None = typer.Option(None, "--due", help="Expected close date (YYYY-MM-DD)."),
    notes: str | None = typer.Option(None, "--notes"),
    events: bool = typer.Option(True, "--events/--no-events"),
) -> None:
    board = _load_board(events)
    try:
        deal = Deal(
            deal_id=deal_id,
            title=title,
            company=company,
            contact=contact,
            value=value,
            probability=probability,
            score=score,
            stage=stage,
            expected_close=rules.parse_date(due, "due"),
            notes=notes,
        )
        board.add_deal(deal)
    except (ValidationError, BoardError) as exc:
        _exit_with_error(str(exc))
    typer.echo(f"Added deal: {deal_id}")
    _echo_board(board, stage)


@board_app.command("move")
def board_move(
    deal_id: str = typer.Argument(...),
    stage: str = typer.Argument(...),
    index: int | None = typer.Option(None, "--index", help="Position in the target stage."),
    events: bool = typer.Option(True, "--events/--no-events"),
) -> None:
    board = _load_board(events)
    try:
        board.move_deal(deal_id, stage, index)
    except BoardError as exc:
        _exit_with_error(str(exc))
    _echo_board(board)


@board_app.command("replay")
def board_replay(
    script: Path = typer.Argument(..., help="YAML gesture script."),
    json_output: bool = typer.Option(False, "--json", help="Emit JSON output."),
    events: bool = typer.Option(True, "--events/--no-events"),
) -> None:
    """Run a recorded gesture script against the board."""
    board = _load_board(events)
    try:
        layout, gestures = seed.load_script(script)
        outcomes = board.replay(gestures, layout if layout.columns else None)
    except (SeedError, BoardError) as exc:
        _exit_with_error(str(exc))
    if json_output:
        payload = {
            "outcomes": [
                {
                    "kind": outcome.kind.value,
                    "deal_id": outcome.deal_id,
                    "target": outcome.target.__dict__ if outcome.target else None,
                }
                for outcome in outcomes
            ],
            "columns": board.snapshot().columns,
        }
        typer.echo(json.dumps(payload, indent=2))
        return
    for outcome in outcomes:
        line = f"{outcome.kind.value} {outcome.deal_id}"
        if outcome.kind is OutcomeKind.COMMITTED and outcome.target is not None:
            line += f" -> {outcome.target.stage_id}[{outcome.target.index}]"
        typer.echo(line)
    _echo_board(board)


@export_app.command("excel")
def export_excel(out: str = typer.Option(..., "--out")) -> None:
    board = _load_board(False)
    exports.export_excel(board, Path(out))
    typer.echo(f"Exported Excel to {out}")


@export_app.command("csv")
def export_csv(out: str | None = typer.Option(None, "--out")) -> None:
    board = _load_board(False)
    out_dir = Path(out) if out else Path("exports") / today_iso()
    exports.export_csv_tables(board, out_dir)
    typer.echo(f"Exported CSV to {out_dir}")


def build_board(ws: WorkspaceConfig, events: bool) -> PipelineBoard:
    catalog = (
        StageCatalog.from_config(ws.board.stages) if ws.board.stages else StageCatalog.default()
    )
    deals = seed.load_deals(ws.board.seed_path) if ws.board.seed_path.exists() else []
    return PipelineBoard(catalog, deals, logger=_event_logger(ws, enabled=events))


def _load_board(events: bool) -> PipelineBoard:
    ws = _load_workspace()
    try:
        return build_board(ws, events)
    except (SeedError, ValidationError, BoardError) as exc:
        _exit_with_error(str(exc))


def _echo_board(board: PipelineBoard, stage: str | None = None) -> None:
    for column in board.columns():
        if stage and column.stage.stage_id != stage:
            continue
        typer.echo(
            f"{column.stage.name} ({column.summary.count}) {format_money(column.summary.value)}"
        )
        for deal in column.deals:
            typer.echo(
                f"  {deal.deal_id} | {deal.title} | {deal.company} | "
                f"{format_money(deal.value)} | {deal.probability}% | "
                f"score {deal.score} ({aggregates.score_band(deal.score)})"
            )


def _load_workspace():
    try:
        return load_workspace()
    except WorkspaceError as exc:
        typer.echo(str(exc))
        raise typer.Exit(code=1) from exc


def _exit_with_error(message: str) -> None:
    typer.echo(f"Error: {message}", err=True)
    raise typer.Exit(code=1)


def _event_logger(ws: WorkspaceConfig, enabled: bool) -> EventLogger:
    return EventLogger(path=ws.events_path, workspace=ws.name, enabled=enabled and ws.events_enabled)


if __name__ == "__main__":
    app()
