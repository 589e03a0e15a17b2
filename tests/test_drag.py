from pathlib import Path

import pytest

from dealboard.board.drag import (
    DragController,
    DragState,
    GestureCancel,
    GestureEnd,
    GestureMove,
    GestureStart,
    OutcomeKind,
)
from dealboard.board.layout import BoardLayout, ColumnZone, DropTarget, Point, Rect, grid_layout
from dealboard.board.registry import DealRegistry
from dealboard.domain.models import Deal
from dealboard.domain.rules import ListenerError, NotFoundError
from dealboard.domain.stages import StageCatalog
from dealboard.services.events import EventLogger

LEAD = 10
QUALIFIED = 300
PROPOSAL = 550
OUTSIDE = Point(5000, 5000)


def _deal(deal_id: str, stage: str) -> Deal:
    return Deal(
        deal_id=deal_id,
        title=f"Deal {deal_id}",
        company="Acme",
        contact=None,
        value=1000,
        probability=50,
        score=70,
        stage=stage,
    )


def _controller(logger: EventLogger | None = None) -> DragController:
    registry = DealRegistry(StageCatalog.default())
    for deal_id, stage in [
        ("1", "lead"),
        ("2", "lead"),
        ("3", "qualified"),
        ("4", "proposal"),
        ("5", "negotiation"),
    ]:
        registry.add_deal(_deal(deal_id, stage))
    controller = DragController(registry, logger=logger)
    _relayout(controller)
    return controller


def _relayout(controller: DragController) -> None:
    controller.update_layout(grid_layout(controller.registry.snapshot().columns))


def test_start_unknown_deal_stays_idle() -> None:
    controller = _controller()
    assert controller.on_gesture_start("99") is False
    assert controller.state is DragState.IDLE
    assert controller.session is None


def test_start_enters_dragging() -> None:
    controller = _controller()
    assert controller.on_gesture_start("2") is True
    assert controller.state is DragState.DRAGGING
    assert controller.session.origin == DropTarget("lead", 1)
    assert controller.session.target is None


def test_release_outside_drop_zones_changes_nothing() -> None:
    controller = _controller()
    before = controller.registry.snapshot()
    controller.on_gesture_start("1")
    assert controller.on_gesture_move(Point(QUALIFIED, 100)) == DropTarget("qualified", 0)
    assert controller.hovered_stage == "qualified"
    outcome = controller.on_gesture_end(OUTSIDE)
    assert outcome.kind is OutcomeKind.CANCELLED
    assert controller.registry.snapshot() == before
    assert controller.state is DragState.IDLE
    assert controller.hovered_stage is None


def test_release_without_position_cancels() -> None:
    controller = _controller()
    before = controller.registry.snapshot()
    controller.on_gesture_start("1")
    controller.on_gesture_move(Point(PROPOSAL, 100))
    assert controller.on_gesture_end(None).kind is OutcomeKind.CANCELLED
    assert controller.registry.snapshot() == before


def test_pointer_moves_do_not_mutate() -> None:
    controller = _controller()
    before = controller.registry.snapshot()
    controller.on_gesture_start("1")
    for x, y in [(QUALIFIED, 100), (PROPOSAL, 300), (LEAD, 400)]:
        controller.on_gesture_move(Point(x, y))
        assert controller.registry.snapshot() == before


def test_commit_moves_deal() -> None:
    controller = _controller()
    controller.on_gesture_start("1")
    controller.on_gesture_move(Point(QUALIFIED, 300))
    outcome = controller.on_gesture_end(Point(QUALIFIED, 300))
    assert outcome.kind is OutcomeKind.COMMITTED
    assert outcome.origin == DropTarget("lead", 0)
    assert outcome.target == DropTarget("qualified", 1)
    assert outcome.state.order("qualified") == ("3", "1")
    assert controller.registry.snapshot().order("lead") == ("2",)
    assert controller.state is DragState.IDLE


def test_end_position_decides_target() -> None:
    controller = _controller()
    controller.on_gesture_start("1")
    controller.on_gesture_move(Point(QUALIFIED, 300))
    outcome = controller.on_gesture_end(Point(PROPOSAL, 100))
    assert outcome.target == DropTarget("proposal", 0)
    assert controller.registry.snapshot().order("proposal") == ("1", "4")


def test_drop_on_origin_is_noop() -> None:
    controller = _controller()
    calls = []
    controller.registry.subscribe(calls.append)
    controller.on_gesture_start("1")
    controller.on_gesture_move(Point(QUALIFIED, 100))
    outcome = controller.on_gesture_end(Point(LEAD, 150))
    assert outcome.kind is OutcomeKind.NOOP
    assert calls == []
    assert controller.state is DragState.IDLE


def test_reorder_within_stage() -> None:
    controller = _controller()
    controller.on_gesture_start("1")
    outcome = controller.on_gesture_end(Point(LEAD, 240))
    assert outcome.kind is OutcomeKind.COMMITTED
    assert controller.registry.snapshot().order("lead") == ("2", "1")


def test_explicit_cancel() -> None:
    controller = _controller()
    before = controller.registry.snapshot()
    controller.on_gesture_start("3")
    controller.on_gesture_move(Point(PROPOSAL, 100))
    assert controller.cancel().kind is OutcomeKind.CANCELLED
    assert controller.state is DragState.IDLE
    assert controller.registry.snapshot() == before


def test_events_outside_a_drag_are_ignored() -> None:
    controller = _controller()
    assert controller.on_gesture_move(Point(LEAD, 100)) is None
    assert controller.on_gesture_end(Point(LEAD, 100)).kind is OutcomeKind.IGNORED
    assert controller.cancel().kind is OutcomeKind.IGNORED


def test_second_start_keeps_running_session() -> None:
    controller = _controller()
    controller.on_gesture_start("1")
    assert controller.on_gesture_start("3") is False
    assert controller.session.deal_id == "1"


def test_drag_round_trip_restores_order() -> None:
    controller = _controller()
    before = controller.registry.snapshot()
    controller.on_gesture_start("3")
    controller.on_gesture_end(Point(PROPOSAL, 300))
    assert controller.registry.snapshot().order("proposal") == ("4", "3")
    _relayout(controller)
    controller.on_gesture_start("3")
    controller.on_gesture_end(Point(QUALIFIED, 100))
    assert controller.registry.snapshot() == before


def test_failed_commit_returns_to_idle() -> None:
    controller = _controller()
    controller.update_layout(
        BoardLayout(columns=(ColumnZone(stage_id="archive", rect=Rect(0, 0, 100, 100)),))
    )
    before = controller.registry.snapshot()
    controller.on_gesture_start("1")
    with pytest.raises(NotFoundError):
        controller.on_gesture_end(Point(10, 10))
    assert controller.state is DragState.IDLE
    assert controller.registry.snapshot() == before


def test_listener_failure_after_commit_is_logged(tmp_path: Path) -> None:
    logger = EventLogger(path=tmp_path / "events.ndjson", workspace="demo")
    controller = _controller(logger)

    def _broken(state) -> None:
        raise RuntimeError("renderer offline")

    controller.registry.subscribe(_broken)
    controller.on_gesture_start("1")
    with pytest.raises(ListenerError) as excinfo:
        controller.on_gesture_end(Point(QUALIFIED, 300))
    assert controller.state is DragState.IDLE
    assert controller.session is None
    assert controller.registry.snapshot().order("lead") == ("2",)
    assert excinfo.value.state.order("qualified") == ("3", "1")
    records = logger.read()
    assert [record["event_type"] for record in records] == ["drag_committed"]
    assert (records[0]["stage"], records[0]["index"]) == ("qualified", 1)


def test_run_processes_events_in_order() -> None:
    controller = _controller()
    outcomes = controller.run(
        [
            GestureMove(Point(LEAD, 100)),
            GestureStart("5"),
            GestureMove(Point(QUALIFIED, 100)),
            GestureEnd(Point(QUALIFIED, 100)),
            GestureStart("2"),
            GestureCancel(),
        ]
    )
    assert [outcome.kind for outcome in outcomes] == [OutcomeKind.COMMITTED, OutcomeKind.CANCELLED]
    assert controller.registry.snapshot().order("qualified") == ("5", "3")


def test_outcomes_are_logged(tmp_path: Path) -> None:
    logger = EventLogger(path=tmp_path / "events.ndjson", workspace="demo")
    controller = _controller(logger)
    controller.on_gesture_start("99")
    controller.on_gesture_start("1")
    controller.on_gesture_end(Point(PROPOSAL, 100))
    records = logger.read()
    assert [record["event_type"] for record in records] == ["drag_ignored", "drag_committed"]
    committed = records[1]
    assert committed["deal_id"] == "1"
    assert (committed["stage"], committed["index"]) == ("proposal", 0)
    assert (committed["origin_stage"], committed["origin_index"]) == ("lead", 0)
    assert committed["workspace"] == "demo"
