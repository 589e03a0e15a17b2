"""Drag session state machine.

Gesture events are the only inputs. Pointer movement only updates the
candidate drop target; the registry is touched once, when the gesture ends
over a drop zone that differs from where the card started.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum

from dealboard.board.layout import BoardLayout, DropTarget, Point, hit_test
from dealboard.board.registry import DealRegistry
from dealboard.domain.models import PipelineState
from dealboard.domain.rules import ListenerError
from dealboard.services.events import EventLogger


class DragState(str, Enum):
    IDLE = "idle"
    DRAGGING = "dragging"
    RESOLVING = "resolving"


class OutcomeKind(str, Enum):
    COMMITTED = "committed"
    NOOP = "noop"
    CANCELLED = "cancelled"
    IGNORED = "ignored"


@dataclass(frozen=True)
class DragSession:
    deal_id: str
    origin: DropTarget
    target: DropTarget | None = None


@dataclass(frozen=True)
class DragOutcome:
    kind: OutcomeKind
    deal_id: str | None
    origin: DropTarget | None = None
    target: DropTarget | None = None
    state: PipelineState | None = None


@dataclass(frozen=True)
class GestureStart:
    deal_id: str


@dataclass(frozen=True)
class GestureMove:
    point: Point


@dataclass(frozen=True)
class GestureEnd:
    point: Point | None


@dataclass(frozen=True)
class GestureCancel:
    pass


GestureEvent = GestureStart | GestureMove | GestureEnd | GestureCancel


class DragController:
    def __init__(
        self,
        registry: DealRegistry,
        layout: BoardLayout | None = None,
        logger: EventLogger | None = None,
    ) -> None:
        self.registry = registry
        self.layout = layout or BoardLayout()
        self.logger = logger
        self._state = DragState.IDLE
        self._session: DragSession | None = None

    @property
    def state(self) -> DragState:
        return self._state

    @property
    def session(self) -> DragSession | None:
        return self._session

    @property
    def hovered_stage(self) -> str | None:
        if self._session is None or self._session.target is None:
            return None
        return self._session.target.stage_id

    def update_layout(self, layout: BoardLayout) -> None:
        self.layout = layout

    def on_gesture_start(self, deal_id: str) -> bool:
        if self._state is not DragState.IDLE:
            return False
        if deal_id not in self.registry:
            # Card vanished between paint and pointer-down.
            self._log("drag_ignored", deal_id)
            return False
        stage_id, index = self.registry.index_of(deal_id)
        self._session = DragSession(deal_id=deal_id, origin=DropTarget(stage_id, index))
        self._state = DragState.DRAGGING
        return True

    def on_gesture_move(self, point: Point) -> DropTarget | None:
        if self._state is not DragState.DRAGGING or self._session is None:
            return None
        target = hit_test(self.layout, point, self._session.deal_id)
        self._session = DragSession(
            deal_id=self._session.deal_id, origin=self._session.origin, target=target
        )
        return target

    def on_gesture_end(self, point: Point | None) -> DragOutcome:
        if self._state is not DragState.DRAGGING or self._session is None:
            return DragOutcome(kind=OutcomeKind.IGNORED, deal_id=None)
        if point is None:
            return self.cancel()
        if self.on_gesture_move(point) is None:
            return self.cancel()

        session = self._session
        self._state = DragState.RESOLVING
        try:
            if session.target == session.origin:
                outcome = DragOutcome(
                    kind=OutcomeKind.NOOP,
                    deal_id=session.deal_id,
                    origin=session.origin,
                    target=session.target,
                )
            else:
                try:
                    state = self.registry.move_deal(
                        session.deal_id, session.target.stage_id, session.target.index
                    )
                except ListenerError as exc:
                    # The move landed; only a subscriber failed.
                    self._log_outcome(self._committed(session, exc.state))
                    raise
                outcome = self._committed(session, state)
        finally:
            self._reset()
        self._log_outcome(outcome)
        return outcome

    def cancel(self) -> DragOutcome:
        if self._session is None:
            return DragOutcome(kind=OutcomeKind.IGNORED, deal_id=None)
        outcome = DragOutcome(
            kind=OutcomeKind.CANCELLED, deal_id=self._session.deal_id, origin=self._session.origin
        )
        self._reset()
        self._log_outcome(outcome)
        return outcome

    def dispatch(self, event: GestureEvent) -> DragOutcome | DropTarget | bool | None:
        if isinstance(event, GestureStart):
            return self.on_gesture_start(event.deal_id)
        if isinstance(event, GestureMove):
            return self.on_gesture_move(event.point)
        if isinstance(event, GestureEnd):
            return self.on_gesture_end(event.point)
        if isinstance(event, GestureCancel):
            return self.cancel()
        raise TypeError(f"Unsupported gesture event: {event!r}")

    def run(self, events: Iterable[GestureEvent]) -> list[DragOutcome]:
        outcomes = []
        for event in events:
            result = self.dispatch(event)
            if isinstance(result, DragOutcome) and result.kind is not OutcomeKind.IGNORED:
                outcomes.append(result)
        return outcomes

    @staticmethod
    def _committed(session: DragSession, state: PipelineState) -> DragOutcome:
        return DragOutcome(
            kind=OutcomeKind.COMMITTED,
            deal_id=session.deal_id,
            origin=session.origin,
            target=session.target,
            state=state,
        )

    def _reset(self) -> None:
        self._session = None
        self._state = DragState.IDLE

    def _log_outcome(self, outcome: DragOutcome) -> None:
        self._log(
            f"drag_{outcome.kind.value}",
            outcome.deal_id,
            target=outcome.target,
            origin=outcome.origin,
        )

    def _log(
        self,
        event_type: str,
        deal_id: str | None,
        target: DropTarget | None = None,
        origin: DropTarget | None = None,
    ) -> None:
        if self.logger is None:
            return
        self.logger.log(
            event_type=event_type,
            deal_id=deal_id,
            stage=target.stage_id if target else None,
            index=target.index if target else None,
            origin_stage=origin.stage_id if origin else None,
            origin_index=origin.index if origin else None,
        )
