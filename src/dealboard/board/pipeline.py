from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from fractions import Fraction

from dealboard.board import aggregates
from dealboard.board.aggregates import PipelineSummary, StageSummary
from dealboard.board.drag import DragController, DragOutcome, GestureEvent
from dealboard.board.layout import BoardLayout, DropTarget, Point, grid_layout
from dealboard.board.registry import DealRegistry
from dealboard.domain.models import Deal, PipelineState, Stage
from dealboard.domain.rules import ListenerError
from dealboard.domain.stages import StageCatalog
from dealboard.services.events import EventLogger


@dataclass(frozen=True)
class ColumnView:
    stage: Stage
    deals: tuple[Deal, ...]
    summary: StageSummary


class PipelineBoard:
    """Read model and gesture entry point handed to the renderer."""

    def __init__(
        self,
        catalog: StageCatalog | None = None,
        deals: Iterable[Deal] = (),
        logger: EventLogger | None = None,
    ) -> None:
        self.catalog = catalog or StageCatalog.default()
        self.registry = DealRegistry(self.catalog)
        self.logger = logger
        for deal in deals:
            self.registry.add_deal(deal)
        self.controller = DragController(self.registry, logger=logger)

    def list_stages(self) -> list[Stage]:
        return self.catalog.list_stages()

    def get_deals_by_stage(self, stage_id: str) -> list[Deal]:
        return self.registry.get_deals_by_stage(stage_id)

    def snapshot(self) -> PipelineState:
        return self.registry.snapshot()

    def stage_value(self, stage_id: str) -> int:
        return aggregates.stage_value(self.registry, stage_id)

    def total_value(self) -> int:
        return aggregates.total_value(self.registry)

    def weighted_value(self) -> Fraction:
        return aggregates.weighted_value(self.registry)

    def average_score(self) -> Fraction:
        return aggregates.average_score(self.registry)

    def summary(self) -> PipelineSummary:
        return aggregates.pipeline_summary(self.registry)

    def columns(self) -> list[ColumnView]:
        return [
            ColumnView(
                stage=summary.stage,
                deals=tuple(self.registry.get_deals_by_stage(summary.stage.stage_id)),
                summary=summary,
            )
            for summary in aggregates.stage_summaries(self.registry)
        ]

    def add_deal(self, deal: Deal, stage_id: str | None = None) -> Deal:
        try:
            added = self.registry.add_deal(deal, stage_id)
        except ListenerError:
            self._log_added(deal.deal_id)
            raise
        self._log_added(added.deal_id)
        return added

    def _log_added(self, deal_id: str) -> None:
        if self.logger is None:
            return
        stage, index = self.registry.index_of(deal_id)
        self.logger.log(event_type="deal_added", deal_id=deal_id, stage=stage, index=index)

    def move_deal(self, deal_id: str, stage_id: str, index: int | None = None) -> PipelineState:
        origin_stage, origin_index = self.registry.index_of(deal_id)
        before = self.registry.snapshot()
        try:
            state = self.registry.move_deal(deal_id, stage_id, index)
        except ListenerError:
            self._log_move(deal_id, origin_stage, origin_index)
            raise
        if state != before:
            self._log_move(deal_id, origin_stage, origin_index)
        return state

    def _log_move(self, deal_id: str, origin_stage: str, origin_index: int) -> None:
        if self.logger is None:
            return
        stage, index = self.registry.index_of(deal_id)
        self.logger.log(
            event_type="deal_moved",
            deal_id=deal_id,
            stage=stage,
            index=index,
            origin_stage=origin_stage,
            origin_index=origin_index,
        )

    def update_layout(self, layout: BoardLayout) -> None:
        self.controller.update_layout(layout)

    def on_gesture_start(self, deal_id: str) -> bool:
        return self.controller.on_gesture_start(deal_id)

    def on_gesture_move(self, point: Point) -> DropTarget | None:
        return self.controller.on_gesture_move(point)

    def on_gesture_end(self, point: Point | None) -> DragOutcome:
        return self.controller.on_gesture_end(point)

    def cancel_drag(self) -> DragOutcome:
        return self.controller.cancel()

    def replay(
        self, events: Iterable[GestureEvent], layout: BoardLayout | None = None
    ) -> list[DragOutcome]:
        """Feed gesture events in order.

        Without an explicit layout the board is re-laid out on a fixed grid
        before every event, as a renderer would after each repaint.
        """
        if layout is not None:
            self.controller.update_layout(layout)
            return self.controller.run(events)
        outcomes = []
        for event in events:
            self.controller.update_layout(grid_layout(self.snapshot().columns))
            outcomes.extend(self.controller.run([event]))
        return outcomes
