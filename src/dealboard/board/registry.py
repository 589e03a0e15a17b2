from __future__ import annotations

from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import replace

from dealboard.domain import rules
from dealboard.domain.models import Deal, PipelineState
from dealboard.domain.rules import (
    ListenerError,
    NotFoundError,
    ReentrantMutationError,
    ValidationError,
)
from dealboard.domain.stages import StageCatalog

Listener = Callable[[PipelineState], None]


def validate_deal(deal: Deal) -> None:
    rules.require(deal.deal_id, "id")
    rules.require(deal.title, "title")
    rules.require(deal.company, "company")
    rules.validate_range(deal.value, "value", 0)
    rules.validate_range(deal.probability, "probability", 0, 100)
    rules.validate_range(deal.score, "score", 0, 100)


class DealRegistry:
    """Canonical deal records and their per-stage order.

    Every deal sits in exactly one column. Column lists are only replaced
    wholesale, so a reader sees either the old or the new arrangement.
    """

    def __init__(self, catalog: StageCatalog) -> None:
        self.catalog = catalog
        self._deals: dict[str, Deal] = {}
        self._columns: dict[str, tuple[str, ...]] = {stage_id: () for stage_id in catalog.ids()}
        self._listeners: list[Listener] = []
        self._mutating = False

    def __len__(self) -> int:
        return len(self._deals)

    def __contains__(self, deal_id: object) -> bool:
        return deal_id in self._deals

    def subscribe(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def snapshot(self) -> PipelineState:
        return PipelineState(stages=tuple(self._columns.items()))

    def get_deal(self, deal_id: str) -> Deal:
        deal = self._deals.get(deal_id)
        if deal is None:
            raise NotFoundError(f"Unknown deal: {deal_id}")
        return deal

    def get_deals_by_stage(self, stage_id: str) -> list[Deal]:
        self.catalog.get_stage(stage_id)
        return [self._deals[deal_id] for deal_id in self._columns[stage_id]]

    def deals(self) -> list[Deal]:
        return [self._deals[deal_id] for order in self._columns.values() for deal_id in order]

    def index_of(self, deal_id: str) -> tuple[str, int]:
        deal = self.get_deal(deal_id)
        return deal.stage, self._columns[deal.stage].index(deal_id)

    def add_deal(self, deal: Deal, stage_id: str | None = None) -> Deal:
        stage_id = stage_id or deal.stage
        validate_deal(deal)
        self.catalog.get_stage(stage_id)
        if deal.deal_id in self._deals:
            raise ValidationError(f"Deal already exists: {deal.deal_id}")
        if deal.stage != stage_id:
            deal = replace(deal, stage=stage_id)

        with self._mutation():
            columns = dict(self._columns)
            columns[stage_id] = columns[stage_id] + (deal.deal_id,)
            self._deals[deal.deal_id] = deal
            self._columns = columns
        self._notify()
        return deal

    def move_deal(
        self, deal_id: str, target_stage: str, target_index: int | None = None
    ) -> PipelineState:
        deal = self.get_deal(deal_id)
        self.catalog.get_stage(target_stage)
        if target_stage == deal.stage and target_index is None:
            return self.snapshot()

        source = tuple(d for d in self._columns[deal.stage] if d != deal_id)
        destination = source if target_stage == deal.stage else self._columns[target_stage]
        if target_index is None:
            target_index = len(destination)
        target_index = max(0, min(target_index, len(destination)))
        destination = destination[:target_index] + (deal_id,) + destination[target_index:]

        columns = dict(self._columns)
        columns[deal.stage] = source
        columns[target_stage] = destination
        if columns == self._columns:
            return self.snapshot()

        with self._mutation():
            self._deals[deal_id] = replace(deal, stage=target_stage)
            self._columns = columns
        self._notify()
        return self.snapshot()

    @contextmanager
    def _mutation(self) -> Iterator[None]:
        if self._mutating:
            raise ReentrantMutationError("Registry mutation already in progress.")
        self._mutating = True
        try:
            yield
        finally:
            self._mutating = False

    def _notify(self) -> None:
        # The change is already applied; every listener runs and the first
        # failure is re-raised with the committed state attached.
        state = self.snapshot()
        failure: Exception | None = None
        with self._mutation():
            for listener in list(self._listeners):
                try:
                    listener(state)
                except Exception as exc:
                    if failure is None:
                        failure = exc
        if failure is not None:
            raise ListenerError(f"Change listener failed: {failure}", state) from failure
