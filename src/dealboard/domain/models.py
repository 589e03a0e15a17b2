from __future__ import annotations

from dataclasses import dataclass
from datetime import date


@dataclass(frozen=True)
class Stage:
    stage_id: str
    name: str
    color: str
    position: int


@dataclass(frozen=True)
class Deal:
    deal_id: str
    title: str
    company: str
    contact: str | None
    value: int
    probability: int
    score: int
    stage: str
    expected_close: date | None = None
    notes: str | None = None


@dataclass(frozen=True)
class PipelineState:
    """Per-stage deal order as (stage id, deal ids) pairs in catalog order."""

    stages: tuple[tuple[str, tuple[str, ...]], ...]

    @property
    def columns(self) -> dict[str, tuple[str, ...]]:
        return dict(self.stages)

    def order(self, stage_id: str) -> tuple[str, ...]:
        return self.columns.get(stage_id, ())

    def locate(self, deal_id: str) -> tuple[str, int] | None:
        for stage_id, deal_ids in self.stages:
            if deal_id in deal_ids:
                return stage_id, deal_ids.index(deal_id)
        return None

    def deal_ids(self) -> list[str]:
        return [deal_id for _, deal_ids in self.stages for deal_id in deal_ids]
