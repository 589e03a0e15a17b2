"""Board metrics, recomputed from the registry on every call.

Weighted value and average score are returned as exact ``Fraction`` values;
rounding belongs to the presentation layer (see ``services.utils``).
"""

from __future__ import annotations

from dataclasses import dataclass
from fractions import Fraction

from dealboard.board.registry import DealRegistry
from dealboard.domain.models import Deal, Stage
from dealboard.domain.rules import EmptyDatasetError

HIGH_SCORE = 80
MEDIUM_SCORE = 60


@dataclass(frozen=True)
class StageSummary:
    stage: Stage
    count: int
    value: int
    weighted: Fraction


@dataclass(frozen=True)
class PipelineSummary:
    total: int
    weighted: Fraction
    deal_count: int
    average_score: Fraction | None


def stage_value(registry: DealRegistry, stage_id: str) -> int:
    return sum(deal.value for deal in registry.get_deals_by_stage(stage_id))


def stage_count(registry: DealRegistry, stage_id: str) -> int:
    return len(registry.get_deals_by_stage(stage_id))


def total_value(registry: DealRegistry) -> int:
    return sum(deal.value for deal in registry.deals())


def weighted_value(registry: DealRegistry) -> Fraction:
    return _weighted(registry.deals())


def deal_count(registry: DealRegistry) -> int:
    return len(registry)


def average_score(registry: DealRegistry) -> Fraction:
    deals = registry.deals()
    if not deals:
        raise EmptyDatasetError("Average score is undefined for an empty pipeline.")
    return Fraction(sum(deal.score for deal in deals), len(deals))


def score_band(score: int) -> str:
    if score >= HIGH_SCORE:
        return "high"
    if score >= MEDIUM_SCORE:
        return "medium"
    return "low"


def stage_summaries(registry: DealRegistry) -> list[StageSummary]:
    summaries = []
    for stage in registry.catalog.list_stages():
        deals = registry.get_deals_by_stage(stage.stage_id)
        summaries.append(
            StageSummary(
                stage=stage,
                count=len(deals),
                value=sum(deal.value for deal in deals),
                weighted=_weighted(deals),
            )
        )
    return summaries


def pipeline_summary(registry: DealRegistry) -> PipelineSummary:
    try:
        average = average_score(registry)
    except EmptyDatasetError:
        average = None
    return PipelineSummary(
        total=total_value(registry),
        weighted=weighted_value(registry),
        deal_count=deal_count(registry),
        average_score=average,
    )


def _weighted(deals: list[Deal]) -> Fraction:
    return sum((Fraction(deal.value * deal.probability, 100) for deal in deals), Fraction(0))
