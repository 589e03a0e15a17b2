from __future__ import annotations

from collections.abc import Iterable, Mapping
from enum import Enum
from typing import Any

from dealboard.domain.models import Stage
from dealboard.domain.rules import NotFoundError, ValidationError, require


class StageId(str, Enum):
    LEAD = "lead"
    QUALIFIED = "qualified"
    PROPOSAL = "proposal"
    NEGOTIATION = "negotiation"
    CLOSED_WON = "closed-won"
    CLOSED_LOST = "closed-lost"


DEFAULT_STAGES = [
    (StageId.LEAD, "Lead", "gray-500"),
    (StageId.QUALIFIED, "Qualified", "blue-500"),
    (StageId.PROPOSAL, "Proposal", "yellow-500"),
    (StageId.NEGOTIATION, "Negotiation", "orange-500"),
    (StageId.CLOSED_WON, "Closed Won", "green-500"),
    (StageId.CLOSED_LOST, "Closed Lost", "gray-400"),
]


class StageCatalog:
    """Fixed, ordered set of pipeline stages.

    Column order is taken from ``Stage.position`` and never changes after
    construction.
    """

    def __init__(self, stages: Iterable[Stage]) -> None:
        ordered = sorted(stages, key=lambda stage: stage.position)
        if not ordered:
            raise ValidationError("At least one stage is required.")
        by_id: dict[str, Stage] = {}
        for stage in ordered:
            require(stage.stage_id, "stage id")
            if stage.stage_id in by_id:
                raise ValidationError(f"Duplicate stage id: {stage.stage_id}")
            by_id[stage.stage_id] = stage
        self._stages = tuple(ordered)
        self._by_id = by_id

    @classmethod
    def default(cls) -> StageCatalog:
        return cls(
            Stage(stage_id=stage_id.value, name=name, color=color, position=position)
            for position, (stage_id, name, color) in enumerate(DEFAULT_STAGES)
        )

    @classmethod
    def from_config(cls, entries: Iterable[Mapping[str, Any]]) -> StageCatalog:
        stages = []
        for position, entry in enumerate(entries):
            if not isinstance(entry, Mapping):
                raise ValidationError("Stage entries must be mappings.")
            stage_id = entry.get("id")
            require(stage_id, "stage id")
            stages.append(
                Stage(
                    stage_id=str(stage_id),
                    name=str(entry.get("name") or stage_id),
                    color=str(entry.get("color") or "gray-500"),
                    position=position,
                )
            )
        return cls(stages)

    def list_stages(self) -> list[Stage]:
        return list(self._stages)

    def get_stage(self, stage_id: str) -> Stage:
        stage = self._by_id.get(stage_id)
        if stage is None:
            raise NotFoundError(f"Unknown stage: {stage_id}")
        return stage

    def ids(self) -> list[str]:
        return [stage.stage_id for stage in self._stages]

    def __contains__(self, stage_id: object) -> bool:
        return stage_id in self._by_id

    def __iter__(self):
        return iter(self._stages)

    def __len__(self) -> int:
        return len(self._stages)
