from dealboard.domain.models import Deal, PipelineState, Stage
from dealboard.domain.rules import (
    BoardError,
    EmptyDatasetError,
    ListenerError,
    NotFoundError,
    ReentrantMutationError,
    ValidationError,
)
from dealboard.domain.stages import StageCatalog, StageId

__all__ = [
    "BoardError",
    "Deal",
    "EmptyDatasetError",
    "ListenerError",
    "NotFoundError",
    "PipelineState",
    "ReentrantMutationError",
    "Stage",
    "StageCatalog",
    "StageId",
    "ValidationError",
]
