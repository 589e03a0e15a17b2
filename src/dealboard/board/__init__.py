from dealboard.board.drag import DragController, DragOutcome, DragState, OutcomeKind
from dealboard.board.layout import BoardLayout, CardZone, ColumnZone, DropTarget, Point, Rect
from dealboard.board.pipeline import ColumnView, PipelineBoard
from dealboard.board.registry import DealRegistry

__all__ = [
    "BoardLayout",
    "CardZone",
    "ColumnView",
    "ColumnZone",
    "DealRegistry",
    "DragController",
    "DragOutcome",
    "DragState",
    "DropTarget",
    "OutcomeKind",
    "PipelineBoard",
    "Point",
    "Rect",
]
