from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Point:
    x: float
    y: float


@dataclass(frozen=True)
class Rect:
    x: float
    y: float
    width: float
    height: float

    @property
    def mid_y(self) -> float:
        return self.y + self.height / 2

    def contains(self, point: Point) -> bool:
        return self.x <= point.x < self.x + self.width and self.y <= point.y < self.y + self.height


@dataclass(frozen=True)
class DropTarget:
    stage_id: str
    index: int


@dataclass(frozen=True)
class CardZone:
    deal_id: str
    rect: Rect


@dataclass(frozen=True)
class ColumnZone:
    stage_id: str
    rect: Rect
    cards: tuple[CardZone, ...] = ()


@dataclass(frozen=True)
class BoardLayout:
    """Drop-zone geometry as painted by the renderer."""

    columns: tuple[ColumnZone, ...] = field(default_factory=tuple)

    def column_at(self, point: Point) -> ColumnZone | None:
        for column in self.columns:
            if column.rect.contains(point):
                return column
        return None


def hit_test(layout: BoardLayout, point: Point, dragged_id: str | None = None) -> DropTarget | None:
    """Resolve a pointer position to a stage and insertion index.

    The dragged card's own zone is skipped, so the index is a position in the
    column as it will look once the card is lifted out. Over the upper half of
    a card the drop lands before it; over the lower half, after it.
    """
    column = layout.column_at(point)
    if column is None:
        return None
    cards = [card for card in column.cards if card.deal_id != dragged_id]
    index = sum(1 for card in cards if point.y >= card.rect.mid_y)
    return DropTarget(stage_id=column.stage_id, index=index)


def grid_layout(
    columns: dict[str, tuple[str, ...]],
    column_width: float = 240,
    column_height: float = 800,
    header_height: float = 60,
    card_height: float = 100,
    gap: float = 12,
) -> BoardLayout:
    """Evenly spaced columns with cards stacked top to bottom."""
    zones = []
    for position, (stage_id, deal_ids) in enumerate(columns.items()):
        x = position * (column_width + gap)
        cards = tuple(
            CardZone(
                deal_id=deal_id,
                rect=Rect(x, header_height + row * (card_height + gap), column_width, card_height),
            )
            for row, deal_id in enumerate(deal_ids)
        )
        zones.append(
            ColumnZone(stage_id=stage_id, rect=Rect(x, 0, column_width, column_height), cards=cards)
        )
    return BoardLayout(columns=tuple(zones))
