"""Load board fixtures and gesture scripts from YAML.

A board file looks like::

    deals:
      - id: "1"
        title: Website Redesign
        company: DesignCorp
        contact: Alice Johnson
        value: 12000
        probability: 30
        score: 65
        stage: lead
        expected_close: 2024-02-15

A gesture script adds a ``layout`` block with column and card rectangles
(``[x, y, width, height]``) and an ``events`` list of ``start``, ``move``,
``end`` and ``cancel`` steps.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from dealboard.board.drag import GestureCancel, GestureEnd, GestureEvent, GestureMove, GestureStart
from dealboard.board.layout import BoardLayout, CardZone, ColumnZone, Point, Rect
from dealboard.domain import rules
from dealboard.domain.models import Deal
from dealboard.domain.rules import ValidationError


class SeedError(RuntimeError):
    pass


def load_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise SeedError(f"File not found: {path}")
    data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise SeedError(f"{path} must contain a mapping.")
    return data


def load_deals(path: Path) -> list[Deal]:
    entries = load_yaml(path).get("deals") or []
    if not isinstance(entries, list):
        raise SeedError("deals must be a list.")
    return [parse_deal(entry) for entry in entries]


def parse_deal(entry: Any) -> Deal:
    if not isinstance(entry, dict):
        raise SeedError("Each deal must be a mapping.")
    try:
        rules.require(entry.get("id"), "id")
        rules.require(entry.get("stage"), "stage")
        return Deal(
            deal_id=str(entry["id"]),
            title=str(entry.get("title") or ""),
            company=str(entry.get("company") or ""),
            contact=entry.get("contact"),
            value=_as_int(entry.get("value", 0), "value"),
            probability=_as_int(entry.get("probability", 0), "probability"),
            score=_as_int(entry.get("score", 0), "score"),
            stage=str(entry["stage"]),
            expected_close=rules.parse_date(entry.get("expected_close"), "expected_close"),
            notes=entry.get("notes"),
        )
    except ValidationError as exc:
        raise SeedError(f"Invalid deal {entry.get('id')!r}: {exc}") from exc


def load_layout(data: Any) -> BoardLayout:
    if data is None:
        return BoardLayout()
    if not isinstance(data, dict):
        raise SeedError("layout must be a mapping.")
    columns = []
    for column in data.get("columns") or []:
        if not isinstance(column, dict) or not column.get("stage"):
            raise SeedError(f"Layout column needs a stage: {column!r}")
        cards = []
        for card in column.get("cards") or []:
            if not isinstance(card, dict) or not card.get("deal"):
                raise SeedError(f"Layout card needs a deal: {card!r}")
            cards.append(CardZone(deal_id=str(card["deal"]), rect=_rect(card.get("rect"))))
        columns.append(
            ColumnZone(stage_id=str(column["stage"]), rect=_rect(column.get("rect")), cards=tuple(cards))
        )
    return BoardLayout(columns=tuple(columns))


def load_script(path: Path) -> tuple[BoardLayout, list[GestureEvent]]:
    data = load_yaml(path)
    layout = load_layout(data.get("layout"))
    events = [parse_event(step) for step in data.get("events") or []]
    return layout, events


def parse_event(step: Any) -> GestureEvent:
    if not isinstance(step, dict) or len(step) != 1:
        raise SeedError(f"Invalid gesture step: {step!r}")
    (kind, value), = step.items()
    if kind == "start":
        return GestureStart(deal_id=str(value))
    if kind == "move":
        return GestureMove(point=_point(value))
    if kind == "end":
        return GestureEnd(point=None if value is None else _point(value))
    if kind == "cancel":
        return GestureCancel()
    raise SeedError(f"Unknown gesture step: {kind}")


def _as_int(value: Any, field: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{field} must be an integer.")
    return value


def _point(value: Any) -> Point:
    if not isinstance(value, list | tuple) or len(value) != 2:
        raise SeedError(f"Point must be [x, y], got {value!r}")
    return Point(x=float(value[0]), y=float(value[1]))


def _rect(value: Any) -> Rect:
    if not isinstance(value, list | tuple) or len(value) != 4:
        raise SeedError(f"Rect must be [x, y, width, height], got {value!r}")
    x, y, width, height = (float(part) for part in value)
    return Rect(x=x, y=y, width=width, height=height)


SAMPLE_DEALS = [
    {
        "id": "1",
        "title": "Website Redesign",
        "company": "DesignCorp",
        "contact": "Alice Johnson",
        "value": 12000,
        "probability": 30,
        "score": 65,
        "stage": "lead",
        "expected_close": "2024-02-15",
    },
    {
        "id": "2",
        "title": "Mobile App Development",
        "company": "AppStart",
        "contact": "Bob Wilson",
        "value": 35000,
        "probability": 25,
        "score": 58,
        "stage": "lead",
        "expected_close": "2024-02-20",
    },
    {
        "id": "3",
        "title": "Cloud Infrastructure Setup",
        "company": "StartupXYZ",
        "contact": "Mike Chen",
        "value": 15000,
        "probability": 60,
        "score": 72,
        "stage": "qualified",
        "expected_close": "2024-02-10",
    },
    {
        "id": "4",
        "title": "Marketing Automation Platform",
        "company": "GrowthCo",
        "contact": "Sarah Johnson",
        "value": 28000,
        "probability": 70,
        "score": 78,
        "stage": "proposal",
        "expected_close": "2024-02-08",
    },
    {
        "id": "5",
        "title": "Enterprise Software License",
        "company": "TechCorp Inc.",
        "contact": "John Smith",
        "value": 45000,
        "probability": 85,
        "score": 92,
        "stage": "negotiation",
        "expected_close": "2024-02-05",
    },
]


def write_board_file(path: Path, deals: list[dict[str, Any]]) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(yaml.safe_dump({"deals": deals}, sort_keys=False), encoding="utf-8")
    return path
