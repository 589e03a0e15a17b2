from datetime import date
from pathlib import Path

import pytest

from dealboard.board.drag import GestureCancel, GestureEnd, GestureMove, GestureStart
from dealboard.board.layout import Point
from dealboard.services import seed
from dealboard.services.seed import SeedError


def test_load_sample_board(tmp_path: Path) -> None:
    path = seed.write_board_file(tmp_path / "board.yaml", seed.SAMPLE_DEALS)
    deals = seed.load_deals(path)
    assert [deal.deal_id for deal in deals] == ["1", "2", "3", "4", "5"]
    assert deals[0].expected_close == date(2024, 2, 15)
    assert deals[4].stage == "negotiation"
    assert deals[4].value == 45000


def test_unquoted_yaml_date(tmp_path: Path) -> None:
    path = tmp_path / "board.yaml"
    path.write_text(
        "deals:\n"
        "  - id: a\n"
        "    title: Renewal\n"
        "    company: Acme\n"
        "    value: 500\n"
        "    probability: 90\n"
        "    score: 80\n"
        "    stage: proposal\n"
        "    expected_close: 2024-03-01\n",
        encoding="utf-8",
    )
    (deal,) = seed.load_deals(path)
    assert deal.expected_close == date(2024, 3, 1)
    assert deal.contact is None


@pytest.mark.parametrize(
    "entry",
    [
        {"title": "No id", "stage": "lead"},
        {"id": "x", "title": "No stage"},
        {"id": "x", "stage": "lead", "value": "lots"},
        {"id": "x", "stage": "lead", "expected_close": "soon"},
        "not a mapping",
    ],
)
def test_parse_deal_rejects_bad_entries(entry) -> None:
    with pytest.raises(SeedError):
        seed.parse_deal(entry)


def test_missing_file(tmp_path: Path) -> None:
    with pytest.raises(SeedError):
        seed.load_deals(tmp_path / "missing.yaml")


def test_load_script(tmp_path: Path) -> None:
    path = tmp_path / "script.yaml"
    path.write_text(
        "layout:\n"
        "  columns:\n"
        "    - stage: lead\n"
        "      rect: [0, 0, 200, 600]\n"
        "      cards:\n"
        "        - deal: '1'\n"
        "          rect: [0, 50, 200, 80]\n"
        "events:\n"
        "  - start: '1'\n"
        "  - move: [20, 140]\n"
        "  - end: null\n"
        "  - cancel: true\n",
        encoding="utf-8",
    )
    layout, events = seed.load_script(path)
    assert layout.columns[0].stage_id == "lead"
    assert layout.columns[0].cards[0].rect.mid_y == 90
    assert layout.column_at(Point(20, 140)).stage_id == "lead"
    assert events == [
        GestureStart("1"),
        GestureMove(Point(20, 140)),
        GestureEnd(None),
        GestureCancel(),
    ]


def test_parse_event_rejects_unknown_steps() -> None:
    with pytest.raises(SeedError):
        seed.parse_event({"hover": [1, 2]})
    with pytest.raises(SeedError):
        seed.parse_event({"move": [1]})


def test_layout_requires_stage() -> None:
    with pytest.raises(SeedError):
        seed.load_layout({"columns": [{"rect": [0, 0, 1, 1]}]})
    assert seed.load_layout(None).columns == ()
