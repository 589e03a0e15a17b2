from __future__ import annotations

import csv
from collections.abc import Iterable
from pathlib import Path

from openpyxl import Workbook

from dealboard.board.pipeline import PipelineBoard
from dealboard.services.utils import format_score, round_half_up

DEAL_HEADERS = [
    "stage",
    "position",
    "deal_id",
    "title",
    "company",
    "contact",
    "value",
    "probability",
    "score",
    "expected_close",
    "notes",
]
SUMMARY_HEADERS = ["stage", "name", "deals", "value", "weighted_value"]


def deal_rows(board: PipelineBoard) -> list[list[object]]:
    rows: list[list[object]] = []
    for column in board.columns():
        for position, deal in enumerate(column.deals):
            rows.append(
                [
                    column.stage.stage_id,
                    position,
                    deal.deal_id,
                    deal.title,
                    deal.company,
                    deal.contact,
                    deal.value,
                    deal.probability,
                    deal.score,
                    deal.expected_close.isoformat() if deal.expected_close else None,
                    deal.notes,
                ]
            )
    return rows


def summary_rows(board: PipelineBoard) -> list[list[object]]:
    rows: list[list[object]] = [
        [
            column.stage.stage_id,
            column.stage.name,
            column.summary.count,
            column.summary.value,
            round_half_up(column.summary.weighted),
        ]
        for column in board.columns()
    ]
    summary = board.summary()
    rows.append(["total", "Total", summary.deal_count, summary.total, round_half_up(summary.weighted)])
    return rows


def export_excel(board: PipelineBoard, out_path: Path) -> None:
    out_path.parent.mkdir(parents=True, exist_ok=True)
    wb = Workbook()
    wb.remove(wb.active)

    _write_sheet(wb.create_sheet(title="deals"), DEAL_HEADERS, deal_rows(board))
    _write_sheet(wb.create_sheet(title="stages"), SUMMARY_HEADERS, summary_rows(board))
    ws = wb.create_sheet(title="metrics")
    summary = board.summary()
    ws.append(["metric", "value"])
    ws.append(["total_value", summary.total])
    ws.append(["weighted_value", round_half_up(summary.weighted)])
    ws.append(["deal_count", summary.deal_count])
    ws.append(["average_score", format_score(summary.average_score)])

    wb.save(out_path)


def export_csv_tables(board: PipelineBoard, out_dir: Path) -> list[Path]:
    out_dir.mkdir(parents=True, exist_ok=True)
    written = []
    for name, headers, rows in (
        ("deals", DEAL_HEADERS, deal_rows(board)),
        ("stages", SUMMARY_HEADERS, summary_rows(board)),
    ):
        csv_path = out_dir / f"{name}.csv"
        with csv_path.open("w", newline="", encoding="utf-8") as handle:
            writer = csv.writer(handle)
            writer.writerow(headers)
            writer.writerows(rows)
        written.append(csv_path)
    return written


def _write_sheet(ws, headers: list[str], rows: Iterable[list[object]]) -> None:
    ws.append(headers)
    for row in rows:
        ws.append(row)
