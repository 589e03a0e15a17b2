from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path

from dealboard.services.utils import utc_now_iso


@dataclass
class EventLogger:
    path: Path
    workspace: str
    enabled: bool = True

    def log(
        self,
        *,
        event_type: str,
        deal_id: str | None,
        stage: str | None = None,
        index: int | None = None,
        origin_stage: str | None = None,
        origin_index: int | None = None,
    ) -> None:
        if not self.enabled:
            return
        payload = {
            "ts": utc_now_iso(),
            "workspace": self.workspace,
            "event_type": event_type,
            "deal_id": deal_id,
            "stage": stage,
            "index": index,
            "origin_stage": origin_stage,
            "origin_index": origin_index,
        }
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(payload) + "\n")

    def read(self) -> list[dict]:
        if not self.path.exists():
            return []
        with self.path.open(encoding="utf-8") as handle:
            return [json.loads(line) for line in handle if line.strip()]
