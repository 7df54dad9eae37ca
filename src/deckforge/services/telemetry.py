from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Mapping

from deckforge.engine.simulator import BatchReport, MatchResult

BATCH_COMPLETED = "batch_completed"
MATCH_COMPLETED = "match_completed"


@dataclass(frozen=True)
class TelemetryRecord:
    ts: str
    type: str
    payload: dict[str, object]


@dataclass
class TelemetryService:
    """Append-only JSON-lines log of simulation runs.

    Each line is ``{"ts": ..., "type": ..., "payload": {...}}`` with a UTC
    ISO timestamp. ``deck`` and ``vs`` are deck ids; a mirror match repeats
    the same id.
    """

    path: Path

    def log(self, event_type: str, payload: Mapping[str, object]) -> TelemetryRecord:
        record = TelemetryRecord(
            ts=datetime.now(tz=timezone.utc).isoformat(),
            type=event_type,
            payload=dict(payload),
        )
        self.path.parent.mkdir(parents=True, exist_ok=True)
        line = json.dumps({"ts": record.ts, "type": record.type, "payload": record.payload}, sort_keys=True)
        with self.path.open("a", encoding="utf-8") as f:
            f.write(line + "\n")
        return record

    def batch_completed(
        self, deck: str, vs: str | None, seed: int | None, iterations: int, report: BatchReport
    ) -> TelemetryRecord:
        return self.log(
            BATCH_COMPLETED,
            {"deck": deck, "vs": vs or deck, "seed": seed, "iterations": iterations, **report.to_dict()},
        )

    def match_completed(self, deck: str, vs: str | None, result: MatchResult) -> TelemetryRecord:
        return self.log(
            MATCH_COMPLETED,
            {
                "deck": deck,
                "vs": vs or deck,
                "seed": result.seed,
                "winner": result.winner,
                "reason": result.reason,
                "turns": result.turns,
                "lore": [result.lore_a, result.lore_b],
            },
        )

    def read(self, event_type: str | None = None) -> list[TelemetryRecord]:
        if not self.path.exists():
            return []
        out: list[TelemetryRecord] = []
        for line in self.path.read_text(encoding="utf-8").splitlines():
            if not line.strip():
                continue
            raw = json.loads(line)
            if event_type is not None and raw["type"] != event_type:
                continue
            out.append(TelemetryRecord(ts=raw["ts"], type=raw["type"], payload=raw["payload"]))
        return out
