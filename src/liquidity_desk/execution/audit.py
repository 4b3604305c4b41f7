"""JSONL audit logging for executed liquidity operations."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathlib import Path

    from liquidity_desk.execution.models import LiquidityResult


class OperationAuditLogger:
    """Append-only JSONL log with one line per operation attempt."""

    def __init__(self, path: Path) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def write(self, result: LiquidityResult) -> None:
        """Append one result as a single JSONL line."""
        self._path.parent.mkdir(parents=True, exist_ok=True)
        payload = result.model_dump(mode="json")
        with self._path.open("a", encoding="utf-8") as f:
            f.write(json.dumps(payload) + "\n")

    def read(self) -> list[dict[str, object]]:
        """Return every recorded line, oldest first. Missing log means no entries."""
        if not self._path.exists():
            return []
        with self._path.open(encoding="utf-8") as f:
            return [json.loads(line) for line in f if line.strip()]
