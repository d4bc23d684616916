from __future__ import annotations

from collections.abc import Iterable
from datetime import UTC, datetime
from pathlib import Path

from ..models.cell_issue import CellIssue

"""Cell issue log: buffers CellIssue records and flushes them as JSON Lines.

One file per run: ``logs/issues-YYYYMMDD-HHMMSS.log`` (UTC), created on the
first flush that has something to write. Serial use only.
"""

__all__ = [
    "CellIssue",
    "CellIssueLog",
]

LOGS_DIR = Path("./logs")
TIMESTAMP_FMT = "%Y%m%d-%H%M%S"


class CellIssueLog:
    def __init__(self, logs_dir: Path = LOGS_DIR) -> None:
        self._records: list[CellIssue] = []
        self._logs_dir = logs_dir
        self._file_path: Path | None = None

    @property
    def file_path(self) -> Path:
        if self._file_path is None:
            stamp = datetime.now(UTC).strftime(TIMESTAMP_FMT)
            self._file_path = self._logs_dir / f"issues-{stamp}.log"
        return self._file_path

    def append(self, record: CellIssue) -> None:
        self._records.append(record)

    def extend(self, records: Iterable[CellIssue]) -> None:
        self._records.extend(records)

    def __len__(self) -> int:
        return len(self._records)

    def flush(self) -> Path | None:
        """Append buffered records to the log file; None when nothing was buffered."""
        if not self._records:
            return None
        fp = self.file_path
        fp.parent.mkdir(parents=True, exist_ok=True)
        with fp.open("a", encoding="utf-8") as f:
            for r in self._records:
                f.write(r.to_json_line() + "\n")
        self._records.clear()
        return fp
