"""
CSV exporter — Streams sandbox report rows to a delimited text file.

Rows are joined with the configured delimiter without quoting, and each one
is flushed as soon as it is written so an interrupted run leaves a readable
file.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import IO, Iterable, Optional

from ..config import DEFAULT_DELIMITER, REPORT_HEADER
from ..models import ReportRow

logger = logging.getLogger("sandbox_inventory.reporting.csv")


class ReportWriter:
    """Append-only writer for one report file, mirroring rows to the console."""

    def __init__(self, path: Path, delimiter: str = DEFAULT_DELIMITER, echo: bool = True):
        self.path = Path(path)
        self.delimiter = delimiter
        self.echo = echo
        self.rows_written = 0
        self._fh: Optional[IO[str]] = None

    def __enter__(self):
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._fh = open(self.path, "w", newline="", encoding="utf-8-sig")
        self._write_line(REPORT_HEADER)
        logger.info(f"Report file created: {self.path}")
        return self

    def __exit__(self, *args):
        if self._fh:
            self._fh.close()
            self._fh = None

    def format_row(self, fields: Iterable[str]) -> str:
        return self.delimiter.join(fields)

    def write_row(self, row: ReportRow):
        line = self._write_line(row.fields())
        self.rows_written += 1
        if self.echo:
            print(line)

    def write_rows(self, rows: Iterable[ReportRow]):
        for row in rows:
            self.write_row(row)

    def _write_line(self, fields: Iterable[str]) -> str:
        if not self._fh:
            raise RuntimeError("ReportWriter not open. Use 'with' context.")
        line = self.format_row(fields)
        self._fh.write(line + "\n")
        self._fh.flush()
        return line
