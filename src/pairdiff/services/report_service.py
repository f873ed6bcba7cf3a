# Licensed under the Apache License, Version 2.0 (the "License");
# ...
from __future__ import annotations

import csv
import json
import sys
import threading
from pathlib import Path
from typing import IO, Any, Optional

from ..domain.models import PairResult, RunSummary, Verdict

FORMATS = ("json", "ndjson", "csv")

CSV_FIELDS = [
    "i",
    "j",
    "path_a",
    "path_b",
    "worker",
    "bytes_compared",
    "verdict",
    "exit_code",
    "reason",
]


class ResultSink:
    """
    Writes each pair result to a machine-readable file as it is reaped
    (JSON array / NDJSON / CSV). Nothing is buffered beyond the open file,
    so memory does not grow with the number of pairs.

    Notes:
      - The file is opened on the first write (or on close()), so a run that
        fails before producing any result leaves an existing file untouched.
      - JSON: one array of records; the closing bracket is written on close().
      - NDJSON: one record per line.
      - CSV: header first (even when no pairs), stable column order.
    """

    def __init__(self, out: Path, fmt: str = "json") -> None:
        fmt = (fmt or "json").lower()
        if fmt not in FORMATS:
            raise ValueError(f"Unsupported format: {fmt}")
        self.path = Path(out)
        self.fmt = fmt
        self._count = 0
        self._closed = False
        self._fh: Optional[IO[str]] = None
        self._csv: Optional[csv.DictWriter] = None

    def write(self, record: dict[str, Any]) -> None:
        fh = self._open()
        if self._csv is not None:
            self._csv.writerow(record)
        elif self.fmt == "json":
            sep = "," if self._count else ""
            fh.write(f"{sep}\n  {json.dumps(record, ensure_ascii=False)}")
        else:
            fh.write(json.dumps(record, ensure_ascii=False) + "\n")
        self._count += 1

    def close(self) -> None:
        if self._closed:
            return
        fh = self._open()
        if self.fmt == "json":
            fh.write("\n]\n" if self._count else "]\n")
        fh.close()
        self._fh = None
        self._closed = True

    def _open(self) -> IO[str]:
        if self._closed:
            raise ValueError("sink is closed")
        if self._fh is None:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self._fh = open(self.path, "w", newline="", encoding="utf-8")
            if self.fmt == "json":
                self._fh.write("[")
            elif self.fmt == "csv":
                self._csv = csv.DictWriter(self._fh, fieldnames=CSV_FIELDS)
                self._csv.writeheader()
        return self._fh

    def __enter__(self) -> ResultSink:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


class ReportService:
    """
    Result aggregator: one report line per reaped pair, plus running tallies.

    Lines are written whole under a lock so concurrent reporters never
    interleave partial lines on the shared stream.
    """

    def __init__(self, out: Optional[IO[str]] = None, sink: Optional[ResultSink] = None) -> None:
        self._out = out
        self._sink = sink
        self._lock = threading.Lock()
        self._counts = {v: 0 for v in Verdict}
        self._bytes = 0
        self._launch_failed = 0

    @property
    def out(self) -> IO[str]:
        # resolved lazily so test runners that swap sys.stdout are honoured
        return self._out if self._out is not None else sys.stdout

    def header(self, files_a: int, files_b: int, concurrency: int) -> None:
        self._emit(f"files_a={files_a} files_b={files_b} N={concurrency}")

    def record(self, result: PairResult) -> None:
        with self._lock:
            self._counts[result.outcome.verdict] += 1
            self._bytes += result.outcome.bytes_compared
            self.out.write(result.line() + "\n")
            self.out.flush()
            if self._sink is not None:
                self._sink.write(result.as_record())

    def record_launch_failure(self) -> None:
        with self._lock:
            self._launch_failed += 1

    def summary(self, peak_active: int = 0) -> RunSummary:
        with self._lock:
            return RunSummary(
                pairs=sum(self._counts.values()),
                equal=self._counts[Verdict.EQUAL],
                differ=self._counts[Verdict.DIFFER],
                error=self._counts[Verdict.ERROR],
                launch_failed=self._launch_failed,
                bytes_compared=self._bytes,
                peak_active=peak_active,
            )

    def _emit(self, line: str) -> None:
        with self._lock:
            self.out.write(line + "\n")
            self.out.flush()
