# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

from __future__ import annotations

import enum
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Optional, Sequence


class Verdict(str, enum.Enum):
    EQUAL = "EQUAL"
    DIFFER = "DIFFER"
    ERROR = "ERROR"


# Per-task completion codes. 2 is reserved for CLI usage errors.
EXIT_CODES = {
    Verdict.EQUAL: 0,
    Verdict.DIFFER: 1,
    Verdict.ERROR: 3,
}


@dataclass(frozen=True)
class Outcome:
    """
    Result of comparing two files.

    `bytes_compared` counts the content bytes inspected before the verdict:
    0 for a size-based fast reject, the full scanned chunk for an early
    mismatch, the whole file size for a true equal.
    """

    verdict: Verdict
    bytes_compared: int = 0
    reason: Optional[str] = None

    @classmethod
    def equal(cls, bytes_compared: int) -> Outcome:
        return cls(Verdict.EQUAL, bytes_compared)

    @classmethod
    def differ(cls, bytes_compared: int) -> Outcome:
        return cls(Verdict.DIFFER, bytes_compared)

    @classmethod
    def error(cls, reason: str, bytes_compared: int = 0) -> Outcome:
        return cls(Verdict.ERROR, bytes_compared, reason)


class FileSet(Sequence[Path]):
    """Ordered, immutable collection of the regular files found in one directory."""

    __slots__ = ("_directory", "_paths")

    def __init__(self, directory: str | os.PathLike, paths: Sequence[Path] = ()) -> None:
        self._directory = Path(directory)
        self._paths = tuple(Path(p) for p in paths)

    @property
    def directory(self) -> Path:
        return self._directory

    def __getitem__(self, index):  # type: ignore[override]
        return self._paths[index]

    def __len__(self) -> int:
        return len(self._paths)

    def __iter__(self) -> Iterator[Path]:
        return iter(self._paths)

    def __repr__(self) -> str:
        return f"FileSet({str(self._directory)!r}, {len(self._paths)} files)"


@dataclass(frozen=True)
class Pair:
    """One (fileA, fileB) combination and its (i, j) position in the product."""

    i: int
    j: int
    path_a: Path
    path_b: Path


@dataclass(frozen=True)
class PairResult:
    pair: Pair
    outcome: Outcome
    worker: str

    @property
    def exit_code(self) -> int:
        return EXIT_CODES[self.outcome.verdict]

    def line(self) -> str:
        return (
            f"{self.worker} {self.pair.path_a.name} <-> {self.pair.path_b.name} "
            f"bytes={self.outcome.bytes_compared} result={self.outcome.verdict.value}"
        )

    def as_record(self) -> dict:
        return {
            "i": self.pair.i,
            "j": self.pair.j,
            "path_a": str(self.pair.path_a),
            "path_b": str(self.pair.path_b),
            "worker": self.worker,
            "bytes_compared": self.outcome.bytes_compared,
            "verdict": self.outcome.verdict.value,
            "exit_code": self.exit_code,
            "reason": self.outcome.reason,
        }


@dataclass(frozen=True)
class RunSummary:
    pairs: int = 0
    equal: int = 0
    differ: int = 0
    error: int = 0
    launch_failed: int = 0
    bytes_compared: int = 0
    peak_active: int = 0

    def line(self) -> str:
        return (
            f"equal={self.equal} differ={self.differ} error={self.error} "
            f"launch_failed={self.launch_failed} bytes={self.bytes_compared}"
        )
