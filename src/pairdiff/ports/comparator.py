# Licensed under the Apache License, Version 2.0
from __future__ import annotations

from pathlib import Path
from typing import Protocol

from ..domain.models import Outcome


class ComparatorPort(Protocol):
    """
    Content comparison strategy for one pair of files.
    Implementers never raise for per-file problems; they return an ERROR outcome instead.
    """

    def compare(self, path_a: Path, path_b: Path) -> Outcome: ...
