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

import logging
import multiprocessing
import os
import threading
from typing import Optional

from ..adapters.compare.chunked import ChunkedComparator
from ..adapters.filesystem.local_fs import LocalFS
from ..config import DEFAULT_CHUNK_SIZE
from ..domain.models import Pair, PairResult, Verdict
from ..ports.comparator import ComparatorPort

logger = logging.getLogger(__name__)


def worker_identity() -> str:
    """`pid=<pid>` inside a worker process, `tid=<native id>` inside a worker thread."""
    if multiprocessing.parent_process() is not None:
        return f"pid={os.getpid()}"
    return f"tid={threading.get_native_id()}"


def run_pair(
    pair: Pair,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    size_check: bool = True,
    comparator: Optional[ComparatorPort] = None,
) -> PairResult:
    """
    The task unit: compare exactly one pair and report back.

    Module-level so ProcessPoolExecutor can pickle it. Never retries and
    shares nothing with other task units.
    """
    if comparator is None:
        comparator = ChunkedComparator(
            LocalFS(), chunk_size=chunk_size, size_check=size_check
        )
    outcome = comparator.compare(pair.path_a, pair.path_b)
    result = PairResult(pair=pair, outcome=outcome, worker=worker_identity())

    if outcome.verdict is Verdict.ERROR:
        logger.error(
            "%s compare error: %s <-> %s (%s)",
            result.worker,
            pair.path_a.name,
            pair.path_b.name,
            outcome.reason,
        )
    return result
