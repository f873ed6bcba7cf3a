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

import functools
import logging
import os
import sys
from concurrent.futures import (
    FIRST_COMPLETED,
    Executor,
    Future,
    ProcessPoolExecutor,
    ThreadPoolExecutor,
    wait,
)
from dataclasses import replace
from typing import Callable, Dict, Iterator, Optional, Union

from ..adapters.filesystem.local_fs import LocalFS
from ..config import CompareSettings, validate_concurrency
from ..domain.errors import LaunchFailure
from ..domain.models import FileSet, Outcome, Pair, PairResult, RunSummary
from ..ports.filesystem import FilesystemPort
from .collector_service import FileSetCollector
from .report_service import ReportService
from .task_service import run_pair

logger = logging.getLogger(__name__)

# ProcessPoolExecutor refuses more workers than this on Windows
WINDOWS_MAX_PROCESSES = 61

Task = Callable[[Pair], PairResult]
ExecutorFactory = Callable[[CompareSettings], Executor]


def iter_pairs(set_a: FileSet, set_b: FileSet) -> Iterator[Pair]:
    """Yield the product A x B lazily, i outer and j inner."""
    for i in range(len(set_a)):
        for j in range(len(set_b)):
            yield Pair(i, j, set_a[i], set_b[j])


def make_executor(settings: CompareSettings) -> Executor:
    workers = settings.pool_size
    if settings.mode == "process":
        if sys.platform == "win32":
            workers = min(workers, WINDOWS_MAX_PROCESSES)
        return ProcessPoolExecutor(max_workers=workers)
    return ThreadPoolExecutor(max_workers=workers, thread_name_prefix="pairdiff")


class DispatchService:
    """
    Drives the full product of two FileSets with at most N task units in flight.

    - The outstanding-futures map is the active count; only the dispatcher
      thread touches it.
    - Before each launch the dispatcher blocks until active < N, reaping every
      completed task exactly once.
    - A failed submit is logged and skipped (fatal only if nothing was ever
      launched); the run continues with the next pair.
    - Everything still outstanding is drained before run() returns.
    """

    def __init__(
        self,
        settings: CompareSettings,
        report: ReportService,
        *,
        task: Optional[Task] = None,
        executor_factory: Optional[ExecutorFactory] = None,
    ) -> None:
        self._settings = settings
        self._report = report
        self._task: Task = task or functools.partial(
            run_pair, chunk_size=settings.chunk_size, size_check=settings.size_check
        )
        self._executor_factory = executor_factory or make_executor
        self._pending: Dict[Future, Pair] = {}
        self.launched = 0
        self.peak_active = 0

    @property
    def active(self) -> int:
        return len(self._pending)

    def run(self, set_a: FileSet, set_b: FileSet) -> RunSummary:
        n = self._settings.concurrency
        logger.debug(
            "Dispatching %d x %d pairs with N=%d (%s mode)",
            len(set_a),
            len(set_b),
            n,
            self._settings.mode,
        )
        if not len(set_a) or not len(set_b):
            return self._report.summary(self.peak_active)

        try:
            executor = self._executor_factory(self._settings)
        except (OSError, ValueError, RuntimeError) as e:
            raise LaunchFailure(f"cannot start workers: {e}") from e

        with executor:
            for pair in iter_pairs(set_a, set_b):
                while self.active >= n:
                    self._reap()
                self._launch(executor, pair)

            while self.active > 0:
                self._reap()

        return self._report.summary(self.peak_active)

    # --- helpers ------------------------------------------------------------

    def _launch(self, executor: Executor, pair: Pair) -> None:
        try:
            fut = executor.submit(self._task, pair)
        except (RuntimeError, OSError) as e:
            # BrokenExecutor is a RuntimeError
            if self.launched == 0:
                raise LaunchFailure(
                    f"launch failed for {pair.path_a.name} <-> {pair.path_b.name}: {e}"
                ) from e
            logger.error(
                "launch failed for %s <-> %s: %s", pair.path_a.name, pair.path_b.name, e
            )
            self._report.record_launch_failure()
            if self._pending:
                self._reap()
            return

        self._pending[fut] = pair
        self.launched += 1
        self.peak_active = max(self.peak_active, len(self._pending))

    def _reap(self) -> int:
        """Block until at least one outstanding task completes; account for every done one."""
        # without a timeout, wait() returns with at least one future done
        done, _ = wait(list(self._pending), return_when=FIRST_COMPLETED)

        for fut in done:
            pair = self._pending.pop(fut)
            self._report.record(self._result_of(fut, pair))
        return len(done)

    def _result_of(self, fut: Future, pair: Pair) -> PairResult:
        try:
            return fut.result()
        except Exception as e:
            # the unit died without reporting (e.g. a worker process was killed)
            logger.error(
                "task failed for %s <-> %s: %s", pair.path_a.name, pair.path_b.name, e
            )
            worker = "pid=?" if self._settings.mode == "process" else "tid=?"
            return PairResult(pair, Outcome.error(f"task failed: {e}"), worker=worker)


def compare_directories(
    dir_a: Union[str, os.PathLike],
    dir_b: Union[str, os.PathLike],
    concurrency: int,
    *,
    settings: Optional[CompareSettings] = None,
    report: Optional[ReportService] = None,
    fs: Optional[FilesystemPort] = None,
    header: bool = False,
) -> RunSummary:
    """
    Compare every regular file of `dir_a` with every regular file of `dir_b`.

    N is validated before either directory is touched.

    Raises:
        InvalidArgument: N is not a positive integer.
        DirectoryUnreadable: either directory cannot be listed.
        LaunchFailure: no task unit could be started at all.
    """
    n = validate_concurrency(concurrency)
    settings = settings or CompareSettings.from_env()
    if settings.concurrency != n:
        settings = replace(settings, concurrency=n)
    report = report or ReportService()

    collector = FileSetCollector(fs or LocalFS())
    set_a = collector.collect(dir_a)
    set_b = collector.collect(dir_b)

    if header:
        report.header(len(set_a), len(set_b), n)
    return DispatchService(settings, report).run(set_a, set_b)
