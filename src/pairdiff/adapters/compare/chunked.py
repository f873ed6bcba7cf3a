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

import logging
from contextlib import ExitStack
from pathlib import Path
from typing import Optional

from ...config import DEFAULT_CHUNK_SIZE
from ...domain.errors import InvalidArgument, OpenFailure, ReadFailure
from ...domain.models import Outcome
from ...ports.comparator import ComparatorPort
from ...ports.filesystem import FilesystemPort
from ..filesystem.local_fs import LocalFS

logger = logging.getLogger(__name__)


class ChunkedComparator(ComparatorPort):
    """
    Byte-for-byte comparison of two files in fixed-size chunks.

    - Optional fast path: different sizes -> DIFFER with 0 bytes compared.
    - Reads from B are sized to what A returned, so both sides stay aligned.
    - A mismatching chunk counts in full towards `bytes_compared`
      (the chunk scanned, not the offset of the first differing byte).
    - Open/read/stat problems become an ERROR outcome; nothing is raised.
    """

    def __init__(
        self,
        fs: Optional[FilesystemPort] = None,
        *,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        size_check: bool = True,
    ) -> None:
        if int(chunk_size) <= 0:
            raise InvalidArgument(f"chunk_size must be > 0, got {chunk_size}")
        self._fs = fs or LocalFS()
        self._chunk_size = int(chunk_size)
        self._size_check = bool(size_check)

    @property
    def chunk_size(self) -> int:
        return self._chunk_size

    def compare(self, path_a: Path, path_b: Path) -> Outcome:
        if self._size_check:
            try:
                if self._fs.size(path_a) != self._fs.size(path_b):
                    return Outcome.differ(0)
            except OSError as e:
                return Outcome.error(f"stat failed: {e.strerror or e}")

        try:
            return self._compare_content(path_a, path_b)
        except OpenFailure as e:
            return Outcome.error(f"open failed: {e}")
        except ReadFailure as e:
            return Outcome.error(f"read failed: {e}", e.compared)

    # --- helpers ------------------------------------------------------------

    def _compare_content(self, path_a: Path, path_b: Path) -> Outcome:
        with ExitStack() as stack:
            try:
                fa = stack.enter_context(self._fs.open_binary(path_a))
                fb = stack.enter_context(self._fs.open_binary(path_b))
            except OSError as e:
                raise OpenFailure(e.strerror or str(e)) from e

            compared = 0
            while True:
                try:
                    chunk_a = fa.read(self._chunk_size)
                    chunk_b = fb.read(len(chunk_a) or self._chunk_size)
                except OSError as e:
                    raise ReadFailure(e.strerror or str(e), compared) from e

                if not chunk_a and not chunk_b:
                    return Outcome.equal(compared)

                if not chunk_a or not chunk_b:
                    # one side ran out first: the file changed after the size check
                    logger.debug(
                        "Length mismatch mid-read for %s <-> %s after %d bytes",
                        path_a,
                        path_b,
                        compared,
                    )
                    return Outcome.differ(compared)

                if chunk_a != chunk_b:
                    return Outcome.differ(compared + len(chunk_a))

                compared += len(chunk_a)
