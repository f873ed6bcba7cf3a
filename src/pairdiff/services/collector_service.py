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

import errno
import logging
import os
from pathlib import Path
from typing import Union

from ..domain.errors import DirectoryUnreadable
from ..domain.models import FileSet
from ..ports.filesystem import FilesystemPort

logger = logging.getLogger(__name__)


class FileSetCollector:
    """
    Lists the regular files directly inside one directory:
      - no recursion into subdirectories
      - symlinks, directories and special files are excluded silently
      - over-long paths are skipped with a warning
      - entries are sorted by name so every run enumerates pairs the same way
    """

    def __init__(self, fs: FilesystemPort) -> None:
        self._fs = fs

    def collect(self, directory: Union[str, os.PathLike]) -> FileSet:
        """
        Build the FileSet for `directory`.

        Raises:
            DirectoryUnreadable: if the directory cannot be opened.
        """
        root = Path(directory)
        try:
            names = sorted(self._fs.list_dir(root))
        except OSError as e:
            raise DirectoryUnreadable(root, e.strerror or str(e)) from e

        limit = self._fs.path_max(root)
        paths: list[Path] = []
        for name in names:
            if name in (".", ".."):
                continue

            p = root / name
            if len(os.fsencode(str(p))) >= limit:
                logger.warning("Path too long, skipped: %s", p)
                continue

            if self._is_regular(p):
                paths.append(p)

        logger.debug("Collected %d files from %s", len(paths), root)
        return FileSet(root, paths)

    def _is_regular(self, path: Path) -> bool:
        try:
            return self._fs.is_regular_file(path)
        except OSError as e:
            if e.errno == errno.ENAMETOOLONG:
                logger.warning("Path too long, skipped: %s", path)
            else:
                # vanished between listing and lookup, or unreadable metadata
                logger.debug("Lookup failed for %s: %s", path, e)
            return False
