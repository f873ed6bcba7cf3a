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

import os
import stat
from pathlib import Path
from typing import BinaryIO, Iterator

from ...ports.filesystem import FilesystemPort

DEFAULT_PATH_MAX = 4096


class LocalFS(FilesystemPort):
    """Local filesystem adapter backed by os.listdir / os.lstat."""

    def list_dir(self, directory: Path) -> Iterator[str]:
        # listdir opens the directory eagerly so errors surface at call time
        names = os.listdir(directory)
        yield from names

    def is_regular_file(self, path: Path) -> bool:
        # lstat: a symlink to a file is still a symlink
        st = os.lstat(path)
        return stat.S_ISREG(st.st_mode)

    def size(self, path: Path) -> int:
        return os.stat(path).st_size

    def open_binary(self, path: Path) -> BinaryIO:
        return open(path, "rb")

    def path_max(self, directory: Path) -> int:
        try:
            return int(os.pathconf(directory, "PC_PATH_MAX"))
        except (OSError, ValueError, AttributeError):
            # Windows has no pathconf
            return DEFAULT_PATH_MAX
