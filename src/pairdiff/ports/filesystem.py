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

from abc import ABC, abstractmethod
from pathlib import Path
from typing import BinaryIO, Iterator


class FilesystemPort(ABC):
    """Abstract interface for filesystem access."""

    @abstractmethod
    def list_dir(self, directory: Path) -> Iterator[str]:
        """Yield the entry names of `directory` (non-recursive). Raises OSError if it cannot be opened."""
        raise NotImplementedError

    @abstractmethod
    def is_regular_file(self, path: Path) -> bool:
        """True for ordinary files only; symlinks, directories and devices are not. Raises OSError on lookup failure."""
        raise NotImplementedError

    @abstractmethod
    def size(self, path: Path) -> int:
        """Return the size of `path` in bytes."""
        raise NotImplementedError

    @abstractmethod
    def open_binary(self, path: Path) -> BinaryIO:
        """Open `path` for unbuffered binary reading."""
        raise NotImplementedError

    def path_max(self, directory: Path) -> int:
        """Longest path the platform accepts under `directory`."""
        return 4096
