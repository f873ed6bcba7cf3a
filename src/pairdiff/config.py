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

"""Run settings: environment defaults, explicit overrides on top."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from .domain.errors import InvalidArgument

logger = logging.getLogger(__name__)

MAX_CONCURRENCY = 1_000_000
DEFAULT_CHUNK_SIZE = 64 * 1024
DEFAULT_MAX_WORKERS = 32
MODES = ("thread", "process")

def validate_concurrency(n: Any) -> int:
    """
    Return N as a usable concurrency ceiling.
    Raises InvalidArgument for non-integers and values <= 0; caps huge values.
    """
    if isinstance(n, bool):
        raise InvalidArgument(f"N must be a positive integer, got {n!r}")
    try:
        value = int(n)
    except (TypeError, ValueError) as e:
        raise InvalidArgument(f"N must be a positive integer, got {n!r}") from e
    if isinstance(n, float) and value != n:
        raise InvalidArgument(f"N must be a positive integer, got {n!r}")
    if value <= 0:
        raise InvalidArgument(f"N must be > 0, got {value}")
    if value > MAX_CONCURRENCY:
        logger.warning("N=%d capped to %d", value, MAX_CONCURRENCY)
        value = MAX_CONCURRENCY
    return value

@dataclass(frozen=True)
class CompareSettings:
    concurrency: int = 1
    chunk_size: int = DEFAULT_CHUNK_SIZE
    size_check: bool = True
    mode: str = "thread"
    max_workers: int = DEFAULT_MAX_WORKERS

    def __post_init__(self) -> None:
        object.__setattr__(self, "concurrency", validate_concurrency(self.concurrency))
        if int(self.chunk_size) <= 0:
            raise InvalidArgument(f"chunk size must be > 0, got {self.chunk_size}")
        if self.mode not in MODES:
            raise InvalidArgument(
                f"Unknown mode: {self.mode}. Valid options: {', '.join(MODES)}"
            )
        if int(self.max_workers) <= 0:
            raise InvalidArgument(f"max workers must be > 0, got {self.max_workers}")

    @property
    def pool_size(self) -> int:
        return min(self.concurrency, self.max_workers)

    @classmethod
    def from_env(
        cls, env: Optional[Mapping[str, str]] = None, **overrides: Any
    ) -> CompareSettings:
        """
        Build settings from PAIRDIFF_* environment variables, then apply
        `overrides` (None values are ignored so CLI defaults don't mask env).
        """
        env = os.environ if env is None else env
        base: dict[str, Any] = {}
        if env.get("PAIRDIFF_CHUNK_SIZE"):
            base["chunk_size"] = _env_int(env, "PAIRDIFF_CHUNK_SIZE")
        if env.get("PAIRDIFF_MAX_WORKERS"):
            base["max_workers"] = _env_int(env, "PAIRDIFF_MAX_WORKERS")
        if env.get("PAIRDIFF_MODE"):
            base["mode"] = env["PAIRDIFF_MODE"].strip().lower()
        base.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**base)


def _env_int(env: Mapping[str, str], key: str) -> int:
    try:
        return int(env[key])
    except ValueError as e:
        raise InvalidArgument(f"{key} must be an integer, got {env[key]!r}") from e
