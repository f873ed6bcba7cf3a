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

from pathlib import Path
from typing import Optional
import logging

import typer

from ..config import CompareSettings, validate_concurrency
from ..domain.errors import DirectoryUnreadable, InvalidArgument, LaunchFailure
from ..services import ReportService, ResultSink, compare_directories
from ..services.report_service import FORMATS

from ..logging_config import setup_logging

setup_logging()

app = typer.Typer(help="pairdiff - compare every file of DIR1 with every file of DIR2")

logger = logging.getLogger(__name__)


def _parse_fmt(fmt: str) -> str:
    fmt = (fmt or "json").strip().lower()
    if fmt not in FORMATS:
        raise typer.BadParameter(
            f"Unknown format: {fmt}. Valid options: {', '.join(FORMATS)}"
        )
    return fmt


def _resolve_out(out: Path, fmt: str) -> Path:
    # --out DIR -> DIR/pairs.<fmt>; anything else is taken as a file path
    out = Path(out)
    if out.exists() and out.is_dir():
        return out / f"pairs.{fmt}"
    return out


@app.command()
def compare(
    dir1: Path = typer.Argument(..., help="First directory"),
    dir2: Path = typer.Argument(..., help="Second directory"),
    n: int = typer.Argument(..., metavar="N", help="Maximum number of concurrent comparisons"),
    size_check: bool = typer.Option(
        True,
        "--size-check/--no-size-check",
        help="Report files of different size as DIFFER without reading them.",
    ),
    mode: Optional[str] = typer.Option(
        None, "--mode", help="Worker model: thread (default) or process."
    ),
    chunk_size: Optional[int] = typer.Option(
        None, "--chunk-size", help="Bytes read per side per step (default 65536)."
    ),
    max_workers: Optional[int] = typer.Option(
        None, "--max-workers", help="Upper bound on pool width (default 32)."
    ),
    header: bool = typer.Option(
        False, "--header", help="Print file counts and N before the pair lines."
    ),
    summary: bool = typer.Option(
        False, "--summary", help="Print equal/differ/error totals at the end."
    ),
    out: Optional[Path] = typer.Option(
        None,
        "--out",
        "--output",
        help="Also write every pair result to this path. If a directory is provided, "
        "the file will be named 'pairs.<fmt>' inside it.",
        resolve_path=True,
    ),
    fmt: str = typer.Option("json", "--fmt", help="Format for --out: json, ndjson or csv."),
    verbose: bool = typer.Option(False, "--verbose", help="Enable verbose logging"),
):
    """
    Compare every regular file in DIR1 against every regular file in DIR2,
    running at most N comparisons at once.
    """
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)
        logger.debug("Verbose logging enabled")

    # N and settings are checked before either directory is touched
    try:
        n = validate_concurrency(n)
        settings = CompareSettings.from_env(
            concurrency=n,
            chunk_size=chunk_size,
            size_check=size_check,
            mode=mode.strip().lower() if mode else None,
            max_workers=max_workers,
        )
    except InvalidArgument as e:
        raise typer.BadParameter(str(e))
    fmt = _parse_fmt(fmt)

    sink = ResultSink(_resolve_out(out, fmt), fmt=fmt) if out is not None else None
    report = ReportService(sink=sink)
    try:
        result = compare_directories(
            dir1, dir2, n, settings=settings, report=report, header=header
        )
    except DirectoryUnreadable as e:
        typer.echo(f"opendir({e.directory}) failed: {e.reason}", err=True)
        raise typer.Exit(code=1)
    except LaunchFailure as e:
        typer.echo(f"launch failed: {e}", err=True)
        raise typer.Exit(code=1)

    if summary:
        typer.echo(result.line())
    if sink is not None:
        # fatal runs never reach here, so an existing --out file is left alone
        sink.close()
        logger.info("Wrote %s results to %s", fmt, sink.path)


def main() -> None:
    app()
