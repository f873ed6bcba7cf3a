from .errors import (
    ComparisonError,
    DirectoryUnreadable,
    InvalidArgument,
    LaunchFailure,
    OpenFailure,
    PairdiffError,
    ReadFailure,
)
from .models import EXIT_CODES, FileSet, Outcome, Pair, PairResult, RunSummary, Verdict

__all__ = [
    "ComparisonError",
    "DirectoryUnreadable",
    "EXIT_CODES",
    "FileSet",
    "InvalidArgument",
    "LaunchFailure",
    "OpenFailure",
    "Outcome",
    "Pair",
    "PairResult",
    "PairdiffError",
    "ReadFailure",
    "RunSummary",
    "Verdict",
]
