class PairdiffError(Exception):
    """Base exception for domain-specific errors."""


class DirectoryUnreadable(PairdiffError):
    """A directory argument could not be listed (missing, not a directory, no permission)."""

    def __init__(self, directory, reason: str) -> None:
        self.directory = str(directory)
        self.reason = reason
        super().__init__(f"cannot open directory {self.directory}: {reason}")


class LaunchFailure(PairdiffError):
    """A task unit could not be handed to the executor."""


class ComparisonError(PairdiffError):
    """Problems while comparing the content of one pair of files."""


class OpenFailure(ComparisonError):
    """One side of a pair could not be opened."""


class ReadFailure(ComparisonError):
    """A read on one side of a pair failed mid-comparison."""

    def __init__(self, reason: str, compared: int = 0) -> None:
        self.compared = compared
        super().__init__(reason)


class InvalidArgument(PairdiffError, ValueError):
    """Bad CLI args or unusable settings (e.g., N <= 0)."""
