"""Error taxonomy surfaced by the analysis API."""

from __future__ import annotations

from pathlib import Path


class AnalysisError(Exception):
    """Base class for failures reported by the analyser."""

    def __init__(self, path: Path | str, message: str) -> None:
        super().__init__(message)
        self.path = Path(path)


class InvalidPath(AnalysisError):
    """Path is missing, or is not the kind of entry the operation needs."""

    def __init__(self, path: Path | str, expected: str = "path") -> None:
        super().__init__(path, f"Invalid {expected}: {path}")
        self.expected = expected


class IOFailure(AnalysisError):
    """A source file could not be read."""

    def __init__(self, path: Path | str, reason: str) -> None:
        super().__init__(path, f"Error reading file {Path(path).name}: {reason}")
        self.reason = reason


class ParseFailure(AnalysisError):
    """Source text is not a parseable compilation unit."""

    def __init__(self, path: Path | str, detail: str | None = None) -> None:
        message = f"Failed to parse {Path(path).name}"
        if detail:
            message += f": {detail}"
        super().__init__(path, message)
        self.detail = detail


class NoSources(AnalysisError):
    """A recursive walk found no compilation units."""

    def __init__(self, path: Path | str) -> None:
        super().__init__(path, f"No Java files found in the directory: {path}")
