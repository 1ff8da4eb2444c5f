"""Exception hierarchy for the blueprint index."""

from __future__ import annotations


class BlueprintIndexError(RuntimeError):
    """Base class for errors raised by the blueprint index."""


class CorpusReadError(BlueprintIndexError):
    """A single corpus entry could not be read.

    Raised by asset providers while producing one entry. Consumers that scan
    the whole corpus log and skip the entry instead of aborting the scan.
    """

    def __init__(self, source: str, reason: str) -> None:
        super().__init__(f"failed to read '{source}': {reason}")
        self.source = source
        self.reason = reason


__all__ = ["BlueprintIndexError", "CorpusReadError"]
