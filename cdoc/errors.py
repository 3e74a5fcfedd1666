"""Exception taxonomy for the documentation pipeline.

ConfigurationError is fatal and aborts a run before anything is
written. The other errors are per-entry: the pipeline reports them and
moves on to the next entry.
"""


class CdocError(Exception):
    """Base class for all cdoc errors."""


class ConfigurationError(CdocError):
    """Raised when the run inputs or the configuration file are invalid."""


class EntryError(CdocError):
    """An error tied to a single source entry or artifact.

    Attributes:
        path: Path of the offending entry, relative where possible.
        reason: Human-readable description of the failure.
    """

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason


class TraversalError(EntryError):
    """Raised for unreadable entries, permission failures and broken links."""


class ExtractionError(EntryError):
    """Raised when a file's comment structure cannot be parsed."""


class WriteError(EntryError):
    """Raised when an artifact cannot be written to its target path."""
