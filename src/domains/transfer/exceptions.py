"""Import/export error taxonomy."""


class TransferError(Exception):
    """Base class for import/export failures."""


class ImportFormatError(TransferError):
    """The payload cannot be read as the expected shape at all.

    Raised before any row is processed; the whole import is aborted.
    """

    def __init__(self, message: str, details: str | None = None):
        super().__init__(message)
        self.message = message
        self.details = details


class RowError(TransferError):
    """A single row is malformed or references a parent that did not resolve.

    Never escapes the import orchestrator: it is recorded and the next row runs.
    """
