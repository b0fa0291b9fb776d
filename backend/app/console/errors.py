"""CSV import abort errors.

Each error carries a ``kind`` naming its place in the import failure
taxonomy; the router echoes it back to the client.
"""


class CsvImportError(Exception):
    """Base class for errors that abort a CSV import before any update."""

    kind = "ImportError"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidFormatError(CsvImportError):
    """The header row is not ``File Name, Attributes``."""

    kind = "InvalidFormat"


class InvalidJSONError(CsvImportError):
    """An attributes cell could not be parsed as JSON."""

    kind = "InvalidJSON"


class SchemaViolationError(CsvImportError):
    """A row's attributes miss a required field or carry an invalid value."""

    kind = "SchemaViolation"


class NoValidRowsError(CsvImportError):
    """The CSV held no data rows."""

    kind = "NoValidRows"


class ConsoleStateError(Exception):
    """The console is not in a state that allows the requested operation."""
