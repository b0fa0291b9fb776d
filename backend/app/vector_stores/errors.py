"""Exceptions raised by the vector store layer."""


class RemoteFailure(Exception):
    """The vector store service rejected or failed a call."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class AttributeConstraintError(ValueError):
    """An attribute map breaks the 16-key / 256-character limits."""


class MissingVectorStoreError(ValueError):
    """An operation was attempted without a vector store id."""

    def __init__(self, message: str = "Vector store ID is required") -> None:
        super().__init__(message)
