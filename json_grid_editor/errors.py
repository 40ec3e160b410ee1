"""Exceptions raised by the JSON Grid Editor core."""


class JsonGridError(Exception):
    """Base error for the application."""


class ValidationError(JsonGridError):
    """Document or input does not have the expected shape."""


class CapacityError(JsonGridError):
    """Column-count limit would be exceeded."""


class DuplicateKeyError(JsonGridError):
    """Column name already exists."""


class RowIndexError(JsonGridError, IndexError):
    """Row or nested-row index is out of bounds."""


class MissingKeyError(JsonGridError, KeyError):
    """Cell edit targets a key that does not exist in the record."""

    def __str__(self) -> str:
        # KeyError.__str__ would repr() the message.
        return Exception.__str__(self)


class UnsupportedOperationError(JsonGridError):
    """Operation does not apply to the addressed field shape."""


class StorageError(JsonGridError):
    """Storage service failure; message is safe to show to the user."""


class ConfigError(JsonGridError):
    """Configuration related error."""
