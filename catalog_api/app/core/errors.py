"""
Exceptions raised by the catalog core.

Only failures that must abort an operation are modelled as exceptions.
A missing item is a normal outcome and is reported through ``None`` or
``False`` return values; a data file that cannot be read is absorbed by
the store and leaves the catalog empty.
"""


class CatalogError(Exception):
    """Base class for catalog errors."""


class PersistenceError(CatalogError):
    """The data file could not be written.

    The mutation that triggered the write has not been applied in memory.
    """

    def __init__(self, path: str, message: str = "Failed to save items") -> None:
        super().__init__(message)
        self.path = path
        self.message = message
