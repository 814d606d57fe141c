class FarmError(Exception):
    """Base class for errors surfaced to the API caller."""


class InvalidItem(FarmError):
    """Requested or stored item is not part of the Item enumeration."""

    def __init__(self, value):
        self.value = value
        super().__init__(f"Invalid item: {value!r}")


class NotFound(FarmError):
    """Referenced player or plot does not exist."""


class PlayerExists(FarmError):
    """A player with the same name is already registered."""


class StorageFailure(FarmError):
    """The database rejected or failed an operation."""
