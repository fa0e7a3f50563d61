"""Store error taxonomy. None of these cross the repository boundary."""


class StoreError(Exception):
    """Base class for record pipeline failures."""


class DecodeError(StoreError):
    """A line could not be split into usable fields."""


class MalformedUuidError(DecodeError):
    def __init__(self, value: str):
        super().__init__(f"Malformed UUID in data entry: {value!r}")
        self.value = value


class SchemaTooOldError(StoreError):
    """Record predates versioning and cannot be migrated."""

    def __init__(self, length: int, minimum: int):
        super().__init__(
            f"Record has {length} fields; at least {minimum} are required."
        )
        self.length = length
        self.minimum = minimum


class RecordBuildError(StoreError):
    """A migrated and repaired field list still could not be typed."""
