class LineByLineError(Exception):
    """Base class for errors raised by the review core."""


class ValidationError(LineByLineError):
    """Input rejected before anything was written."""


class StorageError(LineByLineError):
    """The record store failed; grouped writes were rolled back."""


class NotFoundError(LineByLineError):
    """An operation needed a record that does not exist."""

    def __init__(self, kind: str, record_id: int):
        super().__init__(f"{kind} {record_id} not found")
        self.kind = kind
        self.record_id = record_id
