"""Exceptions raised by the risk engine."""


class InvalidInputError(ValueError):
    """Input values that would produce a misleading score (negative counts, bad ratios, bad history)."""


class SnapshotFetchError(LookupError):
    """A provider could not produce a snapshot for a client."""

    def __init__(self, client_id: str, reason: str):
        self.client_id = client_id
        self.reason = reason
        super().__init__(f"Snapshot unavailable for {client_id}: {reason}")
