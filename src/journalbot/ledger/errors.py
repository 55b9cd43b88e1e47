from __future__ import annotations


class LedgerError(Exception):
    """Base class for ledger failures surfaced to callers."""
    pass


class RecordNotFound(LedgerError, KeyError):
    """Raised when an id is not present in any partition. No state is changed."""

    def __init__(self, record_id: str, journal: str = ""):
        self.record_id = record_id
        self.journal = journal
        super().__init__(record_id)

    def __str__(self) -> str:
        where = f" in {self.journal}" if self.journal else ""
        return f"record {self.record_id!r} not found{where}"


class StorageFailure(LedgerError):
    """Raised when the backing document cannot be read, parsed or written."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"{path}: {reason}")
