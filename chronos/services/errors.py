from __future__ import annotations


class ChronosError(Exception):
    pass


class NotFoundError(ChronosError, LookupError):
    def __init__(self, kind: str, item_id: str) -> None:
        super().__init__(f"{kind} {item_id!r} not found")
        self.kind = kind
        self.item_id = item_id


class StateDecodeError(ChronosError, ValueError):
    """Persisted state blob could not be turned back into an AppState."""


class ReportError(ChronosError):
    """Report or export generation failed; state is untouched."""
