"""Exceptions raised by the planner core."""


class PlannerError(Exception):
    """Base exception for planner errors."""

    pass


class ValidationError(PlannerError):
    """A manually added or edited item is missing required data.

    Reported to the user; the change is not applied.
    """

    pass


class SourceUnavailable(PlannerError):
    """The spreadsheet could not be fetched or its locator is unusable.

    The caller should ask for a corrected locator and retry the sync.
    """

    def __init__(self, message: str, source_url: str | None = None):
        super().__init__(message)
        self.source_url = source_url


class NotFound(PlannerError):
    """An id or event is no longer present.

    Mutations treat this as a silent no-op, since stale ids routinely arrive
    from UI actions that complete out of order.
    """

    pass
