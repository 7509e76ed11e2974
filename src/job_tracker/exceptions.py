class TrackerError(Exception):
    pass


class DataAccessError(TrackerError):
    """The backing store failed to answer a query. Carries the store's message."""


class ValidationError(TrackerError):
    """A record failed a business rule before it was persisted."""


class UnsupportedFormatError(TrackerError, ValueError):
    def __init__(self, format: str) -> None:
        super().__init__(f"Unsupported export format: {format}")
        self.format = format


class JobNotFound(TrackerError):
    pass


class TaskNotFound(TrackerError):
    pass


class ScheduledExportNotFound(TrackerError):
    pass
