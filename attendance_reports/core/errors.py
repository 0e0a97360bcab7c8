"""Domain errors raised by the report core."""


class ReportError(Exception):
    """Base class for report generation failures."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class UnresolvableScopeError(ReportError):
    """A required organizational ID could not be determined."""


class InsufficientDataError(ReportError):
    """The scope resolved but the level refuses to emit an empty sheet."""


class UpstreamFetchError(ReportError):
    """The data-access layer failed to deliver a list."""


class UnauthorizedScopeError(ReportError):
    """The caller asked for a scope value outside their own assignment."""


class ScopeFilterInputError(ReportError, TypeError):
    """A scope filter function received input of the wrong shape."""
