"""Exceptions raised by the price sources.

Every failure of a fetch-and-parse cycle is one of these, so that the dashboard
can catch ``PriceSourceError`` per panel and let the other panels render.
"""


class PriceSourceError(Exception):
    """Base class for failures of a single price source."""

    def __init__(self, message: str, source: str | None = None):
        super().__init__(message)
        self.source = source


class TransportError(PriceSourceError):
    """Raised on network-level failures (DNS, refused connection, timeout)."""

    pass


class SourceUnavailable(PriceSourceError):
    """Raised when the API answers with a non-2xx status or reports no data.

    Attributes:
        status_code: HTTP status of the response.
        hint: Optional explanation for the user, e.g. that the auction result
            is not published yet.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        hint: str | None = None,
        source: str | None = None,
    ):
        super().__init__(message, source=source)
        self.status_code = status_code
        self.hint = hint

    def __str__(self):
        message = super().__str__()
        if self.hint:
            return f"{message} - {self.hint}"
        return message


class MalformedPayload(PriceSourceError):
    """Raised when a response body cannot be parsed into a price series."""

    pass


class ConfigurationError(PriceSourceError):
    """Raised when a source cannot be queried because configuration is missing."""

    pass
