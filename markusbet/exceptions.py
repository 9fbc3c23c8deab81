"""
Exceptions raised by the prediction client layer.

Views catch these and turn them into transient notifications, none of them
is fatal to the process.
"""


class MarkusBetError(Exception):
    """Base exception for all MarkusBet errors."""
    pass


class ActorUnavailableError(MarkusBetError):
    """No backend actor is configured or it could not be built."""

    def __init__(self, message: str = "No actor"):
        super().__init__(message)


class UpstreamAPIError(MarkusBetError):
    """
    Error from the football-data API.

    Raised when the proxied response is an error payload (a ``message`` with
    no ``matches``) or is not JSON at all.
    """

    def __init__(self, message: str, status_code: int = None):
        self.status_code = status_code
        super().__init__(message)
