#Description: Error taxonomy shared by adapters, the store and the order workflow.


class RelayError(Exception):
    """Base class for every error raised by the relay."""


class AuthError(RelayError):
    """Inbound token missing or not matching the configured secret."""


class EncodingError(RelayError):
    """Inbound body is not a JSON object."""


class PersistenceError(RelayError):
    """Any failure reading from or writing to the signal/trade store."""


class TransportError(RelayError):
    """Network failure, timeout or non-2xx status from a remote HTTP service.

    ``outcome_unknown`` is set when the request may have reached the remote
    side before failing (e.g. read timeout), so its effect cannot be ruled out.
    """

    def __init__(self, message: str, status_code: int | None = None, body: bytes | None = None,
                 outcome_unknown: bool = False):
        super().__init__(message)
        self.status_code = status_code
        self.body = body
        self.outcome_unknown = outcome_unknown


class VenueAPIError(RelayError):
    """The venue processed the request and answered with a non-empty error list."""

    def __init__(self, messages: list[str]):
        self.messages = list(messages)
        super().__init__(str(self))

    def __str__(self) -> str:
        if not self.messages:
            return "unknown Kraken API error"
        return "; ".join(self.messages)


class VenueResponseError(RelayError):
    """The venue answered 2xx but the envelope could not be decoded or had no result."""
