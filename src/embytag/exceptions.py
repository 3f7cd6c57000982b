"""Exception hierarchy for embytag.

Everything raised on purpose by the services derives from :class:`EmbyTagError`
so the API layer can translate failures without catching unrelated bugs.
"""


class EmbyTagError(Exception):
    """Base exception for all embytag errors."""


class EmbyConnectionError(EmbyTagError):
    """Raised when an Emby server cannot be reached or rejects a request.

    Covers timeouts, exhausted transport retries, HTTP error statuses (including
    an invalid API key) and payloads that cannot be parsed.
    """


class MappingError(EmbyTagError):
    """Raised when a single mapping operation refers to inconsistent data."""


class ServerNotFoundError(EmbyTagError):
    """Raised when a server id does not exist."""

    def __init__(self, server_id: int) -> None:
        self.server_id = server_id
        super().__init__(f"Server {server_id} does not exist")
