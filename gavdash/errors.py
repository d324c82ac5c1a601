"""
Error types shared by the webhook, the upstream client and the event store.
"""


class AuthError(Exception):
    """Shared secret missing or wrong. Always answered with 401."""

    def __init__(self, message: str = "unauthorized"):
        super().__init__(message)
        self.message = message


class UpstreamFetchError(Exception):
    """Network failure, timeout or non-2xx status from the Adversus API."""

    def __init__(
        self,
        message: str,
        status: int | None = None,
        url: str | None = None,
        body: str | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.status = status
        self.url = url
        self.body = body

    def to_dict(self) -> dict:
        return {
            "error": self.message,
            "status": self.status,
            "url": self.url,
            "body": self.body,
        }


class PersistenceError(Exception):
    """The event store could not be read or written."""
