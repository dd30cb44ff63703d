"""Errors raised by the Bitbucket Server client and tool handlers."""


class BitbucketError(Exception):
    """Base class for errors surfaced to the tool caller."""

    pass


class InvalidInputError(BitbucketError):
    """A tool parameter failed validation; no request was sent."""

    pass


class BitbucketApiError(BitbucketError):
    """Non-2xx response or transport failure.

    status is None when no response was received.
    """

    def __init__(self, status: int | None, message: str) -> None:
        self.status = status
        self.message = message
        if status is None:
            super().__init__(f"Bitbucket Server request failed: {message}")
        else:
            super().__init__(f"Bitbucket Server API error ({status}): {message}")


class MissingIdentityError(BitbucketError):
    """The authenticated username could not be determined."""

    pass
