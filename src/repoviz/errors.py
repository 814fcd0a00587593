"""Error taxonomy for repoviz.

Every error carries a ``user_message`` -- the string shown in the UI --
separate from the detailed ``str(exc)`` that goes to the log.
"""

from __future__ import annotations

GENERIC_FETCH_MESSAGE = (
    "Failed to fetch repository data. Please check the URL and try again."
)


class RepoVizError(Exception):
    """Base class for all repoviz errors."""

    user_message: str = "Something went wrong."

    def __init__(self, detail: str = "", *, user_message: str | None = None) -> None:
        super().__init__(detail or self.user_message)
        if user_message is not None:
            self.user_message = user_message


class MalformedUrl(RepoVizError):
    """The repository URL does not contain an owner and a repo segment."""

    user_message = (
        "Invalid GitHub repository URL. Expected https://github.com/<owner>/<repo>."
    )


class MalformedEntry(RepoVizError):
    """A repository listing entry has no usable ``path``."""

    user_message = "The repository listing contained a malformed entry."


class DataSourceError(RepoVizError):
    """Anything that went wrong talking to the hosting provider."""

    user_message = GENERIC_FETCH_MESSAGE

    def __init__(
        self,
        detail: str = "",
        *,
        status: int | None = None,
        user_message: str | None = None,
    ) -> None:
        super().__init__(detail, user_message=user_message)
        self.status = status


class NotFound(DataSourceError):
    """Repository or branch does not exist (or is empty)."""


class RateLimited(DataSourceError):
    """The provider refused the request because of rate limiting."""

    def __init__(
        self,
        detail: str = "",
        *,
        status: int | None = None,
        reset_at: int | None = None,
    ) -> None:
        super().__init__(detail, status=status)
        self.reset_at = reset_at


class NetworkError(DataSourceError):
    """Transport failure, unexpected status, or an unreadable response."""
