"""
AniList API exceptions.
"""


class AniListError(Exception):
    """Base exception for AniList API errors."""

    def __init__(self, message: str, status_code: int | None = None, body: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.body = body

    def __str__(self) -> str:
        return self.message


class AniListConnectionError(AniListError):
    """Network failure that persisted through the retry."""

    pass


class AniListRateLimitError(AniListError):
    """Rate limit still exceeded after the retry."""

    pass


class AniListAuthError(AniListError):
    """Authentication error."""

    pass


class AniListGraphQLError(AniListError):
    """The response carried GraphQL errors and no data."""

    pass
