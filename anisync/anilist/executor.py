"""
Rate-limited request execution.

Every outbound AniList call goes through :class:`RateLimitedExecutor`, which
allows at most two attempts and one fixed sleep between them. A rate-limit
response (HTTP 429) or a network failure on the first attempt triggers the
sleep and the second attempt; anything else is surfaced immediately.
"""

import logging
import time
from collections.abc import Callable

import httpx

from .errors import AniListAuthError, AniListConnectionError, AniListError, AniListRateLimitError

logger = logging.getLogger(__name__)

RATE_LIMIT_STATUS = 429
DEFAULT_BACKOFF_SECONDS = 10.0


def _status_error(response: httpx.Response, description: str) -> AniListError:
    """Build the exception for a non-2xx response."""
    body = response.text
    if response.status_code in (401, 403):
        return AniListAuthError(
            f"{description}: authentication failed ({response.status_code}). Check the AniList token.",
            status_code=response.status_code,
            body=body,
        )
    if response.status_code == RATE_LIMIT_STATUS:
        return AniListRateLimitError(
            f"{description}: still rate limited after retry",
            status_code=response.status_code,
            body=body,
        )
    return AniListError(
        f"{description}: API error {response.status_code}",
        status_code=response.status_code,
        body=body,
    )


class RateLimitedExecutor:
    """Run one HTTP call, retrying exactly once after a fixed backoff."""

    def __init__(
        self,
        backoff_seconds: float = DEFAULT_BACKOFF_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Args:
            backoff_seconds: Wait before the single retry
            sleep: Sleep function (tests pass a recorder)
        """
        self.backoff_seconds = backoff_seconds
        self._sleep = sleep

    def execute(self, send: Callable[[], httpx.Response], description: str = "AniList request") -> httpx.Response:
        """
        Execute ``send`` with the retry-once policy.

        Args:
            send: Zero-argument callable issuing one HTTP request
            description: Short label used in log lines and error messages

        Returns:
            The successful (2xx) response

        Raises:
            AniListAuthError: On 401/403
            AniListRateLimitError: When the retry is also rate limited
            AniListConnectionError: When the retry also fails at the network level
            AniListError: On any other non-2xx response
        """
        for attempt in (1, 2):
            try:
                response = send()
            except httpx.TransportError as e:
                if attempt == 2:
                    raise AniListConnectionError(f"{description}: request failed after retry: {e}") from e
                logger.warning(
                    "%s failed (%s), retrying in %.0fs", description, type(e).__name__, self.backoff_seconds
                )
                self._sleep(self.backoff_seconds)
                continue

            if response.is_success:
                return response

            if response.status_code == RATE_LIMIT_STATUS and attempt == 1:
                logger.warning("%s rate limited (429), waiting %.0fs before retry", description, self.backoff_seconds)
                self._sleep(self.backoff_seconds)
                continue

            logger.debug("%s failed with %d: %s", description, response.status_code, response.text[:500])
            raise _status_error(response, description)

        # Both attempts consumed without returning or raising
        raise AniListError(f"{description}: no response")
