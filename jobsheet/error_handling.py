"""Error classification and retry logic for sheet feeds."""
import logging
import time
import random
import requests
from typing import Callable, Dict

from .errors import (
    FeedError,
    TransportError,
    UnexpectedError,
    NETWORK_ERROR_MESSAGE,
)

logger = logging.getLogger(__name__)


class ErrorHandler:
    """Converts exceptions into feed errors and decides on retries."""

    def __init__(self, sleep: Callable[[float], None] = time.sleep):
        """Initialize the error handler.

        Args:
            sleep: Function used to wait between retries
        """
        self.error_counts: Dict[str, int] = {}
        self.base_backoff_time = 1  # Base backoff time in seconds
        self.testing_mode = False  # Set to True to disable jitter in tests
        self.sleep = sleep

    def classify(self, error: Exception, feed_name: str) -> FeedError:
        """Map any exception to a FeedError and log it.

        Args:
            error: The exception that occurred
            feed_name: Name of the feed

        Returns:
            The matching TransportError, DataFormatError or UnexpectedError
        """
        self.error_counts[feed_name] = self.error_counts.get(feed_name, 0) + 1

        if isinstance(error, FeedError):
            feed_error = error
        elif isinstance(error, requests.exceptions.HTTPError):
            feed_error = self.from_http_error(error)
        elif isinstance(error, requests.exceptions.RequestException):
            feed_error = TransportError(NETWORK_ERROR_MESSAGE, cause=error)
        else:
            feed_error = UnexpectedError(cause=error)

        if isinstance(feed_error, TransportError):
            logger.warning(f"Transport error for {feed_name}: {feed_error.cause or feed_error}")
        elif isinstance(feed_error, UnexpectedError):
            cause = feed_error.cause
            logger.error(
                f"Unexpected error for {feed_name}: "
                f"{type(cause).__name__ if cause else 'Error'}: {cause}",
                exc_info=cause,
            )
        else:
            logger.error(f"Data format error for {feed_name}: {feed_error}")

        self.check_notification_threshold(feed_name)
        return feed_error

    def from_http_error(self, error: requests.exceptions.HTTPError) -> TransportError:
        """Build a TransportError from a non-2xx response."""
        response = error.response
        status_code = getattr(response, "status_code", None)
        reason = getattr(response, "reason", "") or ""
        return TransportError(
            f"Failed to fetch sheet data. Status: {status_code} {reason}".rstrip()
            + ". Ensure the URL is correct and the sheet is public.",
            cause=error,
            status_code=status_code,
        )

    def should_retry(self, error: FeedError, feed_name: str,
                     retry_count: int = 0, max_retries: int = 0) -> bool:
        """Decide whether a failed fetch should be attempted again.

        Only transient transport failures are retried. Applies backoff before
        returning True.

        Args:
            error: The classified error
            feed_name: Name of the feed
            retry_count: Retries already made
            max_retries: Maximum retry attempts

        Returns:
            True if retry should be attempted, False otherwise
        """
        if retry_count >= max_retries:
            if max_retries:
                logger.error(f"Max retries ({max_retries}) exceeded for {feed_name}")
            return False

        if isinstance(error, TransportError) and self.is_transient(error):
            logger.info(f"Retrying {feed_name} (attempt {retry_count + 1} of {max_retries})")
            self._apply_backoff(retry_count)
            return True
        return False

    def is_transient(self, error: TransportError) -> bool:
        """Timeouts, connection failures, 429 and 5xx responses are transient."""
        if error.status_code is not None:
            return error.status_code == 429 or error.status_code >= 500
        return isinstance(error.cause, (requests.exceptions.Timeout,
                                        requests.exceptions.ConnectionError))

    def _apply_backoff(self, retry_count: int) -> None:
        """Apply exponential backoff with jitter.

        Args:
            retry_count: Current retry count
        """
        backoff_time = self.base_backoff_time * (2 ** retry_count)

        # Skip jitter in testing mode for predictable results
        if self.testing_mode:
            jitter = 0
        else:
            jitter = random.uniform(0, 0.3 * backoff_time)

        total_backoff = backoff_time + jitter
        logger.info(f"Applying backoff: waiting {total_backoff:.2f} seconds before retry")
        self.sleep(total_backoff)

    def check_notification_threshold(self, feed_name: str, threshold: int = 5) -> None:
        """Log a critical message once a feed keeps failing.

        Args:
            feed_name: Name of the feed
            threshold: Error count threshold
        """
        error_count = self.error_counts.get(feed_name, 0)
        if error_count >= threshold:
            logger.critical(f"High error rate detected for {feed_name}: {error_count} errors")

    def reset(self, feed_name: str) -> None:
        """Clear the error count after a successful fetch."""
        self.error_counts.pop(feed_name, None)
