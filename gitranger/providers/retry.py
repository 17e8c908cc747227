# GitRanger Provider Retry Policy
# Exponential backoff for rate-limited provider API calls

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class RetryPolicy:
    """
    Configuration for rate-limit retries.

    Attributes:
        max_attempts: Total attempts per request, including the first one.
        base_delay: Delay in seconds before the first retry.
        multiplier: Exponential backoff multiplier.
        max_delay: Upper bound for any single delay.
    """

    max_attempts: int = 4
    base_delay: float = 1.0
    multiplier: float = 2.0
    max_delay: float = 60.0

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.base_delay < 0 or self.max_delay < 0:
            raise ValueError("delays must be non-negative")
        if self.multiplier < 1.0:
            raise ValueError("multiplier must be >= 1.0")

    def delay_for(self, attempt: int, retry_after: Optional[float] = None) -> float:
        """
        Calculate the delay before retrying.

        Uses exponential backoff (base_delay * multiplier ^ attempt), raised to
        the server's Retry-After hint when that is longer, and capped at
        max_delay.

        Args:
            attempt: Zero-based index of the attempt that was rate limited.
            retry_after: Seconds the provider asked us to wait, if known.

        Returns:
            Delay in seconds.
        """
        delay = self.base_delay * (self.multiplier**attempt)
        if retry_after is not None:
            delay = max(delay, retry_after)
        return max(0.0, min(delay, self.max_delay))
