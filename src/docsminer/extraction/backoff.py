"""Exponential backoff schedule for render retries."""

import random
from typing import Optional


def backoff_delay(
    retry: int,
    base: float = 1.0,
    cap: float = 10.0,
    jitter: float = 1.0,
    rng: Optional[random.Random] = None,
) -> float:
    """Compute the pause before a retry.

    Args:
        retry: Retry number (1 for the first retry). 0 means no delay.
        base: Base delay in seconds.
        cap: Upper bound of the exponential part in seconds.
        jitter: Upper bound of the random extra delay in seconds.
        rng: Random source, for deterministic tests.

    Returns:
        ``min(2**retry * base, cap)`` plus a uniform jitter.
    """
    if retry <= 0:
        return 0.0
    rng = rng or random.Random()
    extra = rng.uniform(0, jitter) if jitter > 0 else 0.0
    return min((2**retry) * base, cap) + extra
