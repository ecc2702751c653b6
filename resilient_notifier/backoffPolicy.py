from __future__ import annotations

from resilient_notifier.notifierConfig import RetryPolicy


def backoff_delay(attempt: int, policy: RetryPolicy) -> float:
    """
    Seconds to wait after the given (1-indexed) completed attempt.

    Exponential backoff: initial_delay * multiplier^(attempt-1), capped at max_delay.
    """
    if attempt < 1:
        raise ValueError(f"attempt is 1-indexed, got {attempt}")
    try:
        delay = policy.initial_delay * (policy.backoff_multiplier ** (attempt - 1))
    except OverflowError:
        return policy.max_delay
    return min(delay, policy.max_delay)
