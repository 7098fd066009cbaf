"""Cache-Control policy: long freshness for successes, short for everything else."""

from typing import Optional

SUCCESS_MAX_AGE_SECONDS = 3600
FAILURE_MAX_AGE_SECONDS = 300


def max_age_for(
    status_code: int,
    success_max_age: int = SUCCESS_MAX_AGE_SECONDS,
    failure_max_age: int = FAILURE_MAX_AGE_SECONDS,
) -> int:
    return success_max_age if status_code == 200 else failure_max_age


def cache_control_for(
    status_code: int,
    success_max_age: int = SUCCESS_MAX_AGE_SECONDS,
    failure_max_age: int = FAILURE_MAX_AGE_SECONDS,
    remaining: Optional[float] = None,
) -> str:
    """
    Build the Cache-Control value for a response status.

    When `remaining` is given (seconds of cache life left), max-age is capped to it.
    """
    seconds = max_age_for(status_code, success_max_age, failure_max_age)
    if remaining is not None:
        seconds = min(seconds, int(remaining))
    return f"public, max-age={seconds}"
