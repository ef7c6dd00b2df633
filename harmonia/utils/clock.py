import time


def now_ms() -> float:
    """Current wall-clock time as epoch milliseconds."""
    return time.time() * 1000.0


def half_life_factor(elapsed: float, half_life: float) -> float:
    """
    Multiplier for exponential decay with the given half-life.

    elapsed and half_life share a unit. Non-positive elapsed time means no decay.
    """
    if elapsed <= 0 or half_life <= 0:
        return 1.0
    return 0.5 ** (elapsed / half_life)
