import math


def curiosity_seed(timestamp: float, index: int) -> float:
    """
    Deterministic pseudo-random value in [0, 1) for curiosity sampling.

    Derived from sin(timestamp + index), so the same pool always samples the
    same items without any RNG state.
    """
    x = math.sin(timestamp + index) * 10000
    seed = x - math.floor(x)
    return seed if seed < 1.0 else 0.0
