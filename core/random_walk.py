"""
Bounded random walk used to drift every simulated metric.

Each step adds a uniform perturbation in [-magnitude, magnitude] and clamps the
result to the given bounds, so outputs always stay in range no matter how large
the step is.
"""

import math
import random
from typing import Optional


def _clamp(value: float, lower: float, upper: float) -> float:
    return max(lower, min(upper, value))


def round_half_up(value: float, digits: int = 0) -> float:
    """Round .5 away from zero for positives (the dashboard's rounding rule)."""
    scale = 10 ** digits
    return math.floor(value * scale + 0.5) / scale


def fluctuate(
    value: float,
    magnitude: float,
    lower: float = 0,
    upper: float = 100,
    rng: Optional[random.Random] = None,
) -> float:
    """
    Perturb a scalar and clamp it to [lower, upper].

    Args:
        value: Previous value
        magnitude: Maximum absolute step
        lower: Inclusive lower bound
        upper: Inclusive upper bound
        rng: Random source; module-level random when None

    Returns:
        New value within [lower, upper]
    """
    rng = rng or random
    delta = rng.uniform(-magnitude, magnitude)
    return _clamp(value + delta, lower, upper)


def fluctuate_float(
    value: float,
    magnitude: float,
    lower: float = 0,
    upper: float = 1,
    rng: Optional[random.Random] = None,
) -> float:
    """Fractional variant: rounds to two decimals, then clamps."""
    rng = rng or random
    delta = rng.uniform(-magnitude, magnitude)
    return _clamp(round_half_up(value + delta, 2), lower, upper)
