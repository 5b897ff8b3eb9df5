"""Traffic shaping: turn the configured base load into the effective load for one tick."""

from __future__ import annotations

import math
import random
from typing import Optional

TRAFFIC_PATTERNS = ("steady", "spike", "sine-wave", "flash-sale")

SPIKE_PROBABILITY = 0.05
SPIKE_MULTIPLIER = 5


def modulate_traffic(
    base_load: float,
    pattern: str,
    t: float,
    rng: Optional[random.Random] = None,
) -> float:
    """Apply *pattern* to *base_load* at simulation time *t* (seconds).

    Only ``steady`` and ``spike`` draw from *rng*; the sine-wave and
    flash-sale shapes are pure functions of *t*. Unknown patterns pass
    the base load through unchanged.
    """
    rng = rng or random.Random()

    if pattern == "steady":
        return base_load * (0.95 + rng.random() * 0.1)
    if pattern == "spike":
        return base_load * SPIKE_MULTIPLIER if rng.random() > 1 - SPIKE_PROBABILITY else base_load
    if pattern == "sine-wave":
        return base_load * (0.5 + 0.5 * math.sin(t * 0.5))
    if pattern == "flash-sale":
        return base_load * (1 + 3 * max(0.0, math.sin(t * 0.2)))
    return base_load
