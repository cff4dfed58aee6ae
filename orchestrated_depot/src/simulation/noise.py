# src/simulation/noise.py
"""
Telemetry jitter sources for charger metrics.
Jitter is cosmetic: nothing in the orchestration engine reads it, so tests
swap in ConstantNoise to get exact charger readings.
"""

from typing import Optional, Protocol

import numpy as np


class NoiseSource(Protocol):
    def uniform(self) -> float:
        """Return a sample in [0, 1)."""
        ...


class RandomNoise:
    def __init__(self, seed: Optional[int] = None):
        self._rng = np.random.default_rng(seed)

    def uniform(self) -> float:
        return float(self._rng.random())


class ConstantNoise:
    def __init__(self, value: float = 0.5):
        if not 0.0 <= value < 1.0:
            raise ValueError("ConstantNoise value must be in [0, 1)")
        self.value = value

    def uniform(self) -> float:
        return self.value
