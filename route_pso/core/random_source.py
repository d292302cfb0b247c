# core/random_source.py
# -*- coding: utf-8 -*-
"""
Random number sources for the PSO engine.

The engine draws every random number through a single zero-argument
callable returning floats in [0, 1). With a seed it is a small linear
congruential generator, so runs are reproducible bit for bit; without
one it is Python's ``random.random``.
"""

import random
from typing import Callable, Optional

LCG_MULTIPLIER = 9301
LCG_INCREMENT = 49297
LCG_MODULUS = 233280


class LCGRandom:
    """Seeded linear congruential generator producing floats in [0, 1)."""

    def __init__(self, seed: int):
        self.state = int(seed)

    def __call__(self) -> float:
        self.state = (self.state * LCG_MULTIPLIER + LCG_INCREMENT) % LCG_MODULUS
        return self.state / LCG_MODULUS

    def __repr__(self):
        return f"LCGRandom(state={self.state})"


def make_random_source(seed: Optional[int] = None) -> Callable[[], float]:
    """Selects the deterministic LCG when a seed is given, else ``random.random``."""
    if seed is None:
        return random.random
    return LCGRandom(seed)
