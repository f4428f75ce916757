from __future__ import annotations

"""Integrated GameRNG module.

This module provides the deterministic random number generator used across the
project.  Every generator and sampler receives a :class:`GameRNG` handle
explicitly; there is no module level instance.  Two handles built from the same
seed produce identical streams as long as the same calls are made in the same
order, which is what makes map generation reproducible.
"""

import random
from typing import Any, Dict, Optional, Sequence

import numpy as np


class GameRNG:
    def __init__(self, seed: Optional[int] = None) -> None:
        self.initial_seed = seed if seed is not None else random.randint(0, 2**32 - 1)
        self.rng = np.random.default_rng(self.initial_seed)

    # ------------------------------------------------------------------
    # basic random helpers
    # ------------------------------------------------------------------
    def get_int(self, a: int, b: int) -> int:
        """Return an integer in the inclusive range ``[a, b]``."""
        if a > b:
            raise ValueError("a <= b")
        return int(self.rng.integers(a, b + 1))

    def get_float(self, a: float = 0.0, b: float = 1.0) -> float:
        if a > b:
            raise ValueError("a <= b")
        val = float(self.rng.random())
        return a + (b - a) * val

    # ------------------------------------------------------------------
    # sequence utilities
    # ------------------------------------------------------------------
    def choice(self, seq: Sequence[Any]) -> Any:
        """Return a random element from *seq*."""
        if not seq:
            raise ValueError("cannot choose from an empty sequence")
        return seq[self.get_int(0, len(seq) - 1)]

    # ------------------------------------------------------------------
    # state management
    # ------------------------------------------------------------------
    def get_state(self) -> Dict[str, Any]:
        return {
            "random_state": self.rng.bit_generator.state,
            "initial_seed": self.initial_seed,
        }

    def set_state(self, state: Dict[str, Any]) -> None:
        if "random_state" in state:
            self.rng.bit_generator.state = state["random_state"]
        if "initial_seed" in state:
            self.initial_seed = state["initial_seed"]


def resolve_rng(seed: Optional[int] = None, rng: Optional[GameRNG] = None) -> GameRNG:
    """Return ``rng`` when given, otherwise a fresh :class:`GameRNG` for ``seed``."""
    if rng is not None:
        return rng
    return GameRNG(seed=seed)


__all__ = ["GameRNG", "resolve_rng"]
