from __future__ import annotations

"""Seedable random source for dungeon generation.

Every stochastic decision in the pipeline goes through a :class:`DungeonRNG`
instance that is created per generation run and passed explicitly to each
stage. Nothing here touches module-level random state, so independent runs
(even concurrent ones) never interfere with each other.

The API mirrors the small subset of helpers the generator needs:

* ``get_int`` / ``get_float`` for inclusive integer and half-open float draws
* ``coin_flip`` for tie breaking between split axes
* ``weighted_choice`` for cumulative-weight selection of room types
* ``get_state`` / ``set_state`` so a run can be paused and replayed
"""

import json
import secrets
from typing import Any, Dict, List, Optional, Sequence, Union

import numpy as np

SEED_BITS = 32


def random_seed() -> int:
    """Return a fresh seed drawn from the operating system entropy pool."""
    return secrets.randbits(SEED_BITS - 1)


class DungeonRNG:
    def __init__(self, seed: Optional[int] = None) -> None:
        self.initial_seed = seed if seed is not None else random_seed()
        self.rng = np.random.default_rng(self.initial_seed)

    # ------------------------------------------------------------------
    # basic random helpers
    # ------------------------------------------------------------------
    def get_int(self, a: int, b: int) -> int:
        """Uniform integer in ``[a, b]`` (both ends inclusive)."""
        if a > b:
            raise ValueError("a <= b")
        return int(self.rng.integers(a, b + 1))

    def get_float(self, a: float = 0.0, b: float = 1.0) -> float:
        """Uniform float in ``[a, b)``."""
        if a > b:
            raise ValueError("a <= b")
        val = float(self.rng.random())
        return a + (b - a) * val

    def coin_flip(
        self, num_flips: int = 1, heads_probability: float = 0.5
    ) -> Union[str, List[str]]:
        if not 0.0 <= heads_probability <= 1.0:
            raise ValueError("probability out of range")
        results = [
            "heads" if self.get_float() < heads_probability else "tails"
            for _ in range(num_flips)
        ]
        return results[0] if num_flips == 1 else results

    # ------------------------------------------------------------------
    # weighted helpers
    # ------------------------------------------------------------------
    def weighted_index(self, weights: Sequence[float]) -> int:
        """Cumulative-weight scan over *weights*.

        Draws ``r`` uniformly in ``[0, total)`` and returns the first index
        whose running total meets or exceeds ``r``.
        """
        if not weights:
            raise ValueError("weights empty")
        total = float(sum(weights))
        if total <= 0:
            raise ValueError("weight sum must be positive")
        cdf = np.cumsum(np.asarray(weights, dtype=float))
        cdf[-1] = total
        r = self.get_float(0.0, total)
        idx = int(np.searchsorted(cdf, r, side="left"))
        return min(idx, len(weights) - 1)

    def weighted_choice(self, items: Sequence[Any], weights: Sequence[float]) -> Any:
        if len(items) != len(weights):
            raise ValueError("items/weights length mismatch")
        if not items:
            raise ValueError("items empty")
        return items[self.weighted_index(weights)]

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

    def save_state_to_file(self, filename: str) -> None:
        with open(filename, "w", encoding="utf-8") as f:
            json.dump(self.get_state(), f, indent=2)

    def load_state_from_file(self, filename: str) -> None:
        with open(filename, "r", encoding="utf-8") as f:
            state = json.load(f)
        self.set_state(state)


__all__ = ["DungeonRNG", "random_seed"]
