import random
import threading
from typing import Optional


class RandomSource:
    """Pseudo-random numbers shared by all jobs of a run.

    Draws are serialized with a lock so the same source can be handed to
    every concurrent job. Pass a seed (or your own random.Random) for
    repeatable runs.
    """

    def __init__(self, seed: Optional[int] = None, rng: Optional[random.Random] = None):
        self._rng = rng if rng is not None else random.Random(seed)
        self._lock = threading.Lock()

    def random_int(self, min_value: int, max_value: int) -> int:
        # inclusive on both ends
        with self._lock:
            return self._rng.randint(min_value, max_value)

    def random_float(self, min_value: float, max_value: float) -> float:
        # [min_value, max_value)
        with self._lock:
            return min_value + self._rng.random() * (max_value - min_value)
