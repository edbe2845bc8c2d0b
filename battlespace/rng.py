import uuid
from typing import List, Sequence, TypeVar
import numpy as np

T = TypeVar("T")

class DRNG:
    """Deterministic Random Number Generator wrapper.

    Every draw is derived from ``random()`` so a whole tick can be replayed
    (or scripted in tests) from a single stream.
    """

    def __init__(self, seed: int):
        self.g = np.random.Generator(np.random.PCG64(seed))

    def random(self) -> float:
        """Return a float in [0, 1)."""
        return float(self.g.random())

    def bernoulli(self, p: float) -> bool:
        """Return True with probability p."""
        return self.random() < p

    def uniform(self, a: float, b: float) -> float:
        """Return a random float in [a, b)."""
        return a + self.random() * (b - a)

    def randint(self, n: int) -> int:
        """Return an int in [0, n)."""
        return min(n - 1, int(self.random() * n))

    def choice(self, items: Sequence[T]) -> T:
        return items[self.randint(len(items))]

    def shuffle(self, items: Sequence[T]) -> List[T]:
        """Return a shuffled copy (Fisher-Yates)."""
        out = list(items)
        for i in range(len(out) - 1, 0, -1):
            j = self.randint(i + 1)
            out[i], out[j] = out[j], out[i]
        return out

    def uuid4(self) -> str:
        return str(uuid.UUID(bytes=self.g.bytes(16), version=4))
