import random
from typing import Protocol, runtime_checkable


@runtime_checkable
class IRandomSource(Protocol):
    """
    Protocol for pseudo-random generators used to draw delays.
    ``random.Random`` satisfies it, so does any object exposing a
    compatible ``randrange``.
    """

    def randrange(self, stop: int) -> int:
        """Returns an integer drawn uniformly from ``[0, stop)``."""
        ...


def default_random_source() -> random.Random:
    """
    Default generator, seeded from the operating system.
    Not reproducible across runs.
    """
    return random.Random()  # noqa: S311


def seeded_random_source(seed: int | str | bytes) -> random.Random:
    """Deterministic generator for reproducible delay sequences."""
    return random.Random(seed)  # noqa: S311
