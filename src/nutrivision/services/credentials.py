"""API key pool with a pluggable selection strategy."""

import random
from collections.abc import Callable
from dataclasses import dataclass, field

KeySelector = Callable[[list[str]], str]


def random_selector(rng: random.Random | None = None) -> KeySelector:
    """Pick a key uniformly at random on each call."""
    source = rng or random.Random()

    def select(keys: list[str]) -> str:
        return source.choice(keys)

    return select


def round_robin_selector() -> KeySelector:
    """Cycle through keys in configured order."""
    position = 0

    def select(keys: list[str]) -> str:
        nonlocal position
        key = keys[position % len(keys)]
        position += 1
        return key

    return select


SELECTORS: dict[str, Callable[[], KeySelector]] = {
    "random": random_selector,
    "round_robin": round_robin_selector,
}


@dataclass
class CredentialPool:
    """Holds API keys and chooses one per outbound call."""

    keys: list[str]
    selector: KeySelector = field(default_factory=random_selector)

    def __post_init__(self) -> None:
        if not self.keys:
            raise ValueError("At least one API key is required")

    @classmethod
    def create(cls, keys: list[str], strategy: str = "random") -> "CredentialPool":
        """Create a pool using a named selection strategy."""
        factory = SELECTORS.get(strategy)
        if factory is None:
            raise ValueError(f"Unknown key selection strategy: {strategy}")
        return cls(keys=list(keys), selector=factory())

    def next_key(self) -> str:
        """Return the key to use for the next call."""
        return self.selector(self.keys)
