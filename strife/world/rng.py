"""Seeded random streams, one per conflict subsystem."""

from __future__ import annotations

import hashlib
from dataclasses import dataclass, field
from typing import Dict

from numpy.random import PCG64, Generator

_SEED_BYTES = 16


def stream_seed(world_seed: int, stream: str) -> int:
    """Derive a stable, non-zero seed for ``stream`` from ``world_seed``."""

    token = f"{world_seed}:rng:{stream}".encode("utf-8")
    digest = hashlib.blake2b(token, digest_size=_SEED_BYTES).digest()
    # PCG64 accepts any 128-bit value; zero is avoided so no stream is degenerate.
    return int.from_bytes(digest, "big") or 1


@dataclass
class WorldRandomness:
    """Hands out independent ``numpy`` generators keyed by stream name.

    Streams are created on first use and cached, so every caller asking for
    the same name draws from one shared sequence.
    """

    seed: int
    _generators: Dict[str, Generator] = field(default_factory=dict, repr=False)

    def generator(self, stream: str = "default") -> Generator:
        generator = self._generators.get(stream)
        if generator is None:
            generator = Generator(PCG64(stream_seed(self.seed, stream)))
            self._generators[stream] = generator
        return generator

    def source(self, stream: str = "default") -> "GeneratorRandomSource":
        """Return a :class:`GeneratorRandomSource` over ``stream``."""

        return GeneratorRandomSource(self.generator(stream))


class GeneratorRandomSource:
    """Adapts a ``numpy.random.Generator`` to the ``uniform()`` interface."""

    __slots__ = ("_generator",)

    def __init__(self, generator: Generator) -> None:
        self._generator = generator

    @property
    def generator(self) -> Generator:
        return self._generator

    def uniform(self) -> float:
        return float(self._generator.random())


__all__ = ["GeneratorRandomSource", "WorldRandomness", "stream_seed"]
