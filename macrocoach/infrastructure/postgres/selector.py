"""Uniform random choice of the replica pool that serves a read.

Each call draws an independent index over the configured replicas. Over many
calls the distribution is uniform; over short windows nothing is guaranteed
(this is not round-robin). There is no fallback: if the chosen replica is
down, the read fails against that replica.
"""

from __future__ import annotations

import random
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from .pool import AsyncConnectionPool
    from .registry import PoolRegistry


class RandomSource(Protocol):
    """Anything with ``randrange``; `random.Random` satisfies it."""

    def randrange(self, stop: int, /) -> int: ...


class ReplicaSelector:
    """Picks one replica pool per read.

    Parameters
    ----------
    registry
        Registry holding the replica pools.
    random_source
        Source of the index draw. Defaults to a fresh `random.Random`;
        tests pass a seeded instance or a scripted stub.
    """

    __slots__ = ("_random", "_registry")

    def __init__(self, registry: PoolRegistry, random_source: RandomSource | None = None) -> None:
        self._registry = registry
        self._random: RandomSource = random_source if random_source is not None else random.Random()

    def select_read_pool(self) -> tuple[AsyncConnectionPool, str]:
        """Return the chosen replica pool and its endpoint id."""
        replicas = self._registry.replica_pools()
        index = self._random.randrange(len(replicas))
        pool = replicas[index]
        return pool, pool.endpoint_id
