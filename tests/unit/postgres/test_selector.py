"""Unit tests for ReplicaSelector."""

from __future__ import annotations

import random
from collections import Counter

import pytest

from macrocoach.infrastructure.postgres import EndpointRole, PoolRegistry, ReplicaSelector

from ..fakes import PRIMARY_ID, REPLICA_IDS, ScriptedRandom, StubPool


class TestSelection:
    def test_scripted_source_reaches_every_replica(self, stub_registry: PoolRegistry) -> None:
        source = ScriptedRandom([0, 1, 1, 0])
        selector = ReplicaSelector(stub_registry, source)

        chosen = [selector.select_read_pool()[1] for _ in range(4)]

        assert chosen == [REPLICA_IDS[0], REPLICA_IDS[1], REPLICA_IDS[1], REPLICA_IDS[0]]
        assert source.calls == [2, 2, 2, 2]

    def test_returned_pool_matches_returned_id(self, stub_registry: PoolRegistry) -> None:
        selector = ReplicaSelector(stub_registry, ScriptedRandom([1]))

        pool, endpoint_id = selector.select_read_pool()

        assert pool is stub_registry.pool_for_endpoint(endpoint_id)
        assert pool.role == EndpointRole.REPLICA

    def test_never_selects_primary(self, stub_registry: PoolRegistry) -> None:
        selector = ReplicaSelector(stub_registry, random.Random(7))

        assert all(selector.select_read_pool()[1] != PRIMARY_ID for _ in range(1_000))

    def test_default_random_source(self, stub_registry: PoolRegistry) -> None:
        selector = ReplicaSelector(stub_registry)

        assert selector.select_read_pool()[1] in REPLICA_IDS


class TestDistribution:
    @pytest.mark.parametrize("replica_count", [1, 2, 3, 5])
    def test_seeded_draws_approach_uniform(self, replica_count: int) -> None:
        """Over 10,000 independent draws each replica gets roughly 1/N.

        The seed makes the run deterministic; the tolerance is many standard
        deviations wide so the assertion is about uniformity, not the seed.
        """
        draws = 10_000
        replicas = [StubPool(f"replica-{i}", EndpointRole.REPLICA) for i in range(replica_count)]
        registry = PoolRegistry(StubPool(PRIMARY_ID, EndpointRole.PRIMARY), replicas)  # type: ignore[arg-type]
        selector = ReplicaSelector(registry, random.Random(20261019))

        counts = Counter(selector.select_read_pool()[1] for _ in range(draws))

        assert set(counts) == {pool.endpoint_id for pool in replicas}
        for endpoint_id, count in counts.items():
            assert abs(count / draws - 1 / replica_count) < 0.03, (endpoint_id, count)

    def test_same_seed_same_sequence(self, stub_registry: PoolRegistry) -> None:
        first = ReplicaSelector(stub_registry, random.Random(42))
        second = ReplicaSelector(stub_registry, random.Random(42))

        assert [first.select_read_pool()[1] for _ in range(50)] == [
            second.select_read_pool()[1] for _ in range(50)
        ]
