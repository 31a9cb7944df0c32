import asyncio
import pathlib
import sys

sys.path.append(str(pathlib.Path(__file__).resolve().parents[1]))

from fakes import FakeConnection, make_settings
from relay import RelayServer


def test_population_transitions():
    async def run():
        relay = RelayServer(make_settings())
        registry = relay.registry
        first = relay.create_session(FakeConnection())
        second = relay.create_session(FakeConnection())

        assert registry.size() == 0
        assert await registry.add(first) == 1
        assert await registry.add(second) == 2
        assert first in registry

        assert await registry.remove(first) == 1
        assert await registry.remove(second) == 0
        assert first not in registry

    asyncio.run(run())


def test_duplicate_add_and_unknown_remove_do_not_change_population():
    async def run():
        relay = RelayServer(make_settings())
        registry = relay.registry
        session = relay.create_session(FakeConnection())
        stranger = relay.create_session(FakeConnection())

        await registry.add(session)
        assert await registry.add(session) == 1
        assert await registry.remove(stranger) == 1

    asyncio.run(run())


def test_snapshot_is_detached_from_later_mutation():
    async def run():
        relay = RelayServer(make_settings())
        registry = relay.registry
        sessions = [relay.create_session(FakeConnection()) for _ in range(3)]
        for session in sessions:
            await registry.add(session)

        snapshot = await registry.snapshot()
        await registry.remove(sessions[0])

        assert len(snapshot) == 3
        assert registry.size() == 2

    asyncio.run(run())


def test_for_each_visits_every_member():
    async def run():
        relay = RelayServer(make_settings())
        registry = relay.registry
        sessions = [relay.create_session(FakeConnection()) for _ in range(3)]
        for session in sessions:
            await registry.add(session)

        visited = []

        async def visit(session):
            visited.append(session)

        await registry.for_each(visit)
        assert sorted(map(id, visited)) == sorted(map(id, sessions))

    asyncio.run(run())


def test_concurrent_churn_keeps_population_consistent():
    async def run():
        relay = RelayServer(make_settings())
        registry = relay.registry
        sessions = [relay.create_session(FakeConnection()) for _ in range(50)]

        await asyncio.gather(*(registry.add(s) for s in sessions))
        assert registry.size() == 50

        await asyncio.gather(*(registry.remove(s) for s in sessions[:25]))
        assert registry.size() == 25

        stats = await registry.get_connection_stats()
        assert stats == {"total_clients": 25, "authenticated_clients": 0}

    asyncio.run(run())
