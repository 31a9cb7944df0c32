import asyncio
import pathlib
import sys

sys.path.append(str(pathlib.Path(__file__).resolve().parents[1]))

from fakes import FakeConnection, make_settings
from relay import RelayServer

ALLOWED = "https://joshuaingle.art"


async def _member(relay, origin=ALLOWED):
    connection = FakeConnection(origin=origin)
    session = relay.create_session(connection)
    await relay.registry.add(session)
    await session.open()
    connection.sent.clear()
    return session, connection


def test_only_authenticated_sessions_receive():
    async def run():
        relay = RelayServer(make_settings())
        sender, _ = await _member(relay)
        authed, authed_conn = await _member(relay)
        pending, pending_conn = await _member(relay, origin=None)

        delivered = await relay.broadcaster.broadcast(sender, "hi")

        assert delivered == 1
        message = authed_conn.messages()[0]
        assert (message["type"], message["message"]) == ("broadcast", "hi")
        assert pending_conn.sent == []

    asyncio.run(run())


def test_include_sender_delivers_back_to_sender():
    async def run():
        relay = RelayServer(make_settings())
        sender, sender_conn = await _member(relay)
        _, peer_conn = await _member(relay)

        delivered = await relay.broadcaster.broadcast(sender, "echo", include_sender=True)

        assert delivered == 2
        assert sender_conn.messages()[0]["message"] == "echo"
        assert peer_conn.messages()[0]["message"] == "echo"

    asyncio.run(run())


def test_failed_recipient_does_not_abort_fan_out():
    async def run():
        relay = RelayServer(make_settings())
        sender, _ = await _member(relay)
        _, broken_conn = await _member(relay)
        _, healthy_conn = await _member(relay)
        broken_conn.fail_sends = True

        delivered = await relay.broadcaster.broadcast(sender, "still arrives")

        assert delivered == 1
        assert healthy_conn.messages()[0]["message"] == "still arrives"
        assert relay.registry.size() == 3

    asyncio.run(run())


def test_non_writable_recipient_is_skipped():
    async def run():
        relay = RelayServer(make_settings())
        sender, _ = await _member(relay)
        _, stalled_conn = await _member(relay)
        stalled_conn.writable = False

        assert await relay.broadcaster.broadcast(sender, "x") == 0
        assert stalled_conn.sent == []

    asyncio.run(run())


def test_error_message_shape():
    async def run():
        relay = RelayServer(make_settings())
        session, connection = await _member(relay)

        assert await relay.broadcaster.send_error_message(session, "bad frame")
        message = connection.messages()[0]
        assert message["type"] == "error"
        assert message["message"] == "bad frame"

    asyncio.run(run())
