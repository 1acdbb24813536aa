import asyncio

import pytest

from polycloud.server import PROMPT, Shared, _split_address, main, process


class _FakeWriter:
    def __init__(self, peer=("203.0.113.5", 40000)):
        self.data = bytearray()
        self.closed = False
        self.peer = peer

    def get_extra_info(self, name, default=None):
        return self.peer if name == "peername" else default

    def write(self, data):
        self.data += data

    async def drain(self):
        pass

    def close(self):
        self.closed = True

    async def wait_closed(self):
        pass


def _drain_queue(queue):
    items = []
    while not queue.empty():
        items.append(queue.get_nowait())
    return items


async def _wait_until(condition, timeout=5.0):
    async def poll():
        while not condition():
            await asyncio.sleep(0.01)

    await asyncio.wait_for(poll(), timeout)


async def _reader_with(data):
    reader = asyncio.StreamReader()
    reader.feed_data(data)
    reader.feed_eof()
    return reader


@pytest.mark.asyncio
async def test_broadcast_skips_sender():
    state = Shared()
    first = state.add_peer("a")
    second = state.add_peer("b")
    state.broadcast("a", "hello")
    assert _drain_queue(first) == []
    assert _drain_queue(second) == ["hello"]


@pytest.mark.asyncio
async def test_remove_peer_stops_delivery():
    state = Shared()
    state.add_peer("a")
    removed = state.add_peer("b")
    state.remove_peer("b")
    state.remove_peer("missing")
    state.broadcast("a", "hello")
    assert list(state.peers) == ["a"]
    assert _drain_queue(removed) == []


@pytest.mark.asyncio
async def test_disconnect_before_username():
    state = Shared()
    writer = _FakeWriter()
    await process(state, await _reader_with(b""), writer)
    assert bytes(writer.data) == (PROMPT + "\n").encode()
    assert state.peers == {}
    assert writer.closed


@pytest.mark.asyncio
async def test_join_message_and_leave_are_broadcast():
    state = Shared()
    other = state.add_peer(("198.51.100.1", 1))
    writer = _FakeWriter()
    await process(state, await _reader_with(b"carol\nhello\r\n"), writer)
    assert _drain_queue(other) == [
        "carol has joined the chat",
        "carol: hello",
        "carol has left the chat",
    ]
    assert list(state.peers) == [("198.51.100.1", 1)]


@pytest.mark.asyncio
async def test_invalid_utf8_line_is_skipped():
    state = Shared()
    other = state.add_peer("other")
    await process(state, await _reader_with(b"carol\n\xff\nok\n"), _FakeWriter())
    assert _drain_queue(other) == [
        "carol has joined the chat",
        "carol: ok",
        "carol has left the chat",
    ]


@pytest.mark.asyncio
async def test_two_clients_chat_over_tcp():
    state = Shared()
    server = await asyncio.start_server(
        lambda r, w: process(state, r, w), "127.0.0.1", 0
    )
    port = server.sockets[0].getsockname()[1]
    async with server:
        ra, wa = await asyncio.open_connection("127.0.0.1", port)
        assert await asyncio.wait_for(ra.readline(), 5) == (PROMPT + "\n").encode()
        wa.write(b"alice\n")
        await wa.drain()
        await _wait_until(lambda: len(state.peers) == 1)

        rb, wb = await asyncio.open_connection("127.0.0.1", port)
        assert await asyncio.wait_for(rb.readline(), 5) == (PROMPT + "\n").encode()
        wb.write(b"bob\n")
        await wb.drain()
        assert await asyncio.wait_for(ra.readline(), 5) == b"bob has joined the chat\n"

        wb.write(b"hi\r\n")
        await wb.drain()
        assert await asyncio.wait_for(ra.readline(), 5) == b"bob: hi\n"

        wa.write(b"yo\n")
        await wa.drain()
        assert await asyncio.wait_for(rb.readline(), 5) == b"alice: yo\n"

        wb.close()
        await wb.wait_closed()
        assert await asyncio.wait_for(ra.readline(), 5) == b"bob has left the chat\n"

        wa.close()
        await wa.wait_closed()
        await _wait_until(lambda: not state.peers)
    assert state.peers == {}


def test_split_address_forms():
    assert _split_address("127.0.0.1:6142") == ("127.0.0.1", 6142)
    assert _split_address("[::1]:6142") == ("::1", 6142)


@pytest.mark.parametrize("addr", ["nonsense", ":6142", "localhost:", "localhost:99999"])
def test_split_address_rejects_malformed(addr):
    with pytest.raises(ValueError):
        _split_address(addr)


def test_main_rejects_bad_address():
    with pytest.raises(SystemExit) as excinfo:
        main(["nonsense"])
    assert excinfo.value.code == 2