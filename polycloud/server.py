"""Line-based chat server that relays each user's messages to everyone else."""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import logging
import sys
from collections.abc import Hashable
from dataclasses import dataclass, field

DEFAULT_ADDR = "127.0.0.1:6142"
PROMPT = "Please enter your username:"

logger = logging.getLogger(__name__)


@dataclass
class Shared:
    """Outgoing message queues of every connected peer, keyed by address."""

    peers: dict[Hashable, asyncio.Queue[str]] = field(default_factory=dict)

    def add_peer(self, addr: Hashable) -> asyncio.Queue[str]:
        """Register ``addr`` and return the queue of messages meant for it."""
        queue: asyncio.Queue[str] = asyncio.Queue()
        self.peers[addr] = queue
        return queue

    def remove_peer(self, addr: Hashable) -> None:
        """Forget ``addr``; unknown addresses are ignored."""
        self.peers.pop(addr, None)

    def broadcast(self, sender: Hashable, message: str) -> None:
        """Queue ``message`` for every peer except ``sender``."""
        for addr, queue in self.peers.items():
            if addr != sender:
                queue.put_nowait(message)


def _split_address(addr: str) -> tuple[str, int]:
    """Split ``host:port`` into its parts; raises ``ValueError`` if malformed."""
    host, sep, port = addr.rpartition(":")
    if not sep or not host or not port.isdigit():
        raise ValueError(f"invalid socket address: {addr!r}")
    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    number = int(port)
    if number > 65535:
        raise ValueError(f"invalid port in socket address: {addr!r}")
    return host, number


def _decode_line(raw: bytes) -> str:
    """Decode one received line, dropping its terminator."""
    return raw.rstrip(b"\n").rstrip(b"\r").decode("utf-8")


async def _send_line(writer: asyncio.StreamWriter, line: str) -> None:
    writer.write(f"{line}\n".encode("utf-8"))
    await writer.drain()


async def _read_username(reader: asyncio.StreamReader) -> str | None:
    try:
        raw = await reader.readline()
        if not raw:
            return None
        return _decode_line(raw)
    except ValueError:
        return None


async def _relay(
    state: Shared,
    addr: Hashable,
    username: str,
    queue: asyncio.Queue[str],
    reader: asyncio.StreamReader,
    writer: asyncio.StreamWriter,
) -> None:
    read_task: asyncio.Task[bytes] | None = None
    recv_task: asyncio.Task[str] | None = None
    try:
        while True:
            if read_task is None:
                read_task = asyncio.ensure_future(reader.readline())
            if recv_task is None:
                recv_task = asyncio.ensure_future(queue.get())
            done, _ = await asyncio.wait(
                {read_task, recv_task}, return_when=asyncio.FIRST_COMPLETED
            )

            if recv_task in done:
                message = recv_task.result()
                recv_task = None
                logger.info("%s", message)
                await _send_line(writer, message)

            if read_task in done:
                task, read_task = read_task, None
                try:
                    raw = task.result()
                except ValueError as exc:
                    logger.error(
                        "an error occurred while processing messages for %s; error = %r",
                        username,
                        exc,
                    )
                    continue
                if not raw:
                    break
                try:
                    text = _decode_line(raw)
                except UnicodeDecodeError as exc:
                    logger.error(
                        "an error occurred while processing messages for %s; error = %r",
                        username,
                        exc,
                    )
                    continue
                state.broadcast(addr, f"{username}: {text}")
    finally:
        pending = [task for task in (read_task, recv_task) if task is not None]
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)


async def process(
    state: Shared, reader: asyncio.StreamReader, writer: asyncio.StreamWriter
) -> None:
    """Serve one chat client until it disconnects."""
    addr = writer.get_extra_info("peername")
    try:
        await _send_line(writer, PROMPT)
        username = await _read_username(reader)
        if username is None:
            logger.error("Failed to get username from %s. Client disconnected.", addr)
            return

        queue = state.add_peer(addr)
        joined = f"{username} has joined the chat"
        logger.info("%s", joined)
        state.broadcast(addr, joined)

        try:
            await _relay(state, addr, username, queue, reader, writer)
        finally:
            state.remove_peer(addr)
            left = f"{username} has left the chat"
            logger.info("%s", left)
            state.broadcast(addr, left)
    finally:
        writer.close()
        with contextlib.suppress(OSError):
            await writer.wait_closed()


async def _start(addr: str, state: Shared) -> asyncio.AbstractServer:
    host, port = _split_address(addr)

    async def handle(reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        logger.info("accepted connection")
        try:
            await process(state, reader, writer)
        except Exception as exc:  # one client's failure must not stop the server
            logger.info("an error occurred; error = %r", exc)

    return await asyncio.start_server(handle, host, port)


async def serve(addr: str = DEFAULT_ADDR) -> None:
    """Accept chat clients on ``addr`` forever."""
    state = Shared()
    server = await _start(addr, state)
    logger.info("server running on %s", addr)
    async with server:
        await server.serve_forever()


def main(argv: list[str] | None = None) -> int:
    """Run the chat server."""
    parser = argparse.ArgumentParser(prog="server", description="Line-based chat server.")
    parser.add_argument("addr", nargs="?", default=DEFAULT_ADDR, help="host:port to bind")
    args = parser.parse_args(argv)
    try:
        _split_address(args.addr)
    except ValueError as exc:
        parser.error(str(exc))

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")
    try:
        asyncio.run(serve(args.addr))
    except KeyboardInterrupt:
        pass
    except OSError as exc:
        print(f"server: {exc}", file=sys.stderr)
        return 1
    return 0