"""Line-oriented stream sources for demos."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Iterator
import logging
from pathlib import Path

logger = logging.getLogger(__name__)


def file_source(path: Path | str) -> Iterator[str]:
    """Yield non-blank lines of a text file, one text per line."""
    path = Path(path)
    with open(path, encoding="utf-8") as f:
        for line in f:
            text = line.rstrip("\r\n")
            if text.strip():
                yield text


async def socket_source(host: str, port: int) -> AsyncIterator[str]:
    """
    Yield non-blank lines read from a TCP socket until the peer closes it.

    For interactive testing start a server with `nc -lk <port>`.
    """
    reader, writer = await asyncio.open_connection(host, port)
    logger.info(f"Reading from socket {host}:{port}")
    try:
        while True:
            raw = await reader.readline()
            if not raw:
                break
            text = raw.decode("utf-8", errors="replace").rstrip("\r\n")
            if text.strip():
                yield text
    finally:
        writer.close()
        await writer.wait_closed()
        logger.info(f"Socket {host}:{port} closed")
