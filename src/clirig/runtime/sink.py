# src/clirig/runtime/sink.py
"""
In-memory stream that collects what a command prints.
"""
from collections.abc import Callable, Iterable

import structlog

from clirig.telemetry import StructLogger

log: StructLogger = structlog.get_logger("runtime.sink")


class OutputSink:
    """
    Write-only text stream handed to handlers as their stdout.

    Every write is appended to the buffer before it returns. A chunk that is
    exactly `ready_marker` additionally fires `on_ready`, which is how the
    long-running `daemon` command reports that it is up. Once closed, the sink
    keeps accepting writes but discards them.
    """

    def __init__(
        self,
        ready_marker: str | None = None,
        on_ready: Callable[[], None] | None = None,
        encoding: str = "utf-8",
    ):
        self.ready_marker = ready_marker
        self.on_ready = on_ready
        self.encoding = encoding
        self._chunks: list[str] = []
        self._closed = False

    @property
    def chunks(self) -> tuple[str, ...]:
        return tuple(self._chunks)

    @property
    def closed(self) -> bool:
        return self._closed

    def writable(self) -> bool:
        return True

    def readable(self) -> bool:
        return False

    def isatty(self) -> bool:
        return False

    def write(self, chunk: str | bytes) -> int:
        text = chunk.decode(self.encoding, errors="replace") if isinstance(chunk, bytes | bytearray) else str(chunk)
        if self._closed:
            log.debug("Dropping output written after settle", chunk=text)
            return len(text)
        self._chunks.append(text)
        log.debug("Received output chunk", chunk=text)

        if self.ready_marker is not None and text == self.ready_marker and self.on_ready is not None:
            log.debug("Ready marker seen in output")
            self.on_ready()
        return len(text)

    def writelines(self, lines: Iterable[str | bytes]) -> None:
        for line in lines:
            self.write(line)

    def flush(self) -> None:
        pass

    def getvalue(self) -> str:
        return "".join(self._chunks)

    def close(self) -> None:
        self._closed = True
