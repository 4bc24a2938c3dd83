from __future__ import annotations

from typing import BinaryIO, Optional

from .errors import ContractError, TruncatedStream

"""Length-prefixed chunk framing for open-ended byte streams.

Every chunk is a LEB128 unsigned length followed by that many raw bytes; a
zero length terminates the stream. The framing lets a structured record carry
a payload whose total length is unknown when encoding starts.
"""

MAX_VARINT_LEN = 10
DEFAULT_BUFFER_SIZE = 32 * 1024


def encode_uvarint(value: int) -> bytes:
    if value < 0:
        raise ContractError("uvarint must be non-negative")
    out = bytearray()
    while value >= 0x80:
        out.append((value & 0x7F) | 0x80)
        value >>= 7
    out.append(value)
    return bytes(out)


def write_uvarint(out: BinaryIO, value: int) -> None:
    out.write(encode_uvarint(value))


def read_uvarint(inp: BinaryIO) -> Optional[int]:
    """Read one uvarint; ``None`` on a clean EOF before the first byte."""
    value = 0
    shift = 0
    for i in range(MAX_VARINT_LEN):
        b = inp.read(1)
        if not b:
            if i == 0:
                return None
            raise TruncatedStream("stream ended inside a length prefix")
        byte = b[0]
        if i == MAX_VARINT_LEN - 1 and byte > 1:
            raise TruncatedStream("length prefix overflows 64 bits")
        value |= (byte & 0x7F) << shift
        if byte < 0x80:
            return value
        shift += 7
    raise TruncatedStream("length prefix overflows 64 bits")


def read_exact(inp: BinaryIO, size: int) -> bytes:
    parts = []
    remaining = size
    while remaining > 0:
        data = inp.read(remaining)
        if not data:
            break
        parts.append(data)
        remaining -= len(data)
    return b"".join(parts)


class ChunkWriter:
    """Writes each non-empty ``write`` as one chunk."""

    def __init__(self, out: BinaryIO) -> None:
        self._out = out
        self._closed = False

    def write(self, data: bytes) -> int:
        if self._closed:
            raise ContractError("write to a closed ChunkWriter")
        if data:
            write_uvarint(self._out, len(data))
            self._out.write(data)
        return len(data)

    def flush(self) -> None:
        flush = getattr(self._out, "flush", None)
        if flush is not None:
            flush()

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._out.write(b"\x00")

    @property
    def closed(self) -> bool:
        return self._closed


class BufferedChunkWriter(ChunkWriter):
    """Batches small writes into chunks of at most ``size`` bytes."""

    def __init__(self, out: BinaryIO, size: int = DEFAULT_BUFFER_SIZE) -> None:
        super().__init__(out)
        if size < 1:
            raise ContractError("chunk size must be positive")
        self._size = size
        self._buf = bytearray()

    def write(self, data: bytes) -> int:
        if self._closed:
            raise ContractError("write to a closed ChunkWriter")
        self._buf += data
        while len(self._buf) >= self._size:
            super().write(bytes(self._buf[:self._size]))
            del self._buf[:self._size]
        return len(data)

    def close(self) -> None:
        if self._closed:
            return
        if self._buf:
            super().write(bytes(self._buf))
            self._buf.clear()
        super().close()


class ChunkReader:
    """Reads the stream produced by :class:`ChunkWriter`.

    ``read`` returns ``b""`` once the terminator is reached. The underlying
    stream is never read past the terminator, so a following record can be
    decoded from the same source.
    """

    def __init__(self, inp: BinaryIO) -> None:
        self._inp = inp
        self._remaining = 0
        self._eof = False

    def _next_chunk(self) -> None:
        length = read_uvarint(self._inp)
        if length is None:
            raise TruncatedStream("stream ended before the terminating chunk")
        if length == 0:
            self._eof = True
        self._remaining = length

    def read(self, size: int = -1) -> bytes:
        if size is None or size < 0:
            return self.readall()
        out = bytearray()
        while len(out) < size and not self._eof:
            if self._remaining == 0:
                self._next_chunk()
                continue
            want = min(size - len(out), self._remaining)
            data = self._inp.read(want)
            if not data:
                raise TruncatedStream(f"stream ended with {self._remaining} bytes left in the chunk")
            out += data
            self._remaining -= len(data)
            if out:
                break
        return bytes(out)

    def readall(self) -> bytes:
        parts = []
        while True:
            data = self.read(DEFAULT_BUFFER_SIZE)
            if not data:
                return b"".join(parts)
            parts.append(data)

    def readable(self) -> bool:
        return True

    @property
    def eof(self) -> bool:
        return self._eof

    def close(self) -> None:
        """Fails unless the stream was consumed up to and including its terminator."""
        if self._eof:
            return
        if self._remaining > 0:
            raise TruncatedStream(f"chunk stream closed with {self._remaining} unread bytes")
        self._next_chunk()
        if not self._eof:
            raise TruncatedStream("chunk stream was not fully read")


def copy_stream(reader, writer, buffer_size: int = DEFAULT_BUFFER_SIZE) -> int:
    total = 0
    while True:
        data = reader.read(buffer_size)
        if not data:
            return total
        writer.write(data)
        total += len(data)
