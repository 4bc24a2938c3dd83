from __future__ import annotations

import io

import pytest

from pqmsg.errors import TruncatedStream
from pqmsg.stream import (
    BufferedChunkWriter,
    ChunkReader,
    ChunkWriter,
    encode_uvarint,
    read_uvarint,
)


@pytest.mark.parametrize("value", [0, 1, 127, 128, 300, 2**32, 2**64 - 1])
def test_uvarint(value):
    data = encode_uvarint(value)
    assert read_uvarint(io.BytesIO(data)) == value


def test_uvarint_known_encoding():
    assert encode_uvarint(300) == b"\xac\x02"


def test_uvarint_truncated():
    assert read_uvarint(io.BytesIO(b"")) is None
    with pytest.raises(TruncatedStream):
        read_uvarint(io.BytesIO(b"\x80"))


def test_empty_payload_framing():
    buf = io.BytesIO()
    w = ChunkWriter(buf)
    w.write(b"")
    w.close()
    assert buf.getvalue() == b"\x00"
    r = ChunkReader(io.BytesIO(buf.getvalue()))
    assert r.read(10) == b""
    r.close()


def test_chunks_and_trailing_data_untouched():
    buf = io.BytesIO()
    w = ChunkWriter(buf)
    w.write(b"hello ")
    w.write(b"world")
    w.close()
    w.close()
    buf.write(b"TRAILER")
    inp = io.BytesIO(buf.getvalue())
    r = ChunkReader(inp)
    assert r.readall() == b"hello world"
    r.close()
    assert inp.read() == b"TRAILER"


def test_buffered_writer_batches():
    buf = io.BytesIO()
    w = BufferedChunkWriter(buf, 4)
    for b in b"abcdefghij":
        w.write(bytes([b]))
    w.close()
    assert buf.getvalue() == b"\x04abcd\x04efgh\x02ij\x00"


def test_close_with_unread_bytes_fails():
    r = ChunkReader(io.BytesIO(b"\x05hello\x00"))
    assert r.read(2) == b"he"
    with pytest.raises(TruncatedStream):
        r.close()


def test_missing_terminator_fails():
    r = ChunkReader(io.BytesIO(b"\x05hello"))
    assert r.read(5) == b"hello"
    with pytest.raises(TruncatedStream):
        r.close()


def test_truncated_chunk_fails():
    r = ChunkReader(io.BytesIO(b"\x05hel"))
    with pytest.raises(TruncatedStream):
        r.readall()
