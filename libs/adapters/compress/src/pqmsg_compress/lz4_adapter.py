from __future__ import annotations

from dataclasses import dataclass
from typing import Any, BinaryIO

import lz4.frame

from pqmsg.compress import BaseCompression

from ._reader import FrameReader


@dataclass
class LZ4Opts:
    block_linked: bool = True
    content_checksum: bool = False


class _FrameWriter:
    """Writes a single LZ4 frame; the header goes out even for empty input."""

    def __init__(self, out: BinaryIO, compressor: Any) -> None:
        self._out = out
        self._compressor = compressor
        self._closed = False
        out.write(compressor.begin())

    def write(self, data: bytes) -> int:
        if data:
            self._out.write(self._compressor.compress(bytes(data)))
        return len(data)

    def flush(self) -> None:
        pass

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._out.write(self._compressor.flush())

    def writable(self) -> bool:
        return True


class LZ4(BaseCompression):
    name = "LZ4"
    min_level = 0
    max_level = 16
    default_level = 0
    opts_type = LZ4Opts

    def _writer(self, writer: BinaryIO, level: int, opts: LZ4Opts) -> BinaryIO:
        compressor = lz4.frame.LZ4FrameCompressor(
            compression_level=level,
            block_linked=opts.block_linked,
            content_checksum=opts.content_checksum,
        )
        return _FrameWriter(writer, compressor)

    def _reader(self, reader: BinaryIO, opts: LZ4Opts) -> BinaryIO:
        return FrameReader(reader, lz4.frame.LZ4FrameDecompressor(), self.name, (RuntimeError, EOFError))
