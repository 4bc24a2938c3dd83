from __future__ import annotations

from dataclasses import dataclass
from typing import Any, BinaryIO

import zstandard

from pqmsg.compress import BaseCompression
from pqmsg.errors import CompressionError

from ._reader import FrameReader


@dataclass
class ZstdOpts:
    threads: int = 0


class Zstd(BaseCompression):
    name = "ZSTD"
    min_level = 1
    max_level = 22
    default_level = 3
    opts_type = ZstdOpts

    def check(self, level: int, opts: Any = None) -> None:
        super().check(level, opts)
        if opts is not None and opts.threads < 0:
            raise CompressionError(f"{self.name}: threads must not be negative")

    def _writer(self, writer: BinaryIO, level: int, opts: ZstdOpts) -> BinaryIO:
        cctx = zstandard.ZstdCompressor(level=level, threads=opts.threads)
        return cctx.stream_writer(writer, closefd=False)

    def _reader(self, reader: BinaryIO, opts: ZstdOpts) -> BinaryIO:
        dobj = zstandard.ZstdDecompressor().decompressobj()
        return FrameReader(reader, dobj, self.name, (zstandard.ZstdError,))
