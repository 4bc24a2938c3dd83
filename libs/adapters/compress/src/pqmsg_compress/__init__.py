"""Stream compression schemes: ZSTD (zstandard) and LZ4 (lz4.frame)."""

from __future__ import annotations

from pqmsg.config import Settings
from pqmsg.registry import SchemeSet

from .lz4_adapter import LZ4, LZ4Opts
from .zstd_adapter import Zstd, ZstdOpts


def register(schemes: SchemeSet, settings: Settings) -> None:
    schemes.compression.register(Zstd())
    schemes.compression.register(LZ4())


__all__ = ["LZ4", "LZ4Opts", "Zstd", "ZstdOpts", "register"]
