from __future__ import annotations

from typing import Any, BinaryIO, Optional, Type

from .errors import CompressionError


class BaseCompression:
    """Shared level and option checks for compression adapters.

    Level 0 selects ``default_level``. Subclasses implement ``_writer`` and
    ``_reader``; the returned writer's ``close`` flushes the frame but leaves
    the wrapped stream open.
    """

    name = ""
    max_level = 0
    default_level = 0
    min_level = 0
    opts_type: Optional[Type[Any]] = None

    def new_opts(self) -> Any:
        return self.opts_type() if self.opts_type is not None else None

    def resolve_level(self, level: int) -> int:
        return self.default_level if level == 0 else level

    def check(self, level: int, opts: Any = None) -> None:
        if not isinstance(level, int) or isinstance(level, bool):
            raise CompressionError(f"{self.name}: level must be an integer")
        if level != 0 and not (self.min_level <= level <= self.max_level):
            raise CompressionError(
                f"{self.name}: level {level} outside {self.min_level}..{self.max_level}"
            )
        if opts is not None and (self.opts_type is None or not isinstance(opts, self.opts_type)):
            expected = self.opts_type.__name__ if self.opts_type is not None else "no options"
            raise CompressionError(f"{self.name}: wrong options type {type(opts).__name__}, expected {expected}")

    def compress(self, writer: BinaryIO, level: int = 0, opts: Any = None) -> BinaryIO:
        self.check(level, opts)
        return self._writer(writer, self.resolve_level(level), opts if opts is not None else self.new_opts())

    def decompress(self, reader: BinaryIO, opts: Any = None) -> BinaryIO:
        self.check(0, opts)
        return self._reader(reader, opts if opts is not None else self.new_opts())

    def _writer(self, writer: BinaryIO, level: int, opts: Any) -> BinaryIO:
        raise NotImplementedError

    def _reader(self, reader: BinaryIO, opts: Any) -> BinaryIO:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"Compression({self.name})"
