from __future__ import annotations

from typing import Any, Tuple, Type

from pqmsg.errors import MalformedPacket
from pqmsg.stream import DEFAULT_BUFFER_SIZE


class FrameReader:
    """Decompresses exactly one frame pulled from ``source``.

    ``dobj`` is a decompressor object exposing ``decompress``, ``eof`` and
    ``unused_data``. Input left over after the frame and codec failures are
    reported as MalformedPacket.
    """

    def __init__(self, source: Any, dobj: Any, name: str, errors: Tuple[Type[BaseException], ...],
                 read_size: int = DEFAULT_BUFFER_SIZE) -> None:
        self._source = source
        self._dobj = dobj
        self._name = name
        self._errors = errors
        self._read_size = read_size
        self._buf = bytearray()
        self._done = False

    def _fill(self) -> None:
        while not self._buf and not self._done:
            data = self._source.read(self._read_size)
            if not data:
                raise MalformedPacket(f"{self._name} stream ended inside its frame")
            try:
                self._buf += self._dobj.decompress(data)
            except self._errors as exc:
                raise MalformedPacket(f"corrupt {self._name} stream: {exc}") from exc
            if self._dobj.eof:
                self._done = True
                if self._dobj.unused_data:
                    raise MalformedPacket("trailing data after the compressed body")

    def read(self, size: int = -1) -> bytes:
        if size is None or size < 0:
            parts = []
            while True:
                data = self.read(self._read_size)
                if not data:
                    return b"".join(parts)
                parts.append(data)
        self._fill()
        out = bytes(self._buf[:size])
        del self._buf[:size]
        return out

    def readable(self) -> bool:
        return True

    def close(self) -> None:
        self._buf.clear()
