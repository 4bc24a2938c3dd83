from __future__ import annotations

import base64
import binascii
from dataclasses import dataclass, field
from typing import Any, BinaryIO, Callable, Dict, Optional

import msgpack

from .errors import ContractError, MalformedPacket, PacketTagMismatch
from .registry import SchemeSet
from .stream import encode_uvarint, read_exact, read_uvarint

"""Packet container and ASCII armor.

A packet is a sequence of msgpack objects, each framed by a uvarint length so
a reader never consumes bytes beyond the object it decodes. The first object
is the packet tag; packet classes encode and decode the rest themselves,
which lets a message interleave its header, a raw chunked body and its
trailing auth record.
"""

MAX_OBJECT_SIZE = 16 * 1024 * 1024
ARMOR_LINE = 64
_ARMOR_PREFIX = b"-----BEGIN "


def write_object(out: BinaryIO, obj: Any) -> None:
    blob = msgpack.packb(obj, use_bin_type=True)
    out.write(encode_uvarint(len(blob)) + blob)


def read_object(inp: BinaryIO) -> Any:
    size = read_uvarint(inp)
    if size is None:
        raise MalformedPacket("unexpected end of input, expected an object")
    if size > MAX_OBJECT_SIZE:
        raise MalformedPacket(f"object of {size} bytes exceeds the {MAX_OBJECT_SIZE} byte limit")
    blob = read_exact(inp, size)
    if len(blob) != size:
        raise MalformedPacket(f"object truncated: got {len(blob)} of {size} bytes")
    try:
        return msgpack.unpackb(blob, raw=False, strict_map_key=False)
    except (ValueError, TypeError, msgpack.UnpackException) as exc:
        raise MalformedPacket(f"undecodable object: {exc}") from exc


@dataclass(frozen=True)
class PacketType:
    tag: int
    name: str
    block_type: str
    cls: Any


_packet_types: Dict[int, PacketType] = {}


def register_packet_type(tag: int, name: str, block_type: str) -> Callable[[Any], Any]:
    """Class decorator; the class provides ``encode_packet`` and ``decode_packet``."""

    def deco(cls: Any) -> Any:
        if tag in _packet_types:
            raise ContractError(f"packet tag 0x{tag:02x} already registered")
        _packet_types[tag] = PacketType(tag, name, block_type, cls)
        cls.packet_tag = tag
        return cls

    return deco


def packet_type(tag: int) -> PacketType:
    try:
        return _packet_types[tag]
    except KeyError:
        raise MalformedPacket(f"unknown packet tag 0x{tag:02x}") from None


def packet_type_of(obj: Any) -> PacketType:
    tag = getattr(obj, "packet_tag", None)
    if tag is None:
        raise ContractError(f"{type(obj).__name__} is not a packet type")
    return packet_type(tag)


def pack(out: BinaryIO, obj: Any) -> None:
    write_object(out, packet_type_of(obj).tag)
    obj.encode_packet(out)


def _read_tag(inp: BinaryIO) -> int:
    tag = read_object(inp)
    if not isinstance(tag, int) or isinstance(tag, bool):
        raise MalformedPacket("packet tag must be an integer")
    return tag


def unpack(inp: BinaryIO, schemes: SchemeSet) -> Any:
    return packet_type(_read_tag(inp)).cls.decode_packet(inp, schemes)


def unpack_exact(inp: BinaryIO, tag: int, schemes: SchemeSet) -> Any:
    got = _read_tag(inp)
    if got != tag:
        raise PacketTagMismatch(tag, got)
    return packet_type(tag).cls.decode_packet(inp, schemes)


class ArmorWriter:
    """Streams base64 with OpenPGP-style BEGIN/END lines around it."""

    def __init__(self, out: BinaryIO, block_type: str, headers: Optional[Dict[str, str]] = None) -> None:
        self._out = out
        self._type = block_type
        self._buf = bytearray()
        self._closed = False
        out.write(f"-----BEGIN {block_type}-----\n".encode("ascii"))
        for key, value in (headers or {}).items():
            if ":" in key or "\n" in key or "\n" in value:
                raise ContractError(f"invalid armor header {key!r}")
            out.write(f"{key}: {value}\n".encode("utf-8"))
        out.write(b"\n")

    def write(self, data: bytes) -> int:
        if self._closed:
            raise ContractError("write to a closed ArmorWriter")
        self._buf += data
        group = ARMOR_LINE // 4 * 3
        while len(self._buf) >= group:
            self._out.write(base64.b64encode(bytes(self._buf[:group])) + b"\n")
            del self._buf[:group]
        return len(data)

    def flush(self) -> None:
        pass

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._buf:
            self._out.write(base64.b64encode(bytes(self._buf)) + b"\n")
            self._buf.clear()
        self._out.write(f"-----END {self._type}-----\n".encode("ascii"))

    def __enter__(self) -> "ArmorWriter":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()


class _ArmorBody:
    def __init__(self, inp: BinaryIO, block_type: str) -> None:
        self._inp = inp
        self._end = f"-----END {block_type}-----".encode("ascii")
        self._buf = bytearray()
        self._done = False

    def _fill(self) -> None:
        line = self._inp.readline()
        if not line:
            raise MalformedPacket("armor ended without an END line")
        line = line.strip()
        if line.startswith(b"-----"):
            if line != self._end:
                raise MalformedPacket(f"armor END line mismatch: {line.decode('ascii', 'replace')}")
            self._done = True
            return
        try:
            self._buf += base64.b64decode(line, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise MalformedPacket(f"invalid base64 in armor: {exc}") from exc

    def read(self, size: int = -1) -> bytes:
        while not self._done and (size < 0 or len(self._buf) < size):
            self._fill()
        if size < 0:
            size = len(self._buf)
        out = bytes(self._buf[:size])
        del self._buf[:size]
        return out

    def readable(self) -> bool:
        return True


@dataclass
class ArmoredBlock:
    type: str
    headers: Dict[str, str] = field(default_factory=dict)
    body: Any = None


def decode_armor(inp: BinaryIO) -> ArmoredBlock:
    first = inp.readline()
    while first and not first.strip():
        first = inp.readline()
    first = first.strip()
    if not (first.startswith(_ARMOR_PREFIX) and first.endswith(b"-----")):
        raise MalformedPacket("missing armor BEGIN line")
    block_type = first[len(_ARMOR_PREFIX):-5].decode("ascii", "replace")
    headers: Dict[str, str] = {}
    while True:
        line = inp.readline()
        if not line:
            raise MalformedPacket("armor ended inside the header block")
        line = line.strip()
        if not line:
            break
        key, sep, value = line.decode("utf-8", "replace").partition(":")
        if not sep:
            raise MalformedPacket(f"malformed armor header {key!r}")
        headers[key.strip()] = value.strip()
    return ArmoredBlock(block_type, headers, _ArmorBody(inp, block_type))


def is_armored(head: bytes) -> bool:
    return head.lstrip().startswith(_ARMOR_PREFIX)


class _Prefixed:
    """Replays already-peeked bytes ahead of the rest of the stream."""

    def __init__(self, head: bytes, inp: BinaryIO) -> None:
        self._head = head
        self._inp = inp

    def read(self, size: int = -1) -> bytes:
        if not self._head:
            return self._inp.read(size)
        if size < 0:
            out, self._head = self._head, b""
            return out + self._inp.read()
        out, self._head = self._head[:size], self._head[size:]
        return out

    def readline(self) -> bytes:
        if self._head:
            nl = self._head.find(b"\n")
            if nl >= 0:
                out, self._head = self._head[:nl + 1], self._head[nl + 1:]
                return out
            out, self._head = self._head, b""
            return out + self._inp.readline()
        return self._inp.readline()

    def readable(self) -> bool:
        return True


def armor(out: BinaryIO, obj: Any, headers: Optional[Dict[str, str]] = None) -> None:
    w = ArmorWriter(out, packet_type_of(obj).block_type, headers)
    pack(w, obj)
    w.close()


def decode(inp: BinaryIO, schemes: SchemeSet, tag: Optional[int] = None) -> Any:
    """Unpack a binary or armored packet, optionally requiring a packet tag."""
    head = read_exact(inp, 32)
    stream: Any = _Prefixed(head, inp)
    expected_block = packet_type(tag).block_type if tag is not None else None
    if is_armored(head):
        block = decode_armor(stream)
        if expected_block is not None and block.type != expected_block:
            raise MalformedPacket(f"armor block type {block.type!r}, expected {expected_block!r}")
        stream = block.body
    if tag is None:
        return unpack(stream, schemes)
    return unpack_exact(stream, tag, schemes)
