from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, BinaryIO, Dict, Optional

import msgpack

from ..algorithm import decode_scheme, encode_scheme
from ..errors import ContractError, MalformedPacket
from ..interfaces import Family
from ..keys import Fingerprint
from ..pack import read_object, register_packet_type, write_object
from ..registry import SchemeSet
from ..signature import Signature
from .encryption import Encryption

log = logging.getLogger(__name__)

MESSAGE_TAG = 0x03
MESSAGE_BLOCK = "PQMSG MESSAGE"

HEADER_FIELDS = frozenset({"sender", "time", "encryption", "compression", "file"})
AUTH_FIELDS = frozenset({"tag", "signature"})


def _map(data: Any, what: str) -> Dict[str, Any]:
    if not isinstance(data, dict):
        raise MalformedPacket(f"{what} must be a map")
    return data


def _known(data: Dict[str, Any], fields: frozenset, what: str) -> None:
    unknown = [k for k in data if k not in fields]
    if unknown:
        raise MalformedPacket(f"unknown {what} fields: {', '.join(map(repr, unknown))}")


def _int(data: Dict[str, Any], key: str) -> int:
    value = data.get(key, 0)
    if not isinstance(value, int) or isinstance(value, bool):
        raise MalformedPacket(f"{key} must be an integer")
    return value


@dataclass(frozen=True)
class FileInfo:
    name: str = ""
    created: int = 0
    modified: int = 0

    def is_empty(self) -> bool:
        return not self.name and self.created == 0 and self.modified == 0

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {}
        if self.name:
            d["name"] = self.name
        if self.created:
            d["created"] = self.created
        if self.modified:
            d["modified"] = self.modified
        return d

    @classmethod
    def from_dict(cls, data: Any) -> "FileInfo":
        data = _map(data, "file info")
        name = data.get("name", "")
        if not isinstance(name, str):
            raise MalformedPacket("file name must be a string")
        return cls(name, _int(data, "created"), _int(data, "modified"))


@dataclass
class Header:
    sender: Fingerprint = field(default_factory=Fingerprint.empty)
    time: int = 0
    encryption: Optional[Encryption] = None
    compression: Any = None
    file: Optional[FileInfo] = None

    @property
    def signed(self) -> bool:
        return not self.sender.is_empty()

    @property
    def encrypted(self) -> bool:
        return self.encryption is not None

    def associated_data(self) -> bytes:
        """Header fields the cipher authenticates; everything except the encryption descriptor."""
        d = self.to_dict()
        d.pop("encryption", None)
        return msgpack.packb(d, use_bin_type=True)

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {}
        if not self.sender.is_empty():
            d["sender"] = bytes(self.sender)
        if self.time:
            d["time"] = self.time
        if self.encryption is not None:
            d["encryption"] = self.encryption.to_dict()
        if self.compression is not None:
            d["compression"] = encode_scheme(self.compression)
        if self.file is not None and not self.file.is_empty():
            d["file"] = self.file.to_dict()
        return d

    @classmethod
    def from_dict(cls, data: Any, schemes: SchemeSet) -> "Header":
        data = _map(data, "header")
        _known(data, HEADER_FIELDS, "header")
        header = cls()
        if "sender" in data:
            header.sender = Fingerprint.from_wire(data["sender"])
        header.time = _int(data, "time")
        if "encryption" in data:
            header.encryption = Encryption.from_dict(data["encryption"], schemes)
        if "compression" in data:
            header.compression = decode_scheme(schemes, Family.COMPRESSION, data["compression"])
        if "file" in data:
            info = FileInfo.from_dict(data["file"])
            header.file = None if info.is_empty() else info
        return header


@dataclass
class Auth:
    tag: bytes = b""
    signature: Optional[Signature] = None

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {}
        if self.tag:
            d["tag"] = self.tag
        if self.signature is not None:
            d["signature"] = self.signature.to_dict()
        return d

    @classmethod
    def from_dict(cls, data: Any) -> "Auth":
        data = _map(data, "auth")
        _known(data, AUTH_FIELDS, "auth")
        tag = data.get("tag", b"")
        if not isinstance(tag, (bytes, bytearray)):
            raise MalformedPacket("tag must be a byte string")
        sig = Signature.from_dict(data["signature"]) if "signature" in data else None
        return cls(bytes(tag), sig)


@register_packet_type(MESSAGE_TAG, "message", MESSAGE_BLOCK)
class Message:
    """Header, lazily produced or consumed body, and the trailing Auth record.

    A message built by :func:`pqmsg.message.send.new_message` writes its body
    while encoding; a decoded message holds the input stream positioned at
    the body until :meth:`decrypt` consumes it. ``auth`` is only set once the
    body has been fully processed.
    """

    def __init__(self, header: Header, body: Any = None, auth: Optional[Auth] = None, *,
                 schemes: Optional[SchemeSet] = None, writer: Any = None) -> None:
        self.header = header
        self.body = body
        self.auth = auth
        self.schemes = schemes
        self._writer = writer

    def encode(self, out: BinaryIO) -> None:
        if self._writer is None:
            raise ContractError("message has no pending body to encode")
        writer, self._writer = self._writer, None
        write_object(out, self.header.to_dict())
        self.auth = writer.write_body(out)
        write_object(out, self.auth.to_dict())
        log.debug("encoded message (signed=%s, encrypted=%s)", self.header.signed, self.header.encrypted)

    @property
    def pending_auth(self) -> Any:
        return self._writer.pending if self._writer is not None else None

    encode_packet = encode

    @classmethod
    def decode_packet(cls, inp: BinaryIO, schemes: SchemeSet) -> "Message":
        header = Header.from_dict(read_object(inp), schemes)
        return cls(header, body=inp, schemes=schemes)

    def decrypt(self, out: BinaryIO, secrets: Any = None, *, require_signature: bool = False) -> "Message":
        from .receive import decrypt

        return decrypt(self, out, secrets, require_signature=require_signature)

    def __repr__(self) -> str:
        return f"Message(signed={self.header.signed}, encrypted={self.header.encrypted})"
