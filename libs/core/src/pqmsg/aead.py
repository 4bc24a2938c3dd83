from __future__ import annotations

import struct
from typing import Any

from .errors import ContractError

"""Authenticated stream encryption built from a stream cipher and a MAC.

Unlike one-shot AEAD constructions the resulting cipher encrypts data
incrementally and reports the tag at any point without disturbing its state
(Encrypt-then-MAC).
"""

DELIMITER = "-"


def _frame(data: bytes) -> bytes:
    return struct.pack("<Q", len(data)) + data


class EncryptThenMAC:
    """Streaming AEAD state returned by :meth:`ETMScheme.new`."""

    def __init__(self, keystream: Any, mac: Any, decrypt: bool) -> None:
        self._keystream = keystream
        self._mac = mac
        self._decrypt = decrypt

    def crypt(self, data: bytes) -> bytes:
        if not data:
            return b""
        if self._decrypt:
            self._mac.update(data)
            return self._keystream.xor(data)
        out = self._keystream.xor(data)
        self._mac.update(out)
        return out

    def tag(self) -> bytes:
        return self._mac.tag()


class ETMScheme:
    """AEAD scheme named ``CIPHER-MAC``; the nonce is the cipher IV."""

    def __init__(self, cipher: Any, mac: Any) -> None:
        self.cipher = cipher
        self.mac = mac
        self.name = f"{cipher.name}{DELIMITER}{mac.name}".upper()

    @property
    def key_size(self) -> int:
        return self.cipher.key_size

    @property
    def mac_key_size(self) -> int:
        return self.mac.key_size

    @property
    def nonce_size(self) -> int:
        return self.cipher.iv_size

    @property
    def tag_size(self) -> int:
        return self.mac.tag_size

    def new(self, key: bytes, mac_key: bytes, nonce: bytes, associated_data: bytes = b"",
            decrypt: bool = False) -> EncryptThenMAC:
        if len(key) != self.key_size:
            raise ContractError(f"{self.name}: cipher key must be {self.key_size} bytes, got {len(key)}")
        if len(mac_key) != self.mac_key_size:
            raise ContractError(f"{self.name}: MAC key must be {self.mac_key_size} bytes, got {len(mac_key)}")
        if len(nonce) != self.nonce_size:
            raise ContractError(f"{self.name}: nonce must be {self.nonce_size} bytes, got {len(nonce)}")
        mac = self.mac.new(mac_key)
        mac.update(_frame(nonce))
        mac.update(_frame(associated_data or b""))
        return EncryptThenMAC(self.cipher.new(key, nonce), mac, decrypt)

    def __repr__(self) -> str:
        return f"ETMScheme({self.name})"


def build(cipher: Any, mac: Any) -> ETMScheme:
    return ETMScheme(cipher, mac)
