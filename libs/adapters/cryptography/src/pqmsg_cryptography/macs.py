from __future__ import annotations

import hashlib

from cryptography.hazmat.primitives import hashes, hmac


class _HMACState:
    def __init__(self, key: bytes, algorithm: hashes.HashAlgorithm) -> None:
        self._ctx = hmac.HMAC(key, algorithm)

    def update(self, data: bytes) -> None:
        self._ctx.update(data)

    def tag(self) -> bytes:
        return self._ctx.copy().finalize()


class HMAC:
    def __init__(self, name: str, factory, key_size: int = 32) -> None:
        self.name = name
        self._factory = factory
        self.key_size = key_size
        self.tag_size = factory().digest_size

    def new(self, key: bytes) -> _HMACState:
        return _HMACState(key, self._factory())


class _Blake2bState:
    def __init__(self, key: bytes, size: int) -> None:
        self._ctx = hashlib.blake2b(key=key, digest_size=size)

    def update(self, data: bytes) -> None:
        self._ctx.update(data)

    def tag(self) -> bytes:
        return self._ctx.digest()


class Blake2bMAC:
    """Keyed BLAKE2b; cryptography exposes BLAKE2 only unkeyed."""

    name = "BLAKE2B"
    key_size = 32
    tag_size = 32

    def new(self, key: bytes) -> _Blake2bState:
        return _Blake2bState(key, self.tag_size)


MACS = (
    HMAC("HMACSHA256", hashes.SHA256),
    HMAC("HMACSHA512", hashes.SHA512, key_size=64),
    HMAC("HMACSHA3", hashes.SHA3_256),
    Blake2bMAC(),
)
