from __future__ import annotations
from enum import Enum
from typing import Any, BinaryIO, Protocol, Tuple

"""Scheme interfaces used by adapters.

Adapters implement these Protocols and are registered into an explicit
:class:`pqmsg.registry.SchemeSet`. The message pipelines interact only with
these interfaces, never with vendor libraries directly.
"""


class Family(str, Enum):
    HASH = "hash"
    STREAM_CIPHER = "stream cipher"
    MAC = "mac"
    AEAD = "aead"
    EXPANDER = "expander"
    PBKDF = "pbkdf"
    KEM = "kem"
    SIGNATURE = "signature"
    PKE = "pke"
    COMPRESSION = "compression"


class HashState(Protocol):
    def update(self, data: bytes) -> None: ...
    def digest(self) -> bytes: ...


class Hash(Protocol):
    name: str
    size: int
    def new(self) -> HashState: ...


class KeyStream(Protocol):
    def xor(self, data: bytes) -> bytes: ...


class StreamCipher(Protocol):
    name: str
    key_size: int
    iv_size: int
    def new(self, key: bytes, iv: bytes) -> KeyStream: ...


class MACState(Protocol):
    def update(self, data: bytes) -> None: ...
    def tag(self) -> bytes: ...


class MAC(Protocol):
    name: str
    key_size: int
    tag_size: int
    def new(self, key: bytes) -> MACState: ...


class Cipher(Protocol):
    """Authenticated stream cipher state."""
    def crypt(self, data: bytes) -> bytes: ...
    def tag(self) -> bytes: ...


class AEAD(Protocol):
    name: str
    key_size: int
    mac_key_size: int
    nonce_size: int
    tag_size: int
    def new(self, key: bytes, mac_key: bytes, nonce: bytes, associated_data: bytes, decrypt: bool) -> Cipher: ...


class Expander(Protocol):
    name: str
    def expand(self, secret: bytes, info: bytes, size: int) -> bytes: ...


class PBKDF(Protocol):
    name: str
    def new_cost(self) -> Any: ...
    def derive(self, password: bytes, salt: bytes, size: int, cost: Any) -> bytes: ...


class KEM(Protocol):
    """Key Encapsulation Mechanism contract."""
    name: str
    shared_secret_size: int
    def keygen(self) -> Tuple[bytes, bytes]: ...
    def encapsulate(self, public_key: bytes) -> Tuple[bytes, bytes]: ...
    def decapsulate(self, secret_key: bytes, ciphertext: bytes) -> bytes: ...


class Signature(Protocol):
    """Digital Signature contract."""
    name: str
    prehash: str
    def keygen(self) -> Tuple[bytes, bytes]: ...
    def sign(self, secret_key: bytes, message: bytes) -> bytes: ...
    def verify(self, public_key: bytes, message: bytes, signature: bytes) -> bool: ...


class PKE(Protocol):
    """Public key encryption of short secrets."""
    name: str
    plaintext_size: int
    def keygen(self) -> Tuple[bytes, bytes]: ...
    def encrypt(self, public_key: bytes, plaintext: bytes) -> bytes: ...
    def decrypt(self, secret_key: bytes, ciphertext: bytes) -> bytes: ...


class Compression(Protocol):
    name: str
    max_level: int
    default_level: int
    def new_opts(self) -> Any: ...
    def check(self, level: int, opts: Any) -> None: ...
    def compress(self, writer: BinaryIO, level: int, opts: Any) -> BinaryIO: ...
    def decompress(self, reader: BinaryIO, opts: Any) -> BinaryIO: ...
