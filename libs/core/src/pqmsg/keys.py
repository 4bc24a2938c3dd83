from __future__ import annotations

import hashlib
from dataclasses import dataclass, field
from typing import Any, Tuple, Type, TypeVar

from .errors import ContractError, KeyTypeError, MalformedPacket
from .registry import normalize

FINGERPRINT_SIZE = 32


@dataclass(frozen=True)
class Fingerprint:
    """SHA-256 identifier of a public key, bound to its scheme name."""

    value: bytes = bytes(FINGERPRINT_SIZE)

    def __post_init__(self) -> None:
        if len(self.value) != FINGERPRINT_SIZE:
            raise MalformedPacket(f"fingerprint must be {FINGERPRINT_SIZE} bytes, got {len(self.value)}")

    @classmethod
    def of(cls, scheme_name: str, public_key: bytes) -> "Fingerprint":
        h = hashlib.sha256()
        h.update(normalize(scheme_name).encode("utf-8"))
        h.update(b"\x00")
        h.update(public_key)
        return cls(h.digest())

    @classmethod
    def empty(cls) -> "Fingerprint":
        return cls()

    @classmethod
    def from_wire(cls, value: Any) -> "Fingerprint":
        if not isinstance(value, (bytes, bytearray)):
            raise MalformedPacket("fingerprint must be a byte string")
        return cls(bytes(value))

    def is_empty(self) -> bool:
        return self.value == bytes(FINGERPRINT_SIZE)

    def hex(self) -> str:
        return self.value.hex()

    def short(self) -> str:
        return self.value[:8].hex()

    def __bytes__(self) -> bytes:
        return self.value

    def __str__(self) -> str:
        return ":".join(self.value[i:i + 4].hex() for i in range(0, FINGERPRINT_SIZE, 4))


@dataclass(frozen=True)
class _PublicKey:
    scheme: Any
    data: bytes = field(repr=False)

    @property
    def fingerprint(self) -> Fingerprint:
        return Fingerprint.of(self.scheme.name, self.data)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({normalize(self.scheme.name)}, {self.fingerprint.short()})"


@dataclass(frozen=True, repr=False)
class SignPublicKey(_PublicKey):
    def verify(self, message: bytes, signature: bytes) -> bool:
        return bool(self.scheme.verify(self.data, message, signature))


@dataclass(frozen=True, repr=False)
class KEMPublicKey(_PublicKey):
    def encapsulate(self) -> Tuple[bytes, bytes]:
        return self.scheme.encapsulate(self.data)


@dataclass(frozen=True, repr=False)
class PKEPublicKey(_PublicKey):
    def encrypt(self, plaintext: bytes) -> bytes:
        return self.scheme.encrypt(self.data, plaintext)


@dataclass(frozen=True)
class _PrivateKey:
    public: Any
    data: bytes = field(repr=False)

    @property
    def scheme(self) -> Any:
        return self.public.scheme

    @property
    def fingerprint(self) -> Fingerprint:
        return self.public.fingerprint

    def __repr__(self) -> str:
        return f"{type(self).__name__}({normalize(self.scheme.name)}, {self.fingerprint.short()})"


@dataclass(frozen=True, repr=False)
class SignPrivateKey(_PrivateKey):
    public: SignPublicKey

    def sign(self, message: bytes) -> bytes:
        return self.scheme.sign(self.data, message)


@dataclass(frozen=True, repr=False)
class KEMPrivateKey(_PrivateKey):
    public: KEMPublicKey

    def decapsulate(self, ciphertext: bytes) -> bytes:
        return self.scheme.decapsulate(self.data, ciphertext)


@dataclass(frozen=True, repr=False)
class PKEPrivateKey(_PrivateKey):
    public: PKEPublicKey

    def decrypt(self, ciphertext: bytes) -> bytes:
        return self.scheme.decrypt(self.data, ciphertext)


def generate_sign(scheme: Any) -> SignPrivateKey:
    pk, sk = scheme.keygen()
    return SignPrivateKey(SignPublicKey(scheme, pk), sk)


def generate_kem(scheme: Any) -> KEMPrivateKey:
    pk, sk = scheme.keygen()
    return KEMPrivateKey(KEMPublicKey(scheme, pk), sk)


def generate_pke(scheme: Any) -> PKEPrivateKey:
    pk, sk = scheme.keygen()
    return PKEPrivateKey(PKEPublicKey(scheme, pk), sk)


K = TypeVar("K")


def ensure_key(obj: Any, cls: Type[K], role: str) -> K:
    """Reject None and keys of another family before any cryptography happens."""
    if obj is None:
        raise ContractError(f"nil {role}")
    if not isinstance(obj, cls):
        raise KeyTypeError(f"{role} must be a {cls.__name__}, got {type(obj).__name__}")
    return obj
