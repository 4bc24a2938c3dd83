from __future__ import annotations

from typing import Tuple

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey, Ed25519PublicKey
from cryptography.hazmat.primitives.asymmetric.x25519 import X25519PrivateKey, X25519PublicKey
from cryptography.hazmat.primitives.kdf.hkdf import HKDF

_RAW = serialization.Encoding.Raw
_RAW_PUB = serialization.PublicFormat.Raw
_RAW_PRIV = serialization.PrivateFormat.Raw
_NOENC = serialization.NoEncryption()

X25519_INFO = b"pqmsg/x25519-kem/v1"


def x25519_keypair() -> Tuple[bytes, bytes]:
    sk = X25519PrivateKey.generate()
    return sk.public_key().public_bytes(_RAW, _RAW_PUB), sk.private_bytes(_RAW, _RAW_PRIV, _NOENC)


class X25519KEM:
    """DH-based KEM: the ciphertext is an ephemeral public key."""

    name = "X25519"
    shared_secret_size = 32

    def keygen(self) -> Tuple[bytes, bytes]:
        return x25519_keypair()

    def _derive(self, dh: bytes, ct: bytes, pk: bytes) -> bytes:
        return HKDF(algorithm=hashes.SHA256(), length=32, salt=None, info=X25519_INFO + ct + pk).derive(dh)

    def encapsulate(self, public_key: bytes) -> Tuple[bytes, bytes]:
        peer = X25519PublicKey.from_public_bytes(public_key)
        eph = X25519PrivateKey.generate()
        ct = eph.public_key().public_bytes(_RAW, _RAW_PUB)
        return ct, self._derive(eph.exchange(peer), ct, public_key)

    def decapsulate(self, secret_key: bytes, ciphertext: bytes) -> bytes:
        sk = X25519PrivateKey.from_private_bytes(secret_key)
        pk = sk.public_key().public_bytes(_RAW, _RAW_PUB)
        dh = sk.exchange(X25519PublicKey.from_public_bytes(ciphertext))
        return self._derive(dh, ciphertext, pk)


class Ed25519:
    name = "ED25519"
    prehash = "SHA3-512"

    def keygen(self) -> Tuple[bytes, bytes]:
        sk = Ed25519PrivateKey.generate()
        return sk.public_key().public_bytes(_RAW, _RAW_PUB), sk.private_bytes(_RAW, _RAW_PRIV, _NOENC)

    def sign(self, secret_key: bytes, message: bytes) -> bytes:
        return Ed25519PrivateKey.from_private_bytes(secret_key).sign(message)

    def verify(self, public_key: bytes, message: bytes, signature: bytes) -> bool:
        try:
            Ed25519PublicKey.from_public_bytes(public_key).verify(signature, message)
            return True
        except InvalidSignature:
            return False
