from __future__ import annotations

from typing import Tuple

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.hkdf import HKDF

from pqmsg_cryptography.ecc import X25519KEM

from .kem_adapters import ML_KEM_768_KEM, MLKEM

"""X25519 + ML-KEM-768 hybrid KEM.

Both shared secrets are combined with HKDF-SHA256; the info string binds both
ciphertexts so neither half can be swapped independently. Keys and
ciphertexts are the X25519 part (32 bytes) followed by the ML-KEM part.
"""

HYBRID_INFO = b"pqmsg/hybrid-kem/v1"
X25519_SIZE = 32


class HybridKEM:
    shared_secret_size = 32

    def __init__(self, name: str, classical: X25519KEM, pq: MLKEM) -> None:
        self.name = name
        self._classical = classical
        self._pq = pq

    def keygen(self) -> Tuple[bytes, bytes]:
        cpk, csk = self._classical.keygen()
        ppk, psk = self._pq.keygen()
        return cpk + ppk, csk + psk

    def _combine(self, c_ss: bytes, p_ss: bytes, ct: bytes) -> bytes:
        return HKDF(algorithm=hashes.SHA256(), length=self.shared_secret_size, salt=None,
                    info=HYBRID_INFO + ct).derive(c_ss + p_ss)

    def encapsulate(self, public_key: bytes) -> Tuple[bytes, bytes]:
        if len(public_key) <= X25519_SIZE:
            raise ValueError(f"{self.name}: public key too short")
        c_ct, c_ss = self._classical.encapsulate(public_key[:X25519_SIZE])
        p_ct, p_ss = self._pq.encapsulate(public_key[X25519_SIZE:])
        ct = c_ct + p_ct
        return ct, self._combine(c_ss, p_ss, ct)

    def decapsulate(self, secret_key: bytes, ciphertext: bytes) -> bytes:
        if len(secret_key) <= X25519_SIZE or len(ciphertext) <= X25519_SIZE:
            raise ValueError(f"{self.name}: key or ciphertext too short")
        c_ss = self._classical.decapsulate(secret_key[:X25519_SIZE], ciphertext[:X25519_SIZE])
        p_ss = self._pq.decapsulate(secret_key[X25519_SIZE:], ciphertext[X25519_SIZE:])
        return self._combine(c_ss, p_ss, ciphertext)


def x25519_mlkem768() -> HybridKEM:
    return HybridKEM("X25519-ML-KEM-768", X25519KEM(), ML_KEM_768_KEM)
