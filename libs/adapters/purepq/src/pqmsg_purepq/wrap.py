from __future__ import annotations

from typing import Tuple

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import ChaCha20Poly1305
from cryptography.hazmat.primitives.kdf.hkdf import HKDF

from .kem_adapters import ML_KEM_768_KEM, ML_KEM_1024_KEM, MLKEM

WRAP_INFO = b"pqmsg/kem-wrap/v1"
_NONCE = bytes(12)


class KEMWrap:
    """Public key encryption of short secrets: KEM, then ChaCha20-Poly1305 under the KEM secret.

    Every encryption runs a fresh encapsulation, so the fixed nonce is never
    reused under one key.
    """

    plaintext_size = 64

    def __init__(self, name: str, kem: MLKEM, ciphertext_size: int) -> None:
        self.name = name
        self._kem = kem
        self._ct_size = ciphertext_size

    def keygen(self) -> Tuple[bytes, bytes]:
        return self._kem.keygen()

    def _aead(self, ss: bytes, kem_ct: bytes) -> ChaCha20Poly1305:
        key = HKDF(algorithm=hashes.SHA256(), length=32, salt=None, info=WRAP_INFO + kem_ct).derive(ss)
        return ChaCha20Poly1305(key)

    def encrypt(self, public_key: bytes, plaintext: bytes) -> bytes:
        if len(plaintext) > self.plaintext_size:
            raise ValueError(f"{self.name}: plaintext longer than {self.plaintext_size} bytes")
        kem_ct, ss = self._kem.encapsulate(public_key)
        return kem_ct + self._aead(ss, kem_ct).encrypt(_NONCE, plaintext, None)

    def decrypt(self, secret_key: bytes, ciphertext: bytes) -> bytes:
        if len(ciphertext) <= self._ct_size:
            raise ValueError(f"{self.name}: ciphertext too short")
        kem_ct, body = ciphertext[:self._ct_size], ciphertext[self._ct_size:]
        ss = self._kem.decapsulate(secret_key, kem_ct)
        try:
            return self._aead(ss, kem_ct).decrypt(_NONCE, body, None)
        except InvalidTag as exc:
            raise ValueError(f"{self.name}: cannot unwrap secret") from exc

    def __repr__(self) -> str:
        return f"PKE({self.name})"


PKES = (
    KEMWrap("ML-KEM-768-WRAP", ML_KEM_768_KEM, 1088),
    KEMWrap("ML-KEM-1024-WRAP", ML_KEM_1024_KEM, 1568),
)
