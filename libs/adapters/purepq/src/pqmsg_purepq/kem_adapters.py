from __future__ import annotations

from typing import Tuple

from kyber_py.ml_kem import ML_KEM_512, ML_KEM_768, ML_KEM_1024


class MLKEM:
    """FIPS 203 ML-KEM through kyber-py.

    Decapsulation with the wrong key does not fail: implicit rejection
    returns an unrelated secret.
    """

    shared_secret_size = 32

    def __init__(self, name: str, impl) -> None:
        self.name = name
        self._impl = impl

    def keygen(self) -> Tuple[bytes, bytes]:
        ek, dk = self._impl.keygen()
        return ek, dk

    def encapsulate(self, public_key: bytes) -> Tuple[bytes, bytes]:
        ss, ct = self._impl.encaps(public_key)
        return ct, ss

    def decapsulate(self, secret_key: bytes, ciphertext: bytes) -> bytes:
        return self._impl.decaps(secret_key, ciphertext)

    def __repr__(self) -> str:
        return f"KEM({self.name})"


ML_KEM_512_KEM = MLKEM("ML-KEM-512", ML_KEM_512)
ML_KEM_768_KEM = MLKEM("ML-KEM-768", ML_KEM_768)
ML_KEM_1024_KEM = MLKEM("ML-KEM-1024", ML_KEM_1024)

KEMS = (ML_KEM_512_KEM, ML_KEM_768_KEM, ML_KEM_1024_KEM)
