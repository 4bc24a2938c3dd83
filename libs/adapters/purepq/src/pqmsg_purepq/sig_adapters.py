from __future__ import annotations

from typing import Tuple

from dilithium_py.ml_dsa import ML_DSA_44, ML_DSA_65, ML_DSA_87


class MLDSA:
    """FIPS 204 ML-DSA through dilithium-py."""

    prehash = "SHA3-512"

    def __init__(self, name: str, impl) -> None:
        self.name = name
        self._impl = impl

    def keygen(self) -> Tuple[bytes, bytes]:
        pk, sk = self._impl.keygen()
        return pk, sk

    def sign(self, secret_key: bytes, message: bytes) -> bytes:
        return self._impl.sign(secret_key, message)

    def verify(self, public_key: bytes, message: bytes, signature: bytes) -> bool:
        return bool(self._impl.verify(public_key, message, signature))

    def __repr__(self) -> str:
        return f"Signature({self.name})"


SIGNATURES = (
    MLDSA("ML-DSA-44", ML_DSA_44),
    MLDSA("ML-DSA-65", ML_DSA_65),
    MLDSA("ML-DSA-87", ML_DSA_87),
)
