from __future__ import annotations
from typing import Tuple


class OQSSignature:
    """liboqs-backed signature; ``alg`` is the liboqs mechanism name."""

    prehash = "SHA3-512"

    def __init__(self, oqs_mod, name: str, alg: str) -> None:
        self._oqs = oqs_mod
        self.name = name
        self.alg = alg

    def keygen(self) -> Tuple[bytes, bytes]:
        with self._oqs.Signature(self.alg) as sig:
            pk = sig.generate_keypair()
            sk = sig.export_secret_key()
            return pk, sk

    def sign(self, secret_key: bytes, message: bytes) -> bytes:
        with self._oqs.Signature(self.alg, secret_key=secret_key) as sig:
            return sig.sign(message)

    def verify(self, public_key: bytes, message: bytes, signature: bytes) -> bool:
        with self._oqs.Signature(self.alg) as sig:
            return bool(sig.verify(message, signature, public_key))


SIG_MECHANISMS = {
    "OQS-ML-DSA-44": ("PQMSG_OQS_ML_DSA_44_ALG", ["ML-DSA-44", "Dilithium2"]),
    "OQS-ML-DSA-65": ("PQMSG_OQS_ML_DSA_65_ALG", ["ML-DSA-65", "Dilithium3"]),
    "OQS-ML-DSA-87": ("PQMSG_OQS_ML_DSA_87_ALG", ["ML-DSA-87", "Dilithium5"]),
    "OQS-FALCON-512": ("PQMSG_OQS_FALCON_512_ALG", ["Falcon-512"]),
    "OQS-FALCON-1024": ("PQMSG_OQS_FALCON_1024_ALG", ["Falcon-1024"]),
}
