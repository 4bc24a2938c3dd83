from __future__ import annotations
from typing import Tuple


class OQSKEM:
    """liboqs-backed KEM; ``alg`` is the liboqs mechanism name."""

    def __init__(self, oqs_mod, name: str, alg: str) -> None:
        self._oqs = oqs_mod
        self.name = name
        self.alg = alg
        with oqs_mod.KeyEncapsulation(alg) as kem:
            self.shared_secret_size = kem.details["length_shared_secret"]

    def keygen(self) -> Tuple[bytes, bytes]:
        with self._oqs.KeyEncapsulation(self.alg) as kem:
            pk = kem.generate_keypair()
            sk = kem.export_secret_key()
            return pk, sk

    def encapsulate(self, public_key: bytes) -> Tuple[bytes, bytes]:
        with self._oqs.KeyEncapsulation(self.alg) as kem:
            ct, ss = kem.encap_secret(public_key)
            return ct, ss

    def decapsulate(self, secret_key: bytes, ciphertext: bytes) -> bytes:
        with self._oqs.KeyEncapsulation(self.alg, secret_key=secret_key) as kem:
            return kem.decap_secret(ciphertext)


# scheme name -> (env override, liboqs candidates)
KEM_MECHANISMS = {
    "OQS-ML-KEM-512": ("PQMSG_OQS_ML_KEM_512_ALG", ["ML-KEM-512", "Kyber512"]),
    "OQS-ML-KEM-768": ("PQMSG_OQS_ML_KEM_768_ALG", ["ML-KEM-768", "Kyber768"]),
    "OQS-ML-KEM-1024": ("PQMSG_OQS_ML_KEM_1024_ALG", ["ML-KEM-1024", "Kyber1024"]),
    "OQS-HQC-192": ("PQMSG_OQS_HQC_ALG", ["HQC-192", "HQC-128", "HQC-256"]),
}
