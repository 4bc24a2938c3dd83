"""ML-KEM and ML-DSA from the pure-Python kyber-py and dilithium-py packages."""

from __future__ import annotations

from pqmsg.config import Settings
from pqmsg.registry import SchemeSet

from .hybrid import x25519_mlkem768
from .kem_adapters import KEMS
from .sig_adapters import SIGNATURES
from .wrap import PKES


def register(schemes: SchemeSet, settings: Settings) -> None:
    for kem in KEMS:
        schemes.kem.register(kem)
    schemes.kem.register(x25519_mlkem768())
    for sig in SIGNATURES:
        schemes.signature.register(sig)
    for pke in PKES:
        schemes.pke.register(pke)


__all__ = ["register"]
