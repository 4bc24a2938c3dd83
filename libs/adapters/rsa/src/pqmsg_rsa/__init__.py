"""Classical RSA schemes; key size comes from ``Settings.rsa_bits``."""

from __future__ import annotations

from pqmsg.config import Settings
from pqmsg.registry import SchemeSet

from .rsa_adapter import RSAOAEP, RSASignature


def register(schemes: SchemeSet, settings: Settings) -> None:
    schemes.pke.register(RSAOAEP(settings.rsa_bits))
    schemes.signature.register(RSASignature(settings.rsa_bits))


__all__ = ["register"]
