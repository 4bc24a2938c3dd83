"""Schemes backed by the ``cryptography`` package."""

from __future__ import annotations

from pqmsg import aead
from pqmsg.config import Settings
from pqmsg.registry import SchemeSet

from .ciphers import STREAM_CIPHERS
from .ecc import Ed25519, X25519KEM
from .hashes import HASHES
from .kdf import EXPANDERS, pbkdfs
from .macs import MACS

AEAD_COMPOSITIONS = (
    ("AESCTR256", "HMACSHA256"),
    ("AESCTR128", "HMACSHA256"),
    ("AESCTR256", "HMACSHA3"),
    ("CHACHA20", "HMACSHA256"),
    ("CHACHA20", "BLAKE2B"),
)


def register(schemes: SchemeSet, settings: Settings) -> None:
    for h in HASHES:
        schemes.hash.register(h)
    for c in STREAM_CIPHERS:
        schemes.stream_cipher.register(c)
    for m in MACS:
        schemes.mac.register(m)
    for cipher, mac in AEAD_COMPOSITIONS:
        schemes.aead.register(aead.build(schemes.stream_cipher.by_name(cipher), schemes.mac.by_name(mac)))
    for e in EXPANDERS:
        schemes.expander.register(e)
    for p in pbkdfs():
        schemes.pbkdf.register(p)
    schemes.kem.register(X25519KEM())
    schemes.signature.register(Ed25519())


__all__ = ["register"]
