from __future__ import annotations

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.hkdf import HKDF
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC
from cryptography.hazmat.primitives.kdf.scrypt import Scrypt

from pqmsg.errors import ContractError
from pqmsg.pbkdf import BasePBKDF, PBKDF2Cost, ScryptCost


class HKDFExpander:
    def __init__(self, name: str, factory) -> None:
        self.name = name
        self._factory = factory

    def expand(self, secret: bytes, info: bytes, size: int) -> bytes:
        if size < 1 or size > 255 * self._factory().digest_size:
            raise ContractError(f"{self.name}: cannot expand to {size} bytes")
        return HKDF(algorithm=self._factory(), length=size, salt=None, info=info).derive(secret)


def _scrypt(password: bytes, salt: bytes, size: int, cost: ScryptCost) -> bytes:
    return Scrypt(salt=salt, length=size, n=cost.n, r=cost.r, p=cost.p).derive(password)


def _pbkdf2(password: bytes, salt: bytes, size: int, cost: PBKDF2Cost) -> bytes:
    return PBKDF2HMAC(algorithm=hashes.SHA256(), length=size, salt=salt, iterations=cost.iterations).derive(password)


EXPANDERS = (
    HKDFExpander("HKDF-SHA256", hashes.SHA256),
    HKDFExpander("HKDF-SHA512", hashes.SHA512),
    HKDFExpander("HKDF-SHA3-256", hashes.SHA3_256),
)


def pbkdfs():
    return (
        BasePBKDF("SCRYPT", ScryptCost, _scrypt),
        BasePBKDF("PBKDF2-SHA256", PBKDF2Cost, _pbkdf2),
    )
