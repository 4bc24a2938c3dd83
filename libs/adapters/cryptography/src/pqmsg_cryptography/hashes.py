from __future__ import annotations

from cryptography.hazmat.primitives import hashes


class _HashState:
    def __init__(self, algorithm: hashes.HashAlgorithm) -> None:
        self._ctx = hashes.Hash(algorithm)

    def update(self, data: bytes) -> None:
        self._ctx.update(data)

    def digest(self) -> bytes:
        return self._ctx.copy().finalize()


class CryptographyHash:
    def __init__(self, name: str, factory) -> None:
        self.name = name
        self._factory = factory
        self.size = factory().digest_size

    @property
    def algorithm(self) -> hashes.HashAlgorithm:
        return self._factory()

    def new(self) -> _HashState:
        return _HashState(self._factory())

    def __repr__(self) -> str:
        return f"Hash({self.name})"


HASHES = (
    CryptographyHash("SHA256", hashes.SHA256),
    CryptographyHash("SHA512", hashes.SHA512),
    CryptographyHash("SHA3-256", hashes.SHA3_256),
    CryptographyHash("SHA3-512", hashes.SHA3_512),
    CryptographyHash("BLAKE2B", lambda: hashes.BLAKE2b(64)),
)
