from __future__ import annotations

import logging
import struct
from dataclasses import dataclass
from typing import Any, Dict, Optional

from .errors import ContractError, MalformedPacket, SignatureInvalid
from .keys import Fingerprint, SignPrivateKey, SignPublicKey, ensure_key
from .registry import SchemeSet

log = logging.getLogger(__name__)

SIGNATURE_CONTEXT = b"pqmsg/signature/v1"


@dataclass(frozen=True)
class Validity:
    """Time range (unix seconds) in which a signature is valid; ``expires`` 0 means never."""

    created: int = 0
    expires: int = 0

    @classmethod
    def from_expiry(cls, created: int, expiry: int = 0) -> "Validity":
        if expiry < 0:
            raise ContractError("negative expiry")
        return cls(created, created + expiry if expiry else 0)

    def validate(self) -> None:
        if self.created <= 0:
            raise ValueError("creation time is not set")
        if self.expires != 0 and self.expires <= self.created:
            raise ValueError("expiration time is not after creation time")

    def is_valid_at(self, t: int) -> bool:
        if t < self.created:
            return False
        return self.expires == 0 or t < self.expires

    def encode(self) -> bytes:
        return struct.pack("<qq", self.created, self.expires)

    def to_dict(self) -> Dict[str, int]:
        d = {"created": self.created}
        if self.expires:
            d["expires"] = self.expires
        return d

    @classmethod
    def from_dict(cls, data: Any) -> "Validity":
        if not isinstance(data, dict):
            raise MalformedPacket("validity must be a map")
        try:
            return cls(int(data.get("created", 0)), int(data.get("expires", 0)))
        except (TypeError, ValueError) as exc:
            raise MalformedPacket(f"validity: {exc}") from exc


@dataclass(frozen=True)
class Signature:
    signature: bytes
    validity: Validity
    issuer: Fingerprint

    def validate(self) -> None:
        try:
            self.validity.validate()
        except ValueError as exc:
            raise SignatureInvalid(f"invalid signature validity: {exc}") from exc
        if self.issuer.is_empty():
            raise SignatureInvalid("invalid signature (no issuer)")
        if not self.signature:
            raise SignatureInvalid("invalid signature (no signature)")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sig": self.signature,
            "validity": self.validity.to_dict(),
            "issuer": bytes(self.issuer),
        }

    @classmethod
    def from_dict(cls, data: Any) -> "Signature":
        if not isinstance(data, dict):
            raise MalformedPacket("signature must be a map")
        sig = data.get("sig", b"")
        if not isinstance(sig, (bytes, bytearray)):
            raise MalformedPacket("signature value must be a byte string")
        return cls(
            signature=bytes(sig),
            validity=Validity.from_dict(data.get("validity", {})),
            issuer=Fingerprint.from_wire(data.get("issuer", b"")),
        )


class _Digest:
    def __init__(self, scheme: Any, schemes: SchemeSet) -> None:
        self._hash = schemes.hash.by_name(getattr(scheme, "prehash", "SHA3-512")).new()

    def update(self, data: bytes) -> None:
        self._hash.update(data)

    def finish(self, validity: Validity) -> bytes:
        self._hash.update(validity.encode())
        return SIGNATURE_CONTEXT + self._hash.digest()


class StreamSigner:
    """Hashes data as it streams by and signs the digest at the end."""

    def __init__(self, key: SignPrivateKey, schemes: SchemeSet) -> None:
        self.key = ensure_key(key, SignPrivateKey, "signing key")
        self._digest = _Digest(key.scheme, schemes)
        self._done = False

    def write(self, data: bytes) -> int:
        if self._done:
            raise ContractError("write after sign")
        self._digest.update(data)
        return len(data)

    update = write

    def sign(self, validity: Validity) -> Signature:
        if self._done:
            raise ContractError("signature already produced")
        try:
            validity.validate()
        except ValueError as exc:
            raise ContractError(f"invalid validity: {exc}") from exc
        self._done = True
        value = self.key.sign(self._digest.finish(validity))
        log.debug("signed stream with %s key %s", self.key.scheme.name, self.key.fingerprint.short())
        return Signature(value, validity, self.key.fingerprint)


class StreamVerifier:
    """Counterpart of :class:`StreamSigner`; raises SignatureInvalid on any failure."""

    def __init__(self, key: SignPublicKey, schemes: SchemeSet) -> None:
        self.key = ensure_key(key, SignPublicKey, "issuer key")
        self._digest = _Digest(key.scheme, schemes)

    def write(self, data: bytes) -> int:
        self._digest.update(data)
        return len(data)

    update = write

    def verify(self, signature: Optional[Signature]) -> None:
        if signature is None:
            raise SignatureInvalid("message is not signed")
        signature.validate()
        if signature.issuer != self.key.fingerprint:
            raise SignatureInvalid(
                f"signature issuer {signature.issuer.short()} does not match key {self.key.fingerprint.short()}"
            )
        message = self._digest.finish(signature.validity)
        try:
            ok = self.key.verify(message, signature.signature)
        except (ValueError, TypeError) as exc:
            raise SignatureInvalid(f"signature verification failed: {exc}") from exc
        if not ok:
            raise SignatureInvalid("the signature cannot be verified, it may have been forged")
