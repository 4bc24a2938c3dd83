from __future__ import annotations

import logging
import os
import struct
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Union

from ..algorithm import decode_scheme, encode_scheme
from ..errors import ConfigurationError, ContractError, KeyTypeError, MalformedPacket, MissingSecret, NotARecipient
from ..interfaces import Cipher, Family
from ..keys import Fingerprint, KEMPrivateKey, KEMPublicKey, PKEPrivateKey, PKEPublicKey, ensure_key
from ..pbkdf import Cost
from ..registry import SchemeSet
from ..secret import PassphraseParams, PassphraseScheme, SecretScheme

"""Confidentiality strategies and their wire descriptors.

Each encrypter turns caller-supplied key material into an authenticated
stream cipher plus an :class:`Encryption` descriptor stored in the message
header. ``Encryption.open`` reverses this on the receiving side.

Failed decapsulation or unwrapping never raises: a random secret is used
instead so the mismatch surfaces as a tag mismatch once the body is drained.
"""

log = logging.getLogger(__name__)

GROUP_BINDING = b"pqmsg/group/v1"
MIN_GROUP_SECRET = 16


def _bytes(data: Dict[str, Any], key: str) -> bytes:
    value = data.get(key)
    if not isinstance(value, (bytes, bytearray)):
        raise MalformedPacket(f"{key} must be a byte string")
    return bytes(value)


def group_binding(recipients: Iterable[Fingerprint]) -> bytes:
    """Associated data that pins the exact recipient set."""
    fps = sorted(bytes(fp) for fp in recipients)
    return GROUP_BINDING + struct.pack("<I", len(fps)) + b"".join(fps)


@dataclass(frozen=True)
class PassphraseEncryption:
    scheme: PassphraseScheme
    cost: Cost
    salt: bytes

    kind = "passphrase"

    @property
    def aead(self) -> Any:
        return self.scheme.aead

    def to_dict(self) -> Dict[str, Any]:
        return {
            "aead": encode_scheme(self.scheme.aead),
            "kdf": encode_scheme(self.scheme.pbkdf),
            "cost": self.cost.to_dict(),
            "salt": self.salt,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], schemes: SchemeSet) -> "PassphraseEncryption":
        aead = decode_scheme(schemes, Family.AEAD, data.get("aead"))
        pbkdf = decode_scheme(schemes, Family.PBKDF, data.get("kdf"))
        cost = pbkdf.cost_type.from_dict(data.get("cost"))
        try:
            cost.validate()
        except ValueError as exc:
            raise MalformedPacket(f"{pbkdf.name} cost: {exc}") from exc
        salt = _bytes(data, "salt")
        if not salt:
            raise MalformedPacket("empty salt")
        return cls(PassphraseScheme(aead, pbkdf), cost, salt)


@dataclass(frozen=True)
class SecretEncryption:
    recipient: Fingerprint
    kem: Any
    scheme: SecretScheme
    ciphertext: bytes

    kind = "secret"

    @property
    def aead(self) -> Any:
        return self.scheme.aead

    def to_dict(self) -> Dict[str, Any]:
        return {
            "recipient": bytes(self.recipient),
            "kem": encode_scheme(self.kem),
            "scheme": self.scheme.to_dict(),
            "ciphertext": self.ciphertext,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], schemes: SchemeSet) -> "SecretEncryption":
        return cls(
            recipient=Fingerprint.from_wire(data.get("recipient")),
            kem=decode_scheme(schemes, Family.KEM, data.get("kem")),
            scheme=SecretScheme.from_dict(data.get("scheme"), schemes),
            ciphertext=_bytes(data, "ciphertext"),
        )


@dataclass(frozen=True)
class GroupEncryption:
    scheme: SecretScheme
    size: int
    secrets: Dict[Fingerprint, bytes] = field(default_factory=dict)

    kind = "group"

    @property
    def aead(self) -> Any:
        return self.scheme.aead

    def to_dict(self) -> Dict[str, Any]:
        return {
            "scheme": self.scheme.to_dict(),
            "size": self.size,
            "secrets": {bytes(fp): ct for fp, ct in self.secrets.items()},
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], schemes: SchemeSet) -> "GroupEncryption":
        size = data.get("size")
        if not isinstance(size, int) or isinstance(size, bool) or size < MIN_GROUP_SECRET:
            raise MalformedPacket("invalid group secret size")
        raw = data.get("secrets")
        if not isinstance(raw, dict) or not raw:
            raise MalformedPacket("group encryption has no recipients")
        secrets: Dict[Fingerprint, bytes] = {}
        for fp, ct in raw.items():
            if not isinstance(ct, (bytes, bytearray)):
                raise MalformedPacket("group secret must be a byte string")
            secrets[Fingerprint.from_wire(fp)] = bytes(ct)
        return cls(SecretScheme.from_dict(data.get("scheme"), schemes), size, secrets)


@dataclass(frozen=True)
class DerivedEncryption:
    scheme: SecretScheme

    kind = "derived"

    @property
    def aead(self) -> Any:
        return self.scheme.aead

    def to_dict(self) -> Dict[str, Any]:
        return self.scheme.to_dict()

    @classmethod
    def from_dict(cls, data: Dict[str, Any], schemes: SchemeSet) -> "DerivedEncryption":
        return cls(SecretScheme.from_dict(data, schemes))


Variant = Union[PassphraseEncryption, SecretEncryption, GroupEncryption, DerivedEncryption]

_VARIANTS = {v.kind: v for v in (PassphraseEncryption, SecretEncryption, GroupEncryption, DerivedEncryption)}


@dataclass(frozen=True)
class Encryption:
    """Header descriptor: a fresh nonce plus exactly one variant."""

    nonce: bytes
    variant: Variant

    def __post_init__(self) -> None:
        if len(self.nonce) != self.variant.aead.nonce_size:
            raise MalformedPacket(
                f"nonce is {len(self.nonce)} bytes, {self.variant.aead.name} needs {self.variant.aead.nonce_size}"
            )

    @property
    def kind(self) -> str:
        return self.variant.kind

    def to_dict(self) -> Dict[str, Any]:
        return {"nonce": self.nonce, self.variant.kind: self.variant.to_dict()}

    @classmethod
    def from_dict(cls, data: Any, schemes: SchemeSet) -> "Encryption":
        if not isinstance(data, dict):
            raise MalformedPacket("encryption must be a map")
        present = [k for k in _VARIANTS if k in data]
        if len(present) != 1:
            raise MalformedPacket(f"encryption must carry exactly one variant, found {present or 'none'}")
        body = data[present[0]]
        if not isinstance(body, dict):
            raise MalformedPacket(f"{present[0]} encryption must be a map")
        variant = _VARIANTS[present[0]].from_dict(body, schemes)
        return cls(_bytes(data, "nonce"), variant)

    def open(self, *, passphrase: Optional[str] = None, recipient: Optional[KEMPrivateKey] = None,
             group_recipient: Optional[PKEPrivateKey] = None, derived: Optional[bytes] = None,
             associated_data: bytes = b"") -> Cipher:
        """Rebuild the decrypting cipher; raises MissingSecret when the needed secret is absent."""
        v = self.variant
        if isinstance(v, PassphraseEncryption):
            if not passphrase:
                raise MissingSecret("message is encrypted with a passphrase, none supplied")
            key, mac_key = v.scheme.derive_keys(passphrase, v.salt, v.cost)
            return v.scheme.aead.new(key, mac_key, self.nonce, associated_data, True)
        if isinstance(v, SecretEncryption):
            if recipient is None:
                raise MissingSecret("message is encrypted to a KEM key, no private key supplied")
            ensure_key(recipient, KEMPrivateKey, "recipient key")
            secret = _decapsulate(recipient, v)
            return v.scheme.new_cipher(secret, self.nonce, associated_data, decrypt=True)
        if isinstance(v, GroupEncryption):
            if group_recipient is None:
                raise MissingSecret("message is encrypted to a recipient group, no private key supplied")
            ensure_key(group_recipient, PKEPrivateKey, "group recipient key")
            ciphertext = v.secrets.get(group_recipient.fingerprint)
            if ciphertext is None:
                raise NotARecipient(f"key {group_recipient.fingerprint.short()} is not among the message recipients")
            secret = _unwrap(group_recipient, ciphertext, v.size)
            ad = associated_data + group_binding(v.secrets)
            return v.scheme.new_cipher(secret, self.nonce, ad, decrypt=True)
        if derived is None:
            raise MissingSecret("message is encrypted with a derived key, none supplied")
        if not isinstance(derived, (bytes, bytearray)):
            raise KeyTypeError(f"derived key must be bytes, got {type(derived).__name__}")
        return v.scheme.new_cipher(bytes(derived), self.nonce, associated_data, decrypt=True)


def _decapsulate(key: KEMPrivateKey, v: SecretEncryption) -> bytes:
    if key.scheme.name.upper() != v.kem.name.upper():
        log.debug("recipient key scheme %s does not match %s", key.scheme.name, v.kem.name)
        return os.urandom(max(32, getattr(v.kem, "shared_secret_size", 32)))
    try:
        return key.decapsulate(v.ciphertext)
    except (ValueError, TypeError) as exc:
        log.debug("decapsulation failed: %s", exc)
        return os.urandom(max(32, getattr(v.kem, "shared_secret_size", 32)))


def _unwrap(key: PKEPrivateKey, ciphertext: bytes, size: int) -> bytes:
    try:
        secret = key.decrypt(ciphertext)
    except (ValueError, TypeError) as exc:
        log.debug("group secret unwrap failed: %s", exc)
        return os.urandom(size)
    if len(secret) != size:
        return os.urandom(size)
    return secret


def _nonce(aead: Any) -> bytes:
    return os.urandom(aead.nonce_size)


class PassphraseEncrypter:
    def __init__(self, passphrase: str, params: PassphraseParams) -> None:
        if params is None:
            raise ContractError("nil passphrase parameters")
        if not passphrase:
            raise ConfigurationError("empty passphrase")
        self._passphrase = passphrase
        self.params = params

    def encrypt(self, associated_data: bytes = b"") -> Tuple[Cipher, Encryption]:
        scheme = self.params.scheme
        cost = self.params.resolved_cost()
        salt = os.urandom(self.params.salt_size)
        key, mac_key = scheme.derive_keys(self._passphrase, salt, cost)
        nonce = _nonce(scheme.aead)
        cipher = scheme.aead.new(key, mac_key, nonce, associated_data, False)
        return cipher, Encryption(nonce, PassphraseEncryption(scheme, cost, salt))


class SecretEncrypter:
    def __init__(self, recipient: KEMPublicKey, scheme: SecretScheme) -> None:
        self.recipient = ensure_key(recipient, KEMPublicKey, "recipient key")
        if scheme is None:
            raise ContractError("nil secret scheme")
        self.scheme = scheme

    def encrypt(self, associated_data: bytes = b"") -> Tuple[Cipher, Encryption]:
        ciphertext, secret = self.recipient.encapsulate()
        nonce = _nonce(self.scheme.aead)
        cipher = self.scheme.new_cipher(secret, nonce, associated_data)
        variant = SecretEncryption(self.recipient.fingerprint, self.recipient.scheme, self.scheme, ciphertext)
        return cipher, Encryption(nonce, variant)


class GroupEncrypter:
    def __init__(self, recipients: Sequence[PKEPublicKey], scheme: SecretScheme) -> None:
        if scheme is None:
            raise ContractError("nil secret scheme")
        if not recipients:
            raise ConfigurationError("group encryption needs at least one recipient")
        keys: List[PKEPublicKey] = [ensure_key(r, PKEPublicKey, "group recipient key") for r in recipients]
        seen = set()
        for key in keys:
            if key.fingerprint in seen:
                raise ConfigurationError(f"duplicate recipient {key.fingerprint.short()}")
            seen.add(key.fingerprint)
        self.recipients = keys
        self.scheme = scheme
        self.size = min(k.scheme.plaintext_size for k in keys)
        if self.size < MIN_GROUP_SECRET:
            raise ConfigurationError(f"recipient keys can only carry {self.size} byte secrets")

    def encrypt(self, associated_data: bytes = b"") -> Tuple[Cipher, Encryption]:
        secret = os.urandom(self.size)
        secrets = {k.fingerprint: k.encrypt(secret) for k in self.recipients}
        nonce = _nonce(self.scheme.aead)
        ad = associated_data + group_binding(secrets)
        cipher = self.scheme.new_cipher(secret, nonce, ad)
        return cipher, Encryption(nonce, GroupEncryption(self.scheme, self.size, secrets))


class DerivedEncrypter:
    def __init__(self, key: bytes, scheme: SecretScheme) -> None:
        if key is None or scheme is None:
            raise ContractError("nil derived key or scheme")
        if not isinstance(key, (bytes, bytearray)):
            raise KeyTypeError(f"derived key must be bytes, got {type(key).__name__}")
        if not key:
            raise ConfigurationError("empty derived key")
        self._key = bytes(key)
        self.scheme = scheme

    def encrypt(self, associated_data: bytes = b"") -> Tuple[Cipher, Encryption]:
        nonce = _nonce(self.scheme.aead)
        cipher = self.scheme.new_cipher(self._key, nonce, associated_data)
        return cipher, Encryption(nonce, DerivedEncryption(self.scheme))
