from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from .algorithm import decode_scheme, encode_scheme
from .errors import ConfigurationError, ContractError, MalformedPacket
from .interfaces import Family
from .pbkdf import Cost
from .registry import SchemeSet

SECRET_INFO = b"pqmsg/secret/v1 "


def split_keys(material: bytes, aead: Any) -> Tuple[bytes, bytes]:
    return material[:aead.key_size], material[aead.key_size:aead.key_size + aead.mac_key_size]


@dataclass(frozen=True)
class SecretScheme:
    """AEAD keyed from a shared secret through an expander."""

    aead: Any
    expander: Any

    @property
    def name(self) -> str:
        return f"{encode_scheme(self.aead)}+{encode_scheme(self.expander)}"

    def derive_keys(self, secret: bytes) -> Tuple[bytes, bytes]:
        if not secret:
            raise ContractError("empty shared secret")
        size = self.aead.key_size + self.aead.mac_key_size
        material = self.expander.expand(secret, SECRET_INFO + encode_scheme(self.aead).encode(), size)
        return split_keys(material, self.aead)

    def new_cipher(self, secret: bytes, nonce: bytes, associated_data: bytes = b"", decrypt: bool = False):
        key, mac_key = self.derive_keys(secret)
        return self.aead.new(key, mac_key, nonce, associated_data, decrypt)

    def to_dict(self) -> Dict[str, str]:
        return {"aead": encode_scheme(self.aead), "expander": encode_scheme(self.expander)}

    @classmethod
    def from_dict(cls, data: Any, schemes: SchemeSet) -> "SecretScheme":
        if not isinstance(data, dict):
            raise MalformedPacket("secret scheme must be a map")
        try:
            return cls(
                aead=decode_scheme(schemes, Family.AEAD, data["aead"]),
                expander=decode_scheme(schemes, Family.EXPANDER, data["expander"]),
            )
        except KeyError as exc:
            raise MalformedPacket(f"secret scheme: missing {exc.args[0]!r}") from None

    @classmethod
    def lookup(cls, schemes: SchemeSet, aead: str, expander: str) -> "SecretScheme":
        return cls(schemes.aead.by_name(aead), schemes.expander.by_name(expander))


@dataclass(frozen=True)
class PassphraseScheme:
    """AEAD keyed from a passphrase through a password-based KDF."""

    aead: Any
    pbkdf: Any

    @property
    def name(self) -> str:
        return f"{encode_scheme(self.aead)}+{encode_scheme(self.pbkdf)}"

    def derive_keys(self, passphrase: str, salt: bytes, cost: Cost) -> Tuple[bytes, bytes]:
        if not passphrase:
            raise ConfigurationError("empty passphrase")
        size = self.aead.key_size + self.aead.mac_key_size
        material = self.pbkdf.derive(passphrase.encode("utf-8"), salt, size, cost)
        return split_keys(material, self.aead)

    @classmethod
    def lookup(cls, schemes: SchemeSet, aead: str, pbkdf: str) -> "PassphraseScheme":
        return cls(schemes.aead.by_name(aead), schemes.pbkdf.by_name(pbkdf))


@dataclass
class PassphraseParams:
    scheme: PassphraseScheme
    cost: Optional[Cost] = None
    salt_size: int = 16

    def resolved_cost(self) -> Cost:
        cost = self.cost if self.cost is not None else self.scheme.pbkdf.new_cost()
        self.scheme.pbkdf.check_cost(cost)
        return cost
