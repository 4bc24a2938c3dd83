from __future__ import annotations

import logging
from typing import Any, Dict, Iterator, List

from .errors import ContractError, UnknownScheme
from .interfaces import Family

log = logging.getLogger(__name__)


def normalize(name: str) -> str:
    """Registry key for a scheme name: case-insensitive, stored upper-cased."""
    return name.strip().upper()


class Registry:
    """Name -> scheme map for one algorithm family.

    Populated once by the composition root and read-only after ``freeze``.
    """

    def __init__(self, family: Family) -> None:
        self.family = family
        self._items: Dict[str, Any] = {}
        self._frozen = False

    def register(self, scheme: Any) -> Any:
        name = getattr(scheme, "name", None)
        if not name:
            raise ContractError(f"{self.family.value} scheme has no name: {scheme!r}")
        if self._frozen:
            raise ContractError(f"{self.family.value} registry is frozen; cannot register {name}")
        key = normalize(name)
        if key in self._items:
            raise ContractError(f"{self.family.value} scheme {key} already registered")
        self._items[key] = scheme
        log.debug("registered %s scheme %s", self.family.value, key)
        return scheme

    def by_name(self, name: str) -> Any:
        try:
            return self._items[normalize(name)]
        except KeyError:
            raise UnknownScheme(self.family.value, name) from None

    def get(self, name: str, default: Any = None) -> Any:
        return self._items.get(normalize(name), default)

    def names(self) -> List[str]:
        return sorted(self._items)

    def list(self) -> Dict[str, Any]:
        return dict(self._items)

    def freeze(self) -> None:
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and normalize(name) in self._items

    def __iter__(self) -> Iterator[Any]:
        return iter(self._items.values())

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        return f"Registry({self.family.value}: {', '.join(self.names())})"


class SchemeSet:
    """One registry per family; the value passed to every component that resolves names."""

    def __init__(self) -> None:
        self._registries: Dict[Family, Registry] = {f: Registry(f) for f in Family}

    def registry(self, family: Family) -> Registry:
        return self._registries[family]

    @property
    def hash(self) -> Registry:
        return self._registries[Family.HASH]

    @property
    def stream_cipher(self) -> Registry:
        return self._registries[Family.STREAM_CIPHER]

    @property
    def mac(self) -> Registry:
        return self._registries[Family.MAC]

    @property
    def aead(self) -> Registry:
        return self._registries[Family.AEAD]

    @property
    def expander(self) -> Registry:
        return self._registries[Family.EXPANDER]

    @property
    def pbkdf(self) -> Registry:
        return self._registries[Family.PBKDF]

    @property
    def kem(self) -> Registry:
        return self._registries[Family.KEM]

    @property
    def signature(self) -> Registry:
        return self._registries[Family.SIGNATURE]

    @property
    def pke(self) -> Registry:
        return self._registries[Family.PKE]

    @property
    def compression(self) -> Registry:
        return self._registries[Family.COMPRESSION]

    def freeze(self) -> "SchemeSet":
        for reg in self._registries.values():
            reg.freeze()
        return self

    def summary(self) -> Dict[str, List[str]]:
        return {f.value: reg.names() for f, reg in self._registries.items()}
