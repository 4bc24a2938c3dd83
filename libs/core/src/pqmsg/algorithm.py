from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .errors import MalformedPacket
from .interfaces import Family
from .registry import SchemeSet, normalize


@dataclass(frozen=True)
class Algorithm:
    """A resolved scheme that travels on the wire as its normalized name."""

    family: Family
    scheme: Any

    @property
    def name(self) -> str:
        return normalize(self.scheme.name)

    def encode(self) -> str:
        return self.name

    @classmethod
    def decode(cls, family: Family, value: Any, schemes: SchemeSet) -> "Algorithm":
        if not isinstance(value, str):
            raise MalformedPacket(f"{family.value} algorithm must be a string, got {type(value).__name__}")
        return cls(family, schemes.registry(family).by_name(value))


def encode_scheme(scheme: Any) -> str:
    return normalize(scheme.name)


def decode_scheme(schemes: SchemeSet, family: Family, value: Any) -> Any:
    return Algorithm.decode(family, value, schemes).scheme
