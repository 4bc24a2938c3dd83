from __future__ import annotations

from dataclasses import asdict, dataclass, fields, replace
from typing import Any, Callable, Dict, Optional, Type

from .errors import ContractError, InvalidCost, MalformedPacket

"""Password-based key derivation: typed cost parameters and the scheme base.

A scheme accepts only the cost type it was created with; passing another cost
type is a programming error, while out-of-range values are a configuration
error reported through :class:`InvalidCost`.
"""


class Cost:
    """Base for KDF cost parameters. Subclasses are dataclasses."""

    def validate(self) -> None:
        raise NotImplementedError

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)  # type: ignore[call-overload]

    @classmethod
    def from_dict(cls, data: Any) -> "Cost":
        if not isinstance(data, dict):
            raise MalformedPacket(f"{cls.__name__} must be a map")
        names = {f.name for f in fields(cls)}  # type: ignore[arg-type]
        unknown = set(data) - names
        if unknown:
            raise MalformedPacket(f"{cls.__name__}: unknown fields {sorted(unknown)}")
        try:
            return cls(**{k: int(v) for k, v in data.items()})
        except (TypeError, ValueError) as exc:
            raise MalformedPacket(f"{cls.__name__}: {exc}") from exc


@dataclass
class Argon2Cost(Cost):
    time: int = 3
    memory: int = 64 * 1024  # KiB
    threads: int = 4

    def validate(self) -> None:
        if self.time < 1 or self.threads < 1:
            raise ValueError("cost parameters too small")
        if self.memory < 8 * self.threads:
            raise ValueError("memory must be at least 8 KiB per thread")


@dataclass
class ScryptCost(Cost):
    n: int = 1 << 15
    r: int = 8
    p: int = 1

    def validate(self) -> None:
        if self.n <= 1 or self.n & (self.n - 1) != 0:
            raise ValueError("N must be >1 and a power of 2")
        if self.r < 1 or self.p < 1:
            raise ValueError("r and p must be positive")
        if self.r * self.p >= 1 << 30:
            raise ValueError("parameters are too large")


@dataclass
class PBKDF2Cost(Cost):
    iterations: int = 600_000

    def validate(self) -> None:
        if self.iterations < 1:
            raise ValueError("iterations must be positive")


DeriveFunc = Callable[[bytes, bytes, int, Any], bytes]


class BasePBKDF:
    """Binds a derivation function to a name and its cost type."""

    def __init__(self, name: str, cost_type: Type[Cost], fn: DeriveFunc,
                 default_cost: Optional[Cost] = None) -> None:
        self.name = name
        self.cost_type = cost_type
        self._fn = fn
        self._default = default_cost if default_cost is not None else cost_type()

    def new_cost(self) -> Cost:
        return replace(self._default)  # type: ignore[type-var]

    def check_cost(self, cost: Any) -> None:
        if not isinstance(cost, self.cost_type):
            raise ContractError(
                f"{self.name}: wrong cost type {type(cost).__name__}, expected {self.cost_type.__name__}"
            )
        try:
            cost.validate()
        except ValueError as exc:
            raise InvalidCost(self.name, str(exc)) from exc

    def derive(self, password: bytes, salt: bytes, size: int, cost: Any) -> bytes:
        if size < 1:
            raise ContractError("pbkdf: size must be at least 1")
        self.check_cost(cost)
        return self._fn(password, salt, size, cost)

    def __repr__(self) -> str:
        return f"PBKDF({self.name})"
