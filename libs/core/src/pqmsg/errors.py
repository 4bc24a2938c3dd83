from __future__ import annotations
from typing import Iterable, List, Optional

"""Error taxonomy shared by the registry, codecs and message pipelines.

Recoverable errors derive from :class:`PQMsgError`. Programmer errors
(duplicate registration, missing required arguments, wrong cost or key types,
reading ``Auth`` before the body was drained) derive from
:class:`ContractError`, a ``RuntimeError`` that never shares a base with the
recoverable errors.
"""


class PQMsgError(Exception):
    """Base class for all recoverable errors."""


class ConfigurationError(PQMsgError):
    """Invalid scheme choice, cost parameters or options, detected eagerly."""


class UnknownScheme(ConfigurationError, LookupError):
    def __init__(self, family: str, name: str) -> None:
        super().__init__(f"unknown {family} scheme {name!r}")
        self.family = family
        self.name = name


class InvalidCost(ConfigurationError):
    def __init__(self, kdf: str, reason: str) -> None:
        super().__init__(f"invalid {kdf} parameters: {reason}")
        self.kdf = kdf
        self.reason = reason


class CompressionError(ConfigurationError):
    pass


class MissingSecret(PQMsgError):
    """The message needs a key or passphrase the caller did not supply."""


class NotARecipient(MissingSecret):
    pass


class IntegrityError(PQMsgError):
    """Raised only after the whole body was drained.

    Plaintext already written to the caller's sink must be treated as
    untrusted.
    """


class TagMismatch(IntegrityError):
    def __init__(self, message: str = "authentication tag mismatch") -> None:
        super().__init__(message)


class SignatureInvalid(IntegrityError):
    def __init__(self, message: str = "the signature cannot be verified") -> None:
        super().__init__(message)


class TruncatedStream(IntegrityError):
    pass


class MalformedPacket(PQMsgError):
    pass


class PacketTagMismatch(MalformedPacket):
    def __init__(self, expected: int, got: int) -> None:
        super().__init__(f"packet tag 0x{got:02x} mismatches the expected 0x{expected:02x}")
        self.expected = expected
        self.got = got


class CombinedError(IntegrityError):
    """Several independent failures reported together."""

    def __init__(self, errors: Iterable[BaseException]) -> None:
        self.errors: List[BaseException] = list(errors)
        super().__init__("; ".join(f"{type(e).__name__}: {e}" for e in self.errors))

    def has(self, kind: type) -> bool:
        return any(isinstance(e, kind) for e in self.errors)


class ContractError(RuntimeError):
    """A broken invariant in the calling code; not meant to be handled."""


class KeyTypeError(ContractError, TypeError):
    pass


def join_errors(errors: Iterable[Optional[BaseException]]) -> Optional[BaseException]:
    """Collapse collected errors into ``None``, the only error, or a CombinedError."""
    found = [e for e in errors if e is not None]
    if not found:
        return None
    if len(found) == 1:
        return found[0]
    return CombinedError(found)
