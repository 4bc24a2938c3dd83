"""Stream stages shared by the send and receive paths.

Write path: plaintext -> SigningReader -> [compress] -> EncryptingWriter ->
ChunkWriter. Read path: ChunkReader -> DecryptingReader -> [decompress] ->
VerifyingWriter -> plaintext sink.
"""

from __future__ import annotations

import logging
from typing import Any, BinaryIO, Callable, List, Optional, Tuple

from ..errors import ContractError, join_errors
from ..signature import Signature, StreamSigner, StreamVerifier, Validity
from .model import Auth

log = logging.getLogger(__name__)


class SigningReader:
    """Feeds every byte read from ``source`` to the signer."""

    def __init__(self, source: BinaryIO, signer: Optional[StreamSigner] = None) -> None:
        self._source = source
        self._signer = signer
        self.eof = False

    def read(self, size: int = -1) -> bytes:
        data = self._source.read(size)
        if not data:
            if size != 0:
                self.eof = True
            return b""
        if self._signer is not None:
            self._signer.update(data)
        return data

    def readable(self) -> bool:
        return True


class EncryptingWriter:
    def __init__(self, out: Any, cipher: Any) -> None:
        self._out = out
        self.cipher = cipher

    def write(self, data: bytes) -> int:
        if data:
            self._out.write(self.cipher.crypt(bytes(data)))
        return len(data)

    def flush(self) -> None:
        pass

    def close(self) -> None:
        pass

    def writable(self) -> bool:
        return True


class DecryptingReader:
    def __init__(self, inp: Any, cipher: Any) -> None:
        self._inp = inp
        self.cipher = cipher

    def read(self, size: int = -1) -> bytes:
        data = self._inp.read(size)
        if not data:
            return b""
        return self.cipher.crypt(data)

    def readinto(self, buf: Any) -> int:
        data = self.read(len(buf))
        buf[:len(data)] = data
        return len(data)

    def readable(self) -> bool:
        return True


class VerifyingWriter:
    """Tees plaintext written to ``out`` into the verifier."""

    def __init__(self, out: BinaryIO, verifier: StreamVerifier) -> None:
        self._out = out
        self.verifier = verifier

    def write(self, data: bytes) -> int:
        self.verifier.update(data)
        self._out.write(data)
        return len(data)

    def flush(self) -> None:
        flush = getattr(self._out, "flush", None)
        if flush is not None:
            flush()


class WriteChain:
    """Ordered writer stages; each stage wraps the one added before it.

    ``close`` runs in reverse order of construction so every stage flushes
    into a still-open inner stage. Close errors are collected, not
    short-circuited.
    """

    def __init__(self, sink: Any, name: str = "sink") -> None:
        self.stages: List[Tuple[str, Any]] = [(name, sink)]
        self.closed = False

    def add(self, name: str, wrap: Callable[[Any], Any]) -> Any:
        stage = wrap(self.top)
        self.stages.append((name, stage))
        log.debug("installed %s stage", name)
        return stage

    @property
    def top(self) -> Any:
        return self.stages[-1][1]

    def names(self) -> List[str]:
        return [name for name, _ in self.stages]

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        errors: List[BaseException] = []
        for name, stage in reversed(self.stages):
            try:
                stage.close()
            except Exception as exc:
                log.debug("closing %s stage failed: %s", name, exc)
                errors.append(exc)
        err = join_errors(errors)
        if err is not None:
            raise err


class PendingAuth:
    """Collects the tag and signature; ``finish`` is legal only after the body was drained."""

    def __init__(self, source: SigningReader, *, signer: Optional[StreamSigner] = None,
                 validity: Optional[Validity] = None, cipher: Any = None) -> None:
        self._source = source
        self._chain: Optional[WriteChain] = None
        self._signer = signer
        self._validity = validity
        self._cipher = cipher
        self._auth: Optional[Auth] = None

    def attach(self, chain: WriteChain) -> None:
        if self._chain is not None:
            raise ContractError("message body already written")
        self._chain = chain

    @property
    def ready(self) -> bool:
        return self._source.eof and self._chain is not None and self._chain.closed

    def finish(self) -> Auth:
        if self._auth is not None:
            return self._auth
        if not self.ready:
            raise ContractError("auth requested before the message body was fully written")
        tag = self._cipher.tag() if self._cipher is not None else b""
        signature: Optional[Signature] = None
        if self._signer is not None:
            signature = self._signer.sign(self._validity)
        self._auth = Auth(tag, signature)
        return self._auth
