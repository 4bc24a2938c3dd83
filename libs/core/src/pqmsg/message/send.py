from __future__ import annotations

import io
import logging
import time as _time
from typing import Any, BinaryIO, Optional, Union

from ..errors import ContractError
from ..keys import SignPrivateKey, ensure_key
from ..registry import SchemeSet
from ..signature import StreamSigner, Validity
from ..stream import DEFAULT_BUFFER_SIZE, BufferedChunkWriter, copy_stream
from .model import Auth, FileInfo, Header, Message
from .pipeline import EncryptingWriter, PendingAuth, SigningReader, WriteChain

log = logging.getLogger(__name__)


class _BodyWriter:
    """Streams the plaintext through the write chain when the message is encoded."""

    def __init__(self, source: SigningReader, pending: PendingAuth, build_chain: Any, buffer_size: int) -> None:
        self.source = source
        self.pending = pending
        self._build_chain = build_chain
        self._buffer_size = buffer_size

    def write_body(self, out: BinaryIO) -> Auth:
        chain = self._build_chain(out)
        self.pending.attach(chain)
        try:
            copy_stream(self.source, chain.top, self._buffer_size)
        finally:
            chain.close()
        return self.pending.finish()


def new_message(
    plaintext: Union[bytes, BinaryIO],
    *,
    schemes: SchemeSet,
    sign: Optional[SignPrivateKey] = None,
    expiry: int = 0,
    encrypt: Any = None,
    compression: Any = None,
    level: int = 0,
    compression_opts: Any = None,
    file_info: Optional[FileInfo] = None,
    buffer_size: Optional[int] = None,
    now: Optional[int] = None,
) -> Message:
    """Prepare a message; nothing is read from ``plaintext`` until ``encode``.

    ``encrypt`` is any encrypter (passphrase, secret, group or derived) and
    ``compression`` a compression scheme or its name. Configuration problems
    are raised here, before any byte is produced.
    """
    if schemes is None:
        raise ContractError("nil scheme set")
    if isinstance(plaintext, (bytes, bytearray, memoryview)):
        plaintext = io.BytesIO(bytes(plaintext))
    if plaintext is None:
        raise ContractError("nil plaintext")
    size = buffer_size or DEFAULT_BUFFER_SIZE

    header = Header()
    if file_info is not None and not file_info.is_empty():
        header.file = file_info

    if compression is not None:
        if isinstance(compression, str):
            compression = schemes.compression.by_name(compression)
        if compression_opts is None:
            compression_opts = compression.new_opts()
        compression.check(level, compression_opts)
        header.compression = compression

    signer = None
    validity = None
    if sign is not None:
        ensure_key(sign, SignPrivateKey, "signing key")
        created = int(now if now is not None else _time.time())
        validity = Validity.from_expiry(created, expiry)
        try:
            validity.validate()
        except ValueError as exc:
            raise ContractError(f"invalid signature validity: {exc}") from exc
        signer = StreamSigner(sign, schemes)
        header.sender = sign.fingerprint
        header.time = created

    cipher = None
    if encrypt is not None:
        cipher, header.encryption = encrypt.encrypt(header.associated_data())
        log.debug("message encrypted with %s (%s)", header.encryption.kind, header.encryption.variant.aead.name)

    source = SigningReader(plaintext, signer)

    def build_chain(out: BinaryIO) -> WriteChain:
        chain = WriteChain(BufferedChunkWriter(out, size), "chunks")
        if cipher is not None:
            chain.add("encrypt", lambda w: EncryptingWriter(w, cipher))
        if compression is not None:
            chain.add("compress", lambda w: compression.compress(w, level, compression_opts))
        return chain

    pending = PendingAuth(source, signer=signer, validity=validity, cipher=cipher)
    writer = _BodyWriter(source, pending, build_chain, size)
    return Message(header, body=source, schemes=schemes, writer=writer)
