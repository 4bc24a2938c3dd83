from __future__ import annotations

import hmac
import logging
from dataclasses import dataclass
from typing import Any, BinaryIO, List, Optional

from ..errors import (
    ContractError,
    MalformedPacket,
    MissingSecret,
    SignatureInvalid,
    TagMismatch,
    join_errors,
)
from ..keys import KEMPrivateKey, PKEPrivateKey, SignPublicKey, ensure_key
from ..pack import decode, read_object
from ..registry import SchemeSet
from ..signature import StreamVerifier
from ..stream import DEFAULT_BUFFER_SIZE, ChunkReader, copy_stream
from .encryption import DerivedEncryption, GroupEncryption, PassphraseEncryption, SecretEncryption
from .model import MESSAGE_TAG, Auth, Header, Message
from .pipeline import DecryptingReader, VerifyingWriter

log = logging.getLogger(__name__)


@dataclass
class Decrypt:
    """Secrets supplied by the caller; only the ones the message needs are used."""

    issuer: Optional[SignPublicKey] = None
    recipient: Optional[KEMPrivateKey] = None
    group_recipient: Optional[PKEPrivateKey] = None
    passphrase: Optional[str] = None
    derived: Optional[bytes] = None


def _check_secrets(msg: Message, secrets: Decrypt, require_signature: bool) -> None:
    header = msg.header
    if secrets.issuer is not None:
        ensure_key(secrets.issuer, SignPublicKey, "issuer key")
    if require_signature:
        if not header.signed:
            raise SignatureInvalid("message is not signed")
        if secrets.issuer is None:
            raise MissingSecret("message is signed, no issuer key supplied")
    if header.encryption is None:
        return
    v = header.encryption.variant
    if isinstance(v, PassphraseEncryption) and not secrets.passphrase:
        raise MissingSecret("message is encrypted with a passphrase, none supplied")
    if isinstance(v, SecretEncryption) and secrets.recipient is None:
        raise MissingSecret("message is encrypted to a KEM key, no private key supplied")
    if isinstance(v, GroupEncryption) and secrets.group_recipient is None:
        raise MissingSecret("message is encrypted to a recipient group, no private key supplied")
    if isinstance(v, DerivedEncryption) and secrets.derived is None:
        raise MissingSecret("message is encrypted with a derived key, none supplied")


def _check_signature(header: Header, auth: Auth, verifier: Optional[StreamVerifier]) -> None:
    sig = auth.signature
    if sig is None:
        raise SignatureInvalid("message names a sender but carries no signature")
    if sig.issuer != header.sender:
        raise SignatureInvalid(
            f"signature issuer {sig.issuer.short()} does not match the sender {header.sender.short()}"
        )
    if verifier is None:
        log.debug("signed message returned unverified, no issuer key supplied")
        return
    if sig.validity.created != header.time:
        raise SignatureInvalid("signature time does not match the message header")
    verifier.verify(sig)


def _drain(reader: Any, buffer_size: int) -> int:
    left = 0
    while True:
        data = reader.read(buffer_size)
        if not data:
            return left
        left += len(data)


def decrypt(msg: Message, out: BinaryIO, secrets: Optional[Decrypt] = None, *,
            require_signature: bool = False, buffer_size: int = DEFAULT_BUFFER_SIZE) -> Message:
    """Stream the body of a decoded message into ``out`` and check its Auth.

    Integrity failures are raised only after the whole body was consumed;
    bytes already written to ``out`` must then be discarded by the caller.
    A signed message is verified only when an issuer key is supplied.
    """
    if msg.body is None:
        raise ContractError("message body was already consumed")
    if msg.schemes is None:
        raise ContractError("message was not decoded with a scheme set")
    secrets = secrets or Decrypt()
    schemes: SchemeSet = msg.schemes
    header = msg.header
    _check_secrets(msg, secrets, require_signature)

    sink: Any = out
    verifier = None
    if header.signed and secrets.issuer is not None:
        verifier = StreamVerifier(secrets.issuer, schemes)
        sink = VerifyingWriter(out, verifier)
        log.debug("verifying signature from %s", header.sender.short())

    inp = msg.body
    chunks = ChunkReader(inp)
    base: Any = chunks
    cipher = None
    if header.encryption is not None:
        cipher = header.encryption.open(
            passphrase=secrets.passphrase,
            recipient=secrets.recipient,
            group_recipient=secrets.group_recipient,
            derived=secrets.derived,
            associated_data=header.associated_data(),
        )
        base = DecryptingReader(chunks, cipher)
    reader = base
    if header.compression is not None:
        reader = header.compression.decompress(base)

    body_error: Optional[Exception] = None
    try:
        copy_stream(reader, sink, buffer_size)
    except MalformedPacket as exc:
        if cipher is None:
            raise
        body_error = exc
    if _drain(base, buffer_size) and body_error is None:
        body_error = MalformedPacket("trailing data after the compressed body")
    chunks.close()
    msg.body = None

    auth = Auth.from_dict(read_object(inp))
    msg.auth = auth
    if auth.tag and cipher is None:
        raise MalformedPacket("authentication tag on a message without encryption")
    if auth.signature is not None and not header.signed:
        raise MalformedPacket("signature on a message without a sender")

    errors: List[Optional[BaseException]] = []
    if cipher is not None:
        if not auth.tag or not hmac.compare_digest(cipher.tag(), auth.tag):
            mismatch = TagMismatch()
            if body_error is not None:
                mismatch.__cause__ = body_error
            errors.append(mismatch)
        elif body_error is not None:
            errors.append(body_error)
    elif body_error is not None:
        errors.append(body_error)

    if header.signed:
        try:
            _check_signature(header, auth, verifier)
        except SignatureInvalid as exc:
            errors.append(exc)

    err = join_errors(errors)
    if err is not None:
        raise err
    return msg


def decrypt_message(inp: BinaryIO, out: BinaryIO, secrets: Optional[Decrypt], schemes: SchemeSet, *,
                    require_signature: bool = False) -> Message:
    """Decode a binary or armored message from ``inp`` and decrypt it into ``out``."""
    msg = decode(inp, schemes, tag=MESSAGE_TAG)
    return decrypt(msg, out, secrets, require_signature=require_signature)
