from __future__ import annotations

import pytest

from pqmsg.errors import ContractError, KeyTypeError, MalformedPacket, SignatureInvalid
from pqmsg.keys import FINGERPRINT_SIZE, Fingerprint, ensure_key, generate_sign, SignPrivateKey
from pqmsg.signature import Signature, StreamSigner, StreamVerifier, Validity


def _sign(key, schemes, chunks, validity):
    signer = StreamSigner(key, schemes)
    for c in chunks:
        signer.update(c)
    return signer.sign(validity)


def _verify(key, schemes, chunks, signature):
    verifier = StreamVerifier(key, schemes)
    for c in chunks:
        verifier.update(c)
    verifier.verify(signature)


@pytest.mark.parametrize("fixture", ["ed25519_key", "mldsa_key"])
def test_stream_signature_round_trip(request, schemes, fixture):
    key = request.getfixturevalue(fixture)
    sig = _sign(key, schemes, [b"hello ", b"world"], Validity(1_700_000_000))
    _verify(key.public, schemes, [b"hello world"], sig)
    assert sig.issuer == key.fingerprint


def test_rsa_pss_signature(schemes):
    key = generate_sign(schemes.signature.by_name("RSA-PSS"))
    sig = _sign(key, schemes, [b"data"], Validity(100, 200))
    _verify(key.public, schemes, [b"data"], sig)


def test_modified_data_fails(schemes, ed25519_key):
    sig = _sign(ed25519_key, schemes, [b"hello"], Validity(100))
    with pytest.raises(SignatureInvalid):
        _verify(ed25519_key.public, schemes, [b"hellO"], sig)


def test_modified_validity_fails(schemes, ed25519_key):
    sig = _sign(ed25519_key, schemes, [b"hello"], Validity(100))
    forged = Signature(sig.signature, Validity(101), sig.issuer)
    with pytest.raises(SignatureInvalid):
        _verify(ed25519_key.public, schemes, [b"hello"], forged)


def test_issuer_mismatch_fails(schemes, ed25519_key, mldsa_key):
    sig = _sign(ed25519_key, schemes, [b"hello"], Validity(100))
    with pytest.raises(SignatureInvalid):
        _verify(mldsa_key.public, schemes, [b"hello"], sig)


def test_missing_signature_fails(schemes, ed25519_key):
    with pytest.raises(SignatureInvalid):
        StreamVerifier(ed25519_key.public, schemes).verify(None)


def test_validity_rules():
    Validity(10, 20).validate()
    Validity(10).validate()
    with pytest.raises(ValueError):
        Validity(0).validate()
    with pytest.raises(ValueError):
        Validity(20, 10).validate()
    v = Validity.from_expiry(100, 50)
    assert v == Validity(100, 150)
    assert v.is_valid_at(120)
    assert not v.is_valid_at(99)
    assert not v.is_valid_at(150)
    assert Validity(100).is_valid_at(10**12)


def test_validity_encoding_is_little_endian():
    assert Validity(1, 2).encode() == (1).to_bytes(8, "little") + (2).to_bytes(8, "little")


def test_signature_dict_round_trip(schemes, ed25519_key):
    sig = _sign(ed25519_key, schemes, [b"x"], Validity(5, 6))
    assert Signature.from_dict(sig.to_dict()) == sig
    with pytest.raises(MalformedPacket):
        Signature.from_dict({"sig": "text"})


def test_signing_with_invalid_validity_is_a_contract_error(schemes, ed25519_key):
    signer = StreamSigner(ed25519_key, schemes)
    with pytest.raises(ContractError):
        signer.sign(Validity(0))


def test_fingerprint_properties(ed25519_key, mldsa_key):
    fp = ed25519_key.fingerprint
    assert len(bytes(fp)) == FINGERPRINT_SIZE
    assert fp == ed25519_key.public.fingerprint
    assert fp != mldsa_key.fingerprint
    assert Fingerprint.empty().is_empty()
    assert Fingerprint.from_wire(bytes(fp)) == fp
    with pytest.raises(MalformedPacket):
        Fingerprint.from_wire(b"short")


def test_fingerprint_binds_scheme_name():
    assert Fingerprint.of("ED25519", b"k") != Fingerprint.of("X25519", b"k")
    assert Fingerprint.of("ed25519", b"k") == Fingerprint.of("ED25519", b"k")


def test_ensure_key(ed25519_key, kem_key):
    assert ensure_key(ed25519_key, SignPrivateKey, "signing key") is ed25519_key
    with pytest.raises(KeyTypeError):
        ensure_key(kem_key, SignPrivateKey, "signing key")
    with pytest.raises(ContractError):
        ensure_key(None, SignPrivateKey, "signing key")


def test_key_repr_hides_key_material(ed25519_key):
    text = repr(ed25519_key)
    assert "ED25519" in text
    assert ed25519_key.data.hex() not in text
