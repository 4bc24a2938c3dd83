from __future__ import annotations

import os

import msgpack
import pytest

from pqmsg.errors import ConfigurationError, KeyTypeError, MalformedPacket, MissingSecret, NotARecipient
from pqmsg.keys import generate_kem
from pqmsg.message.encryption import (
    DerivedEncrypter,
    Encryption,
    GroupEncrypter,
    GroupEncryption,
    PassphraseEncrypter,
    SecretEncrypter,
)

AD = b"associated"
DATA = b"the quick brown fox" * 10


def _wire(enc, schemes):
    blob = msgpack.packb(enc.to_dict(), use_bin_type=True)
    return Encryption.from_dict(msgpack.unpackb(blob, raw=False, strict_map_key=False), schemes)


def _seal(encrypter):
    cipher, enc = encrypter.encrypt(AD)
    return cipher.crypt(DATA), cipher.tag(), enc


def _open(enc, ct, ad=AD, **secrets):
    cipher = enc.open(associated_data=ad, **secrets)
    return cipher.crypt(ct), cipher.tag()


def test_passphrase(schemes, passphrase_params):
    ct, tag, enc = _seal(PassphraseEncrypter("correct horse", passphrase_params))
    decoded = _wire(enc, schemes)
    assert decoded.kind == "passphrase"
    assert _open(decoded, ct, passphrase="correct horse") == (DATA, tag)
    _, wrong_tag = _open(decoded, ct, passphrase="wrong")
    assert wrong_tag != tag


def test_secret_kem(schemes, secret_scheme, kem_key, other_kem_key):
    ct, tag, enc = _seal(SecretEncrypter(kem_key.public, secret_scheme))
    decoded = _wire(enc, schemes)
    assert decoded.variant.recipient == kem_key.fingerprint
    assert _open(decoded, ct, recipient=kem_key) == (DATA, tag)
    _, wrong_tag = _open(decoded, ct, recipient=other_kem_key)
    assert wrong_tag != tag


def test_secret_kem_with_other_scheme_key(schemes, secret_scheme, kem_key, x25519_key):
    ct, tag, enc = _seal(SecretEncrypter(kem_key.public, secret_scheme))
    _, wrong_tag = _open(_wire(enc, schemes), ct, recipient=x25519_key)
    assert wrong_tag != tag


@pytest.mark.parametrize("kem", ["X25519", "X25519-ML-KEM-768", "ML-KEM-1024"])
def test_secret_kem_schemes(schemes, secret_scheme, kem):
    key = generate_kem(schemes.kem.by_name(kem))
    ct, tag, enc = _seal(SecretEncrypter(key.public, secret_scheme))
    assert _open(_wire(enc, schemes), ct, recipient=key) == (DATA, tag)


def test_group(schemes, secret_scheme, wrap_keys, rsa_oaep_key):
    recipients = [k.public for k in wrap_keys] + [rsa_oaep_key.public]
    encrypter = GroupEncrypter(recipients, secret_scheme)
    assert encrypter.size == 64
    ct, tag, enc = _seal(encrypter)
    decoded = _wire(enc, schemes)
    assert len(decoded.variant.secrets) == 4
    for key in wrap_keys + [rsa_oaep_key]:
        assert _open(decoded, ct, group_recipient=key) == (DATA, tag)


def test_group_not_a_recipient(schemes, secret_scheme, wrap_keys):
    ct, _, enc = _seal(GroupEncrypter([wrap_keys[0].public], secret_scheme))
    with pytest.raises(NotARecipient):
        _open(_wire(enc, schemes), ct, group_recipient=wrap_keys[1])


def test_group_recipient_set_is_authenticated(schemes, secret_scheme, wrap_keys):
    ct, tag, enc = _seal(GroupEncrypter([k.public for k in wrap_keys], secret_scheme))
    v = enc.variant
    dropped = {fp: c for fp, c in v.secrets.items() if fp != wrap_keys[2].fingerprint}
    stripped = Encryption(enc.nonce, GroupEncryption(v.scheme, v.size, dropped))
    _, stripped_tag = _open(stripped, ct, group_recipient=wrap_keys[0])
    assert stripped_tag != tag


def test_group_rejects_bad_recipients(secret_scheme, wrap_keys, kem_key):
    with pytest.raises(ConfigurationError):
        GroupEncrypter([], secret_scheme)
    with pytest.raises(ConfigurationError):
        GroupEncrypter([wrap_keys[0].public, wrap_keys[0].public], secret_scheme)
    with pytest.raises(KeyTypeError):
        GroupEncrypter([kem_key.public], secret_scheme)


def test_derived(schemes, secret_scheme):
    key = os.urandom(32)
    ct, tag, enc = _seal(DerivedEncrypter(key, secret_scheme))
    decoded = _wire(enc, schemes)
    assert decoded.to_dict()["derived"] == secret_scheme.to_dict()
    assert _open(decoded, ct, derived=key) == (DATA, tag)
    _, wrong_tag = _open(decoded, ct, derived=os.urandom(32))
    assert wrong_tag != tag


def test_associated_data_mismatch(schemes, secret_scheme):
    key = os.urandom(32)
    ct, tag, enc = _seal(DerivedEncrypter(key, secret_scheme))
    _, other = _open(enc, ct, ad=b"other", derived=key)
    assert other != tag


def test_encrypter_contract_checks(passphrase_params, secret_scheme, ed25519_key):
    with pytest.raises(ConfigurationError):
        PassphraseEncrypter("", passphrase_params)
    with pytest.raises(KeyTypeError):
        SecretEncrypter(ed25519_key.public, secret_scheme)
    with pytest.raises(KeyTypeError):
        DerivedEncrypter("not bytes", secret_scheme)


def test_open_requires_the_matching_secret(secret_scheme, kem_key):
    _, _, enc = _seal(SecretEncrypter(kem_key.public, secret_scheme))
    with pytest.raises(MissingSecret):
        enc.open(passphrase="irrelevant")


def test_nonces_are_unique(secret_scheme, kem_key):
    encrypter = SecretEncrypter(kem_key.public, secret_scheme)
    nonces = {encrypter.encrypt(b"")[1].nonce for _ in range(64)}
    assert len(nonces) == 64


def test_descriptor_validation(schemes, secret_scheme):
    _, _, enc = _seal(DerivedEncrypter(b"k" * 32, secret_scheme))
    d = enc.to_dict()
    with pytest.raises(MalformedPacket):
        Encryption.from_dict({"nonce": d["nonce"]}, schemes)
    with pytest.raises(MalformedPacket):
        Encryption.from_dict(dict(d, passphrase={}), schemes)
    with pytest.raises(MalformedPacket):
        Encryption.from_dict(dict(d, nonce=d["nonce"][:-1]), schemes)
