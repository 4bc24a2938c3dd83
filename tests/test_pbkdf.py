from __future__ import annotations

import pytest

from pqmsg.errors import ConfigurationError, ContractError, InvalidCost, MalformedPacket
from pqmsg.pbkdf import Argon2Cost, PBKDF2Cost, ScryptCost
from pqmsg.secret import PassphraseScheme


def test_argon2_derivation_is_deterministic(schemes, argon2_cost):
    kdf = schemes.pbkdf.by_name("argon2id")
    a = kdf.derive(b"pw", b"saltsalt", 32, argon2_cost)
    b = kdf.derive(b"pw", b"saltsalt", 32, argon2_cost)
    c = kdf.derive(b"pw2", b"saltsalt", 32, argon2_cost)
    assert a == b != c
    assert len(a) == 32


def test_argon2i_differs_from_argon2id(schemes, argon2_cost):
    i = schemes.pbkdf.by_name("ARGON2I").derive(b"pw", b"saltsalt", 32, argon2_cost)
    d = schemes.pbkdf.by_name("ARGON2ID").derive(b"pw", b"saltsalt", 32, argon2_cost)
    assert i != d


def test_default_argon2_cost_follows_settings(schemes, settings):
    cost = schemes.pbkdf.by_name("ARGON2ID").new_cost()
    assert cost == Argon2Cost(settings.argon2_time, settings.argon2_memory, settings.argon2_threads)


def test_scrypt_and_pbkdf2(schemes, scrypt_cost):
    assert len(schemes.pbkdf.by_name("SCRYPT").derive(b"pw", b"salt", 48, scrypt_cost)) == 48
    out = schemes.pbkdf.by_name("PBKDF2-SHA256").derive(b"pw", b"salt", 16, PBKDF2Cost(iterations=10))
    assert len(out) == 16


def test_wrong_cost_type_is_a_contract_error(schemes, scrypt_cost):
    with pytest.raises(ContractError):
        schemes.pbkdf.by_name("ARGON2ID").derive(b"pw", b"saltsalt", 32, scrypt_cost)


@pytest.mark.parametrize("cost", [ScryptCost(n=1000), ScryptCost(n=1 << 10, r=0)])
def test_invalid_cost_values(schemes, cost):
    with pytest.raises(InvalidCost):
        schemes.pbkdf.by_name("SCRYPT").derive(b"pw", b"salt", 32, cost)


def test_invalid_argon2_memory(schemes):
    with pytest.raises(InvalidCost):
        schemes.pbkdf.by_name("ARGON2ID").check_cost(Argon2Cost(time=1, memory=4, threads=1))


def test_zero_size_is_a_contract_error(schemes, scrypt_cost):
    with pytest.raises(ContractError):
        schemes.pbkdf.by_name("SCRYPT").derive(b"pw", b"salt", 0, scrypt_cost)


def test_cost_dict_round_trip():
    cost = ScryptCost(n=1 << 12, r=4, p=2)
    assert ScryptCost.from_dict(cost.to_dict()) == cost
    with pytest.raises(MalformedPacket):
        ScryptCost.from_dict({"n": 2, "bogus": 1})


def test_passphrase_scheme_rejects_empty_passphrase(schemes, scrypt_cost):
    scheme = PassphraseScheme.lookup(schemes, "AESCTR256-HMACSHA256", "SCRYPT")
    with pytest.raises(ConfigurationError):
        scheme.derive_keys("", b"salt", scrypt_cost)
    key, mac_key = scheme.derive_keys("pw", b"salt", scrypt_cost)
    assert len(key) == scheme.aead.key_size
    assert len(mac_key) == scheme.aead.mac_key_size
