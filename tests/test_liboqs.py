from __future__ import annotations

import os

import pytest

import pqmsg_liboqs
from pqmsg.config import Settings
from pqmsg.registry import SchemeSet
from pqmsg_liboqs import _util


class _FakeMechanism:
    enabled = {"ML-KEM-768", "Kyber512", "ML-DSA-44"}

    def __init__(self, name, secret_key=None):
        if name not in self.enabled:
            raise RuntimeError(f"{name} is not enabled")
        self.details = {"length_shared_secret": 32}

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False


class _FakeOQS:
    KeyEncapsulation = _FakeMechanism
    Signature = _FakeMechanism


def test_pick_kem_prefers_first_enabled_candidate():
    assert _util.pick_kem_algorithm(_FakeOQS, "X_ALG", ["ML-KEM-512", "Kyber512"], env={}) == "Kyber512"


def test_pick_honours_env_override():
    env = {"X_ALG": "ML-KEM-768"}
    assert _util.pick_kem_algorithm(_FakeOQS, "X_ALG", ["Kyber512"], env=env) == "ML-KEM-768"


def test_pick_falls_back_when_override_is_disabled():
    env = {"X_ALG": "Nope-1"}
    assert _util.pick_sig_algorithm(_FakeOQS, "X_ALG", ["ML-DSA-44"], env=env) == "ML-DSA-44"


def test_pick_returns_none_without_candidates():
    assert _util.pick_sig_algorithm(_FakeOQS, "X_ALG", ["Falcon-512"], env={}) is None


def test_register_skips_missing_mechanisms(monkeypatch):
    monkeypatch.setattr(pqmsg_liboqs, "try_import_oqs", lambda: _FakeOQS)
    schemes = SchemeSet()
    pqmsg_liboqs.register(schemes, Settings(), env={})
    assert sorted(s.name for s in schemes.kem.list().values()) == ["OQS-ML-KEM-512", "OQS-ML-KEM-768"]
    assert [s.name for s in schemes.signature.list().values()] == ["OQS-ML-DSA-44"]
    assert schemes.kem.by_name("OQS-ML-KEM-768").alg == "ML-KEM-768"


def test_register_warns_without_bindings(monkeypatch):
    monkeypatch.setattr(pqmsg_liboqs, "try_import_oqs", lambda: None)
    schemes = SchemeSet()
    with pytest.warns(UserWarning, match="pqmsg_liboqs disabled"):
        pqmsg_liboqs.register(schemes, Settings())
    assert schemes.kem.list() == {}


@pytest.mark.skipif(not os.environ.get("PQMSG_TEST_LIBOQS"), reason="set PQMSG_TEST_LIBOQS=1 to exercise liboqs")
def test_liboqs_kem_and_signature():
    oqs = pytest.importorskip("oqs")
    from pqmsg_liboqs.kem_adapters import OQSKEM
    from pqmsg_liboqs.sig_adapters import OQSSignature

    alg = _util.pick_kem_algorithm(oqs, "PQMSG_OQS_ML_KEM_768_ALG", ["ML-KEM-768", "Kyber768"])
    if alg is None:
        pytest.skip("no ML-KEM-768 mechanism enabled")
    kem = OQSKEM(oqs, "OQS-ML-KEM-768", alg)
    pk, sk = kem.keygen()
    ct, ss = kem.encapsulate(pk)
    assert kem.decapsulate(sk, ct) == ss

    alg = _util.pick_sig_algorithm(oqs, "PQMSG_OQS_ML_DSA_44_ALG", ["ML-DSA-44", "Dilithium2"])
    if alg is None:
        pytest.skip("no ML-DSA-44 mechanism enabled")
    sig = OQSSignature(oqs, "OQS-ML-DSA-44", alg)
    pk, sk = sig.keygen()
    signature = sig.sign(sk, b"msg")
    assert sig.verify(pk, b"msg", signature)
    assert not sig.verify(pk, b"other", signature)
