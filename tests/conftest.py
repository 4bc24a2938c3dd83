from __future__ import annotations

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC_ROOTS = [ROOT / "libs" / "core" / "src"] + sorted((ROOT / "libs" / "adapters").glob("*/src"))

for candidate in SRC_ROOTS:
    candidate_str = str(candidate)
    if candidate_str not in sys.path:
        sys.path.insert(0, candidate_str)

from pqmsg import generate_kem, generate_pke, generate_sign, load_default_schemes  # noqa: E402
from pqmsg.config import Settings  # noqa: E402
from pqmsg.pbkdf import Argon2Cost, ScryptCost  # noqa: E402
from pqmsg.secret import PassphraseParams, PassphraseScheme, SecretScheme  # noqa: E402


@pytest.fixture(scope="session")
def settings() -> Settings:
    return Settings(rsa_bits=2048, argon2_time=1, argon2_memory=1024, argon2_threads=1)


@pytest.fixture(scope="session")
def schemes(settings):
    return load_default_schemes(settings)


@pytest.fixture
def argon2_cost() -> Argon2Cost:
    return Argon2Cost(time=1, memory=1024, threads=1)


@pytest.fixture
def scrypt_cost() -> ScryptCost:
    return ScryptCost(n=1 << 10, r=8, p=1)


@pytest.fixture
def secret_scheme(schemes) -> SecretScheme:
    return SecretScheme.lookup(schemes, "AESCTR256-HMACSHA256", "HKDF-SHA256")


@pytest.fixture
def passphrase_params(schemes, scrypt_cost) -> PassphraseParams:
    scheme = PassphraseScheme.lookup(schemes, "CHACHA20-HMACSHA256", "SCRYPT")
    return PassphraseParams(scheme, scrypt_cost)


@pytest.fixture(scope="session")
def ed25519_key(schemes):
    return generate_sign(schemes.signature.by_name("ED25519"))


@pytest.fixture(scope="session")
def mldsa_key(schemes):
    return generate_sign(schemes.signature.by_name("ML-DSA-44"))


@pytest.fixture(scope="session")
def kem_key(schemes):
    return generate_kem(schemes.kem.by_name("ML-KEM-768"))


@pytest.fixture(scope="session")
def other_kem_key(schemes):
    return generate_kem(schemes.kem.by_name("ML-KEM-768"))


@pytest.fixture(scope="session")
def x25519_key(schemes):
    return generate_kem(schemes.kem.by_name("X25519"))


@pytest.fixture(scope="session")
def wrap_keys(schemes):
    scheme = schemes.pke.by_name("ML-KEM-768-WRAP")
    return [generate_pke(scheme) for _ in range(3)]


@pytest.fixture(scope="session")
def rsa_oaep_key(schemes):
    return generate_pke(schemes.pke.by_name("RSA-OAEP"))
