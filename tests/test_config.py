from __future__ import annotations

import pytest

from pqmsg.config import Settings, load_settings
from pqmsg.errors import ConfigurationError


def test_defaults():
    s = load_settings(environ={})
    assert s == Settings()
    assert s.aead == "AESCTR256-HMACSHA256"
    assert s.pbkdf == "ARGON2ID"
    assert s.enable_liboqs is False


def test_environment_overrides():
    s = load_settings(environ={"PQMSG_RSA_BITS": "4096", "PQMSG_ENABLE_LIBOQS": "yes", "PQMSG_AEAD": "chacha20-blake2b"})
    assert s.rsa_bits == 4096
    assert s.enable_liboqs is True
    assert s.aead == "chacha20-blake2b"


def test_os_environ_is_used_by_default(monkeypatch):
    monkeypatch.setenv("PQMSG_SALT_SIZE", "32")
    monkeypatch.delenv("PQMSG_CONFIG", raising=False)
    assert load_settings().salt_size == 32


def test_yaml_file_then_environment(tmp_path):
    cfg = tmp_path / "pqmsg.yaml"
    cfg.write_text("pqmsg:\n  pbkdf: SCRYPT\n  buffer_size: 1024\n  rsa_bits: 2048\n")
    s = load_settings(environ={"PQMSG_CONFIG": str(cfg), "PQMSG_BUFFER_SIZE": "2048"})
    assert s.pbkdf == "SCRYPT"
    assert s.rsa_bits == 2048
    assert s.buffer_size == 2048


@pytest.mark.parametrize("env", [
    {"PQMSG_RSA_BITS": "lots"},
    {"PQMSG_ENABLE_LIBOQS": "maybe"},
    {"PQMSG_SALT_SIZE": "4"},
    {"PQMSG_AEAD": "   "},
])
def test_malformed_values(env):
    with pytest.raises(ConfigurationError):
        load_settings(environ=env)


def test_bad_yaml(tmp_path):
    cfg = tmp_path / "bad.yaml"
    cfg.write_text("pqmsg: [unclosed\n")
    with pytest.raises(ConfigurationError):
        load_settings(cfg, environ={})
    cfg.write_text("pqmsg:\n  colour: blue\n")
    with pytest.raises(ConfigurationError):
        load_settings(cfg, environ={})


def test_missing_file(tmp_path):
    with pytest.raises(ConfigurationError):
        load_settings(tmp_path / "absent.yaml", environ={})
