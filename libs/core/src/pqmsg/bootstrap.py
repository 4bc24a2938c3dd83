from __future__ import annotations

import importlib
import logging
from typing import Optional, Sequence

from .config import Settings, load_settings
from .registry import SchemeSet
from .secret import PassphraseParams, PassphraseScheme, SecretScheme

"""Composition root: builds the scheme set the rest of the library consumes."""

log = logging.getLogger(__name__)

DEFAULT_ADAPTERS: Sequence[str] = (
    "pqmsg_cryptography",
    "pqmsg_argon2",
    "pqmsg_purepq",
    "pqmsg_rsa",
    "pqmsg_compress",
)
LIBOQS_ADAPTER = "pqmsg_liboqs"


def register_adapters(schemes: SchemeSet, settings: Settings, adapters: Sequence[str]) -> SchemeSet:
    for name in adapters:
        module = importlib.import_module(name)
        module.register(schemes, settings)
        log.debug("loaded adapter %s", name)
    return schemes


def load_default_schemes(settings: Optional[Settings] = None, *, freeze: bool = True) -> SchemeSet:
    """Register every bundled adapter; liboqs only when ``settings.enable_liboqs`` is set."""
    settings = settings if settings is not None else load_settings()
    adapters = list(DEFAULT_ADAPTERS)
    if settings.enable_liboqs:
        adapters.append(LIBOQS_ADAPTER)
    schemes = register_adapters(SchemeSet(), settings, adapters)
    return schemes.freeze() if freeze else schemes


def default_secret_scheme(schemes: SchemeSet, settings: Settings) -> SecretScheme:
    return SecretScheme.lookup(schemes, settings.aead, settings.expander)


def default_passphrase_params(schemes: SchemeSet, settings: Settings) -> PassphraseParams:
    scheme = PassphraseScheme.lookup(schemes, settings.aead, settings.pbkdf)
    return PassphraseParams(scheme, salt_size=settings.salt_size)
