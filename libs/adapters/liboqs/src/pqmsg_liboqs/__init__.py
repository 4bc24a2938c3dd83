"""Optional liboqs-backed KEMs and signatures.

Loaded only when ``Settings.enable_liboqs`` is set, since importing the
``oqs`` bindings may build liboqs. Mechanisms the local liboqs does not
enable are skipped.
"""

from __future__ import annotations

import logging
import warnings
from typing import Mapping, Optional

from pqmsg.config import Settings
from pqmsg.registry import SchemeSet

from ._util import pick_kem_algorithm, pick_sig_algorithm, try_import_oqs
from .kem_adapters import KEM_MECHANISMS, OQSKEM
from .sig_adapters import SIG_MECHANISMS, OQSSignature

log = logging.getLogger(__name__)


def register(schemes: SchemeSet, settings: Settings, env: Optional[Mapping[str, str]] = None) -> None:
    oqs = try_import_oqs()
    if oqs is None:
        warnings.warn("pqmsg_liboqs disabled: the oqs bindings cannot be imported")
        log.warning("liboqs requested but the oqs bindings cannot be imported")
        return
    for name, (env_var, candidates) in KEM_MECHANISMS.items():
        alg = pick_kem_algorithm(oqs, env_var, candidates, env)
        if alg is None:
            log.warning("no liboqs mechanism enabled for %s", name)
            continue
        schemes.kem.register(OQSKEM(oqs, name, alg))
    for name, (env_var, candidates) in SIG_MECHANISMS.items():
        alg = pick_sig_algorithm(oqs, env_var, candidates, env)
        if alg is None:
            log.warning("no liboqs mechanism enabled for %s", name)
            continue
        schemes.signature.register(OQSSignature(oqs, name, alg))


__all__ = ["register"]
