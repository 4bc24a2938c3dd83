from __future__ import annotations
import os
from typing import Mapping, Optional, Sequence


def try_import_oqs():
    try:
        import oqs  # type: ignore
        return oqs
    except (ImportError, RuntimeError, OSError):
        return None


def _order(env_var: str, candidates: Sequence[str], env: Optional[Mapping[str, str]]) -> list[str]:
    env_map = env if env is not None else os.environ
    order: list[str] = []
    env_val = env_map.get(env_var)
    if env_val:
        order.append(env_val)
    order += [c for c in candidates if c != env_val]
    return order


def pick_kem_algorithm(oqs_mod, env_var: str, candidates: Sequence[str],
                       env: Optional[Mapping[str, str]] = None) -> Optional[str]:
    """
    Choose a KEM mechanism by attempting to instantiate each candidate,
    without relying on oqs helper lists. Honors the env override first.
    """
    for name in _order(env_var, candidates, env):
        try:
            with oqs_mod.KeyEncapsulation(name):
                return name
        except Exception:
            continue
    return None


def pick_sig_algorithm(oqs_mod, env_var: str, candidates: Sequence[str],
                       env: Optional[Mapping[str, str]] = None) -> Optional[str]:
    """
    Choose a SIG mechanism by attempting instantiation.
    """
    for name in _order(env_var, candidates, env):
        try:
            with oqs_mod.Signature(name):
                return name
        except Exception:
            continue
    return None
