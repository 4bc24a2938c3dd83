"""Argon2i and Argon2id password hashing through argon2-cffi."""

from __future__ import annotations

from functools import partial

from argon2.low_level import Type, hash_secret_raw

from pqmsg.config import Settings
from pqmsg.pbkdf import Argon2Cost, BasePBKDF
from pqmsg.registry import SchemeSet


def _derive(kind: Type, password: bytes, salt: bytes, size: int, cost: Argon2Cost) -> bytes:
    return hash_secret_raw(
        secret=password,
        salt=salt,
        time_cost=cost.time,
        memory_cost=cost.memory,
        parallelism=cost.threads,
        hash_len=size,
        type=kind,
    )


def default_cost(settings: Settings) -> Argon2Cost:
    return Argon2Cost(time=settings.argon2_time, memory=settings.argon2_memory, threads=settings.argon2_threads)


def register(schemes: SchemeSet, settings: Settings) -> None:
    cost = default_cost(settings)
    schemes.pbkdf.register(BasePBKDF("ARGON2I", Argon2Cost, partial(_derive, Type.I), cost))
    schemes.pbkdf.register(BasePBKDF("ARGON2ID", Argon2Cost, partial(_derive, Type.ID), cost))


__all__ = ["register"]
