"""
auth/passwords.py -- Argon2id password hashing.

Argon2id is memory-hard: every guess costs memory_cost KiB of RAM as well as
CPU, which blunts GPU/ASIC brute force against a stolen users table. The
hasher output is a PHC string ($argon2id$v=19$m=...,t=...,p=...$salt$digest),
so parameters and the per-password random salt travel with the hash and
verification needs nothing else.

The work factor comes from Settings (ARGON2_TIME_COST, ARGON2_MEMORY_COST,
ARGON2_PARALLELISM). Tests lower it through the environment before import.
Hashes produced under older parameters still verify -- the PHC string is
self-describing.
"""

from __future__ import annotations

import logging

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError

from core.config import get_settings

logger = logging.getLogger("itemkeeper.auth")

_settings = get_settings()

_HASHER = PasswordHasher(
    time_cost=_settings.argon2_time_cost,
    memory_cost=_settings.argon2_memory_cost,
    parallelism=_settings.argon2_parallelism,
)


def hash_password(plain: str) -> str:
    """Return an Argon2id PHC string for the given password. A fresh salt is drawn every call."""
    return _HASHER.hash(plain)


def verify_password(plain: str, hashed: str) -> bool:
    """Return True if the password matches the stored hash.

    Fails closed: a wrong password, an empty hash, or a corrupt/unparseable
    stored value all return False. Corrupt values are logged because they point
    at data damage rather than a user typo.
    """
    if not hashed:
        return False
    try:
        return _HASHER.verify(hashed, plain)
    except VerifyMismatchError:
        return False
    except (InvalidHashError, VerificationError):
        logger.warning("Stored password hash could not be parsed; treating as invalid credentials")
        return False


# Timing equalization dummy hash. Computed once at module load so an unknown
# username costs the same Argon2 verification as a wrong password.
DUMMY_HASH: str = hash_password("itemkeeper_timing_dummy")
