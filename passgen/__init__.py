"""Secure random password generator with policy filters and a seeded fallback source."""
from loguru import logger

from passgen.entropy import EntropySource, OSSource, SeededSource, derive_seed, open_source
from passgen.errors import (
    EntropyOpenError,
    EntropyReadError,
    PassgenError,
    SeedTooShortError,
    UnknownPolicyError,
    UsageError,
)
from passgen.filter import Filter, Policy
from passgen.generator import Generator, PasswordSpec, new

# Silent when used as a library; the CLI opts back in.
logger.disable("passgen")

__version__ = "0.1.0"

__all__ = [
    "EntropyOpenError",
    "EntropyReadError",
    "EntropySource",
    "Filter",
    "Generator",
    "OSSource",
    "PassgenError",
    "PasswordSpec",
    "Policy",
    "SeedTooShortError",
    "SeededSource",
    "UnknownPolicyError",
    "UsageError",
    "derive_seed",
    "new",
    "open_source",
]
