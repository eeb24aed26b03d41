"""Exceptions raised by the password generator core."""
from __future__ import annotations


class PassgenError(Exception):
    """Base class for every error surfaced by passgen."""


class UnknownPolicyError(PassgenError, ValueError):
    def __init__(self, policy):
        self.policy = policy
        super().__init__(f"unknown policy flag {policy!r}")


class SeedTooShortError(PassgenError, ValueError):
    def __init__(self, length: int, minimum: int):
        self.length = length
        self.minimum = minimum
        super().__init__(f"seed phrase must be at least {minimum} bytes (got {length})")


class EntropyOpenError(PassgenError, OSError):
    """The OS entropy device could not be opened."""


class EntropyReadError(PassgenError, OSError):
    """A byte could not be read from the entropy source."""


class UsageError(PassgenError, RuntimeError):
    """Programming error: the per-byte read interface was misused."""
