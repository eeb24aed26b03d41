"""
Entropy sources: byte streams read one byte at a time by the generator.

Two sources are provided:

- OSSource reads the operating system's blocking entropy device
  (/dev/random by default) and must be closed to release the handle.
- SeededSource is an OS-independent pseudo-entropy stream derived from a
  seed phrase. Pool blocks are SHA-512 digests of PRNG output mixed with
  the wall clock. It is NOT cryptographically secure, and because the
  clock is mixed in it is not reproducible across runs either.
"""
from __future__ import annotations

import hashlib
import random
import time
from typing import BinaryIO, Callable, Optional, Union

from loguru import logger

from passgen.errors import EntropyOpenError, EntropyReadError, SeedTooShortError, UsageError

DEFAULT_DEVICE = "/dev/random"
MIN_SEED_LENGTH = 8
POOL_SIZE = 64  # SHA-512 digest size

_MASK64 = (1 << 64) - 1
_SHIFTS = (0, 8, 16, 24, 32, 40, 48, 56)

Clock = Callable[[], int]

# ---------------------------- Base ----------------------------


class EntropySource:
    """A byte stream with a one-byte read and a close."""

    closed = False

    def read_one(self) -> int:
        raise NotImplementedError

    def read(self, size: int = 1) -> bytes:
        # Only single-byte reads are served.
        if size != 1:
            raise UsageError(f"{type(self).__name__}.read called with size={size}, expected 1")
        return bytes((self.read_one(),))

    def close(self) -> None:
        self.closed = True

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()


# ---------------------------- OS source ----------------------------


class OSSource(EntropySource):
    def __init__(self, device: str = DEFAULT_DEVICE):
        self.device = device
        try:
            self._fh: Optional[BinaryIO] = open(device, "rb", buffering=0)
        except OSError as exc:
            raise EntropyOpenError(f"cannot open entropy device {device}: {exc}") from exc
        logger.debug("opened entropy device {}", device)

    def read_one(self) -> int:
        if self._fh is None:
            raise EntropyReadError(f"entropy device {self.device} is closed")
        try:
            b = self._fh.read(1)
        except OSError as exc:
            raise EntropyReadError(f"unexpected error reading from {self.device}: {exc}") from exc
        if not b:
            raise EntropyReadError(f"unexpected end of stream reading from {self.device}")
        return b[0]

    def close(self) -> None:
        if self._fh is not None:
            self._fh.close()
            self._fh = None
            logger.debug("closed entropy device {}", self.device)
        super().close()


# ---------------------------- Seeded source ----------------------------


def _phrase_bytes(seed_phrase: Union[str, bytes]) -> bytes:
    if isinstance(seed_phrase, str):
        return seed_phrase.encode("utf-8", "surrogateescape")
    return bytes(seed_phrase)


def derive_seed(seed_phrase: Union[str, bytes], now_ns: int) -> int:
    """Fold the seed phrase into a nanosecond timestamp, giving a 64-bit PRNG seed.

    All arithmetic is on unsigned 64-bit values.
    """
    seed = now_ns & _MASK64
    for i, c in enumerate(_phrase_bytes(seed_phrase)):
        shift = _SHIFTS[i % 8]
        x = ((~c & _MASK64) << shift) & _MASK64
        seed ^= x | (seed >> shift)
    return ((seed << 33) | (seed >> 31)) & _MASK64


class SeededSource(EntropySource):
    def __init__(self, seed_phrase: Union[str, bytes], clock: Clock = time.time_ns):
        phrase = _phrase_bytes(seed_phrase)
        if len(phrase) < MIN_SEED_LENGTH:
            raise SeedTooShortError(len(phrase), MIN_SEED_LENGTH)
        self._clock = clock
        self._prng = random.Random(derive_seed(phrase, clock()))
        self._pool = bytes(POOL_SIZE)
        self._offset = POOL_SIZE
        logger.debug("seeded entropy source ready")

    def _refill(self) -> None:
        r = self._prng.getrandbits(63)
        t = self._clock()
        self._pool = hashlib.sha512(f"{r}{t}".encode("ascii")).digest()
        self._offset = 0
        logger.trace("seeded pool refilled")

    def read_one(self) -> int:
        if self._offset == POOL_SIZE:
            self._refill()
        c = self._pool[self._offset]
        self._offset += 1
        return c


def open_source(
    seed_phrase: Union[str, bytes] = "",
    *,
    device: str = DEFAULT_DEVICE,
    clock: Clock = time.time_ns,
) -> EntropySource:
    """Pick the OS device for an empty seed phrase, the seeded source otherwise."""
    if not seed_phrase:
        return OSSource(device)
    return SeededSource(seed_phrase, clock=clock)
