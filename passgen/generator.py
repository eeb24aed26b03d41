"""
Password generator: rejection sampling over an entropy source.

Each raw byte is folded into the printable range with `b % 94 + 33` and
kept only if the filter accepts it (and, with no_repeat, if it differs
from the previous character). The generator exclusively owns its entropy
source; dispose it (or use it as a context manager) to release the OS
device handle.

    with passgen.new(PasswordSpec(policy="an")) as gen:
        print(gen.generate(24))
"""
from __future__ import annotations

import operator
import time
from dataclasses import dataclass
from typing import Optional, Union

from loguru import logger

from passgen.entropy import DEFAULT_DEVICE, Clock, EntropySource, open_source
from passgen.errors import EntropyReadError
from passgen.filter import Filter, Policy

PRINTABLE_SPAN = 94
PRINTABLE_BASE = 33
# Never emitted: every mapped byte is in [33, 127).
NO_PREVIOUS = 127


@dataclass(frozen=True)
class PasswordSpec:
    policy: Union[Policy, str] = Policy.PRINTABLE
    seed_phrase: Union[str, bytes] = ""
    special_chars: Union[str, bytes] = ""
    no_repeat: bool = False


class Generator:
    def __init__(
        self,
        spec: PasswordSpec,
        *,
        source: Optional[EntropySource] = None,
        device: str = DEFAULT_DEVICE,
        clock: Clock = time.time_ns,
    ):
        # Filter first: an unknown policy must fail before any device is opened.
        self.filter = Filter.build(spec.policy, spec.special_chars)
        self.policy = Policy.parse(spec.policy)
        self.no_repeat = spec.no_repeat
        if source is None:
            source = open_source(spec.seed_phrase, device=device, clock=clock)
        self._source: Optional[EntropySource] = source
        logger.debug(
            "generator ready: policy={} source={} no_repeat={}",
            self.policy.name, type(source).__name__, self.no_repeat,
        )

    @property
    def disposed(self) -> bool:
        return self._source is None

    def generate(self, size: int) -> str:
        """Return a password of exactly `size` accepted characters."""
        size = operator.index(size)
        if size < 0:
            raise ValueError(f"password size must be non-negative, got {size}")
        source = self._source
        if source is None:
            raise EntropyReadError("generator has been disposed")

        accept = self.filter.accept
        out = bytearray()
        last = NO_PREVIOUS
        while len(out) < size:
            c = source.read_one() % PRINTABLE_SPAN + PRINTABLE_BASE
            if not accept(c):
                continue
            if self.no_repeat and c == last:
                continue
            out.append(c)
            last = c
        return out.decode("ascii")

    def dispose(self) -> None:
        if self._source is None:
            return
        source, self._source = self._source, None
        source.close()
        logger.debug("generator disposed")

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.dispose()


def new(spec: PasswordSpec, **kwargs) -> Generator:
    """Build a Generator for `spec`; keyword arguments are passed through."""
    return Generator(spec, **kwargs)
