import itertools

import pytest

from passgen.entropy import EntropySource
from passgen.errors import EntropyReadError


class ScriptedSource(EntropySource):
    """Cycles through a fixed byte script and counts reads."""

    def __init__(self, script, limit=None):
        self._bytes = itertools.cycle(bytes(script))
        self.limit = limit
        self.reads = 0
        self.close_calls = 0

    def read_one(self):
        if self.limit is not None and self.reads >= self.limit:
            raise EntropyReadError(f"scripted source exhausted after {self.limit} reads")
        self.reads += 1
        return next(self._bytes)

    def close(self):
        self.close_calls += 1
        super().close()


@pytest.fixture
def scripted_source():
    def make(script=b"\x00", limit=None):
        return ScriptedSource(script, limit=limit)

    return make


@pytest.fixture
def fixed_clock():
    def clock():
        return 1_700_000_000_123_456_789

    return clock


@pytest.fixture
def entropy_file(tmp_path):
    """A regular file standing in for the entropy device."""

    def make(data):
        path = tmp_path / "random"
        path.write_bytes(bytes(data))
        return str(path)

    return make
