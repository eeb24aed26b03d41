"""Tests for the OS and seeded entropy sources."""

import hashlib
import io
import random

import pytest

from passgen.entropy import (
    MIN_SEED_LENGTH,
    POOL_SIZE,
    OSSource,
    SeededSource,
    derive_seed,
    open_source,
)
from passgen.errors import EntropyOpenError, EntropyReadError, SeedTooShortError, UsageError


def test_os_source_reads_device_bytes_in_order(entropy_file):
    with OSSource(entropy_file(b"\x01\x02\xff")) as source:
        assert [source.read_one() for _ in range(3)] == [1, 2, 255]


def test_os_source_end_of_stream_is_read_error(entropy_file):
    source = OSSource(entropy_file(b"\x07"))
    try:
        assert source.read_one() == 7
        with pytest.raises(EntropyReadError):
            source.read_one()
    finally:
        source.close()


def test_os_source_missing_device_is_open_error(tmp_path):
    with pytest.raises(EntropyOpenError) as exc_info:
        OSSource(str(tmp_path / "no-such-device"))
    assert isinstance(exc_info.value.__cause__, OSError)


def test_os_source_close_is_idempotent(entropy_file):
    source = OSSource(entropy_file(b"abc"))
    source.close()
    source.close()
    assert source.closed
    with pytest.raises(EntropyReadError):
        source.read_one()


def test_os_source_default_device_yields_bytes():
    with OSSource() as source:
        assert 0 <= source.read_one() < 256


@pytest.mark.parametrize("length", range(1, MIN_SEED_LENGTH))
def test_seeded_source_rejects_short_phrases(length):
    with pytest.raises(SeedTooShortError):
        SeededSource("x" * length)


def test_seed_length_counts_bytes():
    # 4 characters, 8 bytes in UTF-8
    source = SeededSource("éééé")
    assert 0 <= source.read_one() < 256


def test_derive_seed_fits_in_64_bits():
    for phrase in ["testseed", "a much longer seed phrase", b"\x00" * 8, b"\xff" * 17]:
        for now in [0, 1, 2**63, 2**64 - 1, 1_700_000_000_000_000_000]:
            assert 0 <= derive_seed(phrase, now) < 2**64


def test_derive_seed_depends_on_phrase_and_clock():
    now = 1_700_000_000_000_000_000
    assert derive_seed("testseed", now) == derive_seed(b"testseed", now)
    assert derive_seed("testseed", now) != derive_seed("testseee", now)
    assert derive_seed("testseed", now) != derive_seed("testseed", now + 1)


def test_derive_seed_rotation_with_no_phrase():
    # only the final 33/31 rotation applies
    assert derive_seed(b"", 1) == 1 << 33
    assert derive_seed(b"", 1 << 63) == 1 << 32


def test_seeded_source_first_pool_is_sha512_of_prng_and_clock(fixed_clock):
    phrase = "testseed"
    source = SeededSource(phrase, clock=fixed_clock)
    got = bytes(source.read_one() for _ in range(POOL_SIZE))

    prng = random.Random(derive_seed(phrase, fixed_clock()))
    r = prng.getrandbits(63)
    expected = hashlib.sha512(f"{r}{fixed_clock()}".encode("ascii")).digest()
    assert got == expected


def test_seeded_source_refills_after_pool_is_drained(fixed_clock):
    source = SeededSource("testseed", clock=fixed_clock)
    first = bytes(source.read_one() for _ in range(POOL_SIZE))
    second = bytes(source.read_one() for _ in range(POOL_SIZE))
    assert len(second) == POOL_SIZE
    assert first != second


def test_seeded_source_is_deterministic_with_pinned_clock(fixed_clock):
    a = SeededSource("testseed", clock=fixed_clock)
    b = SeededSource("testseed", clock=fixed_clock)
    assert [a.read_one() for _ in range(300)] == [b.read_one() for _ in range(300)]


def test_seeded_source_mixes_in_the_clock():
    ticks = iter(range(10**18, 10**18 + 1000, 7))
    c = SeededSource("testseed", clock=lambda: next(ticks))
    d = SeededSource("testseed", clock=lambda: next(ticks))
    assert [c.read_one() for _ in range(64)] != [d.read_one() for _ in range(64)]


def test_seeded_source_close_is_noop(fixed_clock):
    source = SeededSource("testseed", clock=fixed_clock)
    source.close()
    assert 0 <= source.read_one() < 256


@pytest.mark.parametrize("size", [0, 2, 64])
def test_read_with_size_other_than_one_is_usage_error(size, fixed_clock):
    source = SeededSource("testseed", clock=fixed_clock)
    with pytest.raises(UsageError):
        source.read(size)


def test_read_one_byte(fixed_clock):
    source = SeededSource("testseed", clock=fixed_clock)
    twin = SeededSource("testseed", clock=fixed_clock)
    assert source.read(1) == bytes([twin.read_one()])


def test_open_source_selects_variant(entropy_file, fixed_clock):
    with open_source("", device=entropy_file(b"z")) as source:
        assert isinstance(source, OSSource)
    with open_source("testseed", clock=fixed_clock) as source:
        assert isinstance(source, SeededSource)
    with pytest.raises(SeedTooShortError):
        open_source("short")


class _FailingHandle:
    def read(self, size):
        raise OSError(5, "Input/output error")

    def close(self):
        pass


def test_os_source_handle_error_is_read_error(entropy_file):
    source = OSSource(entropy_file(b"abc"))
    source._fh.close()
    source._fh = _FailingHandle()
    with pytest.raises(EntropyReadError) as exc_info:
        source.read_one()
    assert isinstance(exc_info.value.__cause__, OSError)
    source.close()


def test_os_source_reads_device_unbuffered(entropy_file):
    with OSSource(entropy_file(b"abc")) as source:
        assert isinstance(source._fh, io.FileIO)
        assert source.read_one() == ord("a")
        assert source._fh.tell() == 1


def test_short_seed_message_counts_bytes():
    with pytest.raises(SeedTooShortError) as exc_info:
        SeededSource("éé")
    assert str(exc_info.value) == "seed phrase must be at least 8 bytes (got 4)"


def test_undecodable_seed_phrase_is_used_as_raw_bytes(fixed_clock):
    now = fixed_clock()
    assert derive_seed("\udcff" * 8, now) == derive_seed(b"\xff" * 8, now)
    source = SeededSource("\udcff" * 8, clock=fixed_clock)
    assert 0 <= source.read_one() < 256
