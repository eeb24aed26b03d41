"""
Character-class policies and the byte acceptance filter.

A policy names a predetermined set of printable ASCII characters. The
filter is a dense 256-entry table built from a policy plus any extra
characters the caller wants to allow, so `accept` is a single index
lookup whatever the policy or input.
"""
from __future__ import annotations

from enum import Enum
from typing import Iterable, Tuple, Union

from passgen.errors import UnknownPolicyError

# ---------------------------- Policies ----------------------------

# Byte ranges are [start, stop), ASCII code points.
PRINTABLE_RANGE = (33, 127)
UPPER_RANGE = (65, 91)
LOWER_RANGE = (97, 123)
DIGIT_RANGE = (48, 58)


class Policy(str, Enum):
    PRINTABLE = "p"
    ALPHA = "a"
    NUMERIC = "n"
    ALPHANUMERIC = "an"

    @classmethod
    def parse(cls, value: Union[Policy, str]) -> Policy:
        """Resolve a wire code ("p", "a", "n", "an") or a Policy member."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise UnknownPolicyError(value) from None


_POLICY_RANGES = {
    Policy.PRINTABLE: (PRINTABLE_RANGE,),
    Policy.ALPHA: (UPPER_RANGE, LOWER_RANGE),
    Policy.NUMERIC: (DIGIT_RANGE,),
    Policy.ALPHANUMERIC: (UPPER_RANGE, LOWER_RANGE, DIGIT_RANGE),
}

# ---------------------------- Filter ----------------------------


def _as_bytes(extra: Union[str, bytes, None]) -> bytes:
    if not extra:
        return b""
    if isinstance(extra, str):
        return extra.encode("utf-8", "surrogateescape")
    return bytes(extra)


class Filter:
    """Immutable byte acceptance table.

    `table[c]` is True iff byte `c` may appear in a generated password.
    Extra characters are applied verbatim, without validation.
    """

    __slots__ = ("_table",)

    def __init__(self, table: Iterable[bool]):
        table = tuple(bool(v) for v in table)
        if len(table) != 256:
            raise ValueError(f"filter table must have 256 entries, got {len(table)}")
        self._table: Tuple[bool, ...] = table

    @classmethod
    def build(cls, policy: Union[Policy, str], extra: Union[str, bytes, None] = "") -> Filter:
        policy = Policy.parse(policy)
        table = [False] * 256
        for start, stop in _POLICY_RANGES[policy]:
            for c in range(start, stop):
                table[c] = True
        for c in _as_bytes(extra):
            table[c] = True
        return cls(table)

    def accept(self, c: int) -> bool:
        return self._table[c]

    @property
    def table(self) -> Tuple[bool, ...]:
        return self._table

    def accepted(self) -> bytes:
        """All accepted byte values, ascending."""
        return bytes(c for c in range(256) if self._table[c])

    def __eq__(self, other):
        if not isinstance(other, Filter):
            return NotImplemented
        return self._table == other._table

    def __hash__(self):
        return hash(self._table)

    def __repr__(self):
        return f"Filter(accepted={self.accepted()!r})"
