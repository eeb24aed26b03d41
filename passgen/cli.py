#!/usr/bin/env python3
"""
passgen - secure random password generator
==========================================

Emits one or more random passwords of a given length, each drawn from a
character-class policy plus optional extra characters.

Features
--------
- OS entropy (/dev/random) by default.
- Seed-phrase mode: an OS-agnostic pseudo-entropy stream (SHA-512 over a
  PRNG mixed with the wall clock). Weaker than the OS source; use it only
  where no entropy device is available.
- Policies: p (printable), a (alpha), n (numeric), an (alphanumeric).
- Extra allowed characters, used verbatim.
- Optional suppression of adjacent duplicate characters.
- JSON output for scripting.

Usage
-----
$ passgen -h

Examples
--------
# 1 printable password of 64 characters (the defaults)
$ passgen

# 5 alphanumeric passwords of length 20
$ passgen -p an -s 20 -n 5

# letters plus ! and @, no two identical characters in a row, seeded source
$ passgen -p a -x '!@' -norep -seed 'correct horse battery'

# extras that start with a dash need the = form
$ passgen -p an -x=-_

# JSON output
$ passgen -n 3 --json
"""
from __future__ import annotations

import argparse
import json
import sys
from dataclasses import dataclass
from typing import List

from loguru import logger

from passgen.errors import PassgenError
from passgen.filter import Policy
from passgen.generator import PasswordSpec, new

DEFAULT_SIZE = 64
DEFAULT_COUNT = 1

# ---------------------------- Options ----------------------------


@dataclass
class Options:
    policy: str = Policy.PRINTABLE.value
    size: int = DEFAULT_SIZE
    count: int = DEFAULT_COUNT
    seed: str = ""
    extra: str = ""
    no_repeat: bool = False
    json_out: bool = False
    verbose: bool = False

    def to_spec(self) -> PasswordSpec:
        return PasswordSpec(
            policy=self.policy,
            seed_phrase=self.seed,
            special_chars=self.extra,
            no_repeat=self.no_repeat,
        )


def non_negative_int(text: str) -> int:
    try:
        value = int(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer: {text!r}")
    if value < 0:
        raise argparse.ArgumentTypeError(f"must be non-negative, got {value}")
    return value


def parse_args(argv: List[str]) -> Options:
    p = argparse.ArgumentParser(
        prog="passgen",
        description="Secure random password generator.",
        allow_abbrev=False,
    )
    p.add_argument("-p", dest="policy", default=Policy.PRINTABLE.value,
                   help="policy: p:printable a:alpha n:numeric an:alphanumeric (default: p)")
    p.add_argument("-s", dest="size", type=non_negative_int, default=DEFAULT_SIZE,
                   help=f"password length (default: {DEFAULT_SIZE})")
    p.add_argument("-n", dest="count", type=non_negative_int, default=DEFAULT_COUNT,
                   help=f"number of passwords to generate (default: {DEFAULT_COUNT})")
    p.add_argument("-seed", "-input", dest="seed", default="",
                   help="seed phrase (8+ characters) for the OS agnostic entropy source; "
                        "empty selects /dev/random")
    p.add_argument("-x", dest="extra", default="",
                   help="extra characters to allow, used verbatim")
    p.add_argument("-norep", dest="no_repeat", action="store_true",
                   help="disallow adjacent duplicate characters")
    p.add_argument("--json", dest="json_out", action="store_true", help="emit a JSON array")
    p.add_argument("-v", "--verbose", action="store_true", help="debug logging to stderr")
    args = p.parse_args(argv)
    return Options(policy=args.policy, size=args.size, count=args.count, seed=args.seed,
                   extra=args.extra, no_repeat=args.no_repeat, json_out=args.json_out,
                   verbose=args.verbose)


def configure_logging(verbose: bool) -> None:
    logger.enable("passgen")
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if verbose else "WARNING", backtrace=True, diagnose=False)


# ---------------------------- Main ----------------------------


def main(argv: List[str]) -> int:
    opts = parse_args(argv)
    configure_logging(opts.verbose)
    try:
        with new(opts.to_spec()) as generator:
            passwords = []
            for _ in range(opts.count):
                password = generator.generate(opts.size)
                if opts.json_out:
                    passwords.append(password)
                else:
                    print(password)
            if opts.json_out:
                print(json.dumps(passwords, indent=2))
        return 0
    except PassgenError as e:
        logger.debug("{} raised", type(e).__name__)
        print(f"Error: {e}", file=sys.stderr)
        return 1


def run() -> None:
    sys.exit(main(sys.argv[1:]))


if __name__ == "__main__":
    run()
