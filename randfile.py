#!/usr/bin/env python3
# -*- coding: utf-8 -*-

import os
import struct
import tempfile
import time

from typing import BinaryIO, Callable

MAX_ATTEMPTS = 10000

# Quick and dirty congruential generator from Numerical Recipes
_MULTIPLIER = 1664525
_INCREMENT = 1013904223
_INT_BITS = struct.calcsize('P') * 8


class AllocationExhaustedError(FileExistsError):
    """Raised when no unique file name could be found"""
    directory: str
    attempts: int

    def __init__(self, directory: str, attempts: int):
        super().__init__(f'No unique file name found in {directory!r} after {attempts} attempts')
        self.directory = directory
        self.attempts = attempts


def _wrap(value: int) -> int:
    """Truncates value to the platform's native signed integer width"""
    half = 1 << (_INT_BITS - 1)
    return ((value + half) % (1 << _INT_BITS)) - half


def disambiguator(nanos: int, pid: int) -> int:
    return _wrap((nanos + pid) * _MULTIPLIER + _INCREMENT)


def _private(path: str, flags: int) -> int:
    return os.open(path, flags, 0o600)


def rand_file(directory: str, prefix: str, suffix: str, *,
              attempts: int = MAX_ATTEMPTS,
              clock: Callable[[], int] = time.time_ns,
              getpid: Callable[[], int] = os.getpid,
              opener: Callable[[str, int], int] = _private) -> BinaryIO:
    """Returns a new, empty file opened for reading and writing.

    The name has the form ``<prefix>_<n>.<suffix>`` where ``n`` is derived
    from the clock and the process id, sampled again on every attempt. The
    file is created exclusively, so an existing file is never reused. If
    ``directory`` is empty the temporary directory is used.
    """
    if not directory:
        directory = tempfile.gettempdir()

    for _ in range(attempts):
        name = os.path.join(directory, f'{prefix}_{disambiguator(clock(), getpid())}.{suffix}')
        try:
            return open(name, 'x+b', opener=opener)
        except FileExistsError:
            continue

    raise AllocationExhaustedError(directory, attempts)
