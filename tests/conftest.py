"""
Pytest configuration and fixtures.
"""

import io
import os
import random
import sys

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))


class FakeTerminal(io.StringIO):
    """In-memory terminal stream that counts write calls."""

    def __init__(self, tty: bool = True):
        super().__init__()
        self.tty = tty
        self.write_calls = 0

    def isatty(self):
        return self.tty

    def write(self, s):
        self.write_calls += 1
        return super().write(s)


@pytest.fixture
def terminal():
    """A stream that reports itself as a TTY."""
    return FakeTerminal(tty=True)


@pytest.fixture
def make_terminal():
    """Factory for streams with a chosen isatty() answer."""
    return FakeTerminal


@pytest.fixture
def rng():
    """Seeded random generator for reproducible droplets."""
    return random.Random(1729)
