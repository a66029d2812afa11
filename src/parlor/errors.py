"""Exceptions raised by the game engines."""

from __future__ import annotations


class IllegalMove(ValueError):
    """A move was refused: occupied target, out of range, wrong phase or mover."""


class InvalidConfiguration(ValueError):
    """Unsupported board size, player count or palette size."""
