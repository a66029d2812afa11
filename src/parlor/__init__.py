"""Parlor package exposing the game engines, the Dots & Boxes AI, and the web application."""

from .ai import GreedyDotsAI
from .dots import DotsConfig, DotsGame
from .errors import IllegalMove, InvalidConfiguration
from .hexgame import HexConfig, HexGame
from .mastermind import MastermindConfig, MastermindGame
from .ui import app

__all__ = [
    "DotsConfig",
    "DotsGame",
    "GreedyDotsAI",
    "HexConfig",
    "HexGame",
    "IllegalMove",
    "InvalidConfiguration",
    "MastermindConfig",
    "MastermindGame",
    "app",
]
