"""
Bot players for the Revolution game.
"""

from .base import BaseBot, BotAction
from .greedy import GreedyBot

__all__ = ["BaseBot", "BotAction", "GreedyBot"]
