"""
Base bot interface and utilities.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from ..constants import STATUS_PLAYING, STATUS_TRADING
from ..models import Card, GameState, PlayerState


class BotAction:
    """Represents a bot action."""

    def __init__(self, action_type: str, cards: Optional[List[Card]] = None):
        self.type = action_type
        self.cards = list(cards or [])

    @classmethod
    def play(cls, cards: List[Card]) -> 'BotAction':
        """Create a play action."""
        return cls('play', cards=cards)

    @classmethod
    def pass_turn(cls) -> 'BotAction':
        """Create a pass action."""
        return cls('pass')

    @classmethod
    def trade(cls, cards: List[Card]) -> 'BotAction':
        """Create a trade action."""
        return cls('trade', cards=cards)

    def __repr__(self) -> str:
        return f"BotAction({self.type!r}, {[c.id for c in self.cards]})"


class BaseBot(ABC):
    """Abstract base class for bot players."""

    def __init__(self, seat_id: str):
        self.seat_id = seat_id

    @abstractmethod
    def choose_action(self, state: GameState) -> Optional[BotAction]:
        """
        Choose an action based on the current game state.

        Args:
            state: Current game state; bots only read their own hand and
                public table information from it

        Returns:
            BotAction to take, or None if no action needed
        """
        pass

    def get_player(self, state: GameState) -> Optional[PlayerState]:
        return state.get_player(self.seat_id)

    def get_player_hand(self, state: GameState) -> List[Card]:
        """Get this bot's current hand."""
        player = self.get_player(state)
        return list(player.hand) if player else []

    def is_my_turn(self, state: GameState) -> bool:
        """Check if it's this bot's turn."""
        return state.status == STATUS_PLAYING and state.current_player_id == self.seat_id

    def has_pending_trade(self, state: GameState) -> bool:
        """Check if this bot owes cards in the current trading phase."""
        if state.status != STATUS_TRADING:
            return False

        from ..exchange import trade_for_giver
        return trade_for_giver(state, self.seat_id) is not None

    def opponent_card_counts(self, state: GameState) -> List[int]:
        """Hand sizes of opponents still in the round."""
        return [
            len(p.hand) for p in state.players
            if p.seat_id != self.seat_id and not p.is_finished
        ]
