"""
Play validation against the combination on the table.
"""

from typing import List, Optional

from .comparator import (
    bomb_high_rank, card_value, classify, find_bombs, find_runs, group_by_rank,
    highest_suit_in_set, run_high_card,
)
from .constants import PLAY_BOMB, PLAY_RUN
from .errors import BOMB_REQUIRED, INVALID_COMBINATION, PATTERN_MISMATCH, RANK_TOO_LOW
from .models import Card, Play, PlayerState


class ValidationResult:
    """Result of play validation."""

    def __init__(
        self,
        valid: bool,
        error_code: Optional[str] = None,
        error_message: Optional[str] = None,
        play_type: Optional[str] = None
    ):
        self.valid = valid
        self.error_code = error_code
        self.error_message = error_message
        self.play_type = play_type

    @classmethod
    def success(cls, play_type: str) -> 'ValidationResult':
        """Create a successful validation result."""
        return cls(valid=True, play_type=play_type)

    @classmethod
    def error(cls, error_code: str, error_message: str) -> 'ValidationResult':
        """Create an error validation result."""
        return cls(valid=False, error_code=error_code, error_message=error_message)

    def __repr__(self) -> str:
        if self.valid:
            return f"ValidationResult(valid=True, play_type={self.play_type!r})"
        return f"ValidationResult(valid=False, error_code={self.error_code!r})"


def validate_ownership(player: PlayerState, cards: List[Card]) -> bool:
    """Check the player holds every card and no card is listed twice."""
    if len(set(cards)) != len(cards):
        return False
    hand = set(player.hand)
    return all(card in hand for card in cards)


def _last_high_suit(last_play: Play) -> int:
    if last_play.high_suit is not None:
        return last_play.high_suit
    return highest_suit_in_set(last_play.cards)


def _last_bomb_rank(last_play: Play, twos_high: bool) -> int:
    if last_play.bomb_high_rank is not None:
        return last_play.bomb_high_rank
    return bomb_high_rank(last_play.cards, twos_high)


def validate_play(
    cards: List[Card],
    last_play: Optional[Play],
    twos_high: bool = False
) -> ValidationResult:
    """
    Validate a combination against the table's last play.

    Args:
        cards: Cards being played
        last_play: Combination currently on the table, None when leading
        twos_high: Whether rank 2 ranks above Ace

    Returns:
        ValidationResult with validation outcome and play type
    """
    if not cards:
        return ValidationResult.error(INVALID_COMBINATION, "Must play at least one card")

    play_type = classify(cards, twos_high)
    if play_type is None:
        return ValidationResult.error(
            INVALID_COMBINATION,
            "Invalid combination. Play same rank cards, a run (3+ consecutive), "
            "or a bomb (3 consecutive pairs)."
        )

    # Leading: anything valid goes
    if last_play is None:
        return ValidationResult.success(play_type)

    if play_type == PLAY_BOMB:
        if last_play.play_type == PLAY_BOMB:
            if bomb_high_rank(cards, twos_high) > _last_bomb_rank(last_play, twos_high):
                return ValidationResult.success(play_type)
            return ValidationResult.error(RANK_TOO_LOW, "Must play a higher bomb")
        # Bomb beats anything else
        return ValidationResult.success(play_type)

    if last_play.play_type == PLAY_BOMB:
        return ValidationResult.error(BOMB_REQUIRED, "Only a bomb can beat a bomb")

    if play_type != last_play.play_type:
        return ValidationResult.error(PATTERN_MISMATCH, f"Must play a {last_play.play_type}")

    if len(cards) != last_play.count:
        return ValidationResult.error(PATTERN_MISMATCH, f"Must play {last_play.count} card(s)")

    if play_type == PLAY_RUN:
        mine = run_high_card(cards, twos_high)
        theirs = last_play.run_high_card or run_high_card(last_play.cards, twos_high)
        if (mine.rank, mine.suit) > (theirs.rank, theirs.suit):
            return ValidationResult.success(play_type)
        return ValidationResult.error(RANK_TOO_LOW, "Must play a higher run")

    # Single, pair, triple, quad: rank first, then highest suit in the set
    my_value = card_value(cards[0].rank, twos_high)
    their_value = card_value(last_play.rank, twos_high)
    if my_value > their_value:
        return ValidationResult.success(play_type)
    if my_value == their_value and highest_suit_in_set(cards) > _last_high_suit(last_play):
        return ValidationResult.success(play_type)
    return ValidationResult.error(RANK_TOO_LOW, "Must play higher cards")


def can_play(hand: List[Card], last_play: Optional[Play], twos_high: bool = False) -> bool:
    """
    Check whether a hand holds any legal response to the table.

    Used for "must pass" hints. Runs of the required length and bombs are
    enumerated; the authoritative check is always validate_play on the
    cards actually chosen.
    """
    if not hand:
        return False
    if last_play is None:
        return True

    bombs = find_bombs(hand, twos_high)
    if last_play.play_type == PLAY_BOMB:
        return any(validate_play(bomb, last_play, twos_high).valid for bomb in bombs)
    if bombs:
        return True

    if last_play.play_type == PLAY_RUN:
        for run in find_runs(hand, twos_high):
            if len(run) != last_play.count:
                continue
            # Try the strongest suit for the top card of this run
            top_value = card_value(run[-1].rank, twos_high)
            for card in hand:
                if card_value(card.rank, twos_high) == top_value:
                    if validate_play(run[:-1] + [card], last_play, twos_high).valid:
                        return True
        return False

    for cards in group_by_rank(hand).values():
        if len(cards) >= last_play.count:
            # Highest suits give the best tie-break
            candidate = cards[-last_play.count:]
            if validate_play(candidate, last_play, twos_high).valid:
                return True
    return False
