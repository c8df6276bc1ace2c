"""
Card ranking and combination classification.
"""

from collections import defaultdict
from typing import Dict, Iterable, List, Optional, Tuple

from .constants import (
    BOMB_SIZE, MIN_RUN_LENGTH, PLAY_BOMB, PLAY_RUN, RANK_VALUES, SAME_RANK_TYPES,
    SUIT_VALUES, TWOS_HIGH_VALUE,
)
from .models import Card, Play, RunHighCard


def card_value(rank: str, twos_high: bool = False) -> int:
    """
    Get the ranking value of a card rank.

    Standard order maps 2..10, J, Q, K, A to 2..14. With twos high the
    rank 2 is worth 15, strictly above the Ace.
    """
    if twos_high and rank == '2':
        return TWOS_HIGH_VALUE
    try:
        return RANK_VALUES[rank]
    except KeyError:
        raise ValueError(f"Invalid rank: {rank}")


def suit_value(suit: str) -> int:
    try:
        return SUIT_VALUES[suit]
    except KeyError:
        raise ValueError(f"Invalid suit: {suit}")


def card_sort_key(card: Card, twos_high: bool = False) -> Tuple[int, int]:
    """Key ordering cards by rank value, then suit."""
    return card_value(card.rank, twos_high), suit_value(card.suit)


def parse_card_id(card_id: str) -> Card:
    """Parse a card id like "10-hearts" back into a Card."""
    rank, sep, suit = card_id.partition('-')
    if not sep or rank not in RANK_VALUES or suit not in SUIT_VALUES:
        raise ValueError(f"Invalid card ID format: {card_id}")
    return Card(rank=rank, suit=suit)


def group_by_rank(cards: Iterable[Card]) -> Dict[str, List[Card]]:
    """Group cards by rank, each group sorted lowest suit first."""
    groups: Dict[str, List[Card]] = defaultdict(list)
    for card in cards:
        groups[card.rank].append(card)
    for rank in groups:
        groups[rank].sort(key=lambda c: suit_value(c.suit))
    return dict(groups)


def highest_suit_in_set(cards: List[Card]) -> int:
    """Highest suit value among the cards (tie-break for same-rank plays)."""
    return max(suit_value(card.suit) for card in cards)


def is_valid_run(cards: List[Card], twos_high: bool = False) -> bool:
    """Check if cards form 3+ strictly consecutive distinct rank values."""
    if len(cards) < MIN_RUN_LENGTH:
        return False
    values = sorted(card_value(card.rank, twos_high) for card in cards)
    return all(values[i] == values[i - 1] + 1 for i in range(1, len(values)))


def is_valid_bomb(cards: List[Card], twos_high: bool = False) -> bool:
    """Check if cards are exactly three consecutive pairs."""
    if len(cards) != BOMB_SIZE:
        return False
    groups = group_by_rank(cards)
    if len(groups) != 3 or any(len(group) != 2 for group in groups.values()):
        return False
    values = sorted(card_value(rank, twos_high) for rank in groups)
    return values[1] == values[0] + 1 and values[2] == values[1] + 1


def classify(cards: List[Card], twos_high: bool = False) -> Optional[str]:
    """
    Determine the play type of a set of cards.

    Bombs are recognised first, then same-rank groups of 1-4 cards, then
    runs. Returns None when the cards form no legal combination.
    """
    if not cards:
        return None

    if len(cards) == BOMB_SIZE and is_valid_bomb(cards, twos_high):
        return PLAY_BOMB

    first_rank = cards[0].rank
    if all(card.rank == first_rank for card in cards):
        # Can't have more than 4 of the same rank
        return SAME_RANK_TYPES.get(len(cards))

    if is_valid_run(cards, twos_high):
        return PLAY_RUN

    return None


def run_high_card(cards: List[Card], twos_high: bool = False) -> RunHighCard:
    """Get the highest card of a run as (rank value, suit value)."""
    best = max(cards, key=lambda c: card_sort_key(c, twos_high))
    return RunHighCard(rank=card_value(best.rank, twos_high), suit=suit_value(best.suit))


def bomb_high_rank(cards: List[Card], twos_high: bool = False) -> int:
    """Get the highest rank value across a bomb's six cards."""
    return max(card_value(card.rank, twos_high) for card in cards)


def highest_card(cards: List[Card], twos_high: bool = False) -> Card:
    return max(cards, key=lambda c: card_sort_key(c, twos_high))


def lowest_card(cards: List[Card], twos_high: bool = False) -> Card:
    return min(cards, key=lambda c: card_sort_key(c, twos_high))


def find_runs(hand: List[Card], twos_high: bool = False) -> List[List[Card]]:
    """
    Find every run of 3+ consecutive ranks in a hand.

    Each run uses the lowest-suit card of every rank so high suits stay
    in hand. Runs are ordered by their high card, lowest first.
    """
    by_value: Dict[int, List[Card]] = defaultdict(list)
    for card in hand:
        by_value[card_value(card.rank, twos_high)].append(card)
    for value in by_value:
        by_value[value].sort(key=lambda c: suit_value(c.suit))

    values = sorted(by_value)
    runs: List[List[Card]] = []
    for start in range(len(values)):
        for length in range(MIN_RUN_LENGTH, len(values) - start + 1):
            window = values[start:start + length]
            if window[-1] - window[0] != length - 1:
                break
            runs.append([by_value[value][0] for value in window])

    runs.sort(key=lambda run: run_high_card(run, twos_high).rank)
    return runs


def find_bombs(hand: List[Card], twos_high: bool = False) -> List[List[Card]]:
    """Find every set of three consecutive pairs, lowest bomb first."""
    pairs = sorted(
        (
            (card_value(rank, twos_high), cards[:2])
            for rank, cards in group_by_rank(hand).items()
            if len(cards) >= 2
        ),
        key=lambda item: item[0],
    )

    bombs: List[List[Card]] = []
    for i in range(len(pairs) - 2):
        if pairs[i + 1][0] == pairs[i][0] + 1 and pairs[i + 2][0] == pairs[i + 1][0] + 1:
            bombs.append(pairs[i][1] + pairs[i + 1][1] + pairs[i + 2][1])
    return bombs


def make_play(player_id: str, cards: List[Card], twos_high: bool = False) -> Play:
    """
    Build the table record for a combination, caching its comparison keys.

    Raises:
        ValueError: If the cards form no legal combination
    """
    play_type = classify(cards, twos_high)
    if play_type is None:
        raise ValueError(f"Cards do not form a valid combination: {[c.id for c in cards]}")

    high = highest_card(cards, twos_high)
    play = Play(
        player_id=player_id,
        cards=list(cards),
        play_type=play_type,
        rank=cards[0].rank if play_type in SAME_RANK_TYPES.values() else high.rank,
        count=len(cards),
    )
    if play_type == PLAY_RUN:
        play.run_high_card = run_high_card(cards, twos_high)
    elif play_type == PLAY_BOMB:
        play.bomb_high_rank = bomb_high_rank(cards, twos_high)
    else:
        play.high_suit = highest_suit_in_set(cards)
    return play
