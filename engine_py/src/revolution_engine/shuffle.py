"""
Deck construction, shuffling and dealing utilities.
"""

import random
from collections import Counter
from typing import List, Optional, Sequence, Tuple

from .comparator import card_sort_key
from .constants import DECK_SIZE, RANKS, SUITS, SUIT_SYMBOLS
from .models import Card, GameState


def create_deck() -> List[Card]:
    """Create a standard deck with one card per (rank, suit) pair."""
    return [Card(rank=rank, suit=suit) for suit in SUITS for rank in RANKS]


def shuffle_deck(deck: List[Card], seed: Optional[int] = None, passes: int = 7) -> List[Card]:
    """
    Shuffle a deck deterministically if seed is provided.

    One Fisher-Yates pass is already uniform; the extra passes keep the
    historical deal behaviour.

    Args:
        deck: Cards to shuffle
        seed: Optional seed for deterministic shuffling
        passes: Number of Fisher-Yates passes

    Returns:
        Shuffled copy of the deck
    """
    rng = random.Random(seed) if seed is not None else random.Random()
    shuffled = list(deck)
    for _ in range(max(1, passes)):
        for i in range(len(shuffled) - 1, 0, -1):
            j = rng.randint(0, i)
            shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled


def deal_cards(
    deck: List[Card],
    player_count: int,
    extra_recipients: Sequence[int] = ()
) -> Tuple[List[List[Card]], List[Card]]:
    """
    Deal cards evenly, round-robin, to every seat.

    The remainder of 52 / player_count either goes one card each to the
    seat indices in extra_recipients (worst finisher first) or, when
    there are no recipients, is burned for the round.

    Returns:
        (hands indexed by seat, burned cards)
    """
    if player_count <= 0:
        raise ValueError(f"Invalid player count: {player_count}")

    hands: List[List[Card]] = [[] for _ in range(player_count)]
    cards_per_player = len(deck) // player_count
    cards_to_use = cards_per_player * player_count

    for i, card in enumerate(deck[:cards_to_use]):
        hands[i % player_count].append(card)

    leftover = list(deck[cards_to_use:])
    burned: List[Card] = []
    if not extra_recipients:
        burned = leftover
    else:
        for i, card in enumerate(leftover):
            if i < len(extra_recipients) and 0 <= extra_recipients[i] < player_count:
                hands[extra_recipients[i]].append(card)
            else:
                burned.append(card)

    return hands, burned


def sort_hand(hand: List[Card], twos_high: bool = False, descending: bool = False) -> List[Card]:
    """
    Sort a hand by rank value, then suit.

    Args:
        hand: Cards to sort
        twos_high: Whether rank 2 ranks above Ace
        descending: Highest card first

    Returns:
        Sorted copy of the hand
    """
    return sorted(hand, key=lambda c: card_sort_key(c, twos_high), reverse=descending)


def format_card(card: Card) -> str:
    """Short display form, e.g. 10♥."""
    return f"{card.rank}{SUIT_SYMBOLS[card.suit]}"


def format_cards(cards: List[Card]) -> str:
    return ', '.join(format_card(card) for card in cards)


def validate_deck_integrity(state: GameState) -> bool:
    """
    Validate that all cards are accounted for and no duplicates exist.

    Hands, cards played this round and burned cards must partition
    exactly one 52-card deck.
    """
    all_cards: List[Card] = []
    for player in state.players:
        all_cards.extend(player.hand)
    all_cards.extend(state.played_cards)
    all_cards.extend(state.burned_cards)

    counts = Counter(all_cards)
    return (
        len(all_cards) == DECK_SIZE
        and all(count == 1 for count in counts.values())
        and set(counts) == set(create_deck())
    )
