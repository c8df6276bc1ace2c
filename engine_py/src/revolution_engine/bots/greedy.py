"""
Greedy bot implementation with basic heuristics.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Set

from .base import BaseBot, BotAction
from ..comparator import (
    bomb_high_rank, card_sort_key, card_value, classify, find_bombs, find_runs,
    group_by_rank, suit_value,
)
from ..constants import BOT_NAMES, DANGEROUS_HAND_SIZE, PLAY_BOMB, PLAY_RUN, SAME_RANK_TYPES
from ..models import Card, GameState, Play
from ..validate import validate_play

logger = logging.getLogger(__name__)

# Hand size at which leading switches to planning the way out
EXIT_PLANNING_HAND_SIZE = 4
BOMB_FREELY_HAND_SIZE = 6


@dataclass
class HandAnalysis:
    """Every combination a hand can lead with, weakest first."""
    singles: List[List[Card]] = field(default_factory=list)
    pairs: List[List[Card]] = field(default_factory=list)
    triples: List[List[Card]] = field(default_factory=list)
    quads: List[List[Card]] = field(default_factory=list)
    runs: List[List[Card]] = field(default_factory=list)
    bombs: List[List[Card]] = field(default_factory=list)
    rank_counts: Dict[str, int] = field(default_factory=dict)
    run_ranks: Set[str] = field(default_factory=set)


def get_bot_name(index: int) -> str:
    return BOT_NAMES[index % len(BOT_NAMES)]


def analyze_hand(hand: List[Card], twos_high: bool = False) -> HandAnalysis:
    """
    Enumerate same-rank groups, runs and bombs in a hand.

    Same-rank groups use the lowest suits of their rank so the high suits
    stay in hand for tie-breaks later.
    """
    analysis = HandAnalysis()
    groups = sorted(group_by_rank(hand).items(), key=lambda item: card_value(item[0], twos_high))

    for rank, cards in groups:
        analysis.rank_counts[rank] = len(cards)
        analysis.singles.append(cards[:1])
        if len(cards) >= 2:
            analysis.pairs.append(cards[:2])
        if len(cards) >= 3:
            analysis.triples.append(cards[:3])
        if len(cards) >= 4:
            analysis.quads.append(cards[:4])

    analysis.runs = find_runs(hand, twos_high)
    analysis.bombs = find_bombs(hand, twos_high)
    analysis.run_ranks = {card.rank for run in analysis.runs for card in run}
    return analysis


def is_dangerous(opponent_card_counts: Sequence[int]) -> bool:
    """An opponent still in the round is about to go out."""
    return any(0 < count <= DANGEROUS_HAND_SIZE for count in opponent_card_counts)


def plan_exit_play(hand: List[Card], analysis: HandAnalysis, twos_high: bool = False) -> List[Card]:
    """
    Lead so the hand can go out in at most two turns.

    A hand that is itself a combination goes out at once. Otherwise lead
    the higher of the biggest same-rank group and the best single left
    beside it, keeping the other for the next lead.
    """
    if classify(hand, twos_high) is not None:
        return sorted(hand, key=lambda c: card_sort_key(c, twos_high))

    groups = [cards for cards in group_by_rank(hand).values() if len(cards) >= 2]
    if not groups:
        return [max(hand, key=lambda c: card_sort_key(c, twos_high))]

    group = max(groups, key=lambda cards: (len(cards), card_value(cards[0].rank, twos_high)))
    rest = [card for card in hand if card not in group]
    single = max(rest, key=lambda c: card_sort_key(c, twos_high))
    if card_value(single.rank, twos_high) >= card_value(group[0].rank, twos_high):
        return [single]
    return group


def select_lead_play(
    hand: List[Card],
    analysis: HandAnalysis,
    twos_high: bool = False,
    opponent_dangerous: bool = False
) -> List[Card]:
    """
    Choose what to lead.

    Normally junk goes first and combinations are saved. When an opponent
    is about to go out, lead the strongest combination to keep control.
    """
    if len(hand) <= EXIT_PLANNING_HAND_SIZE:
        return plan_exit_play(hand, analysis, twos_high)

    if opponent_dangerous:
        for options in (analysis.bombs, analysis.triples, analysis.runs, analysis.pairs, analysis.singles):
            if options:
                return options[-1]

    counts = analysis.rank_counts

    # Isolated singles
    for single in analysis.singles:
        rank = single[0].rank
        if counts[rank] == 1 and rank not in analysis.run_ranks:
            return single

    # True pairs outside any run
    for pair in analysis.pairs:
        rank = pair[0].rank
        if counts[rank] == 2 and rank not in analysis.run_ranks:
            return pair

    if analysis.runs:
        shortest = min(len(run) for run in analysis.runs)
        return next(run for run in analysis.runs if len(run) == shortest)

    for triple in analysis.triples:
        if counts[triple[0].rank] == 3:
            return triple

    if analysis.quads:
        return analysis.quads[0]

    return analysis.singles[0] if analysis.singles else [hand[0]]


def _same_rank_candidates(hand: List[Card], count: int, twos_high: bool) -> List[List[Card]]:
    candidates = []
    groups = sorted(group_by_rank(hand).items(), key=lambda item: card_value(item[0], twos_high))
    for _, cards in groups:
        if len(cards) < count:
            continue
        candidates.append(cards[:count])
        if cards[-count:] != cards[:count]:
            # Highest suits win a tie at equal rank
            candidates.append(cards[-count:])
    return candidates


def _run_candidates(hand: List[Card], length: int, twos_high: bool) -> List[List[Card]]:
    candidates = []
    for run in find_runs(hand, twos_high):
        if len(run) != length:
            continue
        candidates.append(run)
        top_value = card_value(run[-1].rank, twos_high)
        tops = [c for c in hand if card_value(c.rank, twos_high) == top_value]
        best_top = max(tops, key=lambda c: suit_value(c.suit))
        if best_top != run[-1]:
            candidates.append(run[:-1] + [best_top])
    return candidates


def select_follow_play(
    hand: List[Card],
    last_play: Play,
    analysis: HandAnalysis,
    twos_high: bool = False,
    opponent_dangerous: bool = False
) -> Optional[List[Card]]:
    """
    Choose a response to the table, or None to pass.

    The weakest accepted response is played, except that a middle one is
    used when an opponent is about to go out and there is a choice.
    """
    if last_play.play_type == PLAY_BOMB:
        last_rank = last_play.bomb_high_rank or bomb_high_rank(last_play.cards, twos_high)
        for bomb in analysis.bombs:
            if bomb_high_rank(bomb, twos_high) > last_rank:
                return bomb
        return None

    if last_play.play_type == PLAY_RUN:
        candidates = _run_candidates(hand, last_play.count, twos_high)
    elif last_play.play_type in SAME_RANK_TYPES.values():
        candidates = _same_rank_candidates(hand, last_play.count, twos_high)
    else:
        candidates = []

    valid = [cards for cards in candidates if validate_play(cards, last_play, twos_high).valid]
    if valid:
        if opponent_dangerous and len(valid) > 1:
            return valid[len(valid) // 2]
        return valid[0]

    if analysis.bombs:
        should_bomb = (
            opponent_dangerous
            or len(hand) <= BOMB_FREELY_HAND_SIZE
            or len(analysis.bombs) >= 2
        )
        if should_bomb:
            return analysis.bombs[0]

    return None


def decide(
    hand: List[Card],
    last_play: Optional[Play],
    twos_high: bool = False,
    opponent_card_counts: Sequence[int] = (),
    is_leading: Optional[bool] = None
) -> Optional[List[Card]]:
    """
    Pick the cards to play, or None to pass.

    Args:
        hand: The bot's hand
        last_play: Combination on the table, None when leading
        twos_high: Whether rank 2 ranks above Ace
        opponent_card_counts: Hand sizes of the other seats still playing
        is_leading: Defaults to whether the table is empty

    Returns:
        A combination the validator accepts against last_play, or None
    """
    if not hand:
        return None
    if is_leading is None:
        is_leading = last_play is None

    analysis = analyze_hand(hand, twos_high)
    dangerous = is_dangerous(opponent_card_counts)

    if is_leading or last_play is None:
        return select_lead_play(hand, analysis, twos_high, dangerous)
    return select_follow_play(hand, last_play, analysis, twos_high, dangerous)


def choose_trade_cards(hand: List[Card], count: int, twos_high: bool = False) -> List[Card]:
    """Give away the lowest cards by rank, then suit."""
    return sorted(hand, key=lambda c: card_sort_key(c, twos_high))[:count]


def choose_opening_play(hand: List[Card], must_include_id: str, twos_high: bool = False) -> List[Card]:
    """
    Lead the first play of the game, which must contain a given card.

    Prefers the longest run containing it, then the largest same-rank
    group containing it, then the card alone.
    """
    must = next((c for c in hand if c.id == must_include_id), None)
    if must is None:
        return [min(hand, key=lambda c: card_sort_key(c, twos_high))]

    runs = [run for run in find_runs(hand, twos_high) if must in run]
    if runs:
        return max(runs, key=len)

    same_rank = [c for c in group_by_rank(hand)[must.rank] if c != must]
    return [must] + same_rank[:3]


class GreedyBot(BaseBot):
    """
    Greedy bot that plays by hand analysis and simple heuristics.

    Strategy:
    - Lead junk first and keep combinations for later
    - Follow with the weakest card that wins
    - Keep control when an opponent is about to go out
    - Give away the lowest cards when trading
    """

    def choose_action(self, state: GameState) -> Optional[BotAction]:
        """Choose the best action for the current state."""
        twos_high = state.settings.twos_high

        if self.has_pending_trade(state):
            from ..exchange import trade_for_giver
            _, _, count = trade_for_giver(state, self.seat_id)
            return BotAction.trade(choose_trade_cards(self.get_player_hand(state), count, twos_high))

        if not self.is_my_turn(state):
            return None

        hand = self.get_player_hand(state)
        if not hand:
            return None

        leading = state.last_play is None
        if leading and state.opening_card_id and any(c.id == state.opening_card_id for c in hand):
            return BotAction.play(choose_opening_play(hand, state.opening_card_id, twos_high))

        cards = decide(
            hand,
            state.last_play,
            twos_high,
            self.opponent_card_counts(state),
            leading,
        )
        if cards is None:
            return BotAction.pass_turn()
        logger.debug(f"Bot {self.seat_id} plays {[c.id for c in cards]}")
        return BotAction.play(cards)
