"""
Round transitions: dealing, playing, passing and round-end scoring.

Every transition takes a GameState and returns a new one; the input is
never mutated. Callers validate intents (see engine.py) before calling
these, so legality of the combination is assumed here.
"""

import copy
import logging
from typing import List, Optional, Sequence

from .comparator import card_sort_key, lowest_card, make_play
from .constants import OPENING_CARD, STATUS_GAME_OVER, STATUS_PLAYING, STATUS_ROUND_END
from .errors import CANNOT_PASS, NOT_ENOUGH_PLAYERS, OWNERSHIP_MISMATCH, PLAYER_NOT_FOUND, GameError
from .models import Card, GameState, PlayerState
from .ranking import assign_titles, has_winner
from .shuffle import create_deck, deal_cards, format_cards, shuffle_deck, sort_hand

logger = logging.getLogger(__name__)


def _require_player(state: GameState, seat_id: str) -> PlayerState:
    player = state.get_player(seat_id)
    if player is None:
        raise GameError(PLAYER_NOT_FOUND, f"Player {seat_id} not found")
    return player


def find_opening_seat(players: List[PlayerState], twos_high: bool = False) -> tuple:
    """
    Find who leads the first round and the card they must lead with.

    The 3 of clubs opens regardless of twos_high. When it was burned,
    the holder of the lowest dealt card opens instead.

    Returns:
        (seat_id, card_id)
    """
    for player in players:
        if any(card.id == OPENING_CARD for card in player.hand):
            return player.seat_id, OPENING_CARD

    holders = [(lowest_card(p.hand, twos_high), p) for p in players if p.hand]
    if not holders:
        raise GameError(NOT_ENOUGH_PLAYERS, "No cards were dealt")
    card, player = min(holders, key=lambda item: card_sort_key(item[0], twos_high))
    return player.seat_id, card.id


def next_active_seat(state: GameState, from_seat_id: str) -> Optional[str]:
    """Next non-finished seat after from_seat_id in turn order."""
    order = state.turn_order or [p.seat_id for p in state.players]
    if not order:
        return None
    start = order.index(from_seat_id) if from_seat_id in order else -1
    for step in range(1, len(order) + 1):
        seat_id = order[(start + step) % len(order)]
        player = state.get_player(seat_id)
        if player is not None and not player.is_finished:
            return seat_id
    return None


def passes_needed(state: GameState) -> int:
    """
    Passes that end the current trick: every active seat except the
    owner of the last play.
    """
    active = state.active_players()
    if state.last_play is None:
        return max(len(active) - 1, 0)
    owner = state.get_player(state.last_play.player_id)
    if owner is not None and not owner.is_finished:
        return len(active) - 1
    return len(active)


def clear_trick(state: GameState):
    """
    Clear the table and hand the lead back to the trick winner.

    Mutates state. If the winner has already gone out, play continues
    with the next active seat after them.
    """
    winner_id = state.last_play.player_id if state.last_play else state.current_player_id
    state.last_play = None
    state.pass_count = 0

    winner = state.get_player(winner_id) if winner_id else None
    if winner is not None and not winner.is_finished:
        state.current_player_id = winner_id
    else:
        state.current_player_id = next_active_seat(state, winner_id)

    leader = state.get_player(state.current_player_id) if state.current_player_id else None
    if leader is not None:
        state.add_log(f"Pile cleared, {leader.name} leads")


def advance_turn(state: GameState, from_seat_id: str):
    """
    Move the turn to the next seat able to respond.

    Mutates state. Seats holding fewer cards than the combination on the
    table are skipped without being asked, recorded in
    skipped_player_ids, and count as a pass.
    """
    current = from_seat_id
    while True:
        next_id = next_active_seat(state, current)
        if next_id is None:
            state.current_player_id = None
            return

        if state.last_play is None:
            state.current_player_id = next_id
            return

        if next_id == state.last_play.player_id:
            # Went all the way round: the owner leads a fresh trick
            clear_trick(state)
            return

        player = state.get_player(next_id)
        if len(player.hand) >= state.last_play.count:
            state.current_player_id = next_id
            return

        state.skipped_player_ids.append(next_id)
        state.pass_count += 1
        state.add_log(f"{player.name} skipped (not enough cards)")
        logger.debug(f"Auto-skipped {next_id} in room {state.code}: "
                     f"{len(player.hand)} cards < {state.last_play.count}")

        if state.pass_count >= passes_needed(state):
            clear_trick(state)
            return
        current = next_id


def initialize_round(
    state: GameState,
    seats: Optional[Sequence[PlayerState]] = None,
    seed: Optional[int] = None
) -> GameState:
    """
    Shuffle, deal and open a new round.

    Round 1 deals in seating order, burns the undealt remainder and gives
    the lead to the holder of the opening card. Later rounds hand the
    remainder one card each to the worst finishers of the previous round,
    and play in the previous finish order with the winner leading.

    Args:
        state: Current game state (LOBBY for the first round, ROUND_END after)
        seats: Optional replacement seating, in seat order
        seed: Optional seed for deterministic shuffling

    Returns:
        New state with status PLAYING
    """
    new_state = copy.deepcopy(state)
    if seats is not None:
        new_state.players = [copy.deepcopy(seat) for seat in seats]

    players = new_state.players
    settings = new_state.settings
    if len(players) != settings.player_count:
        raise GameError(
            NOT_ENOUGH_PLAYERS,
            f"Need exactly {settings.player_count} players (have {len(players)})"
        )

    seat_ids = [p.seat_id for p in players]
    previous_order = []
    if new_state.current_round > 0:
        previous_order = [sid for sid in new_state.finish_order if sid in seat_ids]
    full_previous_order = len(previous_order) == len(players)

    # Worst finisher first
    extra_recipients = [seat_ids.index(sid) for sid in reversed(previous_order)]
    deck = shuffle_deck(create_deck(), seed)
    hands, burned = deal_cards(deck, len(players), extra_recipients)

    for player, hand in zip(players, hands):
        player.hand = sort_hand(hand, settings.twos_high)
        player.is_finished = False
        player.finish_position = None

    new_state.current_round += 1
    new_state.status = STATUS_PLAYING
    new_state.previous_finish_order = previous_order
    new_state.finish_order = []
    new_state.last_play = None
    new_state.pass_count = 0
    new_state.played_cards = []
    new_state.burned_cards = burned
    new_state.trading_state = None
    new_state.skipped_player_ids = []

    if full_previous_order:
        new_state.turn_order = list(previous_order)
        new_state.current_player_id = previous_order[0]
        new_state.opening_card_id = None
    else:
        new_state.turn_order = seat_ids
        leader_id, card_id = find_opening_seat(players, settings.twos_high)
        new_state.current_player_id = leader_id
        new_state.opening_card_id = card_id

    leader = new_state.get_player(new_state.current_player_id)
    new_state.add_log(f"Round {new_state.current_round} dealt, {leader.name} leads")
    if burned:
        new_state.add_log(f"Burned: {format_cards(burned)}")
    logger.info(f"Room {new_state.code}: round {new_state.current_round} dealt "
                f"({len(burned)} burned), {leader.seat_id} leads")

    new_state.increment_version()
    return new_state


def apply_play(state: GameState, seat_id: str, cards: List[Card]) -> GameState:
    """
    Record a play: remove the cards, finish the seat if its hand is empty,
    and move the turn on.

    Args:
        state: Current game state
        seat_id: Seat playing the cards
        cards: A combination already accepted by validate_play

    Returns:
        Updated state; the round is scored when one or no seats remain
    """
    new_state = copy.deepcopy(state)
    player = _require_player(new_state, seat_id)
    twos_high = new_state.settings.twos_high

    remaining = list(player.hand)
    for card in cards:
        if card not in remaining:
            raise GameError(OWNERSHIP_MISMATCH, f"You don't own {card.id}")
        remaining.remove(card)

    play = make_play(seat_id, cards, twos_high)
    player.hand = remaining
    new_state.played_cards.extend(cards)
    new_state.opening_card_id = None
    new_state.skipped_player_ids = []
    new_state.add_log(f"{player.name} played: {format_cards(cards)}")
    logger.debug(f"{seat_id} played {play.play_type} in room {new_state.code}")

    if not player.hand:
        player.is_finished = True
        player.finish_position = len(new_state.finish_order)
        new_state.finish_order.append(seat_id)
        new_state.add_log(f"{player.name} finished in position {len(new_state.finish_order)}!")

        active = new_state.active_players()
        if len(active) <= 1:
            for last in active:
                last.is_finished = True
                last.finish_position = len(new_state.finish_order)
                new_state.finish_order.append(last.seat_id)
                new_state.add_log(f"{last.name} finished last")
            return end_round(new_state)

    new_state.last_play = play
    new_state.pass_count = 0
    advance_turn(new_state, seat_id)
    new_state.increment_version()
    return new_state


def apply_pass(state: GameState, seat_id: str) -> GameState:
    """
    Record a pass. When every seat but the trick winner has passed the
    pile is cleared and the winner leads again.
    """
    if state.last_play is None:
        raise GameError(CANNOT_PASS, "Cannot pass when leading")

    new_state = copy.deepcopy(state)
    player = _require_player(new_state, seat_id)
    new_state.skipped_player_ids = []
    new_state.pass_count += 1
    new_state.add_log(f"{player.name} passed")

    if new_state.pass_count >= passes_needed(new_state):
        clear_trick(new_state)
    else:
        advance_turn(new_state, seat_id)

    new_state.increment_version()
    return new_state


def end_round(state: GameState) -> GameState:
    """
    Score a finished round and decide whether the game is over.

    Points and titles come from the finish order; the first time any
    total reaches win_score the game ends.
    """
    new_state = copy.deepcopy(state)
    assign_titles(new_state)

    new_state.status = STATUS_GAME_OVER if has_winner(new_state) else STATUS_ROUND_END
    new_state.current_player_id = None
    new_state.last_play = None
    new_state.pass_count = 0
    new_state.skipped_player_ids = []

    scores = ', '.join(f"{p.name} {p.total_score}" for p in new_state.players)
    new_state.add_log(f"Round {new_state.current_round} over: {scores}")
    logger.info(f"Room {new_state.code}: round {new_state.current_round} ended "
                f"({new_state.status}), order {new_state.finish_order}")

    new_state.increment_version()
    return new_state
