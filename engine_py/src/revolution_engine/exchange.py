"""
Trading phase logic between rounds.

The last finisher gives the KING two cards and the second to last gives
the QUEEN one; then the KING and QUEEN give the same number of cards
back. The giver chooses which of their cards to hand over. Trades are
keyed "giver-receiver" and each key may only be completed once.
"""

import copy
import logging
from typing import List, Optional, Tuple

from .constants import (
    KING_TRADE_COUNT,
    QUEEN_TRADE_COUNT,
    STATUS_PLAYING,
    STATUS_TRADING,
    TRADE_PEASANTS_GIVE,
    TRADE_ROYALS_GIVE,
)
from .errors import (
    INVALID_TRADE,
    OWNERSHIP_MISMATCH,
    PHASE_MISMATCH,
    PLAYER_NOT_FOUND,
    TRADE_ALREADY_DONE,
    GameError,
)
from .models import Card, GameState, TradingState
from .shuffle import format_cards, sort_hand

logger = logging.getLogger(__name__)

# (giver, receiver, count)
Trade = Tuple[str, str, int]


def trade_key(giver_id: str, receiver_id: str) -> str:
    return f"{giver_id}-{receiver_id}"


def start_trading(state: GameState) -> GameState:
    """
    Open the trading phase from the previous round's finish order.

    With trading disabled, or fewer than two previous finishers, the
    state is returned unchanged.
    """
    order = state.previous_finish_order
    if not state.settings.trading_enabled or len(order) < 2:
        return state

    new_state = copy.deepcopy(state)
    new_state.status = STATUS_TRADING
    new_state.current_player_id = None
    new_state.trading_state = TradingState(
        phase=TRADE_PEASANTS_GIVE,
        king_id=order[0],
        queen_id=order[1],
        last_id=order[-1],
        second_last_id=order[-2],
    )
    new_state.add_log("Trading: peasants give cards to the royals")
    logger.info(f"Room {new_state.code}: trading started "
                f"(king={order[0]}, last={order[-1]})")
    new_state.increment_version()
    return new_state


def required_trades(state: GameState) -> List[Trade]:
    """
    Trades the current phase needs, in order.

    A pair whose giver and receiver are the same seat, or that repeats an
    earlier pair of the phase, is dropped.
    """
    ts = state.trading_state
    if ts is None:
        return []

    if ts.phase == TRADE_PEASANTS_GIVE:
        candidates = [
            (ts.last_id, ts.king_id, KING_TRADE_COUNT),
            (ts.second_last_id, ts.queen_id, QUEEN_TRADE_COUNT),
        ]
    elif ts.phase == TRADE_ROYALS_GIVE:
        candidates = [
            (ts.king_id, ts.last_id, KING_TRADE_COUNT),
            (ts.queen_id, ts.second_last_id, QUEEN_TRADE_COUNT),
        ]
    else:
        return []

    trades: List[Trade] = []
    seen = set()
    for giver, receiver, count in candidates:
        if giver == receiver or (giver, receiver) in seen:
            continue
        seen.add((giver, receiver))
        trades.append((giver, receiver, count))
    return trades


def pending_trades(state: GameState) -> List[Trade]:
    """Required trades of the current phase not yet completed."""
    ts = state.trading_state
    if ts is None:
        return []
    return [
        trade for trade in required_trades(state)
        if trade_key(trade[0], trade[1]) not in ts.completed_trades
    ]


def trade_for_giver(state: GameState, seat_id: str) -> Optional[Trade]:
    """The pending trade a seat has to make now, if any."""
    for trade in pending_trades(state):
        if trade[0] == seat_id:
            return trade
    return None


def complete_trade(
    state: GameState,
    from_id: str,
    to_id: str,
    cards: List[Card]
) -> GameState:
    """
    Move cards from giver to receiver and record the trade.

    When the last trade of a phase is recorded the phase advances:
    peasants_give -> royals_give -> PLAYING, with the KING leading.

    Raises:
        GameError: Wrong phase, unknown seats, a trade that is not
            required, the wrong card count, or cards the giver lacks
    """
    if state.status != STATUS_TRADING or state.trading_state is None:
        raise GameError(PHASE_MISMATCH, "Not in trading phase")

    new_state = copy.deepcopy(state)
    ts = new_state.trading_state
    giver = new_state.get_player(from_id)
    receiver = new_state.get_player(to_id)
    if giver is None or receiver is None:
        raise GameError(PLAYER_NOT_FOUND, "Trading seat not found")

    key = trade_key(from_id, to_id)
    if key in ts.completed_trades:
        raise GameError(TRADE_ALREADY_DONE, "Trade already completed")

    required = {(g, r): count for g, r, count in required_trades(new_state)}
    if (from_id, to_id) not in required:
        raise GameError(INVALID_TRADE, "Invalid trade")
    count = required[(from_id, to_id)]
    if len(cards) != count:
        raise GameError(INVALID_TRADE, f"Must trade exactly {count} card(s)")

    remaining = list(giver.hand)
    for card in cards:
        if card not in remaining:
            raise GameError(OWNERSHIP_MISMATCH, f"You don't own {card.id}")
        remaining.remove(card)

    twos_high = new_state.settings.twos_high
    giver.hand = remaining
    receiver.hand = sort_hand(receiver.hand + list(cards), twos_high)
    ts.completed_trades.append(key)
    new_state.add_log(f"{giver.name} gave {len(cards)} card(s) to {receiver.name}")
    logger.debug(f"Room {new_state.code}: trade {key} ({format_cards(cards)})")

    if not pending_trades(new_state):
        if ts.phase == TRADE_PEASANTS_GIVE:
            ts.phase = TRADE_ROYALS_GIVE
            new_state.add_log("Trading: royals give cards back")
        else:
            _finish_trading(new_state)

    new_state.increment_version()
    return new_state


def _finish_trading(state: GameState):
    """Leave the trading phase; the previous winner leads. Mutates state."""
    state.trading_state = None
    state.status = STATUS_PLAYING
    if state.previous_finish_order:
        state.turn_order = list(state.previous_finish_order)
        state.current_player_id = state.previous_finish_order[0]
    leader = state.get_player(state.current_player_id)
    if leader is not None:
        state.add_log(f"Trading complete, {leader.name} leads")
    logger.info(f"Room {state.code}: trading complete")
