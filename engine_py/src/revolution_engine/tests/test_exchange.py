"""
Tests for the trading phase between rounds.
"""

from revolution_engine.bots.greedy import choose_trade_cards
from revolution_engine.comparator import parse_card_id
from revolution_engine.engine import submit_trade
from revolution_engine.errors import INVALID_TRADE, OWNERSHIP_MISMATCH, PHASE_MISMATCH, TRADE_ALREADY_DONE
from revolution_engine.exchange import pending_trades, required_trades, start_trading
from revolution_engine.models import GameState, PlayerState
from revolution_engine.rules import GameSettings


def cards(*ids):
    return [parse_card_id(card_id) for card_id in ids]


def trading_game(trading_enabled=True) -> GameState:
    """Round two about to start: p1 won round one, p4 came last."""
    hands = {
        "p1": ["A-hearts", "K-clubs", "Q-clubs", "5-hearts"],
        "p2": ["2-spades", "J-clubs", "10-clubs", "6-hearts"],
        "p3": ["8-clubs", "7-clubs", "6-clubs", "5-clubs"],
        "p4": ["3-clubs", "4-spades", "9-diamonds", "K-hearts"],
    }
    players = [
        PlayerState(seat_id=seat_id, person_id=f"u-{seat_id}", name=seat_id, seat_position=i, hand=cards(*hand))
        for i, (seat_id, hand) in enumerate(hands.items())
    ]
    state = GameState(
        game_id="game-1",
        code="TEST",
        settings=GameSettings(trading_enabled=trading_enabled),
        status="PLAYING",
        current_round=2,
        players=players,
        current_player_id="p1",
        turn_order=["p1", "p2", "p3", "p4"],
        previous_finish_order=["p1", "p2", "p3", "p4"],
    )
    return start_trading(state)


def ids(hand):
    return sorted(card.id for card in hand)


def test_start_trading():
    """Test roles come from the previous finish order."""
    state = trading_game()

    assert state.status == "TRADING"
    assert state.current_player_id is None
    ts = state.trading_state
    assert ts.phase == "peasants_give"
    assert (ts.king_id, ts.queen_id, ts.second_last_id, ts.last_id) == ("p1", "p2", "p3", "p4")
    assert required_trades(state) == [("p4", "p1", 2), ("p3", "p2", 1)]


def test_trading_disabled_is_a_no_op():
    """Test nothing changes with trading off."""
    state = trading_game(trading_enabled=False)
    assert state.status == "PLAYING"
    assert state.trading_state is None


def test_full_trade_both_ways():
    """Test the last finisher's two lowest cards go to the winner and back again."""
    state = trading_game()
    last = state.get_player("p4")
    give = choose_trade_cards(last.hand, 2)
    assert ids(give) == ["3-clubs", "4-spades"]

    state = submit_trade(state, "p4", give).state
    assert ids(state.get_player("p4").hand) == ["9-diamonds", "K-hearts"]
    assert "3-clubs" in ids(state.get_player("p1").hand)
    assert state.trading_state.phase == "peasants_give"
    assert pending_trades(state) == [("p3", "p2", 1)]

    state = submit_trade(state, "p3", cards("5-clubs")).state
    assert state.trading_state.phase == "royals_give"
    assert required_trades(state) == [("p1", "p4", 2), ("p2", "p3", 1)]

    state = submit_trade(state, "p1", cards("3-clubs", "4-spades")).state
    state = submit_trade(state, "p2", cards("6-hearts")).state

    assert state.trading_state is None
    assert state.status == "PLAYING"
    assert state.current_player_id == "p1"
    assert state.turn_order == ["p1", "p2", "p3", "p4"]
    assert len(state.get_player("p4").hand) == 4
    assert len(state.get_player("p3").hand) == 4


def test_receiver_hand_is_sorted():
    """Test received cards are merged into sorted order."""
    state = submit_trade(trading_game(), "p4", cards("3-clubs", "4-spades")).state
    hand = [c.id for c in state.get_player("p1").hand]
    assert hand[:2] == ["3-clubs", "4-spades"]


def test_trade_cannot_be_repeated():
    """Test a giver cannot trade twice in the same pairing."""
    state = submit_trade(trading_game(), "p4", cards("3-clubs", "4-spades")).state
    result = submit_trade(state, "p4", cards("9-diamonds", "K-hearts"))

    assert not result.success
    assert result.error_code == TRADE_ALREADY_DONE
    assert state.trading_state.completed_trades == ["p4-p1"]


def test_trade_validation():
    """Test role, count and ownership checks."""
    state = trading_game()

    assert submit_trade(state, "p1", cards("A-hearts", "K-clubs")).error_code == INVALID_TRADE
    assert submit_trade(state, "p4", cards("3-clubs")).error_code == INVALID_TRADE
    assert submit_trade(state, "p4", cards("3-clubs", "A-hearts")).error_code == OWNERSHIP_MISMATCH

    playing = trading_game(trading_enabled=False)
    assert submit_trade(playing, "p4", cards("3-clubs", "4-spades")).error_code == PHASE_MISMATCH


def test_self_and_duplicate_trades_are_dropped():
    """Test a seat never trades with itself and a pair is only required once."""
    state = trading_game()
    state.trading_state.queen_id = "p3"
    assert required_trades(state) == [("p4", "p1", 2)]

    state = trading_game()
    state.trading_state.queen_id = "p1"
    state.trading_state.second_last_id = "p4"
    assert required_trades(state) == [("p4", "p1", 2)]


def test_giver_chooses_which_cards():
    """Test any owned cards of the right count are accepted, not only the lowest."""
    state = submit_trade(trading_game(), "p4", cards("K-hearts", "9-diamonds")).state

    assert ids(state.get_player("p4").hand) == ["3-clubs", "4-spades"]
    assert "K-hearts" in ids(state.get_player("p1").hand)
