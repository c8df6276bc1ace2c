"""
Tests for the validated game entry points and round transitions.
"""

from revolution_engine.comparator import parse_card_id
from revolution_engine.engine import (
    create_game, join_game, leave_game, pass_turn, play_cards, replace_with_bot,
    start_game, start_next_round,
)
from revolution_engine.errors import (
    ACTION_NOT_ALLOWED, CANNOT_PASS, NOT_ENOUGH_PLAYERS, NOT_YOUR_TURN, OPENING_CARD_REQUIRED,
    OWNERSHIP_MISMATCH, PATTERN_MISMATCH, PHASE_MISMATCH, PLAYER_NOT_FOUND, ROOM_FULL,
)
from revolution_engine.models import GameState, PlayerState
from revolution_engine.rules import GameSettings
from revolution_engine.shuffle import validate_deck_integrity
from revolution_engine.turns import find_opening_seat


def cards(*ids):
    return [parse_card_id(card_id) for card_id in ids]


def make_game(hands, current="p1", status="PLAYING", **settings) -> GameState:
    """A game in progress with the given hands, seated p1..pN."""
    players = [
        PlayerState(
            seat_id=f"p{i + 1}",
            person_id=f"u{i + 1}",
            name=f"Player {i + 1}",
            seat_position=i,
            hand=cards(*hand),
        )
        for i, hand in enumerate(hands)
    ]
    return GameState(
        game_id="game-1",
        code="TEST",
        settings=GameSettings(player_count=len(hands), **settings),
        status=status,
        current_round=1,
        players=players,
        current_player_id=current,
        turn_order=[p.seat_id for p in players],
    )


def full_lobby(player_count=4) -> GameState:
    state = create_game("room1", GameSettings(player_count=player_count))
    for i in range(player_count):
        state = join_game(state, f"u{i}", f"Player {i}", seat_id=f"p{i}").state
    return state


# Lobby

def test_create_game():
    """Test room creation."""
    state = create_game("abcd")
    assert state.code == "ABCD"
    assert state.status == "LOBBY"
    assert state.players == []
    assert state.settings.player_count == 4


def test_join_game():
    """Test players take seats in order."""
    state = create_game("room1")
    result = join_game(state, "u1", "Alice")

    assert result.success
    assert len(result.state.players) == 1
    alice = result.state.players[0]
    assert alice.name == "Alice"
    assert alice.seat_position == 0
    assert not alice.is_bot
    assert result.state.version == state.version + 1

    result2 = join_game(result.state, "u2", "Bob", is_bot=True)
    assert result2.state.players[1].seat_position == 1
    assert result2.state.players[1].is_bot


def test_rejoin_is_a_no_op():
    """Test joining twice keeps one seat."""
    state = join_game(create_game("room1"), "u1", "Alice").state
    result = join_game(state, "u1", "Alice")

    assert result.success
    assert result.state is state


def test_room_full():
    """Test room capacity limit."""
    state = full_lobby(4)
    result = join_game(state, "extra", "Extra Player")

    assert not result.success
    assert result.error_code == ROOM_FULL
    assert "full" in result.error_message.lower()
    assert result.state is state


def test_leave_game():
    """Test leaving closes up seat positions."""
    state = full_lobby(4)
    result = leave_game(state, "u1")

    assert result.success
    assert [p.seat_position for p in result.state.players] == [0, 1, 2]
    assert "p1" not in [p.seat_id for p in result.state.players]

    assert leave_game(state, "nobody").error_code == PLAYER_NOT_FOUND


def test_start_game_needs_a_full_table():
    """Test game start fails with too few players."""
    state = join_game(create_game("room1"), "u1", "Alice").state
    result = start_game(state)

    assert not result.success
    assert result.error_code == NOT_ENOUGH_PLAYERS


def test_start_game_deals_and_opens():
    """Test the first deal and the opener holding the 3 of clubs."""
    state = full_lobby(4)
    result = start_game(state, seed=42)
    assert result.success

    new_state = result.state
    assert new_state.status == "PLAYING"
    assert new_state.current_round == 1
    assert all(len(p.hand) == 13 for p in new_state.players)
    assert validate_deck_integrity(new_state)
    assert new_state.turn_order == [p.seat_id for p in new_state.players]
    assert new_state.opening_card_id == "3-clubs"

    opener = new_state.get_player(new_state.current_player_id)
    assert parse_card_id("3-clubs") in opener.hand

    # Original lobby state is untouched
    assert state.status == "LOBBY"
    assert all(p.hand == [] for p in state.players)


def test_start_game_five_players_burns_remainder():
    """Test a five-player first deal burns two cards."""
    result = start_game(full_lobby(5), seed=3)

    assert result.success
    assert len(result.state.burned_cards) == 2
    assert all(len(p.hand) == 10 for p in result.state.players)
    assert validate_deck_integrity(result.state)


def test_opener_when_opening_card_burned():
    """Test the lowest dealt card opens when the 3 of clubs is missing."""
    state = make_game([
        ["5-clubs", "9-hearts"],
        ["3-spades", "K-clubs"],
        ["3-diamonds", "A-clubs"],
        ["4-clubs", "Q-hearts"],
    ])

    assert find_opening_seat(state.players) == ("p2", "3-spades")


# Playing

def test_opening_card_required():
    """Test the first lead must include the opening card."""
    state = make_game([["3-clubs", "4-clubs"], ["5-clubs"], ["6-clubs"], ["7-clubs"]])
    state.opening_card_id = "3-clubs"

    result = play_cards(state, "p1", cards("4-clubs"))
    assert not result.success
    assert result.error_code == OPENING_CARD_REQUIRED

    result = play_cards(state, "p1", cards("3-clubs"))
    assert result.success
    assert result.state.opening_card_id is None


def test_turn_checked_before_anything_else():
    """Test out-of-turn intents are rejected before the cards are looked at."""
    state = make_game([["3-clubs"], ["5-clubs", "9-hearts"], ["6-clubs"], ["7-clubs"]])

    result = play_cards(state, "p2", cards("5-clubs", "9-hearts"))
    assert result.error_code == NOT_YOUR_TURN
    assert pass_turn(state, "p2").error_code == NOT_YOUR_TURN
    assert play_cards(state, "nobody", cards("3-clubs")).error_code == PLAYER_NOT_FOUND


def test_phase_checked():
    """Test play intents outside PLAYING are rejected."""
    state = make_game([["3-clubs"], ["5-clubs"], ["6-clubs"], ["7-clubs"]], status="ROUND_END")
    assert play_cards(state, "p1", cards("3-clubs")).error_code == PHASE_MISMATCH


def test_ownership_checked():
    """Test cards not in hand are rejected."""
    state = make_game([["3-clubs"], ["5-clubs"], ["6-clubs"], ["7-clubs"]])
    result = play_cards(state, "p1", cards("5-clubs"))

    assert result.error_code == OWNERSHIP_MISMATCH
    assert result.state is state


def test_validator_errors_are_returned():
    """Test an illegal response carries the validator's code."""
    state = make_game([["3-clubs", "9-clubs"], ["5-clubs", "5-hearts", "K-clubs"], ["6-clubs"], ["7-clubs"]])
    state = play_cards(state, "p1", cards("3-clubs")).state

    result = play_cards(state, "p2", cards("5-clubs", "5-hearts"))
    assert result.error_code == PATTERN_MISMATCH


def test_cannot_pass_when_leading():
    """Test the leader has to play."""
    state = make_game([["3-clubs"], ["5-clubs"], ["6-clubs"], ["7-clubs"]])
    result = pass_turn(state, "p1")

    assert not result.success
    assert result.error_code == CANNOT_PASS


def test_play_does_not_mutate_input():
    """Test transitions return new states and bump the version once."""
    state = make_game([["3-clubs", "9-clubs"], ["5-clubs", "K-clubs"], ["6-clubs", "Q-clubs"], ["7-clubs", "J-clubs"]])
    result = play_cards(state, "p1", cards("3-clubs"))

    assert result.success
    assert result.state.version == state.version + 1
    assert len(state.players[0].hand) == 2
    assert state.last_play is None
    assert [c.id for c in result.state.players[0].hand] == ["9-clubs"]
    assert result.state.last_play.player_id == "p1"
    assert result.state.current_player_id == "p2"


def test_trick_clears_when_everyone_passes():
    """Test the opener leads again after the other three pass."""
    state = make_game([
        ["3-clubs", "9-clubs"],
        ["4-clubs", "K-clubs"],
        ["5-spades", "Q-clubs"],
        ["6-hearts", "J-clubs"],
    ])
    state = play_cards(state, "p1", cards("3-clubs")).state
    state = pass_turn(state, "p2").state
    state = pass_turn(state, "p3").state
    assert state.last_play is not None
    assert state.current_player_id == "p4"

    state = pass_turn(state, "p4").state
    assert state.last_play is None
    assert state.pass_count == 0
    assert state.current_player_id == "p1"


def test_trick_winner_leads_next():
    """Test the highest play wins the trick once the rest have passed."""
    state = make_game([
        ["3-clubs", "9-clubs"],
        ["4-clubs", "K-clubs"],
        ["5-spades", "Q-clubs"],
        ["6-hearts", "J-clubs"],
    ])
    state = play_cards(state, "p1", cards("3-clubs")).state
    state = play_cards(state, "p2", cards("4-clubs")).state
    state = pass_turn(state, "p3").state
    state = pass_turn(state, "p4").state
    assert state.current_player_id == "p1"
    assert state.last_play.player_id == "p2"

    state = pass_turn(state, "p1").state
    assert state.last_play is None
    assert state.current_player_id == "p2"


def test_seat_without_enough_cards_is_skipped():
    """Test a seat holding fewer cards than the table needs is skipped."""
    state = make_game([
        ["5-clubs", "5-hearts", "9-clubs"],
        ["3-spades"],
        ["7-clubs", "7-hearts", "K-clubs"],
        ["8-clubs", "8-hearts", "Q-clubs"],
    ])
    result = play_cards(state, "p1", cards("5-clubs", "5-hearts"))

    assert result.success
    new_state = result.state
    assert new_state.current_player_id == "p3"
    assert new_state.skipped_player_ids == ["p2"]
    assert new_state.pass_count == 1
    assert any("skipped" in line for line in new_state.game_log)


def test_finished_seat_and_lead_passes_on():
    """Test going out records the finish and the next seat inherits the lead."""
    state = make_game([
        ["A-clubs"],
        ["4-clubs", "K-clubs"],
        ["5-spades", "Q-clubs"],
        ["6-hearts", "J-clubs"],
    ])
    state = play_cards(state, "p1", cards("A-clubs")).state

    p1 = state.get_player("p1")
    assert p1.is_finished
    assert p1.finish_position == 0
    assert state.finish_order == ["p1"]
    assert state.current_player_id == "p2"

    state = pass_turn(state, "p2").state
    state = pass_turn(state, "p3").state
    assert state.last_play is not None
    state = pass_turn(state, "p4").state

    assert state.last_play is None
    assert state.current_player_id == "p2"


def test_round_end_scores_and_titles():
    """Test the last seat is finished automatically and points are awarded."""
    state = make_game([[], [], ["K-clubs"], ["3-spades", "4-spades"]], current="p3")
    for seat_id in ("p1", "p2"):
        player = state.get_player(seat_id)
        player.is_finished = True
        player.finish_position = len(state.finish_order)
        state.finish_order.append(seat_id)

    result = play_cards(state, "p3", cards("K-clubs"))
    assert result.success

    new_state = result.state
    assert new_state.status == "ROUND_END"
    assert new_state.finish_order == ["p1", "p2", "p3", "p4"]
    assert [p.total_score for p in new_state.players] == [4, 3, 2, 0]
    assert [p.current_rank for p in new_state.players] == ["KING", "QUEEN", "PEASANT", "PEASANT"]
    assert new_state.current_player_id is None
    assert new_state.last_play is None


def test_reaching_win_score_ends_the_game():
    """Test the game is over once a total reaches the win score."""
    state = make_game([[], [], ["K-clubs"], ["3-spades"]], current="p3", win_score=5)
    state.players[0].total_score = 3
    for seat_id in ("p1", "p2"):
        player = state.get_player(seat_id)
        player.is_finished = True
        state.finish_order.append(seat_id)

    result = play_cards(state, "p3", cards("K-clubs"))

    assert result.state.status == "GAME_OVER"
    assert result.state.players[0].total_score == 7


# Rounds

def round_end_state(player_count=4, **settings) -> GameState:
    state = make_game([[] for _ in range(player_count)], current=None, status="ROUND_END", **settings)
    order = [f"p{i}" for i in range(player_count, 0, -1)]
    for position, seat_id in enumerate(order):
        player = state.get_player(seat_id)
        player.is_finished = True
        player.finish_position = position
    state.finish_order = order
    return state


def test_next_round_opens_trading():
    """Test the next deal goes to trading with roles from the finish order."""
    result = start_next_round(round_end_state(4), seed=11)
    assert result.success

    state = result.state
    assert state.status == "TRADING"
    assert state.current_round == 2
    assert state.current_player_id is None
    assert state.previous_finish_order == ["p4", "p3", "p2", "p1"]
    assert state.finish_order == []
    ts = state.trading_state
    assert (ts.king_id, ts.queen_id, ts.second_last_id, ts.last_id) == ("p4", "p3", "p2", "p1")
    assert all(len(p.hand) == 13 for p in state.players)
    assert validate_deck_integrity(state)


def test_next_round_without_trading():
    """Test the previous winner leads straight away when trading is off."""
    state = start_next_round(round_end_state(4, trading_enabled=False), seed=11).state

    assert state.status == "PLAYING"
    assert state.trading_state is None
    assert state.current_player_id == "p4"
    assert state.turn_order == ["p4", "p3", "p2", "p1"]
    assert state.opening_card_id is None


def test_next_round_extras_go_to_worst_finishers():
    """Test leftover cards go to the last finishers instead of being burned."""
    state = start_next_round(round_end_state(5, trading_enabled=False), seed=5).state

    assert state.burned_cards == []
    sizes = {p.seat_id: len(p.hand) for p in state.players}
    assert sizes == {"p5": 10, "p4": 10, "p3": 10, "p2": 11, "p1": 11}
    assert validate_deck_integrity(state)


def test_next_round_only_after_round_end():
    """Test dealing again mid-round is rejected."""
    state = make_game([["3-clubs"], ["5-clubs"], ["6-clubs"], ["7-clubs"]])
    assert start_next_round(state).error_code == PHASE_MISMATCH


# Handoff

def test_replace_with_bot():
    """Test a seat keeps its hand and score when a bot takes over."""
    state = make_game([["3-clubs", "4-clubs"], ["5-clubs"], ["6-clubs"], ["7-clubs"]])
    state.players[0].total_score = 6

    result = replace_with_bot(state, "u1", bot_person_id="bot-1", bot_name="AceBot")
    assert result.success

    seat = result.state.get_player("p1")
    assert seat.is_bot
    assert seat.person_id == "bot-1"
    assert seat.name == "AceBot"
    assert seat.total_score == 6
    assert len(seat.hand) == 2

    assert replace_with_bot(result.state, "bot-1").error_code == ACTION_NOT_ALLOWED
    assert replace_with_bot(state, "nobody").error_code == PLAYER_NOT_FOUND
