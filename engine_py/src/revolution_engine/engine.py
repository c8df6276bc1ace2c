"""
Validated entry points of the game.

Every function here takes the current GameState plus an intent and
returns an ActionResult. The input state is never modified: on success
result.state is a new state with its version bumped; on failure
result.state is the original state and error_code says why.
"""

import copy
import logging
import uuid
from typing import Callable, List, Optional

from .constants import (
    STATUS_GAME_OVER,
    STATUS_LOBBY,
    STATUS_PLAYING,
    STATUS_ROUND_END,
    STATUS_TRADING,
)
from .errors import (
    ACTION_NOT_ALLOWED,
    INVALID_TRADE,
    NOT_ENOUGH_PLAYERS,
    NOT_YOUR_TURN,
    OPENING_CARD_REQUIRED,
    OWNERSHIP_MISMATCH,
    PHASE_MISMATCH,
    PLAYER_NOT_FOUND,
    ROOM_FULL,
    TRADE_ALREADY_DONE,
    GameError,
)
from .exchange import complete_trade, start_trading, trade_for_giver, trade_key
from .models import Card, GameState, PlayerState, find_seat_for_person
from .rules import GameSettings
from .turns import apply_pass, apply_play, initialize_round
from .validate import validate_ownership, validate_play

logger = logging.getLogger(__name__)


class ActionResult:
    """Result of applying an intent to a game."""

    def __init__(
        self,
        success: bool,
        state: GameState,
        error_code: Optional[str] = None,
        error_message: Optional[str] = None
    ):
        self.success = success
        self.state = state
        self.error_code = error_code
        self.error_message = error_message

    @classmethod
    def ok(cls, state: GameState) -> 'ActionResult':
        return cls(success=True, state=state)

    @classmethod
    def error(cls, state: GameState, error_code: str, error_message: str) -> 'ActionResult':
        return cls(success=False, state=state, error_code=error_code, error_message=error_message)

    def __repr__(self) -> str:
        if self.success:
            return f"ActionResult(success=True, version={self.state.version})"
        return f"ActionResult(success=False, error_code={self.error_code!r})"


def _apply(state: GameState, transition: Callable[[], GameState]) -> ActionResult:
    """Run a transition, turning a GameError into a failed result."""
    try:
        return ActionResult.ok(transition())
    except GameError as e:
        logger.debug(f"Rejected in room {state.code}: {e}")
        return ActionResult.error(state, e.code, e.message)


def _check_status(state: GameState, *statuses: str) -> Optional[ActionResult]:
    if state.status not in statuses:
        return ActionResult.error(
            state, PHASE_MISMATCH,
            f"Action not allowed while game is {state.status}"
        )
    return None


def _check_turn(state: GameState, seat_id: str) -> Optional[ActionResult]:
    player = state.get_player(seat_id)
    if player is None:
        return ActionResult.error(state, PLAYER_NOT_FOUND, "Player not found")
    if state.current_player_id != seat_id:
        return ActionResult.error(state, NOT_YOUR_TURN, "Not your turn")
    return None


# Lobby

def create_game(
    code: str,
    settings: Optional[GameSettings] = None,
    game_id: Optional[str] = None
) -> GameState:
    """
    Create a new game in the LOBBY.

    Args:
        code: Room code players use to find the game
        settings: Game configuration, defaults when None
        game_id: Stable identifier, generated when None
    """
    state = GameState(
        game_id=game_id or str(uuid.uuid4()),
        code=code.upper(),
        settings=settings or GameSettings(),
    )
    state.add_log(f"Room {state.code} created")
    logger.info(f"Created room {state.code} for {state.settings.player_count} players")
    return state


def join_game(
    state: GameState,
    person_id: str,
    name: str,
    is_bot: bool = False,
    seat_id: Optional[str] = None
) -> ActionResult:
    """
    Seat a person at the table.

    Joining again with the same person_id is a no-op that succeeds.
    """
    error = _check_status(state, STATUS_LOBBY)
    if error:
        return error

    if find_seat_for_person(state, person_id) is not None:
        return ActionResult.ok(state)

    if len(state.players) >= state.settings.player_count:
        return ActionResult.error(state, ROOM_FULL, "Room is full")

    new_state = copy.deepcopy(state)
    seat_id = seat_id or uuid.uuid4().hex[:8]
    new_state.players.append(PlayerState(
        seat_id=seat_id,
        person_id=person_id,
        name=name,
        seat_position=len(new_state.players),
        is_bot=is_bot,
    ))
    new_state.add_log(f"{name} joined")
    new_state.increment_version()
    logger.info(f"{'Bot' if is_bot else 'Player'} {name} joined room {state.code} as {seat_id}")
    return ActionResult.ok(new_state)


def leave_game(state: GameState, person_id: str) -> ActionResult:
    """Remove a person from the lobby; remaining seats close up."""
    error = _check_status(state, STATUS_LOBBY)
    if error:
        return error

    seat_id = find_seat_for_person(state, person_id)
    if seat_id is None:
        return ActionResult.error(state, PLAYER_NOT_FOUND, "Player not found")

    new_state = copy.deepcopy(state)
    leaving = new_state.get_player(seat_id)
    new_state.players = [p for p in new_state.players if p.seat_id != seat_id]
    for position, player in enumerate(new_state.players):
        player.seat_position = position
    new_state.add_log(f"{leaving.name} left")
    new_state.increment_version()
    return ActionResult.ok(new_state)


def start_game(state: GameState, seed: Optional[int] = None) -> ActionResult:
    """Deal the first round. The table must be exactly full."""
    error = _check_status(state, STATUS_LOBBY)
    if error:
        return error

    needed = state.settings.player_count
    if len(state.players) != needed:
        return ActionResult.error(
            state, NOT_ENOUGH_PLAYERS,
            f"Need exactly {needed} players to start (have {len(state.players)})"
        )

    return _apply(state, lambda: initialize_round(state, seed=seed))


# Play

def play_cards(state: GameState, seat_id: str, cards: List[Card]) -> ActionResult:
    """
    Play a combination.

    Checks run in order: phase, seat and turn, ownership, the opening
    card of the game, then the combination against the table.
    """
    error = _check_status(state, STATUS_PLAYING) or _check_turn(state, seat_id)
    if error:
        return error

    player = state.get_player(seat_id)
    if not validate_ownership(player, cards):
        return ActionResult.error(state, OWNERSHIP_MISMATCH, "You don't own all of those cards")

    if state.opening_card_id and state.last_play is None:
        if not any(card.id == state.opening_card_id for card in cards):
            return ActionResult.error(
                state, OPENING_CARD_REQUIRED,
                f"First play must include {state.opening_card_id}"
            )

    result = validate_play(cards, state.last_play, state.settings.twos_high)
    if not result.valid:
        return ActionResult.error(state, result.error_code, result.error_message)

    return _apply(state, lambda: apply_play(state, seat_id, cards))


def pass_turn(state: GameState, seat_id: str) -> ActionResult:
    """Pass on the current trick. Not allowed when leading."""
    error = _check_status(state, STATUS_PLAYING) or _check_turn(state, seat_id)
    if error:
        return error

    return _apply(state, lambda: apply_pass(state, seat_id))


# Trading

def submit_trade(state: GameState, seat_id: str, cards: List[Card]) -> ActionResult:
    """Give cards for the seat's pending trade in the current phase."""
    error = _check_status(state, STATUS_TRADING)
    if error:
        return error

    if state.get_player(seat_id) is None:
        return ActionResult.error(state, PLAYER_NOT_FOUND, "Player not found")

    trade = trade_for_giver(state, seat_id)
    if trade is None:
        done = [key for key in state.trading_state.completed_trades if key.startswith(f"{seat_id}-")]
        if done:
            return ActionResult.error(state, TRADE_ALREADY_DONE, "Trade already completed")
        return ActionResult.error(state, INVALID_TRADE, "Invalid trade")

    giver_id, receiver_id, count = trade
    if trade_key(giver_id, receiver_id) in state.trading_state.completed_trades:
        return ActionResult.error(state, TRADE_ALREADY_DONE, "Trade already completed")
    if len(cards) != count:
        return ActionResult.error(state, INVALID_TRADE, f"Must trade exactly {count} card(s)")
    if not validate_ownership(state.get_player(seat_id), cards):
        return ActionResult.error(state, OWNERSHIP_MISMATCH, "You don't own all of those cards")

    return _apply(state, lambda: complete_trade(state, giver_id, receiver_id, cards))


# Rounds

def start_next_round(state: GameState, seed: Optional[int] = None) -> ActionResult:
    """
    Deal the next round after ROUND_END.

    Extras go to the worst finishers. With trading enabled the game moves
    to TRADING, otherwise straight to PLAYING.
    """
    error = _check_status(state, STATUS_ROUND_END)
    if error:
        return error

    def transition() -> GameState:
        dealt = initialize_round(state, seed=seed)
        return start_trading(dealt)

    return _apply(state, transition)


def replace_with_bot(
    state: GameState,
    person_id: str,
    bot_person_id: Optional[str] = None,
    bot_name: Optional[str] = None
) -> ActionResult:
    """
    Hand a person's seat over to a bot. Hand, score and position are
    kept, so play continues where it was.
    """
    if state.status == STATUS_GAME_OVER:
        return ActionResult.error(state, PHASE_MISMATCH, "Game is over")

    seat_id = find_seat_for_person(state, person_id)
    if seat_id is None:
        return ActionResult.error(state, PLAYER_NOT_FOUND, "Player not found")
    if state.get_player(seat_id).is_bot:
        return ActionResult.error(state, ACTION_NOT_ALLOWED, "Seat is already a bot")

    new_state = copy.deepcopy(state)
    player = new_state.get_player(seat_id)
    old_name = player.name
    player.person_id = bot_person_id or f"bot-{uuid.uuid4().hex[:8]}"
    player.name = bot_name or f"{old_name} (bot)"
    player.is_bot = True
    new_state.add_log(f"{old_name} was replaced by {player.name}")
    new_state.increment_version()
    logger.info(f"Seat {seat_id} in room {state.code} handed to a bot")
    return ActionResult.ok(new_state)
