"""
Caller layer: rooms, intents by person, masked views and bot scheduling.

Every mutation follows the same path: take the room lock, load, apply one
engine entry point, save with the loaded version as the expected one.
"""

import logging
import random
import string
import uuid
from typing import Callable, Dict, List, Optional, Tuple

from .bots.base import BotAction
from .bots.greedy import GreedyBot, choose_trade_cards, get_bot_name
from .comparator import lowest_card, parse_card_id
from .constants import STATUS_GAME_OVER, STATUS_LOBBY, STATUS_PLAYING, STATUS_TRADING
from .engine import (
    ActionResult,
    create_game,
    join_game,
    leave_game,
    pass_turn,
    play_cards,
    replace_with_bot,
    start_game,
    start_next_round,
    submit_trade,
)
from .errors import (
    INVALID_COMBINATION,
    PHASE_MISMATCH,
    PLAYER_NOT_FOUND,
    ROOM_EXISTS,
    ROOM_FULL,
    ROOM_NOT_FOUND,
    GameError,
)
from .exchange import pending_trades, trade_for_giver
from .models import Card, GameState, find_seat_for_person
from .ranking import final_standings
from .rules import GameSettings
from .serialization import sanitize_state
from .store import MUST_NOT_EXIST, InMemoryStateStore, StateStore

logger = logging.getLogger(__name__)

ROOM_CODE_LENGTH = 6
ROOM_CODE_ALPHABET = string.ascii_uppercase + string.digits
DEFAULT_BOT_STEP_LIMIT = 500

GameOverRecorder = Callable[[List[Dict]], None]


def parse_cards(card_ids: List[str]) -> List[Card]:
    """Parse card ids from a client, rejecting malformed ones."""
    try:
        return [parse_card_id(card_id) for card_id in card_ids]
    except ValueError as e:
        raise GameError(INVALID_COMBINATION, str(e))


class GameService:
    """Synchronous game service over an injectable state store."""

    def __init__(
        self,
        store: Optional[StateStore] = None,
        on_game_over: Optional[GameOverRecorder] = None,
        bot_step_limit: int = DEFAULT_BOT_STEP_LIMIT
    ):
        self.store = store or InMemoryStateStore()
        self.on_game_over = on_game_over
        self.bot_step_limit = bot_step_limit

    # Plumbing

    def _load(self, code: str) -> GameState:
        state = self.store.load(code)
        if state is None:
            raise GameError(ROOM_NOT_FOUND, f"Room {code.upper()} not found")
        return state

    def _commit(self, code: str, before: GameState, result: ActionResult) -> GameState:
        if not result.success:
            raise GameError(result.error_code, result.error_message)
        if result.state is before:
            return before

        self.store.save(code, result.state, expected_version=before.version)
        if result.state.status == STATUS_GAME_OVER and before.status != STATUS_GAME_OVER:
            logger.info(f"Game over in room {result.state.code}")
            if self.on_game_over is not None:
                self.on_game_over(final_standings(result.state))
        return result.state

    def _mutate(self, code: str, apply: Callable[[GameState], ActionResult]) -> GameState:
        with self.store.room_lock(code):
            state = self._load(code)
            return self._commit(code, state, apply(state))

    def _seat_for(self, state: GameState, person_id: str) -> str:
        seat_id = find_seat_for_person(state, person_id)
        if seat_id is None:
            raise GameError(PLAYER_NOT_FOUND, "You are not seated in this game")
        return seat_id

    def _new_code(self) -> str:
        return ''.join(random.choices(ROOM_CODE_ALPHABET, k=ROOM_CODE_LENGTH))

    def _create(self, code: str, settings: Optional[GameSettings]) -> GameState:
        state = create_game(code, settings)
        with self.store.room_lock(state.code):
            self.store.save(state.code, state, expected_version=MUST_NOT_EXIST)
        logger.info(f"Created room {state.code}")
        return state

    # Lobby

    def create_game(self, settings: Optional[GameSettings] = None, code: Optional[str] = None) -> GameState:
        """
        Create a room under the given code, or under a fresh random one.

        Raises:
            GameError: ROOM_EXISTS if the given code is taken
        """
        if code is not None:
            return self._create(code, settings)
        while True:
            try:
                return self._create(self._new_code(), settings)
            except GameError as e:
                if e.code != ROOM_EXISTS:
                    raise
                logger.debug("Generated room code was taken, retrying")

    def get_state(self, code: str) -> GameState:
        return self._load(code)

    def join(self, code: str, person_id: str, name: str) -> Tuple[GameState, str]:
        state = self._mutate(code, lambda s: join_game(s, person_id, name))
        return state, find_seat_for_person(state, person_id)

    def add_bot(self, code: str, count: int = 1) -> GameState:
        """Seat count bots at once. Either all of them are seated or none."""
        def add(s: GameState) -> ActionResult:
            if s.status != STATUS_LOBBY:
                return ActionResult.error(s, PHASE_MISMATCH, "Bots can only join in the lobby")
            free = s.settings.player_count - len(s.players)
            if count > free:
                return ActionResult.error(s, ROOM_FULL, f"Room is full ({free} seat(s) free)")

            result = ActionResult.ok(s)
            for _ in range(count):
                index = sum(1 for p in result.state.players if p.is_bot)
                result = join_game(
                    result.state, f"bot-{uuid.uuid4().hex[:8]}", get_bot_name(index), is_bot=True
                )
                if not result.success:
                    return ActionResult.error(s, result.error_code, result.error_message)
            return result

        return self._mutate(code, add)

    def leave(self, code: str, person_id: str) -> GameState:
        return self._mutate(code, lambda s: leave_game(s, person_id))

    def start(self, code: str, seed: Optional[int] = None) -> GameState:
        self._mutate(code, lambda s: start_game(s, seed))
        return self.run_bots(code)

    def next_round(self, code: str, seed: Optional[int] = None) -> GameState:
        self._mutate(code, lambda s: start_next_round(s, seed))
        return self.run_bots(code)

    def handoff(self, code: str, person_id: str) -> GameState:
        """Give a departing person's seat to a bot and let it play on."""
        def apply(s: GameState) -> ActionResult:
            index = sum(1 for p in s.players if p.is_bot)
            return replace_with_bot(s, person_id, bot_name=get_bot_name(index))
        self._mutate(code, apply)
        return self.run_bots(code)

    # Intents

    def play(self, code: str, person_id: str, card_ids: List[str]) -> GameState:
        cards = parse_cards(card_ids)
        self._mutate(code, lambda s: play_cards(s, self._seat_for(s, person_id), cards))
        return self.run_bots(code)

    def pass_turn(self, code: str, person_id: str) -> GameState:
        self._mutate(code, lambda s: pass_turn(s, self._seat_for(s, person_id)))
        return self.run_bots(code)

    def trade(self, code: str, person_id: str, card_ids: List[str]) -> GameState:
        cards = parse_cards(card_ids)
        self._mutate(code, lambda s: submit_trade(s, self._seat_for(s, person_id), cards))
        return self.run_bots(code)

    def view(self, code: str, person_id: Optional[str] = None) -> Dict:
        return sanitize_state(self._load(code), person_id)

    # Bots

    def _bot_to_act(self, state: GameState) -> Optional[str]:
        if state.status == STATUS_PLAYING:
            player = state.get_player(state.current_player_id) if state.current_player_id else None
            if player is not None and player.is_bot:
                return player.seat_id
        elif state.status == STATUS_TRADING:
            for giver_id, _, _ in pending_trades(state):
                player = state.get_player(giver_id)
                if player is not None and player.is_bot:
                    return giver_id
        return None

    def _apply_bot_action(self, state: GameState, seat_id: str, action: BotAction) -> ActionResult:
        """Apply a bot's choice; a rejected choice falls back to a safe one."""
        twos_high = state.settings.twos_high

        if action.type == 'trade':
            result = submit_trade(state, seat_id, action.cards)
            if not result.success:
                logger.warning(f"Bot {seat_id} trade rejected ({result.error_code}), giving lowest cards")
                trade = trade_for_giver(state, seat_id)
                hand = state.get_player(seat_id).hand
                result = submit_trade(state, seat_id, choose_trade_cards(hand, trade[2], twos_high))
            return result

        if action.type == 'play':
            result = play_cards(state, seat_id, action.cards)
            if result.success:
                return result
            logger.warning(f"Bot {seat_id} play rejected ({result.error_code}: {result.error_message})")

        if state.last_play is not None:
            return pass_turn(state, seat_id)

        # Leading cannot pass: lead the lowest card, or the opening card
        hand = state.get_player(seat_id).hand
        opening = [c for c in hand if c.id == state.opening_card_id]
        return play_cards(state, seat_id, opening or [lowest_card(hand, twos_high)])

    def step_bot(self, code: str) -> bool:
        """Apply one bot action if a bot is due to act. Returns whether one was applied."""
        with self.store.room_lock(code):
            state = self._load(code)
            seat_id = self._bot_to_act(state)
            if seat_id is None:
                return False

            action = GreedyBot(seat_id).choose_action(state)
            if action is None:
                return False
            self._commit(code, state, self._apply_bot_action(state, seat_id, action))
            return True

    def run_bots(self, code: str, max_steps: Optional[int] = None) -> GameState:
        """Let bots act until a person is due or the round stops."""
        limit = max_steps if max_steps is not None else self.bot_step_limit
        steps = 0
        while steps < limit and self.step_bot(code):
            steps += 1
        if steps >= limit:
            logger.warning(f"Room {code.upper()}: bot step limit {limit} reached")
        return self._load(code)
