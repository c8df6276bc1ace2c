"""
State serialization and sanitization utilities.
"""

import logging
from typing import Any, Dict, Optional

import orjson
from pydantic import TypeAdapter, ValidationError

from .constants import STATUS_LOBBY
from .errors import INVALID_STATE, GameError
from .models import GameState, PlayerState
from .shuffle import validate_deck_integrity
from .validate import can_play

logger = logging.getLogger(__name__)

_state_adapter = TypeAdapter(GameState)


def state_to_dict(state: GameState) -> Dict[str, Any]:
    """Full, unmasked state as JSON-ready primitives (for storage only)."""
    return _state_adapter.dump_python(state, mode='json')


def dump_state(state: GameState) -> bytes:
    """Encode a state for the store."""
    return orjson.dumps(state_to_dict(state))


def load_state(data: bytes) -> GameState:
    """
    Decode a stored state, validating shape and invariants.

    Raises:
        GameError: INVALID_STATE if the payload is not a well-formed state
    """
    try:
        raw = orjson.loads(data)
    except orjson.JSONDecodeError as e:
        raise GameError(INVALID_STATE, f"Stored state is not valid JSON: {e}")

    try:
        state = _state_adapter.validate_python(raw)
    except ValidationError as e:
        logger.warning(f"Rejected stored state: {e}")
        raise GameError(INVALID_STATE, f"Stored state failed validation: {e.error_count()} error(s)")

    check_invariants(state)
    return state


def check_invariants(state: GameState):
    """
    Reject states that no sequence of transitions could have produced.

    Raises:
        GameError: INVALID_STATE naming the broken invariant
    """
    seat_ids = [p.seat_id for p in state.players]
    if len(set(seat_ids)) != len(seat_ids):
        raise GameError(INVALID_STATE, "Duplicate seat ids")
    if len(state.players) > state.settings.player_count:
        raise GameError(INVALID_STATE, "More players than seats")

    for seat_id in state.finish_order:
        player = state.get_player(seat_id)
        if player is None or not player.is_finished:
            raise GameError(INVALID_STATE, f"Finish order lists {seat_id} who has not finished")
    if len(set(state.finish_order)) != len(state.finish_order):
        raise GameError(INVALID_STATE, "Duplicate entries in finish order")

    if state.current_player_id is not None and state.get_player(state.current_player_id) is None:
        raise GameError(INVALID_STATE, "Current player is not seated")

    if state.status != STATUS_LOBBY and not validate_deck_integrity(state):
        raise GameError(INVALID_STATE, "Cards do not partition a single deck")


def _serialize_card(card) -> Dict[str, str]:
    return {"id": card.id, "rank": card.rank, "suit": card.suit}


def _serialize_player(player: PlayerState, reveal: bool) -> Dict[str, Any]:
    data = {
        "seat_id": player.seat_id,
        "name": player.name,
        "seat_position": player.seat_position,
        "total_score": player.total_score,
        "current_rank": player.current_rank,
        "is_finished": player.is_finished,
        "finish_position": player.finish_position,
        "is_bot": player.is_bot,
        "hand_count": len(player.hand),
    }
    if reveal:
        data["hand"] = [_serialize_card(card) for card in player.hand]
    else:
        data["hand"] = [{"hidden": True} for _ in player.hand]
    return data


def _serialize_play(play) -> Optional[Dict[str, Any]]:
    if play is None:
        return None
    return {
        "player_id": play.player_id,
        "cards": [_serialize_card(card) for card in play.cards],
        "play_type": play.play_type,
        "rank": play.rank,
        "count": play.count,
    }


def sanitize_state(state: GameState, viewer_person_id: Optional[str] = None) -> Dict[str, Any]:
    """
    Sanitize game state for transmission to one viewer.

    Args:
        state: Game state to sanitize
        viewer_person_id: External identity of the viewer (to show their cards)

    Returns:
        Sanitized state dictionary safe for JSON transmission. Every other
        seat's hand is a list of hidden markers of the same length.
    """
    viewer_seat = None
    for player in state.players:
        if viewer_person_id is not None and player.person_id == viewer_person_id:
            viewer_seat = player

    sanitized = {
        "game_id": state.game_id,
        "code": state.code,
        "version": state.version,
        "status": state.status,
        "settings": state.settings.model_dump(),
        "current_round": state.current_round,
        "current_player_id": state.current_player_id,
        "last_play": _serialize_play(state.last_play),
        "pass_count": state.pass_count,
        "finish_order": list(state.finish_order),
        "turn_order": list(state.turn_order),
        "skipped_player_ids": list(state.skipped_player_ids),
        "opening_card_id": state.opening_card_id,
        "players": [
            _serialize_player(player, reveal=player is viewer_seat)
            for player in state.players
        ],
        "trading_state": None,
        "game_log": list(state.game_log),
        "my_seat_id": viewer_seat.seat_id if viewer_seat else None,
        "my_hand": None,
        "can_play": None,
    }

    ts = state.trading_state
    if ts is not None:
        sanitized["trading_state"] = {
            "phase": ts.phase,
            "king_id": ts.king_id,
            "queen_id": ts.queen_id,
            "last_id": ts.last_id,
            "second_last_id": ts.second_last_id,
            "completed_trades": list(ts.completed_trades),
        }

    if viewer_seat is not None:
        sanitized["my_hand"] = [_serialize_card(card) for card in viewer_seat.hand]
        if state.current_player_id == viewer_seat.seat_id:
            sanitized["can_play"] = can_play(viewer_seat.hand, state.last_play, state.settings.twos_high)

    return sanitized


def get_public_room_info(state: GameState) -> Dict[str, Any]:
    """Get public information about a room for listings."""
    return {
        "code": state.code,
        "status": state.status,
        "player_count": len(state.players),
        "max_players": state.settings.player_count,
        "players": [
            {
                "seat_id": player.seat_id,
                "name": player.name,
                "seat_position": player.seat_position,
                "is_bot": player.is_bot,
            }
            for player in state.players
        ],
    }
