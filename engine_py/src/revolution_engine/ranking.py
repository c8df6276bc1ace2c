# engine_py/src/revolution_engine/ranking.py

from typing import Dict, List, Optional

from .constants import (
    POINTS_BY_PLAYER_COUNT,
    TITLE_KING,
    TITLE_QUEEN,
    TITLE_NOBLE,
    TITLE_PEASANT,
)
from .models import GameState


def get_points(player_count: int) -> List[int]:
    """Points awarded by finish position for a table size."""
    try:
        return list(POINTS_BY_PLAYER_COUNT[player_count])
    except KeyError:
        raise ValueError(f"Unsupported player count: {player_count}")


def points_for_position(position: Optional[int], player_count: int) -> int:
    points = get_points(player_count)
    if position is None or position < 0 or position >= len(points):
        return 0
    return points[position]


def get_title(position: Optional[int], player_count: int) -> str:
    """
    Title for a finish position.

    NOBLE only exists at tables of five or six; everyone below the
    QUEEN is otherwise a PEASANT.
    """
    if position == 0:
        return TITLE_KING
    if position == 1:
        return TITLE_QUEEN
    if position == 2 and player_count > 4:
        return TITLE_NOBLE
    return TITLE_PEASANT


def assign_titles(state: GameState):
    """
    Award round points and titles from the finish order.

    This function mutates the state: each player's total_score grows by
    the points for their position and current_rank is replaced.

    Args:
        state: The GameState, which must have a populated 'finish_order'.
    """
    if not state.finish_order:
        return  # Cannot score without a finish order

    player_count = state.settings.player_count
    for player in state.players:
        if player.seat_id in state.finish_order:
            position = state.finish_order.index(player.seat_id)
        else:
            position = None
        player.total_score += points_for_position(position, player_count)
        player.current_rank = get_title(position, player_count)


def has_winner(state: GameState) -> bool:
    return any(p.total_score >= state.settings.win_score for p in state.players)


def final_standings(state: GameState) -> List[Dict]:
    """
    Final scores handed to an external statistics recorder.

    Ordered by total score, highest first; ties keep seating order.
    """
    ordered = sorted(state.players, key=lambda p: -p.total_score)
    return [
        {
            "seat_id": player.seat_id,
            "person_id": player.person_id,
            "name": player.name,
            "total_score": player.total_score,
            "is_bot": player.is_bot,
        }
        for player in ordered
    ]
