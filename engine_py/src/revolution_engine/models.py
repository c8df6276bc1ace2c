"""Game models and data structures"""

from dataclasses import dataclass, field
from typing import List, Optional, Literal

from .constants import GAME_LOG_LIMIT
from .rules import GameSettings

Status = Literal['LOBBY', 'TRADING', 'PLAYING', 'ROUND_END', 'GAME_OVER']
PlayType = Literal['single', 'pair', 'triple', 'quad', 'run', 'bomb']
Title = Literal['KING', 'QUEEN', 'NOBLE', 'PEASANT']
TradePhase = Literal['peasants_give', 'royals_give']


@dataclass(frozen=True)
class Card:
    rank: str
    suit: str

    @property
    def id(self) -> str:
        return f"{self.rank}-{self.suit}"


@dataclass(frozen=True)
class RunHighCard:
    rank: int  # card value, not the rank label
    suit: int


@dataclass
class Play:
    player_id: str
    cards: List[Card]
    play_type: PlayType
    rank: str
    count: int
    high_suit: Optional[int] = None  # same-rank plays only
    run_high_card: Optional[RunHighCard] = None
    bomb_high_rank: Optional[int] = None


@dataclass
class PlayerState:
    seat_id: str
    person_id: str
    name: str
    seat_position: int = 0
    hand: List[Card] = field(default_factory=list)
    total_score: int = 0
    current_rank: Optional[Title] = None
    is_finished: bool = False
    finish_position: Optional[int] = None
    is_bot: bool = False


@dataclass
class TradingState:
    phase: TradePhase
    king_id: str
    queen_id: str
    last_id: str
    second_last_id: str
    completed_trades: List[str] = field(default_factory=list)  # "giver-receiver"


@dataclass
class GameState:
    game_id: str
    code: str
    settings: GameSettings = field(default_factory=GameSettings)
    status: Status = 'LOBBY'
    current_round: int = 0
    players: List[PlayerState] = field(default_factory=list)
    current_player_id: Optional[str] = None
    last_play: Optional[Play] = None
    pass_count: int = 0
    finish_order: List[str] = field(default_factory=list)
    trading_state: Optional[TradingState] = None
    turn_order: List[str] = field(default_factory=list)
    previous_finish_order: List[str] = field(default_factory=list)
    played_cards: List[Card] = field(default_factory=list)
    burned_cards: List[Card] = field(default_factory=list)
    opening_card_id: Optional[str] = None
    skipped_player_ids: List[str] = field(default_factory=list)
    version: int = 0
    game_log: List[str] = field(default_factory=list)

    def get_player(self, seat_id: str) -> Optional[PlayerState]:
        for player in self.players:
            if player.seat_id == seat_id:
                return player
        return None

    def active_players(self) -> List[PlayerState]:
        return [p for p in self.players if not p.is_finished]

    def increment_version(self):
        self.version += 1

    def add_log(self, message: str):
        self.game_log.append(message)
        if len(self.game_log) > GAME_LOG_LIMIT:
            del self.game_log[:-GAME_LOG_LIMIT]


def find_seat_for_person(state: GameState, person_id: str) -> Optional[str]:
    """Resolve which seat (if any) an external identity occupies."""
    for player in state.players:
        if player.person_id == person_id:
            return player.seat_id
    return None
