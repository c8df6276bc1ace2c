"""Game constants shared across the engine"""

from typing import Dict, List

# Ranks in deck order; '2' moves above 'A' only when twos are high
RANKS: List[str] = ['3', '4', '5', '6', '7', '8', '9', '10', 'J', 'Q', 'K', 'A', '2']

# Suit tie-break order: clubs (lowest) < spades < diamonds < hearts (highest)
SUITS: List[str] = ['clubs', 'spades', 'diamonds', 'hearts']
SUIT_VALUES: Dict[str, int] = {suit: index for index, suit in enumerate(SUITS)}
SUIT_SYMBOLS: Dict[str, str] = {
    'clubs': '♣',
    'spades': '♠',
    'diamonds': '♦',
    'hearts': '♥',
}

RANK_VALUES: Dict[str, int] = {
    '2': 2, '3': 3, '4': 4, '5': 5, '6': 6, '7': 7, '8': 8,
    '9': 9, '10': 10, 'J': 11, 'Q': 12, 'K': 13, 'A': 14,
}
TWOS_HIGH_VALUE = 15

DECK_SIZE = 52
OPENING_CARD = '3-clubs'

# Play types
PLAY_SINGLE = 'single'
PLAY_PAIR = 'pair'
PLAY_TRIPLE = 'triple'
PLAY_QUAD = 'quad'
PLAY_RUN = 'run'
PLAY_BOMB = 'bomb'

SAME_RANK_TYPES: Dict[int, str] = {
    1: PLAY_SINGLE,
    2: PLAY_PAIR,
    3: PLAY_TRIPLE,
    4: PLAY_QUAD,
}
MIN_RUN_LENGTH = 3
BOMB_SIZE = 6

# Game status
STATUS_LOBBY = 'LOBBY'
STATUS_TRADING = 'TRADING'
STATUS_PLAYING = 'PLAYING'
STATUS_ROUND_END = 'ROUND_END'
STATUS_GAME_OVER = 'GAME_OVER'

# Trading phases
TRADE_PEASANTS_GIVE = 'peasants_give'
TRADE_ROYALS_GIVE = 'royals_give'

# Titles by finish position
TITLE_KING = 'KING'
TITLE_QUEEN = 'QUEEN'
TITLE_NOBLE = 'NOBLE'
TITLE_PEASANT = 'PEASANT'

SUPPORTED_PLAYER_COUNTS = (4, 5, 6)
POINTS_BY_PLAYER_COUNT: Dict[int, List[int]] = {
    4: [4, 3, 2, 0],
    5: [5, 4, 3, 2, 0],
    6: [6, 5, 4, 3, 2, 0],
}

# Cards given by the last and second-to-last finishers
KING_TRADE_COUNT = 2
QUEEN_TRADE_COUNT = 1

# An opponent holding this many cards or fewer is about to go out
DANGEROUS_HAND_SIZE = 2

GAME_LOG_LIMIT = 100

BOT_NAMES: List[str] = [
    'CardShark', 'AceBot', 'RoyalFlush', 'DeckMaster',
    'CardWizard', 'PokerFace', 'WildCard', 'JackpotJoe',
]
