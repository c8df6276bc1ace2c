# engine_py/src/revolution_engine/errors.py

class GameError(Exception):
    """Base exception for game-related errors."""
    def __init__(self, code: str, message: str):
        self.code = code
        self.message = message
        super().__init__(f"[{code}] {message}")

# Illegal moves
INVALID_COMBINATION = "INVALID_COMBINATION"
PATTERN_MISMATCH = "PATTERN_MISMATCH"
RANK_TOO_LOW = "RANK_TOO_LOW"
BOMB_REQUIRED = "BOMB_REQUIRED"
OWNERSHIP_MISMATCH = "OWNERSHIP_MISMATCH"
OPENING_CARD_REQUIRED = "OPENING_CARD_REQUIRED"
CANNOT_PASS = "CANNOT_PASS"
INVALID_TRADE = "INVALID_TRADE"
TRADE_ALREADY_DONE = "TRADE_ALREADY_DONE"

# Turn order and phase
NOT_YOUR_TURN = "NOT_YOUR_TURN"
PHASE_MISMATCH = "PHASE_MISMATCH"

# Lobby and rooms
PLAYER_NOT_FOUND = "PLAYER_NOT_FOUND"
ROOM_FULL = "ROOM_FULL"
NOT_ENOUGH_PLAYERS = "NOT_ENOUGH_PLAYERS"
ROOM_NOT_FOUND = "ROOM_NOT_FOUND"
ROOM_EXISTS = "ROOM_EXISTS"
ACTION_NOT_ALLOWED = "ACTION_NOT_ALLOWED"

# Storage boundary
INVALID_STATE = "INVALID_STATE"
VERSION_CONFLICT = "VERSION_CONFLICT"
