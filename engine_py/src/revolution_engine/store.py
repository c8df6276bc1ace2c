"""
State store boundary.

The engine never holds games itself; callers load a state by room code,
apply one intent, and save the result under the room's lock.
"""

import logging
import threading
from abc import ABC, abstractmethod
from collections import defaultdict
from contextlib import contextmanager
from typing import Dict, Iterator, List, Optional

from .errors import ROOM_EXISTS, VERSION_CONFLICT, GameError
from .models import GameState
from .serialization import dump_state, load_state

logger = logging.getLogger(__name__)

# expected_version for a save that must create the room
MUST_NOT_EXIST = -1


class StateStore(ABC):
    """Persistence interface for game states, keyed by room code."""

    @abstractmethod
    def load(self, code: str) -> Optional[GameState]:
        pass

    @abstractmethod
    def save(self, code: str, state: GameState, expected_version: Optional[int] = None):
        """
        Persist a state.

        Raises:
            GameError: ROOM_EXISTS if expected_version is MUST_NOT_EXIST and
                the room is already stored; VERSION_CONFLICT if expected_version
                is given and the stored state's version differs from it
        """
        pass

    @abstractmethod
    def delete(self, code: str):
        pass

    @abstractmethod
    def codes(self) -> List[str]:
        pass

    @contextmanager
    def room_lock(self, code: str) -> Iterator[None]:
        """Serialize read-modify-write for one room. No-op by default."""
        yield


class InMemoryStateStore(StateStore):
    """
    Process-local store.

    States are kept as encoded bytes so every load goes through the same
    validation as a real backing store would.
    """

    def __init__(self):
        self._data: Dict[str, bytes] = {}
        self._locks = defaultdict(threading.RLock)
        self._guard = threading.Lock()

    @staticmethod
    def _key(code: str) -> str:
        return code.upper()

    def load(self, code: str) -> Optional[GameState]:
        data = self._data.get(self._key(code))
        if data is None:
            return None
        return load_state(data)

    def save(self, code: str, state: GameState, expected_version: Optional[int] = None):
        key = self._key(code)
        with self._guard:
            if expected_version == MUST_NOT_EXIST:
                if key in self._data:
                    raise GameError(ROOM_EXISTS, f"Room {key} already exists")
            elif expected_version is not None and key in self._data:
                current = load_state(self._data[key]).version
                if current != expected_version:
                    raise GameError(
                        VERSION_CONFLICT,
                        f"Room {key} is at version {current}, expected {expected_version}"
                    )
            self._data[key] = dump_state(state)
        logger.debug(f"Saved room {key} at version {state.version}")

    def delete(self, code: str):
        # Room locks are never dropped; a deleted room keeps its lock
        key = self._key(code)
        with self.room_lock(code):
            with self._guard:
                self._data.pop(key, None)

    def codes(self) -> List[str]:
        return list(self._data)

    @contextmanager
    def room_lock(self, code: str) -> Iterator[None]:
        with self._guard:
            lock = self._locks[self._key(code)]
        with lock:
            yield
