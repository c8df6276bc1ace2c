"""
HTTP request models.
"""

from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from .rules import GameSettings


class CreateGameRequest(BaseModel):
    """Create a room, optionally with its own settings."""
    settings: GameSettings = Field(default_factory=GameSettings)
    code: Optional[str] = Field(default=None, min_length=4, max_length=12)


class JoinRequest(BaseModel):
    person_id: str = Field(..., min_length=1, max_length=64)
    name: str = Field(..., min_length=1, max_length=30)


class AddBotsRequest(BaseModel):
    count: int = Field(default=1, ge=1, le=6)


class StartRequest(BaseModel):
    seed: Optional[int] = None


class ActionRequest(BaseModel):
    """A player intent: play cards, pass, or give cards in a trade."""
    person_id: str = Field(..., min_length=1, max_length=64)
    type: Literal["play", "pass", "trade"]
    cards: List[str] = Field(default_factory=list, max_length=13)


class HandoffRequest(BaseModel):
    person_id: str = Field(..., min_length=1, max_length=64)
