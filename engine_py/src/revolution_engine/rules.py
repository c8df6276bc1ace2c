"""
Game rule configuration and validation.
"""

from pydantic import BaseModel, Field, field_validator

from .constants import SUPPORTED_PLAYER_COUNTS


class GameSettings(BaseModel):
    """Configuration fixed for the life of one game."""

    player_count: int = Field(
        default=4,
        ge=4,
        le=6,
        description="Number of seats at the table"
    )
    twos_high: bool = Field(
        default=False,
        description="Rank 2 beats Ace instead of being the lowest card"
    )
    trading_enabled: bool = Field(
        default=True,
        description="Whether the post-round card trading ritual runs"
    )
    win_score: int = Field(
        default=50,
        gt=0,
        description="Total score that ends the game"
    )

    @field_validator('player_count')
    @classmethod
    def validate_player_count(cls, v):
        """Only table sizes with a scoring vector are playable."""
        if v not in SUPPORTED_PLAYER_COUNTS:
            raise ValueError(f'player_count must be one of {SUPPORTED_PLAYER_COUNTS}')
        return v
