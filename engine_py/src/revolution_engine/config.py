"""
Server configuration read from the environment.
"""

import os
from typing import Literal, Mapping, Optional

from pydantic import BaseModel, Field, field_validator


class ServerConfig(BaseModel):
    """Settings for the HTTP adapter and bot scheduler."""

    host: str = Field(default="0.0.0.0", description="Interface to bind")
    port: int = Field(default=8000, ge=1, le=65535)
    log_level: Literal["critical", "error", "warning", "info", "debug"] = "info"
    reload: bool = False
    bot_step_limit: int = Field(
        default=500,
        gt=0,
        description="Most bot actions applied after a single request"
    )

    @field_validator('log_level', mode='before')
    @classmethod
    def normalize_log_level(cls, v):
        return str(v).lower()

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> 'ServerConfig':
        """Build config from HOST, PORT, LOG_LEVEL, RELOAD and BOT_STEP_LIMIT."""
        env = os.environ if environ is None else environ
        values = {}
        if "HOST" in env:
            values["host"] = env["HOST"]
        if "PORT" in env:
            values["port"] = int(env["PORT"])
        if "LOG_LEVEL" in env:
            values["log_level"] = env["LOG_LEVEL"]
        if "RELOAD" in env:
            values["reload"] = env["RELOAD"].lower() == "true"
        if "BOT_STEP_LIMIT" in env:
            values["bot_step_limit"] = int(env["BOT_STEP_LIMIT"])
        return cls(**values)
