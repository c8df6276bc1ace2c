import pytest
from pydantic import ValidationError

from revolution_engine.config import ServerConfig
from revolution_engine.rules import GameSettings


def test_server_config_defaults():
    config = ServerConfig.from_env({})
    assert config.port == 8000
    assert config.log_level == "info"
    assert config.bot_step_limit == 500


def test_server_config_from_env():
    config = ServerConfig.from_env({
        "HOST": "127.0.0.1",
        "PORT": "9001",
        "LOG_LEVEL": "DEBUG",
        "RELOAD": "true",
        "BOT_STEP_LIMIT": "50",
    })
    assert (config.host, config.port, config.log_level) == ("127.0.0.1", 9001, "debug")
    assert config.reload
    assert config.bot_step_limit == 50


def test_server_config_rejects_bad_values():
    with pytest.raises(ValidationError):
        ServerConfig.from_env({"PORT": "0"})
    with pytest.raises(ValidationError):
        ServerConfig.from_env({"LOG_LEVEL": "loud"})


def test_game_settings():
    settings = GameSettings(player_count=6, twos_high=True)
    assert settings.player_count == 6
    assert settings.trading_enabled
    assert settings.win_score == 50

    with pytest.raises(ValidationError):
        GameSettings(player_count=3)
    with pytest.raises(ValidationError):
        GameSettings(win_score=0)
