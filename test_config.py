from unittest.mock import patch, MagicMock

import pytest

from relaybot import config


@pytest.fixture(autouse=True)
def clean_cache():
    config.reset_cache()
    yield
    config.reset_cache()


def test_load_bot_config_defaults(monkeypatch):
    for name in (
        "WEBHOOK_PATH",
        "WEBHOOK_SECRET",
        "OPENAI_MODEL",
        "DAILY_QUOTA",
        "OPENAI_BACKOFF_SECONDS",
        "VOICE_REPLIES",
        "ADMIN_CHAT_ID",
    ):
        monkeypatch.delenv(name, raising=False)

    cfg = config.load_bot_config()
    assert cfg["webhook_path"] == "/webhook"
    assert cfg["webhook_secret"] is None
    assert cfg["openai_model"] == "gpt-4o-mini"
    assert cfg["daily_quota"] == 20
    assert cfg["backoff_seconds"] == 3600
    assert cfg["voice_replies"] is True


def test_load_bot_config_reads_env(monkeypatch):
    monkeypatch.setenv("WEBHOOK_PATH", "hook")
    monkeypatch.setenv("DAILY_QUOTA", "5")
    monkeypatch.setenv("VOICE_REPLIES", "false")
    monkeypatch.setenv("OPENAI_MODEL", "gpt-4.1-mini")

    cfg = config.load_bot_config()
    assert cfg["webhook_path"] == "/hook"
    assert cfg["daily_quota"] == 5
    assert cfg["voice_replies"] is False
    assert cfg["openai_model"] == "gpt-4.1-mini"


def test_load_bot_config_invalid_numbers_fall_back(monkeypatch):
    monkeypatch.setenv("DAILY_QUOTA", "lots")
    monkeypatch.setenv("OPENAI_BACKOFF_SECONDS", "0")

    cfg = config.load_bot_config()
    assert cfg["daily_quota"] == 20
    assert cfg["backoff_seconds"] == 3600


def test_load_bot_config_is_cached(monkeypatch):
    monkeypatch.setenv("DAILY_QUOTA", "7")
    first = config.load_bot_config()
    monkeypatch.setenv("DAILY_QUOTA", "8")
    assert config.load_bot_config() is first
    assert first["daily_quota"] == 7


def test_config_redis_with_env_vars(monkeypatch):
    monkeypatch.setenv("REDIS_HOST", "redis.local")
    monkeypatch.setenv("REDIS_PORT", "6380")
    monkeypatch.setenv("REDIS_PASSWORD", "pw")

    with patch("redis.Redis") as mock_redis:
        mock_instance = MagicMock()
        mock_redis.return_value = mock_instance

        assert config.config_redis() is mock_instance
        mock_redis.assert_called_once_with(
            host="redis.local", port=6380, password="pw", decode_responses=True
        )
        mock_instance.ping.assert_called_once()


def test_config_redis_connection_error_is_logged_and_raised(capsys):
    with patch("redis.Redis") as mock_redis:
        mock_redis.return_value.ping.side_effect = Exception("down")
        with pytest.raises(Exception, match="down"):
            config.config_redis(host="h", port=1, password="secret")

    output = capsys.readouterr().out
    assert "Redis connection error: down" in output
    assert "secret" not in output
    assert "***" in output
