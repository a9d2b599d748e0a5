import pytest

from relaybot import config


class FakeRedis:
    """In-memory stand-in for the handful of Redis calls the bot makes."""

    def __init__(self):
        self.store = {}
        self.ttls = {}

    def get(self, key):
        return self.store.get(key)

    def set(self, key, value, nx=False, ex=None):
        if nx and key in self.store:
            return None
        self.store[key] = str(value)
        if ex is None:
            self.ttls.pop(key, None)
        else:
            self.ttls[key] = ex
        return True

    def setex(self, key, ttl, value):
        self.store[key] = str(value)
        self.ttls[key] = ttl
        return True

    def delete(self, *keys):
        removed = 0
        for key in keys:
            if self.store.pop(key, None) is not None:
                removed += 1
            self.ttls.pop(key, None)
        return removed

    def ping(self):
        return True


TEST_CONFIG = {
    "telegram_token": "test_token",
    "webhook_secret": "s3cret",
    "webhook_path": "/webhook",
    "openai_api_key": "sk-test",
    "openai_model": "gpt-4o-mini",
    "voice_model": "gpt-4o-mini-tts",
    "voice": "alloy",
    "max_output_tokens": 1024,
    "openai_timeout": 60,
    "daily_quota": 20,
    "backoff_seconds": 3600,
    "voice_replies": False,
    "admin_chat_id": None,
}


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def bot_config():
    cfg = dict(TEST_CONFIG)
    config.set_cache(cfg)
    yield cfg
    config.reset_cache()
