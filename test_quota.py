from datetime import datetime, timedelta, timezone

from relaybot.services.quota import (
    check_and_consume_quota,
    get_quota_usage,
    quota_key,
)
from relaybot.utils import seconds_until_next_utc_midnight, utc_day_key


NOON = datetime(2024, 5, 17, 12, 0, 0, tzinfo=timezone.utc)


def test_utc_day_key_and_midnight_ttl():
    assert utc_day_key(NOON) == "2024-05-17"
    assert seconds_until_next_utc_midnight(NOON) == 12 * 3600

    almost_midnight = datetime(2024, 5, 17, 23, 59, 59, 500000, tzinfo=timezone.utc)
    assert seconds_until_next_utc_midnight(almost_midnight) == 1

    exactly_midnight = datetime(2024, 5, 18, 0, 0, 0, tzinfo=timezone.utc)
    assert seconds_until_next_utc_midnight(exactly_midnight) == 24 * 3600


def test_utc_day_key_converts_other_timezones():
    tehran = timezone(timedelta(hours=3, minutes=30))
    local = datetime(2024, 5, 18, 2, 0, 0, tzinfo=tehran)
    assert utc_day_key(local) == "2024-05-17"


def test_first_message_creates_counter(fake_redis):
    allowed, used = check_and_consume_quota(fake_redis, 42, 20, now=NOON)

    key = "quota:42:2024-05-17"
    assert quota_key(42, NOON) == key
    assert (allowed, used) == (True, 0)
    assert fake_redis.store[key] == "1"
    assert fake_redis.ttls[key] == 12 * 3600


def test_counter_increments(fake_redis):
    for expected_before in range(3):
        allowed, used = check_and_consume_quota(fake_redis, 42, 20, now=NOON)
        assert allowed is True
        assert used == expected_before
    assert get_quota_usage(fake_redis, 42, now=NOON) == 3


def test_exhausted_quota_refuses_without_write(fake_redis):
    key = "quota:42:2024-05-17"
    fake_redis.setex(key, 100, "20")

    allowed, used = check_and_consume_quota(fake_redis, 42, 20, now=NOON)

    assert (allowed, used) == (False, 20)
    assert fake_redis.store[key] == "20"
    assert fake_redis.ttls[key] == 100


def test_non_numeric_counter_counts_as_zero(fake_redis):
    key = "quota:42:2024-05-17"
    fake_redis.set(key, "garbage")

    assert get_quota_usage(fake_redis, 42, now=NOON) == 0
    allowed, used = check_and_consume_quota(fake_redis, 42, 20, now=NOON)
    assert (allowed, used) == (True, 0)
    assert fake_redis.store[key] == "1"


def test_new_day_uses_new_counter(fake_redis):
    fake_redis.setex("quota:42:2024-05-17", 100, "20")
    next_day = datetime(2024, 5, 18, 0, 0, 1, tzinfo=timezone.utc)

    allowed, used = check_and_consume_quota(fake_redis, 42, 20, now=next_day)

    assert (allowed, used) == (True, 0)
    assert fake_redis.store["quota:42:2024-05-18"] == "1"


def test_counters_are_per_chat(fake_redis):
    fake_redis.setex("quota:42:2024-05-17", 100, "20")

    allowed, _ = check_and_consume_quota(fake_redis, 43, 20, now=NOON)
    assert allowed is True
