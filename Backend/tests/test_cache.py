import json

import redis

import cache
import config
import leaderboard
from game_recorder import record
from helpers import make_report
from user_resolver import Anonymous, resolve


class FakeRedis:
    def __init__(self):
        self.store = {}

    def ping(self):
        return True

    def get(self, key):
        return self.store.get(key)

    def setex(self, key, ttl, value):
        self.store[key] = value

    def scan_iter(self, match=None):
        prefix = (match or "*").rstrip("*")
        return [key for key in list(self.store) if key.startswith(prefix)]

    def delete(self, *keys):
        for key in keys:
            self.store.pop(key, None)


def test_disabled_cache_is_a_no_op():
    assert config.REDIS_URL == ""
    assert cache.get_redis() is None
    assert cache.cache_get("leaderboard:all:50") is None
    cache.cache_set("leaderboard:all:50", [1])


def test_query_is_cached_until_refresh(db, monkeypatch):
    fake = FakeRedis()
    monkeypatch.setattr(cache, "_redis_client", fake)

    user_id = resolve(db, Anonymous(), "Morgan")
    record(db, user_id, "Prompt", "Response", "academic", make_report(overall=88))
    leaderboard.refresh(db)

    first = leaderboard.query(db, "academic", 10)
    assert json.loads(fake.store["leaderboard:academic:10"])[0]["best_score"] == 88

    record(db, user_id, "Prompt", "Response", "academic", make_report(overall=93))
    assert leaderboard.query(db, "academic", 10) == first

    leaderboard.refresh(db)
    assert fake.store == {}
    assert leaderboard.query(db, "academic", 10)[0].best_score == 93


def test_unreachable_redis_falls_back(monkeypatch):
    class DownRedis(FakeRedis):
        def get(self, key):
            raise redis.ConnectionError("down")

    monkeypatch.setattr(cache, "_redis_client", DownRedis())

    assert cache.cache_get("leaderboard:all:50") is None
