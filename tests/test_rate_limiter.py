import pytest
import redis
from fastapi import HTTPException
from starlette.requests import Request

from app import config, rate_limiter
from app.rate_limiter import HybridRateLimiter, create_rate_limiter


class FakeRedis:
    """Just enough of redis.Redis for the limiter"""

    def __init__(self, fail=False):
        self.values = {}
        self.fail = fail

    def get(self, key):
        if self.fail:
            raise redis.ConnectionError("down")
        return self.values.get(key)

    def ttl(self, key):
        return 30 if key in self.values else -2

    def set(self, key, value, ex=None):
        if self.fail:
            raise redis.ConnectionError("down")
        self.values[key] = str(value)


def make_request(ip="203.0.113.7", forwarded=None):
    headers = [(b"x-forwarded-for", forwarded.encode())] if forwarded else []
    return Request({"type": "http", "headers": headers, "client": (ip, 1234), "state": {}})


def test_limit_is_enforced_per_key():
    limiter = HybridRateLimiter(FakeRedis())
    results = [limiter.hit("orders:1.1.1.1", limit=3, window_seconds=60)[0] for _ in range(4)]
    assert results == [True, True, True, False]
    assert limiter.hit("orders:2.2.2.2", limit=3, window_seconds=60)[0] is True


def test_counter_resumes_from_redis():
    client = FakeRedis()
    client.values["orders:1.1.1.1"] = "3"
    limiter = HybridRateLimiter(client)
    assert limiter.hit("orders:1.1.1.1", limit=3, window_seconds=60)[0] is False


def test_redis_outage_falls_back_to_memory():
    limiter = HybridRateLimiter(FakeRedis(fail=True))
    assert limiter.hit("orders:1.1.1.1", limit=1, window_seconds=60)[:2] == (True, 1)
    assert limiter.hit("orders:1.1.1.1", limit=1, window_seconds=60)[0] is False


def test_client_ip_prefers_forwarded_header():
    assert rate_limiter.client_ip(make_request(forwarded="198.51.100.1, 10.0.0.1")) == "198.51.100.1"
    assert rate_limiter.client_ip(make_request()) == "203.0.113.7"


@pytest.mark.anyio
async def test_dependency_raises_429(monkeypatch):
    monkeypatch.setattr(config, "RATE_LIMIT_ENABLED", True)
    monkeypatch.setattr(rate_limiter, "_limiter", HybridRateLimiter(FakeRedis()))
    dependency = create_rate_limiter(limit=1, window_seconds=60, key_prefix="test")

    await dependency(make_request())
    with pytest.raises(HTTPException) as exc_info:
        await dependency(make_request())
    assert exc_info.value.status_code == 429
    assert "Retry-After" in exc_info.value.headers


@pytest.mark.anyio
async def test_dependency_is_noop_when_disabled(monkeypatch):
    monkeypatch.setattr(rate_limiter, "_limiter", None)
    dependency = create_rate_limiter(limit=0, window_seconds=60)
    assert await dependency(make_request()) is None


@pytest.fixture
def anyio_backend():
    return "asyncio"
