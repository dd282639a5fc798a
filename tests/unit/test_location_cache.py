"""Unit tests for the Redis location cache."""

import json

import pytest

from mealdeal.models.geo import Coordinate
from mealdeal.storage.location_cache import LocationCache


@pytest.fixture
def cache(mock_redis):
    cache = LocationCache("redis://localhost:6379/0", ttl_seconds=900)
    cache._client = mock_redis
    return cache


def test_key_for():
    assert LocationCache.key_for(42) == "mealdeal:location:42"


@pytest.mark.asyncio
async def test_set_writes_with_ttl(cache, mock_redis):
    await cache.set(42, Coordinate(latitude=40.7128, longitude=-74.006))

    mock_redis.set.assert_awaited_once()
    key, payload = mock_redis.set.await_args.args
    assert key == "mealdeal:location:42"
    assert json.loads(payload) == {"latitude": 40.7128, "longitude": -74.006}
    assert mock_redis.set.await_args.kwargs == {"ex": 900}


@pytest.mark.asyncio
async def test_get_hit(cache, mock_redis):
    mock_redis.get.return_value = json.dumps({"latitude": 0.0, "longitude": 0.0})

    coordinate = await cache.get(42)

    assert coordinate == Coordinate(latitude=0.0, longitude=0.0)


@pytest.mark.asyncio
async def test_get_miss(cache, mock_redis):
    assert await cache.get(42) is None


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "raw",
    ["not json", json.dumps({"latitude": 1.0}), json.dumps({"latitude": 200, "longitude": 0}), "[]"],
)
async def test_get_corrupt_entry(cache, mock_redis, raw):
    mock_redis.get.return_value = raw
    assert await cache.get(42) is None


@pytest.mark.asyncio
async def test_clear(cache, mock_redis):
    await cache.clear(42)
    mock_redis.delete.assert_awaited_once_with("mealdeal:location:42")


@pytest.mark.asyncio
async def test_requires_connection():
    cache = LocationCache("redis://localhost:6379/0")

    with pytest.raises(RuntimeError):
        await cache.get(1)


@pytest.mark.asyncio
async def test_disconnect(cache, mock_redis):
    await cache.disconnect()

    mock_redis.close.assert_awaited_once()
    assert cache._client is None


@pytest.mark.asyncio
async def test_stored_payload_reads_back(cache, mock_redis):
    coordinate = Coordinate(latitude=51.5074, longitude=-0.1278)
    await cache.set(7, coordinate)
    mock_redis.get.return_value = mock_redis.set.await_args.args[1]

    assert await cache.get(7) == coordinate
