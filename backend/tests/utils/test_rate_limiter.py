"""Tests for the fixed-window rate limiter dependency."""
import pytest
from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient

from paydesk.utils import rate_limiter
from paydesk.utils.rate_limiter import rate_limit, reset_rate_limits

app = FastAPI()


@app.get("/items/{item_id}")
def read_item(item_id: str, _throttle: bool = Depends(rate_limit(requests=2, window=60))):
    return {"id": item_id}


@pytest.fixture()
def clock(monkeypatch):
    now = [1_000.0]
    monkeypatch.setattr(rate_limiter.time, "time", lambda: now[0])
    reset_rate_limits()
    yield now
    reset_rate_limits()


def test_ids_on_one_route_share_a_window(clock):
    client = TestClient(app)
    assert [client.get(f"/items/{i}").status_code for i in range(3)] == [200, 200, 429]
    assert list(rate_limiter._rate_limit_store) == [("testclient", "/items/{item_id}")]


def test_window_reopens_after_expiry(clock):
    client = TestClient(app)
    client.get("/items/a")
    client.get("/items/b")
    clock[0] += 61
    assert client.get("/items/c").status_code == 200


def test_expired_windows_are_dropped(clock):
    rate_limiter._rate_limit_store[("10.0.0.9", "/items/{item_id}")] = (clock[0] - 120, 2)
    rate_limiter._rate_limit_store[("10.0.0.9", "/other")] = (clock[0] - 120, 2)

    TestClient(app).get("/items/a")

    assert ("10.0.0.9", "/items/{item_id}") not in rate_limiter._rate_limit_store
    # Other routes are pruned by their own limiter
    assert ("10.0.0.9", "/other") in rate_limiter._rate_limit_store
