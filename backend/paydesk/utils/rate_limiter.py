"""
In-memory fixed-window rate limiter, keyed by client IP and route template.
Single-process only; behind several workers use a shared store.
"""
import time
from typing import Dict, Tuple

from fastapi import Request, HTTPException

# {(ip, route template): (window_start, count)}
_rate_limit_store: Dict[Tuple[str, str], Tuple[float, int]] = {}


def route_key(request: Request) -> str:
    """`/api/receipt/send-email/{receipt_id}` rather than the concrete URL."""
    route = request.scope.get("route")
    return getattr(route, "path", request.url.path)


def _drop_expired(route: str, window: int, now: float) -> None:
    expired = [
        key for key, (start, _) in _rate_limit_store.items()
        if key[1] == route and now - start > window
    ]
    for key in expired:
        del _rate_limit_store[key]


def rate_limit(requests: int, window: int):
    """
    Dependency factory for rate limiting.
    Example: Depends(rate_limit(requests=10, window=60))
    """
    def limiter(request: Request):
        route = route_key(request)
        key = (request.client.host if request.client else "unknown", route)
        now = time.time()

        entry = _rate_limit_store.get(key)
        if entry is None or now - entry[0] > window:
            _drop_expired(route, window, now)
            _rate_limit_store[key] = (now, 1)
            return True

        window_start, count = entry
        if count >= requests:
            raise HTTPException(
                status_code=429,
                detail=f"Rate limit exceeded. Try again in {int(window - (now - window_start))} seconds."
            )

        _rate_limit_store[key] = (window_start, count + 1)
        return True

    return limiter


def reset_rate_limits() -> None:
    _rate_limit_store.clear()
