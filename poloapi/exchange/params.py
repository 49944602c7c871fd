"""Request parameter building, encoding and nonce generation."""

from __future__ import annotations

import threading
import time
from collections.abc import Callable, Mapping
from urllib.parse import urlencode

Scalar = str | int | float


def build_params(
    base: Mapping[str, Scalar],
    extra: Mapping[str, Scalar | None] | None = None,
) -> dict[str, Scalar]:
    """Merge optional fields into the base fields, skipping unset values.

    Base fields come first, followed by extras in call order.
    """
    params: dict[str, Scalar] = dict(base)
    for key, value in (extra or {}).items():
        if value is not None:
            params[key] = value
    return params


def encode_params(params: Mapping[str, Scalar]) -> str:
    """URL-encode params as a query string, preserving key order."""
    return urlencode(list(params.items()))


class NonceGenerator:
    """Issues strictly increasing nonces derived from the wall clock.

    A nonce is ``seconds * 10**6 + microseconds``. The clock returns wall-clock
    nanoseconds and can be replaced in tests. When the clock does not move
    forward between calls (or moves backwards) the previous nonce + 1 is
    issued instead.
    """

    def __init__(self, clock: Callable[[], int] = time.time_ns) -> None:
        self._clock = clock
        self._last = 0
        self._lock = threading.Lock()

    def next(self) -> int:
        with self._lock:
            nonce = self._clock() // 1000
            if nonce <= self._last:
                nonce = self._last + 1
            self._last = nonce
            return nonce
