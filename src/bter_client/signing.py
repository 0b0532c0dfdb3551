from __future__ import annotations

import hashlib
import hmac
import threading
import time
from decimal import Decimal
from typing import Any, Callable, Mapping
from urllib.parse import quote

from .errors import MissingCredentialsError

NonceProvider = Callable[[], Any]

# Unreserved set of the exchange's form encoder; quote() already keeps "_.-~"
_SAFE_CHARS = "!*'()"


# ---------- nonce providers ----------
def unix_nonce() -> int:
    """Current Unix time in whole seconds. Repeats within the same second."""
    return int(round(time.time()))


class CounterNonce:
    """Strictly increasing nonce seeded from the clock; safe to share between threads."""

    def __init__(self, start: int | None = None):
        self._value = unix_nonce() if start is None else int(start)
        self._lock = threading.Lock()

    def __call__(self) -> int:
        with self._lock:
            self._value += 1
            return self._value


# ---------- canonical form ----------
def _render(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        # 100.0 -> "100", the way the exchange renders numbers
        if value.is_integer():
            return str(int(value))
        return repr(value)
    if isinstance(value, Decimal):
        return format(value, "f")
    return str(value)


def _escape(s: str) -> str:
    return quote(s, safe=_SAFE_CHARS)


def canonical_form(params: Mapping[str, Any]) -> str:
    """
    Encode params as `key=value` pairs joined with `&`, in iteration order.

    Space becomes %20 (never '+'). List and tuple values repeat the key.
    """
    pairs: list[str] = []
    for key, value in params.items():
        k = _escape(str(key))
        if isinstance(value, (list, tuple)):
            pairs.extend(f"{k}={_escape(_render(v))}" for v in value)
        else:
            pairs.append(f"{k}={_escape(_render(value))}")
    return "&".join(pairs)


# ---------- signature ----------
def sign(secret: str, canonical: str) -> str:
    """HMAC-SHA512 of `canonical` keyed by `secret`, lowercase hex."""
    if not secret:
        raise MissingCredentialsError()
    return hmac.new(secret.encode("utf-8"), canonical.encode("utf-8"), hashlib.sha512).hexdigest()
