import hashlib
import hmac

import pytest

from bter_client.errors import MissingCredentialsError
from bter_client.signing import CounterNonce, canonical_form, sign


def test_signing_is_deterministic():
    body = canonical_form({"pair": "btc_usd", "nonce": 1700000000})
    assert body == "pair=btc_usd&nonce=1700000000"

    s1 = sign("SECRET", body)
    s2 = sign("SECRET", body)
    assert s1 == s2
    assert len(s1) == 128
    assert s1 == s1.lower()
    assert s1 == hmac.new(b"SECRET", body.encode(), hashlib.sha512).hexdigest()


def test_signature_changes_with_any_key_or_value():
    base = {"pair": "btc_usd", "rate": 100, "nonce": 1}
    ref = sign("SECRET", canonical_form(base))

    assert sign("SECRET", canonical_form({**base, "rate": 101})) != ref
    assert sign("SECRET", canonical_form({"pair": "btc_usd", "rte": 100, "nonce": 1})) != ref
    # escaped '&' in a value must not look like an extra pair
    assert canonical_form({"a": "1&b=2"}) != canonical_form({"a": "1", "b": "2"})
    assert sign("OTHER", canonical_form(base)) != ref


def test_encoding_keeps_insertion_order():
    assert canonical_form({"b": 2, "a": 1}) == "b=2&a=1"


def test_encoding_escapes_reserved_characters():
    assert canonical_form({"q": "a b"}) == "q=a%20b"
    assert canonical_form({"q": "a+b/c"}) == "q=a%2Bb%2Fc"
    assert canonical_form({"q": "x=y&z"}) == "q=x%3Dy%26z"
    assert canonical_form({"q": "-_.!~*'()"}) == "q=-_.!~*'()"
    assert canonical_form({"q": "é"}) == "q=%C3%A9"


def test_encoding_renders_values():
    assert canonical_form({"rate": 100.0, "amount": 0.5}) == "rate=100&amount=0.5"
    assert canonical_form({"flag": True, "empty": None}) == "flag=true&empty="
    assert canonical_form({"id": [1, 2]}) == "id=1&id=2"
    assert canonical_form({}) == ""


def test_empty_secret_is_rejected():
    with pytest.raises(MissingCredentialsError):
        sign("", "nonce=1")


def test_counter_nonce_is_strictly_increasing():
    nonce = CounterNonce(start=10)
    assert [nonce(), nonce(), nonce()] == [11, 12, 13]
