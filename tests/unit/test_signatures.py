"""
Unit tests for IPN signature verification.
"""

import hashlib
import hmac
import json

import pytest

from app.utils.signatures import (
    js_json_dumps,
    js_number,
    sign_ipn_payload,
    verify_ipn_signature,
)

SECRET = "ipn-secret"

# Body as the gateway sends it: sorted keys, JS number formatting
GATEWAY_BODY = (
    b'{"actually_paid":0.00005,"order_id":"1","payment_id":42,'
    b'"payment_status":"finished","price_amount":10}'
)


def raw_signature(body: bytes) -> str:
    return hmac.new(SECRET.encode(), body, hashlib.sha512).hexdigest()


class TestJsJson:
    """Tests for JSON.stringify-compatible serialization."""

    def test_keys_sorted_recursively(self):
        """Nested dicts and lists of dicts are sorted."""
        payload = {"b": 1, "a": {"d": 2, "c": [{"f": 1, "e": 2}]}}
        assert js_json_dumps(payload) == (
            '{"a":{"c":[{"e":2,"f":1}],"d":2},"b":1}'
        )

    def test_literals_and_strings(self):
        """null, booleans and non-ASCII strings."""
        payload = {"a": None, "b": True, "c": False, "d": "ü \"q\""}
        assert js_json_dumps(payload) == (
            '{"a":null,"b":true,"c":false,"d":"ü \\"q\\""}'
        )

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (10, "10"),
            (10.0, "10"),
            (-3.0, "-3"),
            (0.0, "0"),
            (-0.0, "0"),
            (0.1, "0.1"),
            (2.5, "2.5"),
            (0.00005, "0.00005"),
            (0.000001, "0.000001"),
            (1e-7, "1e-7"),
            (1.5e-7, "1.5e-7"),
            (123456789012345680000.0, "123456789012345680000"),
            (1e21, "1e+21"),
            (2.5e25, "2.5e+25"),
            (2**53 + 1, "9007199254740992"),
            (float("nan"), "null"),
            (float("inf"), "null"),
        ],
    )
    def test_number_formatting(self, value, expected):
        """Numbers are written like JavaScript Number#toString."""
        assert js_number(value) == expected

    def test_unsupported_type(self):
        """Non-JSON values raise TypeError."""
        with pytest.raises(TypeError):
            js_json_dumps({"a": object()})


class TestIpnSignature:
    """Tests for HMAC-SHA512 signatures."""

    def test_signature_matches_sorted_compact_json(self):
        """Digest is over compact JSON with sorted keys."""
        payload = {"payment_status": "finished", "order_id": "7"}
        expected = raw_signature(
            b'{"order_id":"7","payment_status":"finished"}'
        )

        assert sign_ipn_payload(payload, SECRET) == expected

    def test_key_order_does_not_matter(self):
        """Same content, same signature."""
        first = {"a": 1, "b": 2}
        second = {"b": 2, "a": 1}
        assert sign_ipn_payload(first, SECRET) == sign_ipn_payload(
            second, SECRET
        )

    @pytest.mark.critical
    def test_gateway_body_with_small_float_verifies(self):
        """A signature over the raw gateway body verifies after parsing."""
        signature = raw_signature(GATEWAY_BODY)
        payload = json.loads(GATEWAY_BODY)

        assert sign_ipn_payload(payload, SECRET) == signature
        assert verify_ipn_signature(payload, signature, SECRET) is True

    def test_integral_float_signed_without_fraction(self):
        """A parsed 10.0 is signed as 10."""
        body = b'{"order_id":"1","price_amount":10}'
        payload = json.loads(b'{"price_amount":10.0,"order_id":"1"}')

        assert verify_ipn_signature(payload, raw_signature(body), SECRET)

    def test_verify(self):
        """Valid, uppercase, tampered and missing signatures."""
        payload = {"order_id": "7", "payment_status": "finished"}
        signature = sign_ipn_payload(payload, SECRET)

        assert verify_ipn_signature(payload, signature, SECRET) is True
        assert verify_ipn_signature(payload, signature.upper(), SECRET) is True
        assert (
            verify_ipn_signature(
                {**payload, "payment_status": "failed"}, signature, SECRET
            )
            is False
        )
        assert verify_ipn_signature(payload, None, SECRET) is False
        assert verify_ipn_signature(payload, signature, None) is False
