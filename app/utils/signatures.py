"""
Webhook signature verification.

NOWPayments signs IPN callbacks with HMAC-SHA512 over the JSON body
re-serialized with keys sorted alphabetically, the way JavaScript's
JSON.stringify writes it. Numbers must therefore be formatted like JS
Number#toString (10.0 -> "10", 5e-05 -> "0.00005").
"""

import hashlib
import hmac
import json
import math
from decimal import Decimal
from typing import Any

from loguru import logger

# JS switches to exponent form outside 1e-7 < |x| < 1e21
JS_MAX_DECIMAL_EXPONENT = 21
JS_MIN_DECIMAL_EXPONENT = -6
JS_MAX_SAFE_INTEGER = 2**53


def js_number(value: int | float) -> str:
    """Format a number like JavaScript Number#toString."""
    if isinstance(value, int):
        if abs(value) < JS_MAX_SAFE_INTEGER:
            return str(value)
        value = float(value)
    if math.isnan(value) or math.isinf(value):
        return "null"
    if value == 0:
        return "0"

    sign = "-" if value < 0 else ""
    # repr gives the shortest round-tripping digits, same as JS
    parsed = Decimal(repr(abs(value))).normalize().as_tuple()
    digits = "".join(str(d) for d in parsed.digits)
    k = len(digits)
    n = parsed.exponent + k

    if k <= n <= JS_MAX_DECIMAL_EXPONENT:
        text = digits + "0" * (n - k)
    elif 0 < n <= JS_MAX_DECIMAL_EXPONENT:
        text = f"{digits[:n]}.{digits[n:]}"
    elif JS_MIN_DECIMAL_EXPONENT < n <= 0:
        text = "0." + "0" * -n + digits
    else:
        exponent = n - 1
        mantissa = digits if k == 1 else f"{digits[0]}.{digits[1:]}"
        text = f"{mantissa}e{'+' if exponent >= 0 else '-'}{abs(exponent)}"
    return sign + text


def js_json_dumps(value: Any) -> str:
    """Compact JSON with sorted keys, formatted as JSON.stringify would."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return js_number(value)
    if isinstance(value, str):
        return json.dumps(value, ensure_ascii=False)
    if isinstance(value, dict):
        items = (
            json.dumps(str(key), ensure_ascii=False)
            + ":"
            + js_json_dumps(value[key])
            for key in sorted(value)
        )
        return "{" + ",".join(items) + "}"
    if isinstance(value, (list, tuple)):
        return "[" + ",".join(js_json_dumps(item) for item in value) + "]"
    raise TypeError(
        f"Object of type {type(value).__name__} is not JSON serializable"
    )


def sign_ipn_payload(payload: dict[str, Any], secret: str) -> str:
    """
    Compute IPN signature for a payload.

    Args:
        payload: Parsed JSON body
        secret: IPN secret

    Returns:
        Hex HMAC-SHA512 digest
    """
    message = js_json_dumps(payload)
    return hmac.new(
        secret.encode("utf-8"), message.encode("utf-8"), hashlib.sha512
    ).hexdigest()


def verify_ipn_signature(
    payload: dict[str, Any], signature: str | None, secret: str | None
) -> bool:
    """
    Verify IPN signature (constant-time compare).

    Args:
        payload: Parsed JSON body
        signature: Value of the x-nowpayments-sig header
        secret: IPN secret

    Returns:
        True if signature matches
    """
    if not signature or not secret:
        logger.warning("IPN signature or secret missing")
        return False
    expected = sign_ipn_payload(payload, secret)
    return hmac.compare_digest(expected, signature.lower())
