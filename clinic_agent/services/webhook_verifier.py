"""
Signature verification for lifecycle webhook notifications.

The voice platform signs each webhook body with the account API key. The
signature header has the form ``v=<unix ms>,d=<hex digest>`` where the digest is
HMAC-SHA256 over the raw body followed by the timestamp. Requests older or newer
than five minutes are rejected to limit replays.
"""

import hashlib
import hmac
import re
import time
from typing import Optional

from clinic_agent.config.constants import SIGNATURE_TOLERANCE_MS

SIGNATURE_PATTERN = re.compile(r"^v=(\d+),d=([0-9a-fA-F]+)$")


def sign_payload(body: str, api_key: str, timestamp_ms: int) -> str:
    """
    Compute the signature header value for a body.

    Args:
        body: Raw request body
        api_key: Shared signing secret
        timestamp_ms: Signing time in milliseconds since the epoch

    Returns:
        The header value in ``v=<timestamp>,d=<digest>`` form
    """
    digest = hmac.new(
        api_key.encode("utf-8"),
        (body + str(timestamp_ms)).encode("utf-8"),
        hashlib.sha256,
    ).hexdigest()
    return f"v={timestamp_ms},d={digest}"


def verify_signature(
    body: str,
    api_key: str,
    signature: Optional[str],
    now_ms: Optional[int] = None,
) -> bool:
    """
    Check that a webhook body was signed with the shared secret.

    Args:
        body: Raw request body exactly as received
        api_key: Shared signing secret
        signature: Value of the signature header, if any
        now_ms: Current time in milliseconds (defaults to the wall clock)

    Returns:
        True if the signature is well-formed, fresh and matches the body
    """
    if not signature or not api_key:
        return False
    match = SIGNATURE_PATTERN.match(signature.strip())
    if not match:
        return False

    timestamp_ms = int(match.group(1))
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    if abs(now_ms - timestamp_ms) > SIGNATURE_TOLERANCE_MS:
        return False

    expected = sign_payload(body, api_key, timestamp_ms)
    return hmac.compare_digest(expected, f"v={timestamp_ms},d={match.group(2).lower()}")
