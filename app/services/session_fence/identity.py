"""
Session Identity Utility Module

This module produces the two identifiers used by the session fence: an
unpredictable session id and a coarse, diagnostic device fingerprint.

Dependencies:
- uuid: For UUIDv4 generation backed by the OS random source.
- random: For the template fallback when the OS has no random source.

Author: @kcaparas1630
"""

import random
import uuid
from typing import Iterable, Optional
from loguru import logger

SERVER_SIDE_FINGERPRINT = "server-side"
_UUID_TEMPLATE = "xxxxxxxx-xxxx-4xxx-yxxx-xxxxxxxxxxxx"


def _template_uuid4() -> str:
    def fill(char: str) -> str:
        if char == "x":
            return format(random.getrandbits(4), "x")
        if char == "y":
            # variant bits 10xx
            return format(random.getrandbits(2) | 0x8, "x")
        return char

    return "".join(fill(char) for char in _UUID_TEMPLATE)


def generate_session_id() -> str:
    """
    Generate a UUIDv4-shaped session identifier.

    Uses the OS CSPRNG through ``uuid.uuid4``. Platforms without a random
    source fall back to filling a UUIDv4 template from ``random``; the result
    keeps the version and variant nibbles either way.

    Returns:
        str: 36-character hyphenated lowercase hex string.

    Example:
        >>> len(generate_session_id())
        36
    """
    try:
        return str(uuid.uuid4())
    except NotImplementedError:
        logger.warning("[SessionFence] No OS random source available, using template session id")
        return _template_uuid4()


def _utf16_code_units(text: str) -> Iterable[int]:
    data = text.encode("utf-16-le", errors="surrogatepass")
    return (int.from_bytes(data[i:i + 2], "little") for i in range(0, len(data), 2))


def get_device_fingerprint(user_agent: Optional[str]) -> str:
    """
    Derive a short device signature from a user-agent string.

    Rolling hash ``h = h * 31 + unit`` over the UTF-16 code units of the user
    agent, folded to a signed 32-bit integer, rendered as the hex of its
    absolute value. Devices of the same model collide; the value is only
    diagnostic.

    Args:
        user_agent: The client's User-Agent header, or None when there is no
            interactive client.

    Returns:
        str: ``device_<hex>``, or ``"server-side"`` without a user agent.

    Example:
        >>> get_device_fingerprint("a")
        'device_61'
    """
    if user_agent is None:
        return SERVER_SIDE_FINGERPRINT

    value = 0
    for unit in _utf16_code_units(user_agent):
        value = (value * 31 + unit) & 0xFFFFFFFF
    if value >= 0x80000000:
        value -= 0x100000000

    return f"device_{abs(value):x}"
