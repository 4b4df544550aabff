"""
Description:
This module sets up a rate limiter for the application using SlowAPI.
It initializes a Limiter instance with a key function to identify clients by their IP address.
Each route declares its own limit; ``RATE_LIMIT_ENABLED=false`` turns limiting off
(local runs and tests).

Dependencies:
- slowapi: For rate limiting functionality.
- slowapi.util: For utility functions like get_remote_address to retrieve the client's IP address.
- loguru: For logging information about the rate limiter initialization.

Author: @kcaparas1630
"""
import os
from dotenv import load_dotenv
from slowapi import Limiter
from slowapi.util import get_remote_address
from loguru import logger

load_dotenv()

RATE_LIMIT_ENABLED = os.getenv("RATE_LIMIT_ENABLED", "true").lower() != "false"

limiter = Limiter(key_func=get_remote_address, enabled=RATE_LIMIT_ENABLED)
logger.info(f"Rate limiter initialized (enabled={RATE_LIMIT_ENABLED})")
