"""
AI Client Manager

This module manages separate AI client instances for the feedback and question
generation capabilities so a slow feedback call never queues question
generation behind it. Each service type gets its own dedicated client instance.

Clients are created with ``max_retries=0``: the generative calls are not
idempotent from the user's point of view, so a failed call is reported instead
of silently repeated.
"""

import os
from openai import AsyncOpenAI
import logging
import threading
from typing import Dict, Optional
from dotenv import load_dotenv

# Ensure .env is loaded
load_dotenv()

logger = logging.getLogger(__name__)

SERVICE_TYPES = ("feedback", "question_generation")

class AIClientManager:
    """
    Manages dedicated AI client instances for different services.
    """

    def __init__(self):
        self._clients: Dict[str, AsyncOpenAI] = {}
        self._initialized = False
        self._lock = threading.Lock()

    def _initialize_clients(self):
        """Lazy initialization of client instances."""
        if self._initialized:
            return

        with self._lock:
            # Double-check locking for initialization
            if self._initialized:
                return

            api_key = os.getenv("OPENAI_API_KEY")
            if not api_key:
                if os.getenv("ENV") == "test":
                    logger.warning("OPENAI_API_KEY not set - AI clients unavailable in test environment")
                    return
                raise RuntimeError(
                    "OPENAI_API_KEY environment variable is not set. "
                    "Please set it in your .env file or environment variables."
                )

            base_url = os.getenv("OPENAI_BASE_URL") or None

            try:
                self._clients = {
                    service_type: AsyncOpenAI(api_key=api_key, base_url=base_url, max_retries=0)
                    for service_type in SERVICE_TYPES
                }
                self._initialized = True
                logger.info(f"Initialized {len(self._clients)} dedicated AI client instances")

            except Exception as e:
                logger.error(f"Failed to initialize AI clients: {e}")
                raise RuntimeError(f"Failed to initialize AI clients: {e}") from e

    def get_client(self, service_type: str) -> AsyncOpenAI:
        """
        Get a dedicated client for the specified service type.

        Args:
            service_type (str): "feedback" or "question_generation"

        Returns:
            AsyncOpenAI: Dedicated client instance for the service

        Raises:
            ValueError: If service_type is not supported
            RuntimeError: If clients failed to initialize
        """
        if service_type not in SERVICE_TYPES:
            raise ValueError(f"Unsupported service type: {service_type}. Available: {list(SERVICE_TYPES)}")

        # Lazy initialization on first access
        self._initialize_clients()

        if not self._initialized:
            raise RuntimeError("AI clients failed to initialize properly")

        return self._clients[service_type]

# Lazy initialization - no eager instantiation
_ai_manager: Optional[AIClientManager] = None
_manager_lock = threading.Lock()

def get_ai_client_manager() -> AIClientManager:
    """
    Get the singleton AIClientManager instance with lazy initialization.

    Returns:
        AIClientManager: The singleton instance
    """
    global _ai_manager

    if _ai_manager is None:
        with _manager_lock:
            # Double-check locking pattern
            if _ai_manager is None:
                _ai_manager = AIClientManager()

    return _ai_manager

def get_feedback_client() -> AsyncOpenAI:
    """Get dedicated client for feedback generation."""
    return get_ai_client_manager().get_client("feedback")

def get_question_generation_client() -> AsyncOpenAI:
    """Get dedicated client for interview question generation."""
    return get_ai_client_manager().get_client("question_generation")
