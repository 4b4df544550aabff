"""
Controller Registry Module

Keeps one InterviewSessionController per (user, interview) so that consecutive
HTTP requests drive the same state machine. Controllers are dropped as soon as
they end; a later request rebuilds the terminal view from the stored session.

Author: @kcaparas1630
"""

import asyncio
from typing import Callable, Dict, Tuple
from loguru import logger
from app.database import DocumentStore
from app.services.feedback.feedback_generator import FeedbackGenerator
from app.services.interview_session.session_controller import InterviewSessionController
from app.services.repositories.interview_repository import InterviewRepository
from app.services.repositories.user_repository import UserRepository

ControllerKey = Tuple[str, str]


class ControllerRegistry:
    """Process-wide cache of live interview session controllers."""

    def __init__(self, store: DocumentStore, feedback_generator_factory: Callable[[], FeedbackGenerator] = FeedbackGenerator):
        self.store = store
        self.feedback_generator_factory = feedback_generator_factory
        self._controllers: Dict[ControllerKey, InterviewSessionController] = {}
        self._lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._controllers)

    async def get_or_load(self, uid: str, interview_id: str) -> InterviewSessionController:
        """
        Return the user's controller for the interview, loading it on first use.

        A controller that ends while loading is returned but not kept.

        Raises:
            InterviewNotFound: If the interview does not exist
        """
        async with self._lock:
            controller = self._controllers.get((uid, interview_id))
            if controller is not None:
                return controller

            controller = InterviewSessionController(
                uid=uid,
                interview_id=interview_id,
                interviews=InterviewRepository(self.store, uid),
                users=UserRepository(self.store),
                feedback_generator=self.feedback_generator_factory(),
                on_end=self._forget,
            )
            await controller.load()
            if controller.ended:
                return controller

            self._controllers[(uid, interview_id)] = controller
            logger.debug(f"[ControllerRegistry] Registered controller for {uid}/{interview_id}")
            return controller

    def discard(self, uid: str, interview_id: str) -> None:
        controller = self._controllers.pop((uid, interview_id), None)
        if controller is not None:
            controller.close()

    def close_all(self) -> None:
        count = len(self)
        for controller in list(self._controllers.values()):
            controller.close()
        self._controllers.clear()
        logger.info(f"[ControllerRegistry] Closed {count} live controllers")

    def _forget(self, controller: InterviewSessionController) -> None:
        key = (controller.uid, controller.interview_id)
        if self._controllers.get(key) is controller:
            del self._controllers[key]
            logger.debug(f"[ControllerRegistry] Dropped ended controller for {key[0]}/{key[1]}")
