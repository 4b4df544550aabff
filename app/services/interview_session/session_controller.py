"""
Interview Session Controller Module

This module drives one interview session from load to its terminal outcome:

    loading -> active(i) -> submitting(i) -> active(i+1) | finalizing
            -> ended_success | ended_error

The controller owns the in-memory copy of the questions and transcript, persists
progress after every answer and, after the last answer (or an early end), marks
the session completed, counts it against the user's interviews and requests the
detailed feedback. It also watches the session document: a completed or
cancelled status written by anyone else ends the controller immediately.

Failures never escape as exceptions once the session is running. They are turned
into ``Notice`` objects and a ``redirect_to`` target that the client follows.

Dependencies:
- loguru: For logging operations.
- app.services.repositories: For session and user persistence.
- app.services.feedback: For the detailed feedback capability.

Author: @kcaparas1630
"""

from typing import Callable, List, Optional
from loguru import logger
from app.database import ChangeEvent
from app.errors.exceptions import InterviewEnded, ServiceOverloadedError, SubmissionInProgress
from app.schemas.interview.interview_feedback import FeedbackAnalysisRequest, FeedbackSchemaError
from app.schemas.interview.interview_requests import ControllerState, ControllerView, Notice, ProctoringEventKind
from app.schemas.interview.interview_session import (
    EndedReason,
    GeneratedQuestion,
    InterviewSession,
    InterviewStatus,
    ProctoringIssues,
)
from app.services.feedback.feedback_generator import FeedbackGenerator
from app.services.interview_session.question_order import (
    append_transcript,
    first_unanswered_index,
    order_questions,
    transcript_lines,
)
from app.services.interview_session.resources import ReleaseCallback, SessionResources
from app.services.repositories.interview_repository import InterviewRepository
from app.services.repositories.user_repository import UserRepository

DASHBOARD_PATH = "/dashboard"
START_INTERVIEW_PATH = "/interview/start"
DEFAULT_JOB_DESCRIPTION = "General Role"

_PROCTORING_FIELDS = {
    ProctoringEventKind.TAB_SWITCH: "tab_switch",
    ProctoringEventKind.FACE_NOT_DETECTED: "face_not_detected",
    ProctoringEventKind.TASK_INACTIVITY: "task_inactivity",
    ProctoringEventKind.DISTRACTION: "distraction",
}


def feedback_path(interview_id: str) -> str:
    return f"/feedback/{interview_id}"


class InterviewSessionController:
    """
    State machine for one running interview session.

    Attributes:
        uid (str): Owner of the session.
        interview_id (str): The session being driven.
        state (ControllerState): Current controller state.
        questions (List[GeneratedQuestion]): Ordered questions with recorded answers.
        transcript (str): Transcript built so far.
        current_index (int): Index of the question being asked.
        redirect_to (Optional[str]): Where the client goes once the controller ended.
        notices (List[Notice]): Notices raised since load.
        on_end (Optional[Callable]): Called once the controller reaches an ended state.
    """

    def __init__(
        self,
        uid: str,
        interview_id: str,
        interviews: InterviewRepository,
        users: UserRepository,
        feedback_generator: FeedbackGenerator,
        resources: Optional[SessionResources] = None,
        on_end: Optional[Callable[["InterviewSessionController"], None]] = None,
    ):
        self.uid = uid
        self.interview_id = interview_id
        self.interviews = interviews
        self.users = users
        self.feedback_generator = feedback_generator
        self.resources = resources or SessionResources()
        self.on_end = on_end

        self.state = ControllerState.LOADING
        self.status = InterviewStatus.PENDING
        self.questions: List[GeneratedQuestion] = []
        self.transcript = ""
        self.current_index = 0
        self.redirect_to: Optional[str] = None
        self.notices: List[Notice] = []
        self.proctoring_issues = ProctoringIssues()

        self._last_version = 0
        self._unsubscribe: Optional[Callable[[], None]] = None
        self._finalize_started = False
        self._closed = False

    @property
    def current_question(self) -> Optional[GeneratedQuestion]:
        if self.state.is_ended or not self.questions:
            return None
        return self.questions[self.current_index]

    @property
    def ended(self) -> bool:
        return self.state.is_ended

    def view(self) -> ControllerView:
        return ControllerView(
            interview_id=self.interview_id,
            state=self.state,
            status=self.status,
            current_index=self.current_index,
            total_questions=len(self.questions),
            current_question=self.current_question,
            redirect_to=self.redirect_to,
            notices=list(self.notices),
        )

    async def load(self) -> ControllerView:
        """
        Read the session, subscribe to its changes and position the question pointer.

        Raises:
            InterviewNotFound: If the session does not exist
        """
        logger.info(f"[InterviewController] Loading interview {self.interview_id} for {self.uid}")
        session = await self.interviews.require(self.interview_id)
        self.status = session.status
        self._unsubscribe = self.interviews.subscribe(self.interview_id, self._on_change)

        if session.status.is_terminal:
            self._end_remotely(session.status)
            return self.view()

        if not session.questions:
            logger.error(f"[InterviewController] Interview {self.interview_id} has no questions")
            self._notify("Interview unavailable", "No questions were found for this interview. Please start a new one.", "destructive")
            self._end(ControllerState.ENDED_ERROR, START_INTERVIEW_PATH)
            return self.view()

        self._restore(session)

        if session.status != InterviewStatus.STARTED:
            try:
                await self.interviews.mark_started(self.interview_id)
                self.status = InterviewStatus.STARTED
            except Exception as e:
                logger.error(f"[InterviewController] Could not mark interview {self.interview_id} started: {e}")

        if not self.state.is_ended:
            self.state = ControllerState.ACTIVE
        return self.view()

    def _restore(self, session: InterviewSession) -> None:
        self.questions = order_questions(session.questions)
        self.transcript = session.transcript or ""
        self.proctoring_issues = session.proctoring_issues.model_copy()

        next_index = first_unanswered_index(self.questions)
        if next_index is None:
            # Resuming a session whose answers were all saved but which never finalized.
            logger.warning(f"[InterviewController] All questions of {self.interview_id} already answered; restarting at the first question")
            next_index = 0
        self.current_index = next_index

    async def advance(self, answer: str) -> ControllerView:
        """
        Record the answer to the current question and move on.

        The answer is recorded in memory and the transcript first; persistence
        failures produce a notice but do not stop progression. After the last
        question the session is finalized.

        Raises:
            InterviewEnded: If the controller has ended or the session is completed
            SubmissionInProgress: While another answer or the finalization is in flight
        """
        if self.state in (ControllerState.SUBMITTING, ControllerState.FINALIZING):
            raise SubmissionInProgress()
        if self.state != ControllerState.ACTIVE or self.status.is_terminal:
            raise InterviewEnded(self.interview_id)

        self.state = ControllerState.SUBMITTING
        question = self.questions[self.current_index]
        recorded = (answer or "").strip()

        self.questions[self.current_index] = question.model_copy(update={"answer": recorded})
        self.transcript = append_transcript(self.transcript, transcript_lines(question, recorded))

        try:
            await self.interviews.save_progress(self.interview_id, self.questions, self.transcript)
        except Exception as e:
            logger.error(f"[InterviewController] Failed to save progress for {self.interview_id}: {e}")
            self._notify("Progress not saved", "Your answer could not be saved. The interview will continue.", "destructive")

        if self.state.is_ended:
            # Ended remotely while the answer was being saved.
            return self.view()

        if self.current_index + 1 < len(self.questions):
            self.current_index += 1
            self.state = ControllerState.ACTIVE
            return self.view()

        return await self.finalize(EndedReason.ALL_QUESTIONS_ANSWERED)

    async def end(self, reason: EndedReason = EndedReason.COMPLETED_BY_USER) -> ControllerView:
        """
        End the interview early (user choice, timer or proctoring) and finalize it.

        Raises:
            InterviewEnded: If the controller has already ended
            SubmissionInProgress: While an answer is being saved
        """
        if self.state.is_ended:
            raise InterviewEnded(self.interview_id)
        if self.state == ControllerState.SUBMITTING:
            raise SubmissionInProgress()
        logger.info(f"[InterviewController] Ending interview {self.interview_id}: {reason.value}")
        return await self.finalize(reason)

    async def finalize(self, reason: EndedReason) -> ControllerView:
        """
        Complete the session and request its feedback. Runs at most once.

        Order: release resources, mark the session completed, count the
        interview, request detailed feedback, store it. Any failure ends the
        controller with an error notice; nothing is retried.
        """
        if self._finalize_started or self.state.is_ended:
            logger.debug(f"[InterviewController] Finalize of {self.interview_id} already handled")
            return self.view()
        self._finalize_started = True
        self.state = ControllerState.FINALIZING
        self.resources.release_all()

        try:
            await self.interviews.mark_completed(
                self.interview_id,
                self.questions,
                self.transcript,
                reason,
                self.proctoring_issues,
            )
            self.status = InterviewStatus.COMPLETED
            await self.users.increment_interviews_taken(self.uid)

            profile = await self.users.get_profile(self.uid)
            request = FeedbackAnalysisRequest(
                interview_transcript=self.transcript or "No answers were recorded.",
                job_description=(profile.role if profile and profile.role else DEFAULT_JOB_DESCRIPTION),
                candidate_profile=(profile.candidate_summary() if profile else "Not provided"),
            )
            result = await self.feedback_generator.analyze_detailed(request, self.questions)
            if isinstance(result, FeedbackSchemaError):
                logger.error(f"[InterviewController] Feedback for {self.interview_id} was invalid: {result.reason}")
                self._notify("Feedback unavailable", "We could not generate feedback for this interview. Your answers were saved.", "destructive")
                self._end(ControllerState.ENDED_ERROR, DASHBOARD_PATH)
                return self.view()

            await self.interviews.save_feedback(self.interview_id, result.value)

        except ServiceOverloadedError:
            logger.warning(f"[InterviewController] Feedback service overloaded for {self.interview_id}")
            self._notify("AI service busy", "The AI service is currently overloaded, so feedback could not be generated. Your answers were saved.", "destructive")
            self._end(ControllerState.ENDED_ERROR, DASHBOARD_PATH)
            return self.view()
        except Exception as e:
            logger.exception(f"[InterviewController] Finalization of {self.interview_id} failed: {e}")
            self._notify("Interview not completed", "Something went wrong while finishing your interview. Please check your dashboard.", "destructive")
            self._end(ControllerState.ENDED_ERROR, DASHBOARD_PATH)
            return self.view()

        logger.info(f"[InterviewController] Interview {self.interview_id} finalized ({reason.value})")
        self._end(ControllerState.ENDED_SUCCESS, feedback_path(self.interview_id))
        return self.view()

    def record_proctoring_event(self, kind: ProctoringEventKind) -> ProctoringIssues:
        """Count a proctoring warning. Counters are persisted when the session completes."""
        if self.state.is_ended or self.state == ControllerState.FINALIZING:
            raise InterviewEnded(self.interview_id)
        field = _PROCTORING_FIELDS[kind]
        setattr(self.proctoring_issues, field, getattr(self.proctoring_issues, field) + 1)
        logger.info(f"[InterviewController] Proctoring event {kind.value} on {self.interview_id}")
        return self.proctoring_issues

    def acquire_resource(self, name: str, release: ReleaseCallback) -> bool:
        return self.resources.acquire(name, release)

    def report_resource_failure(self, name: str, error: Exception) -> None:
        """Media could not be acquired; the interview continues without it."""
        logger.warning(f"[InterviewController] Could not acquire {name} for {self.interview_id}: {error}")
        self._notify(f"{name.capitalize()} unavailable", f"Could not access the {name}. You can continue the interview without it.")

    def close(self) -> None:
        """Unsubscribe from the session and release resources. Safe to call repeatedly."""
        if self._closed:
            return
        self._closed = True
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self.resources.release_all()

    def _on_change(self, event: ChangeEvent) -> None:
        if event.version <= self._last_version:
            return
        self._last_version = event.version
        if event.data is None or self.state.is_ended or self.state == ControllerState.FINALIZING:
            return

        status = event.data.get("status")
        if status in (InterviewStatus.COMPLETED.value, InterviewStatus.CANCELLED.value):
            self._end_remotely(InterviewStatus(status))

    def _end_remotely(self, status: InterviewStatus) -> None:
        logger.info(f"[InterviewController] Interview {self.interview_id} is {status.value}; stopping")
        self.status = status
        self._notify("Session ended", "This interview session is no longer active", "destructive")
        self._end(ControllerState.ENDED_ERROR, DASHBOARD_PATH)

    def _end(self, state: ControllerState, redirect_to: str) -> None:
        self.state = state
        self.redirect_to = redirect_to
        self.close()
        if self.on_end is not None:
            self.on_end(self)

    def _notify(self, title: str, description: str, variant: str = "default") -> None:
        self.notices.append(Notice(title=title, description=description, variant=variant))
