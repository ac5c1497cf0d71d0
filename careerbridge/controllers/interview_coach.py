"""
Interview Coach page.

Session state machine:

    IDLE --start--> IN_PROGRESS --answer (x3)--> IN_PROGRESS
    IN_PROGRESS --4th answer--> AWAITING_FEEDBACK --feedback--> COMPLETE
    any --start (restart)--> IN_PROGRESS with a fresh transcript

Each question is generated from the full transcript so far; the provider keeps no
session of its own.
"""

from enum import Enum
from typing import List, Optional

import structlog

from careerbridge.constants import INTERVIEW_ANSWERS_PER_SESSION, INTERVIEW_CLOSING_MESSAGE
from careerbridge.controllers.guard import RequestGuard
from careerbridge.errors import ProviderError
from careerbridge.models import CamelModel, InterviewFeedback, Speaker, TranscriptTurn, UserProfile
from careerbridge.services.model_gateway import ModelGateway

logger = structlog.get_logger(__name__)

SESSION = "session"


class InterviewState(str, Enum):
    IDLE = "idle"
    IN_PROGRESS = "in_progress"
    AWAITING_FEEDBACK = "awaiting_feedback"
    COMPLETE = "complete"


class InterviewView(CamelModel):
    state: InterviewState
    transcript: List[TranscriptTurn]
    feedback: Optional[InterviewFeedback]
    feedback_unavailable: bool
    answers_given: int
    answers_required: int
    loading: bool
    input_enabled: bool
    error: Optional[str]


class InterviewCoachController:
    def __init__(self, gateway: ModelGateway, profile: UserProfile):
        self.gateway = gateway
        self.profile = profile
        self.state = InterviewState.IDLE
        self.transcript: List[TranscriptTurn] = []
        self.feedback: Optional[InterviewFeedback] = None
        self.feedback_unavailable = False
        self.loading = False
        self.error: Optional[str] = None
        # Transcript as it stood before the answer currently awaiting a reply
        self._before_answer: Optional[List[TranscriptTurn]] = None
        self._guard = RequestGuard()

    @property
    def answers_given(self) -> int:
        return sum(1 for turn in self.transcript if turn.speaker == Speaker.USER)

    @property
    def input_enabled(self) -> bool:
        return self.state == InterviewState.IN_PROGRESS and not self.loading

    def can_submit(self, text: str) -> bool:
        return self.input_enabled and bool(text.strip())

    async def start(self) -> None:
        """Begin a session, discarding any previous transcript and feedback."""
        ticket = self._guard.begin(SESSION)
        self.loading = True
        self.error = None
        try:
            question = await self.gateway.generate_interview_question(self.profile, [])
        except ProviderError as e:
            if self._guard.current(SESSION, ticket):
                logger.error("Could not start interview", error=str(e))
                self.error = "The interview coach is unavailable right now. Please try again."
                self._restore_after_failed_start()
                self.loading = False
            return

        if not self._guard.current(SESSION, ticket):
            return
        self.transcript = [TranscriptTurn(speaker=Speaker.AI, text=question)]
        self._before_answer = None
        self.feedback = None
        self.feedback_unavailable = False
        self.state = InterviewState.IN_PROGRESS
        self.loading = False

    async def submit(self, text: str) -> bool:
        """Record an answer and advance the session. Returns False when rejected."""
        if not self.can_submit(text):
            return False

        ticket = self._guard.begin(SESSION)
        previous = list(self.transcript)
        self._before_answer = previous
        self.transcript = previous + [TranscriptTurn(speaker=Speaker.USER, text=text)]
        self.loading = True
        self.error = None

        if self.answers_given >= INTERVIEW_ANSWERS_PER_SESSION:
            await self._finish(ticket, previous)
        else:
            await self._ask_next(ticket, previous)
        return True

    async def _ask_next(self, ticket: int, previous: List[TranscriptTurn]) -> None:
        try:
            question = await self.gateway.generate_interview_question(
                self.profile, list(self.transcript)
            )
        except ProviderError as e:
            self._rollback(ticket, previous, e)
            return
        if not self._guard.current(SESSION, ticket):
            return
        self.transcript.append(TranscriptTurn(speaker=Speaker.AI, text=question))
        self._before_answer = None
        self.loading = False

    async def _finish(self, ticket: int, previous: List[TranscriptTurn]) -> None:
        self.state = InterviewState.AWAITING_FEEDBACK
        try:
            feedback = await self.gateway.get_interview_feedback(list(self.transcript))
        except ProviderError as e:
            self._rollback(ticket, previous, e)
            return
        if not self._guard.current(SESSION, ticket):
            return

        self.feedback = feedback
        self.feedback_unavailable = feedback is None
        self.transcript.append(TranscriptTurn(speaker=Speaker.AI, text=INTERVIEW_CLOSING_MESSAGE))
        self.state = InterviewState.COMPLETE
        self._before_answer = None
        self.loading = False
        logger.info("Interview session complete", feedback_available=feedback is not None)

    def _rollback(self, ticket: int, previous: List[TranscriptTurn], error: Exception) -> None:
        if not self._guard.current(SESSION, ticket):
            return
        logger.error("Interview turn failed", error=str(error))
        self.transcript = previous
        self._before_answer = None
        self.state = InterviewState.IN_PROGRESS
        self.loading = False
        self.error = "Your answer could not be processed. Please send it again."

    def _restore_after_failed_start(self) -> None:
        """Undo an answer whose reply was superseded by the restart that just failed."""
        if self._before_answer is None:
            return
        self.transcript = self._before_answer
        self._before_answer = None
        self.state = InterviewState.IN_PROGRESS if self.transcript else InterviewState.IDLE

    def view(self) -> InterviewView:
        return InterviewView(
            state=self.state,
            transcript=list(self.transcript),
            feedback=self.feedback,
            feedback_unavailable=self.feedback_unavailable,
            answers_given=self.answers_given,
            answers_required=INTERVIEW_ANSWERS_PER_SESSION,
            loading=self.loading,
            input_enabled=self.input_enabled,
            error=self.error,
        )
