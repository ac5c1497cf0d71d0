import time
from typing import Callable, List, Literal, Optional

import structlog

from careerbridge.constants import SAVE_INDICATOR_SECONDS
from careerbridge.controllers.guard import RequestGuard
from careerbridge.errors import CVAnalysisFailed, ProviderError
from careerbridge.models import CamelModel, CVAnalysis, SavedAnalysis
from careerbridge.services.model_gateway import ModelGateway
from careerbridge.services.profile_store import AnalysisStore

logger = structlog.get_logger(__name__)

ANALYZE = "analyze"
COVER_LETTER = "cover_letter"


class CVTailorView(CamelModel):
    cv_text: str
    job_description: str
    analysis: Optional[CVAnalysis]
    suggestion_count: int
    tip_count: int
    generated_letter: str
    loading: bool
    letter_loading: bool
    save_status: Literal["idle", "saved"]
    can_analyze: bool
    can_save: bool
    can_generate_letter: bool
    error: Optional[str]


class CVTailorController:
    """CV analysis, snapshot saving and cover letter generation.

    ``clock`` drives the transient "saved" indicator so it can be controlled in tests.
    """

    def __init__(
        self,
        gateway: ModelGateway,
        analysis_store: AnalysisStore,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.gateway = gateway
        self.analysis_store = analysis_store
        self.clock = clock

        self.cv_text = ""
        self.job_description = ""
        self.analysis: Optional[CVAnalysis] = None
        self.generated_letter = ""
        self.loading = False
        self.letter_loading = False
        self.error: Optional[str] = None
        self._saved_at: Optional[float] = None
        self._guard = RequestGuard()

    def set_cv_text(self, text: str) -> None:
        """Replace the CV text; any analysis still in flight is for stale text and is dropped."""
        if text == self.cv_text:
            return
        self.cv_text = text
        if self.loading:
            self._guard.invalidate(ANALYZE)
            self.loading = False

    def set_job_description(self, text: str) -> None:
        self.job_description = text

    @property
    def can_analyze(self) -> bool:
        return bool(self.cv_text.strip()) and not self.loading

    @property
    def can_save(self) -> bool:
        return self.analysis is not None

    @property
    def can_generate_letter(self) -> bool:
        return (
            self.analysis is not None
            and bool(self.job_description.strip())
            and not self.letter_loading
        )

    @property
    def save_status(self) -> str:
        if self._saved_at is not None and self.clock() - self._saved_at < SAVE_INDICATOR_SECONDS:
            return "saved"
        return "idle"

    async def analyze(self) -> None:
        if not self.can_analyze:
            return

        ticket = self._guard.begin(ANALYZE)
        self._guard.invalidate(COVER_LETTER)
        self.loading = True
        self.letter_loading = False
        self.error = None
        cv_text = self.cv_text
        try:
            result = await self.gateway.analyze_cv(cv_text)
        except (CVAnalysisFailed, ProviderError) as e:
            if self._guard.current(ANALYZE, ticket):
                logger.error("CV analysis failed", error=str(e))
                self.error = (
                    str(e)
                    if isinstance(e, CVAnalysisFailed)
                    else "The analysis service is unavailable. Please try again."
                )
                self.loading = False
            return

        if not self._guard.current(ANALYZE, ticket):
            logger.info("Discarding superseded CV analysis")
            return
        self.analysis = result
        self.generated_letter = ""
        self._saved_at = None
        self.loading = False

    async def save(self) -> Optional[SavedAnalysis]:
        if self.analysis is None:
            return None
        snapshot = await self.analysis_store.save(self.analysis)
        self._saved_at = self.clock()
        logger.info("CV analysis saved", saved_at=snapshot.saved_at.isoformat())
        return snapshot

    def restore_saved(self) -> bool:
        """Load the saved snapshot back as the current analysis."""
        snapshot = self.analysis_store.load()
        if snapshot is None:
            return False
        self.analysis = CVAnalysis(**snapshot.model_dump(exclude={"saved_at"}))
        self.generated_letter = ""
        return True

    async def generate_cover_letter(self) -> None:
        if not self.can_generate_letter:
            return

        ticket = self._guard.begin(COVER_LETTER)
        self.letter_loading = True
        self.error = None
        try:
            letter = await self.gateway.generate_cover_letter(
                self.cv_text, self.analysis, self.job_description
            )
        except ProviderError as e:
            if self._guard.current(COVER_LETTER, ticket):
                logger.error("Cover letter generation failed", error=str(e))
                self.error = "Unable to generate cover letter right now. Please try again."
                self.letter_loading = False
            return

        if not self._guard.current(COVER_LETTER, ticket):
            return
        self.generated_letter = letter
        self.letter_loading = False

    def view(self) -> CVTailorView:
        suggestions: List[str] = self.analysis.content_suggestions if self.analysis else []
        tips: List[str] = self.analysis.cultural_tips if self.analysis else []
        return CVTailorView(
            cv_text=self.cv_text,
            job_description=self.job_description,
            analysis=self.analysis,
            suggestion_count=len(suggestions),
            tip_count=len(tips),
            generated_letter=self.generated_letter,
            loading=self.loading,
            letter_loading=self.letter_loading,
            save_status=self.save_status,
            can_analyze=self.can_analyze,
            can_save=self.can_save,
            can_generate_letter=self.can_generate_letter,
            error=self.error,
        )
