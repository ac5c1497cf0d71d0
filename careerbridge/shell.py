"""
Application shell (App + Navbar).

The shell owns the UserProfile and the current page. Page controllers receive the
profile as a value when their page is entered; the Profile page is the only writer
and reports every change back through its ``on_update`` callback.
"""

import time
from typing import Callable, List, Optional, Union

import structlog

from careerbridge.constants import NAV_ITEMS
from careerbridge.controllers.cv_tailor import CVTailorController
from careerbridge.controllers.dashboard import DashboardController
from careerbridge.controllers.interview_coach import InterviewCoachController, InterviewState
from careerbridge.controllers.job_search import JobSearchController
from careerbridge.controllers.profile import ProfileController
from careerbridge.models import CamelModel, Page, UserProfile
from careerbridge.services.model_gateway import ModelGateway
from careerbridge.services.navigation import resolve
from careerbridge.services.profile_store import AnalysisStore, ProfileStore

logger = structlog.get_logger(__name__)

PageController = Union[
    DashboardController,
    JobSearchController,
    CVTailorController,
    InterviewCoachController,
    ProfileController,
]


class NavItem(CamelModel):
    label: str
    page: Page
    active: bool


class Feature(CamelModel):
    icon: str
    title: str
    description: str


class HomeView(CamelModel):
    headline: str
    primary_action: Page
    secondary_action: Page
    features: List[Feature]


HOME_VIEW = HomeView(
    headline="Unlock your career in France.",
    primary_action=Page.DASHBOARD,
    secondary_action=Page.JOB_SEARCH,
    features=[
        Feature(
            icon="🎯",
            title="Smart Job Matching",
            description="Our AI filters thousands of French listings to find those truly open to international talent and specific visa types.",
        ),
        Feature(
            icon="✍️",
            title="CV & Cover Letter Tailoring",
            description="Instantly reformat your profile to match French recruitment standards and generate tailored motivation letters.",
        ),
        Feature(
            icon="🗣️",
            title="AI Interview Coach",
            description="Practice with a specialized AI coach that understands the cultural nuances of French workplace etiquette.",
        ),
    ],
)


class Shell:
    def __init__(
        self,
        gateway: ModelGateway,
        profile_store: ProfileStore,
        analysis_store: AnalysisStore,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.gateway = gateway
        self.profile_store = profile_store
        self.analysis_store = analysis_store
        self.clock = clock

        self.profile = profile_store.load()
        self.current_page = Page.HOME
        self.controller: Optional[PageController] = None
        self.interviews_completed = 0

    def open(self, requested: Page) -> Page:
        """Resolve ``requested`` through the gate and make it the current page.

        Entering a different page discards the previous page's controller state.
        """
        page = resolve(requested, self.profile)
        if page != requested:
            logger.info("Navigation redirected", requested=requested.value, page=page.value)
        if page != self.current_page:
            self._leave()
            self.current_page = page
            self.controller = self._build_controller(page)
        return page

    async def navigate(self, requested: Page) -> Page:
        page = self.open(requested)
        if isinstance(self.controller, JobSearchController):
            await self.controller.on_display()
        return page

    def _leave(self) -> None:
        # A finished interview counts towards the dashboard checklist
        if (
            isinstance(self.controller, InterviewCoachController)
            and self.controller.state == InterviewState.COMPLETE
        ):
            self.interviews_completed += 1

    def _build_controller(self, page: Page) -> Optional[PageController]:
        if page == Page.HOME:
            return None
        if page == Page.DASHBOARD:
            return DashboardController(
                self.profile,
                has_saved_analysis=self.analysis_store.exists(),
                interviews_completed=self.interviews_completed,
            )
        if page == Page.JOB_SEARCH:
            return JobSearchController(self.gateway, self.profile)
        if page == Page.CV_TAILOR:
            return CVTailorController(self.gateway, self.analysis_store, clock=self.clock)
        if page == Page.INTERVIEW_COACH:
            return InterviewCoachController(self.gateway, self.profile)
        if page == Page.PROFILE:
            return ProfileController(self.profile, on_update=self._profile_changed)
        raise ValueError(f"No controller for page {page!r}")

    async def _profile_changed(self, profile: UserProfile) -> None:
        self.profile = profile
        await self.profile_store.save(profile)

    def navbar(self) -> List[NavItem]:
        items = [
            NavItem(label=label, page=page, active=page == self.current_page)
            for label, page in NAV_ITEMS
        ]
        items.append(NavItem(label="Profile", page=Page.PROFILE, active=self.current_page == Page.PROFILE))
        return items

    def view(self) -> CamelModel:
        if self.current_page == Page.HOME:
            return HOME_VIEW
        return self.controller.view()
