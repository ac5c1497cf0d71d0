from typing import List, Optional

from careerbridge.models import CamelModel, Page, UserProfile


class StatCard(CamelModel):
    label: str
    value: str
    change: str


class Suggestion(CamelModel):
    title: str
    description: str
    action: str
    target: Optional[Page] = None


class ChecklistItem(CamelModel):
    label: str
    done: bool


class DashboardView(CamelModel):
    greeting: str
    subtitle: str
    visa_type: str
    stats: List[StatCard]
    suggestions: List[Suggestion]
    interview_prep_score: int
    interview_prep_target: Page
    checklist: List[ChecklistItem]


STATS = [
    StatCard(label="Applications", value="12", change="+2 this week"),
    StatCard(label="Interviews", value="3", change="Next tomorrow"),
    StatCard(label="AI Matches", value="45", change="15 new today"),
]

SUGGESTIONS = [
    Suggestion(
        title="Explore visa-friendly roles",
        description="Live search across LinkedIn, Welcome to the Jungle and recruiter posts.",
        action="Explore Jobs",
        target=Page.JOB_SEARCH,
    ),
    Suggestion(
        title="Polish CV for French Luxury sector",
        description="French luxury recruiters value precise formatting and bilingual nuances. Let's optimize yours.",
        action="Optimize CV",
        target=Page.CV_TAILOR,
    ),
    Suggestion(
        title="HEC Alumni Tech Mixer",
        description="Exclusive networking for international graduates. Station F, Paris. Friday at 18:00.",
        action="RSVP Event",
    ),
    Suggestion(
        title="Visa Rule Update (Oct 2024)",
        description="Clarification on APS extension timelines for non-EU Master graduates.",
        action="Check Guide",
    ),
]


class DashboardController:
    def __init__(self, profile: UserProfile, has_saved_analysis: bool, interviews_completed: int):
        self.profile = profile
        self.has_saved_analysis = has_saved_analysis
        self.interviews_completed = interviews_completed

    @property
    def first_name(self) -> str:
        parts = self.profile.name.split()
        return parts[0] if parts else ""

    def view(self) -> DashboardView:
        return DashboardView(
            greeting=f"Welcome back, {self.first_name}!",
            subtitle=f"Here's the latest update for your {self.profile.field} search.",
            visa_type=self.profile.visa_type,
            stats=STATS,
            suggestions=SUGGESTIONS,
            interview_prep_score=72,
            interview_prep_target=Page.INTERVIEW_COACH,
            checklist=[
                ChecklistItem(label="CV Optimized", done=self.has_saved_analysis),
                ChecklistItem(label="Preferences Set", done=bool(self.profile.preferences.strip())),
                ChecklistItem(label="First Mock Interview", done=self.interviews_completed > 0),
                ChecklistItem(label="Sync Tracker", done=False),
            ],
        )
