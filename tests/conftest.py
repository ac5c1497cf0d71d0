"""
Shared test doubles and fixtures.

Nothing here touches the network: ``FakeProvider`` stands in for a model provider
under a real ``ModelGateway``, and ``StubGateway`` replaces the gateway entirely for
controller and API tests.
"""

import asyncio
from typing import Any, List, Optional

import pytest

from careerbridge.models import (
    CVAnalysis,
    InterviewFeedback,
    LanguageLevel,
    ModelResponse,
    SearchResult,
    UserProfile,
)
from careerbridge.services.model_gateway import ModelGateway
from careerbridge.services.profile_store import AnalysisStore, ProfileStore
from careerbridge.services.storage import LocalStorage


class FakeProvider:
    """Returns queued responses in order; queued exceptions are raised instead."""

    def __init__(self, responses: Optional[List[Any]] = None):
        self.responses = list(responses or [])
        self.calls: List[dict] = []

    async def generate(self, prompt, *, model, response_schema=None, web_search=False):
        self.calls.append(
            {
                "prompt": prompt,
                "model": model,
                "response_schema": response_schema,
                "web_search": web_search,
            }
        )
        item = self.responses.pop(0) if self.responses else ModelResponse(text=None)
        if isinstance(item, Exception):
            raise item
        return item


class StubGateway:
    """Gateway double with canned results, per-operation call logs and optional gates.

    Setting ``gates[op]`` to an ``asyncio.Event`` makes that operation wait for it,
    which lets tests interleave overlapping requests.
    """

    def __init__(self):
        self.search_result = SearchResult(text="Results", sources=[])
        self.analysis: Any = CVAnalysis(
            formatting_score=70,
            content_suggestions=["Add a photo-free header"],
            cultural_tips=["Keep it to one page"],
            reformatted_cv="# CV",
        )
        self.cover_letter = "Madame, Monsieur,"
        self.questions: List[str] = []
        self.feedback: Optional[InterviewFeedback] = InterviewFeedback(
            strengths=["Clear examples"],
            weaknesses=["Too informal"],
            cultural_nuance="Use vous with recruiters",
        )
        self.errors: dict = {}
        self.gates: dict = {}
        self.calls: dict = {
            "match_jobs": [],
            "analyze_cv": [],
            "generate_cover_letter": [],
            "generate_interview_question": [],
            "get_interview_feedback": [],
        }

    async def _enter(self, op: str, *args):
        self.calls[op].append(args)
        gate = self.gates.get(op)
        if gate is not None:
            await gate.wait()
        if op in self.errors:
            raise self.errors[op]

    async def match_jobs(self, profile):
        await self._enter("match_jobs", profile)
        return self.search_result

    async def analyze_cv(self, cv_text, job_description=None):
        await self._enter("analyze_cv", cv_text, job_description)
        return self.analysis

    async def generate_cover_letter(self, cv_text, analysis, job_description):
        await self._enter("generate_cover_letter", cv_text, analysis, job_description)
        return self.cover_letter

    async def generate_interview_question(self, profile, history):
        await self._enter("generate_interview_question", profile, history)
        if self.questions:
            return self.questions.pop(0)
        return f"Question {len(self.calls['generate_interview_question'])}"

    async def get_interview_feedback(self, history):
        await self._enter("get_interview_feedback", history)
        return self.feedback


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


async def settle():
    """Let pending tasks run up to their next suspension point."""
    for _ in range(5):
        await asyncio.sleep(0)


@pytest.fixture
def storage(tmp_path) -> LocalStorage:
    return LocalStorage(tmp_path / "local_storage.json")


@pytest.fixture
def profile_store(storage) -> ProfileStore:
    return ProfileStore(storage)


@pytest.fixture
def analysis_store(storage) -> AnalysisStore:
    return AnalysisStore(storage)


@pytest.fixture
def complete_profile() -> UserProfile:
    return UserProfile(
        name="Sarah Chen",
        field="Software Engineering",
        skills=["React", "TypeScript", "Node.js"],
        visa_type="VLS-TS Student",
        language_level=LanguageLevel.B2,
        preferences="Seeking 6-month internship in Paris starting March.",
    )


@pytest.fixture
def fake_provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def gateway(fake_provider) -> ModelGateway:
    return ModelGateway(fake_provider, fast_model="fast-model", pro_model="pro-model")


@pytest.fixture
def stub_gateway() -> StubGateway:
    return StubGateway()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def settle_tasks():
    return settle
