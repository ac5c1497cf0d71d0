from datetime import datetime
from enum import Enum
from typing import List, Optional
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model serialised with the camelCase keys used in storage and the API."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Page(str, Enum):
    HOME = "home"
    DASHBOARD = "dashboard"
    JOB_SEARCH = "jobs"
    CV_TAILOR = "cv"
    INTERVIEW_COACH = "interview"
    PROFILE = "profile"


class LanguageLevel(str, Enum):
    A1 = "A1"
    A2 = "A2"
    B1 = "B1"
    B2 = "B2"
    C1 = "C1"
    C2 = "C2"


class Speaker(str, Enum):
    AI = "AI"
    USER = "User"


class UserProfile(CamelModel):
    name: str = ""
    field: str = ""
    skills: List[str] = Field(default_factory=list)
    visa_type: str = ""
    language_level: LanguageLevel = LanguageLevel.A1
    preferences: str = ""

    @field_validator("skills", mode="before")
    @classmethod
    def split_skills(cls, value):
        if isinstance(value, str):
            return [s.strip() for s in value.split(",") if s.strip()]
        return value


class GroundingSource(BaseModel):
    title: str
    uri: str

    @field_validator("uri")
    @classmethod
    def require_absolute_url(cls, value: str) -> str:
        parsed = urlparse(value)
        if not parsed.scheme or not parsed.netloc:
            raise ValueError(f"Not an absolute URL: {value!r}")
        return value

    @property
    def hostname(self) -> str:
        return urlparse(self.uri).hostname or ""


class SearchResult(BaseModel):
    text: str
    sources: List[GroundingSource] = Field(default_factory=list)


class CVAnalysis(CamelModel):
    formatting_score: int
    content_suggestions: List[str]
    cultural_tips: List[str]
    reformatted_cv: str = Field(alias="reformattedCV")

    @field_validator("formatting_score", mode="before")
    @classmethod
    def round_score(cls, value):
        # The provider schema types the score as a plain number.
        if isinstance(value, float):
            return round(value)
        return value

    @field_validator("formatting_score")
    @classmethod
    def score_in_range(cls, value: int) -> int:
        if value < 0 or value > 100:
            raise ValueError("Formatting score must be between 0 and 100")
        return value


class SavedAnalysis(CVAnalysis):
    saved_at: datetime


class TranscriptTurn(BaseModel):
    speaker: Speaker
    text: str


class InterviewFeedback(CamelModel):
    strengths: List[str]
    weaknesses: List[str]
    cultural_nuance: str


class GroundingChunk(BaseModel):
    """A web citation attached to a provider response; either part may be missing."""

    title: Optional[str] = None
    uri: Optional[str] = None


class ModelResponse(BaseModel):
    text: Optional[str] = None
    grounding_chunks: List[GroundingChunk] = Field(default_factory=list)
