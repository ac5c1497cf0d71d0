"""
Model Gateway

The only boundary between CareerBridge and the external model provider. Every
operation is one stateless request/response round trip: callers always pass the
full context (profile, CV, transcript), so re-issuing a call with the same inputs is
safe. Nothing here retries.

Example Usage:
    gateway = ModelGateway(build_provider(settings), fast_model="...", pro_model="...")
    result = await gateway.match_jobs(profile)
    analysis = await gateway.analyze_cv(cv_text)
"""

import json
from typing import Any, Dict, List, Optional, Sequence

import structlog
from pydantic import ValidationError

from careerbridge.constants import (
    COVER_LETTER_FALLBACK,
    INTERVIEW_QUESTION_FALLBACK,
    NO_POSTINGS_TEXT,
    UNTITLED_SOURCE_TITLE,
)
from careerbridge.errors import CVAnalysisFailed, SchemaParseError
from careerbridge.models import (
    CVAnalysis,
    GroundingChunk,
    GroundingSource,
    InterviewFeedback,
    SearchResult,
    TranscriptTurn,
    UserProfile,
)
from careerbridge.services.providers import ModelProvider

logger = structlog.get_logger(__name__)

CV_ANALYSIS_SCHEMA: Dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "formattingScore": {"type": "NUMBER"},
        "contentSuggestions": {"type": "ARRAY", "items": {"type": "STRING"}},
        "culturalTips": {"type": "ARRAY", "items": {"type": "STRING"}},
        "reformattedCV": {"type": "STRING"},
    },
    "required": ["formattingScore", "contentSuggestions", "culturalTips", "reformattedCV"],
}

INTERVIEW_FEEDBACK_SCHEMA: Dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "strengths": {"type": "ARRAY", "items": {"type": "STRING"}},
        "weaknesses": {"type": "ARRAY", "items": {"type": "STRING"}},
        "culturalNuance": {"type": "STRING"},
    },
    "required": ["strengths", "weaknesses", "culturalNuance"],
}


def strip_code_fences(response_text: str) -> str:
    """Remove markdown code block markers around a JSON payload."""
    text = response_text.strip()
    if text.startswith("```json"):
        text = text[7:]
    elif text.startswith("```"):
        text = text[3:]
    if text.endswith("```"):
        text = text[:-3]
    return text.strip()


def transcript_json(history: Sequence[TranscriptTurn]) -> str:
    return json.dumps(
        [{"speaker": turn.speaker.value, "text": turn.text} for turn in history],
        ensure_ascii=False,
    )


def extract_sources(chunks: Sequence[GroundingChunk]) -> List[GroundingSource]:
    """Turn grounding chunks into sources, skipping chunks without a usable URL."""
    sources: List[GroundingSource] = []
    for chunk in chunks:
        if not chunk.uri:
            continue
        try:
            sources.append(
                GroundingSource(title=chunk.title or UNTITLED_SOURCE_TITLE, uri=chunk.uri)
            )
        except ValidationError:
            logger.warning("Skipping grounding chunk with invalid URL", uri=chunk.uri)
    return sources


def _has_text(text: Optional[str]) -> bool:
    return bool(text and text.strip())


class ModelGateway:
    """Typed operations over a ``ModelProvider``."""

    def __init__(self, provider: ModelProvider, fast_model: str, pro_model: str):
        self.provider = provider
        self.fast_model = fast_model
        self.pro_model = pro_model

    def _parse(self, text: Optional[str], model_cls):
        if not _has_text(text):
            raise SchemaParseError("Empty structured response")
        try:
            return model_cls.model_validate_json(strip_code_fences(text))
        except ValidationError as e:
            raise SchemaParseError(f"Invalid structured response: {e}") from e

    async def match_jobs(self, profile: UserProfile) -> SearchResult:
        """Web-grounded search for visa-friendly postings matching ``profile``."""
        prompt = self._create_match_jobs_prompt(profile)
        logger.info("Gateway call", operation="match_jobs", model=self.fast_model)
        response = await self.provider.generate(prompt, model=self.fast_model, web_search=True)

        text = response.text if _has_text(response.text) else NO_POSTINGS_TEXT
        sources = extract_sources(response.grounding_chunks)
        logger.info("Job search completed", sources=len(sources))
        return SearchResult(text=text, sources=sources)

    async def analyze_cv(self, cv_text: str, job_description: Optional[str] = None) -> CVAnalysis:
        """Score and rewrite a CV for the French market.

        Raises:
            CVAnalysisFailed: the provider payload does not match the analysis schema
            ProviderError: the provider call itself failed
        """
        prompt = self._create_cv_analysis_prompt(cv_text, job_description)
        logger.info("Gateway call", operation="analyze_cv", model=self.pro_model)
        response = await self.provider.generate(
            prompt, model=self.pro_model, response_schema=CV_ANALYSIS_SCHEMA
        )
        try:
            return self._parse(response.text, CVAnalysis)
        except SchemaParseError as e:
            logger.error("CV analysis payload rejected", error=str(e))
            raise CVAnalysisFailed() from e

    async def generate_cover_letter(
        self, cv_text: str, analysis: CVAnalysis, job_description: str
    ) -> str:
        prompt = self._create_cover_letter_prompt(cv_text, analysis, job_description)
        logger.info("Gateway call", operation="generate_cover_letter", model=self.pro_model)
        response = await self.provider.generate(prompt, model=self.pro_model)
        return response.text if _has_text(response.text) else COVER_LETTER_FALLBACK

    async def generate_interview_question(
        self, profile: UserProfile, history: Sequence[TranscriptTurn]
    ) -> str:
        prompt = self._create_interview_question_prompt(profile, history)
        logger.info(
            "Gateway call",
            operation="generate_interview_question",
            model=self.fast_model,
            turns=len(history),
        )
        response = await self.provider.generate(prompt, model=self.fast_model)
        return response.text.strip() if _has_text(response.text) else INTERVIEW_QUESTION_FALLBACK

    async def get_interview_feedback(
        self, history: Sequence[TranscriptTurn]
    ) -> Optional[InterviewFeedback]:
        """Review a finished transcript. Returns None when the payload is unusable."""
        prompt = self._create_feedback_prompt(history)
        logger.info("Gateway call", operation="get_interview_feedback", model=self.fast_model)
        response = await self.provider.generate(
            prompt, model=self.fast_model, response_schema=INTERVIEW_FEEDBACK_SCHEMA
        )
        try:
            return self._parse(response.text, InterviewFeedback)
        except SchemaParseError as e:
            logger.warning("Interview feedback unavailable", error=str(e))
            return None

    def _create_match_jobs_prompt(self, profile: UserProfile) -> str:
        return f"""
Perform an exhaustive, real-time search for current job and internship postings in France and the EU for this international student.
Cover every relevant platform:
- LinkedIn (recruiter posts, hiring updates and roles that are not formally advertised)
- Welcome to the Jungle France
- Apec, Indeed France and Glassdoor
- Niche industry boards and startup portals (Station F and similar)

STUDENT PROFILE:
- Field: {profile.field}
- Skills: {", ".join(profile.skills)}
- Visa Type: {profile.visa_type}
- French Language Level: {profile.language_level.value}
- Preferences: {profile.preferences}

Prioritise postings that are visa friendly or open to {profile.visa_type} holders.
For each result identify:
1. Job title and company (include the platform or source)
2. Location (city or remote status)
3. Key requirements matched against the student's skills
4. Direct application advice (cultural nuances or visa strategy)

Format the response as a clear, structured Markdown list with bold headers.
"""

    def _create_cv_analysis_prompt(self, cv_text: str, job_description: Optional[str]) -> str:
        context = f"Context: applying for {job_description}\n" if job_description else ""
        return f"""
Analyze this CV for a student seeking work in France.
{context}
CV CONTENT:
{cv_text}

1. Score the formatting against French "CV professionnel" standards (integer 0-100).
2. Provide 3-5 specific content improvements.
3. Give 3 cultural phrasing tips for the French/EU context.
4. Provide a reformatted Markdown version of the CV.
"""

    def _create_cover_letter_prompt(
        self, cv_text: str, analysis: CVAnalysis, job_description: str
    ) -> str:
        return f"""
Acting as a French professional career coach, write a tailored "Lettre de Motivation" (cover letter).

CV DATA:
{cv_text}

CV ANALYSIS:
{analysis.model_dump_json(by_alias=True)}

TARGET JOB:
{job_description}

REQUIREMENTS:
- Follow the French tripartite structure: Vous (the company), Moi (the candidate), Nous (the partnership).
- Maintain high professional etiquette.
- Mention readiness to work under {analysis.formatting_score}% match conditions.
- Write in English but with a French cultural structure.
- Return ONLY the letter text.
"""

    def _create_interview_question_prompt(
        self, profile: UserProfile, history: Sequence[TranscriptTurn]
    ) -> str:
        return f"""
AI interview coach session for the {profile.field} sector in France.
User Profile: {profile.model_dump_json(by_alias=True)}
History: {transcript_json(history)}
Ask the next behavioral or technical question. Make sure one question of the session addresses their {profile.visa_type} status in a professional context.
Return ONLY the question.
"""

    def _create_feedback_prompt(self, history: Sequence[TranscriptTurn]) -> str:
        return f"""
Review this interview transcript for a role at a French company: {transcript_json(history)}
Analyze it for professional tone, cultural fit and clarity.
List the candidate's strengths and weaknesses and describe one cultural nuance they should work on.
"""
