import asyncio
from datetime import datetime, timezone
from typing import Callable, Optional

import structlog
from pydantic import ValidationError

from careerbridge.constants import PROFILE_STORAGE_KEY, SAVED_ANALYSIS_STORAGE_KEY
from careerbridge.models import CVAnalysis, SavedAnalysis, UserProfile
from careerbridge.services.storage import LocalStorage

logger = structlog.get_logger(__name__)


class ProfileStore:
    """Persists the single UserProfile. No validation happens here."""

    def __init__(self, storage: LocalStorage):
        self.storage = storage

    def load(self) -> UserProfile:
        raw = self.storage.get_item(PROFILE_STORAGE_KEY)
        if raw is None:
            return UserProfile()
        try:
            return UserProfile.model_validate_json(raw)
        except ValidationError as e:
            logger.warning("Stored profile unreadable, using defaults", error=str(e))
            return UserProfile()

    async def save(self, profile: UserProfile) -> None:
        """Write the profile from a worker thread; failures are logged, never raised."""
        payload = profile.model_dump_json(by_alias=True)
        try:
            await asyncio.to_thread(self.storage.set_item, PROFILE_STORAGE_KEY, payload)
        except OSError as e:
            logger.error("Failed to persist profile", error=str(e))


class AnalysisStore:
    """Persists the latest saved CV analysis snapshot, stamped with its save time."""

    def __init__(
        self,
        storage: LocalStorage,
        now: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self.storage = storage
        self.now = now

    async def save(self, analysis: CVAnalysis) -> SavedAnalysis:
        snapshot = SavedAnalysis(**analysis.model_dump(), saved_at=self.now())
        try:
            await asyncio.to_thread(
                self.storage.set_item,
                SAVED_ANALYSIS_STORAGE_KEY,
                snapshot.model_dump_json(by_alias=True),
            )
        except OSError as e:
            logger.error("Failed to persist saved analysis", error=str(e))
        return snapshot

    def load(self) -> Optional[SavedAnalysis]:
        raw = self.storage.get_item(SAVED_ANALYSIS_STORAGE_KEY)
        if raw is None:
            return None
        try:
            return SavedAnalysis.model_validate_json(raw)
        except ValidationError as e:
            logger.warning("Stored analysis unreadable", error=str(e))
            return None

    def exists(self) -> bool:
        return self.load() is not None
