"""
Unit tests for local storage and the profile / analysis stores.
"""

import json
import threading
from datetime import datetime, timezone

import pytest

from careerbridge.constants import PROFILE_STORAGE_KEY, SAVED_ANALYSIS_STORAGE_KEY
from careerbridge.models import CVAnalysis, LanguageLevel, UserProfile
from careerbridge.services.profile_store import AnalysisStore, ProfileStore
from careerbridge.services.storage import LocalStorage


class TestLocalStorage:
    def test_missing_file_reads_as_empty(self, tmp_path):
        storage = LocalStorage(tmp_path / "nope" / "storage.json")

        assert storage.get_item("anything") is None
        assert storage.keys() == []

    def test_set_and_get_item(self, storage):
        storage.set_item("a", "1")
        storage.set_item("b", "2")

        assert storage.get_item("a") == "1"
        assert sorted(storage.keys()) == ["a", "b"]

    def test_set_item_overwrites(self, storage):
        storage.set_item("a", "1")
        storage.set_item("a", "2")

        assert storage.get_item("a") == "2"

    def test_remove_item(self, storage):
        storage.set_item("a", "1")
        storage.remove_item("a")
        storage.remove_item("missing")

        assert storage.get_item("a") is None

    def test_corrupt_file_reads_as_empty(self, tmp_path):
        path = tmp_path / "storage.json"
        path.write_text("{not json")

        assert LocalStorage(path).get_item("a") is None

    def test_non_object_file_reads_as_empty(self, tmp_path):
        path = tmp_path / "storage.json"
        path.write_text("[1, 2, 3]")

        assert LocalStorage(path).keys() == []

    def test_undecodable_file_reads_as_empty(self, tmp_path):
        path = tmp_path / "storage.json"
        path.write_bytes(b"\xff\xfe\x00")

        assert LocalStorage(path).get_item("a") is None

    def test_file_is_plain_json_of_strings(self, storage):
        storage.set_item("k", "v")

        assert json.loads(storage.path.read_text()) == {"k": "v"}


class TestProfileStore:
    def test_load_without_data_returns_default(self, profile_store):
        profile = profile_store.load()

        assert profile == UserProfile()
        assert profile.name == ""
        assert profile.skills == []
        assert profile.language_level == LanguageLevel.A1

    @pytest.mark.asyncio
    async def test_round_trip(self, profile_store, complete_profile):
        await profile_store.save(complete_profile)

        assert profile_store.load() == complete_profile

    @pytest.mark.asyncio
    async def test_round_trip_with_unicode(self, profile_store):
        profile = UserProfile(name="Zoë Ngô", visa_type="Work Visa (Salarié)", skills=[])

        await profile_store.save(profile)

        assert profile_store.load() == profile

    @pytest.mark.asyncio
    async def test_save_is_idempotent(self, profile_store, complete_profile):
        await profile_store.save(complete_profile)
        await profile_store.save(complete_profile)

        assert profile_store.load() == complete_profile

    @pytest.mark.asyncio
    async def test_stored_json_uses_camel_case_keys(self, storage, profile_store, complete_profile):
        await profile_store.save(complete_profile)

        stored = json.loads(storage.get_item(PROFILE_STORAGE_KEY))
        assert stored["visaType"] == "VLS-TS Student"
        assert stored["languageLevel"] == "B2"
        assert stored["skills"] == ["React", "TypeScript", "Node.js"]

    def test_corrupt_profile_falls_back_to_default(self, storage, profile_store):
        storage.set_item(PROFILE_STORAGE_KEY, "{{{")

        assert profile_store.load() == UserProfile()

    def test_invalid_profile_values_fall_back_to_default(self, storage, profile_store):
        storage.set_item(PROFILE_STORAGE_KEY, json.dumps({"name": "X", "languageLevel": "Z9"}))

        assert profile_store.load() == UserProfile()

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "content",
        [b"\xff\xfe\x00", b'{"careerbridge_user_profile": "\xff\xfe garbage"}'],
    )
    async def test_undecodable_file_reads_as_default_and_is_replaced(
        self, tmp_path, complete_profile, content
    ):
        path = tmp_path / "storage.json"
        path.write_bytes(content)
        store = ProfileStore(LocalStorage(path))

        assert store.load() == UserProfile()

        await store.save(complete_profile)

        assert store.load() == complete_profile

    @pytest.mark.asyncio
    async def test_save_failure_is_not_raised(self, tmp_path, complete_profile):
        blocker = tmp_path / "blocker"
        blocker.write_text("a file, not a directory")
        store = ProfileStore(LocalStorage(blocker / "storage.json"))

        await store.save(complete_profile)

        assert store.load() == UserProfile()

    @pytest.mark.asyncio
    async def test_save_writes_off_the_event_loop_thread(self, storage, complete_profile):
        writer_threads = []
        original = storage.set_item

        def recording_set_item(key, value):
            writer_threads.append(threading.get_ident())
            original(key, value)

        storage.set_item = recording_set_item

        await ProfileStore(storage).save(complete_profile)

        assert writer_threads and writer_threads[0] != threading.get_ident()


class TestAnalysisStore:
    def _analysis(self):
        return CVAnalysis(
            formatting_score=82,
            content_suggestions=["Add quantified achievements"],
            cultural_tips=["Use formal vous tone"],
            reformatted_cv="# Jane Doe\n...",
        )

    def test_load_without_snapshot_returns_none(self, analysis_store):
        assert analysis_store.load() is None
        assert not analysis_store.exists()

    @pytest.mark.asyncio
    async def test_save_stamps_snapshot(self, storage):
        saved_at = datetime(2026, 3, 1, 9, 30, tzinfo=timezone.utc)
        store = AnalysisStore(storage, now=lambda: saved_at)

        snapshot = await store.save(self._analysis())

        assert snapshot.saved_at == saved_at
        stored = json.loads(storage.get_item(SAVED_ANALYSIS_STORAGE_KEY))
        assert stored["formattingScore"] == 82
        assert stored["reformattedCV"] == "# Jane Doe\n..."
        assert datetime.fromisoformat(stored["savedAt"].replace("Z", "+00:00")) == saved_at

    @pytest.mark.asyncio
    async def test_round_trip(self, analysis_store):
        snapshot = await analysis_store.save(self._analysis())

        assert analysis_store.load() == snapshot
        assert analysis_store.exists()

    def test_corrupt_snapshot_returns_none(self, storage, analysis_store):
        storage.set_item(SAVED_ANALYSIS_STORAGE_KEY, "nope")

        assert analysis_store.load() is None

    @pytest.mark.asyncio
    async def test_save_over_undecodable_file(self, tmp_path):
        path = tmp_path / "storage.json"
        path.write_bytes(b"\xff\xfe\x00")
        store = AnalysisStore(LocalStorage(path))

        assert store.load() is None
        snapshot = await store.save(self._analysis())

        assert store.load() == snapshot

    @pytest.mark.asyncio
    async def test_save_writes_off_the_event_loop_thread(self, storage):
        writer_threads = []
        original = storage.set_item

        def recording_set_item(key, value):
            writer_threads.append(threading.get_ident())
            original(key, value)

        storage.set_item = recording_set_item

        await AnalysisStore(storage).save(self._analysis())

        assert writer_threads and writer_threads[0] != threading.get_ident()
