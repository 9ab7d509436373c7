"""Unit tests for the JSON record store."""

import asyncio
import json
from datetime import datetime, timedelta, timezone

import pytest

from conftest import no_sleep
from ivalidate.errors import StorageError, TransientStorageError
from ivalidate.models import IdeaInput, StepStatus, ValidationRecord, ValidationStatus
from ivalidate.pipeline import StepBoard
from ivalidate.storage import RecordStore, cache_key_filename, generate_id


def make_record(validation_id: str = "run-001") -> ValidationRecord:
    return ValidationRecord(
        id=validation_id,
        idea=IdeaInput(description="A booking app for mobile dog groomers"),
        processing_steps=StepBoard().steps,
    )


class FakeClock:
    def __init__(self):
        self.now = datetime(2026, 1, 1, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now


class TestValidationRecords:
    """Tests for saving and loading run records."""

    def test_save_and_load(self, store):
        record = make_record()
        asyncio.run(store.save_validation(record))

        loaded = asyncio.run(store.load_validation("run-001"))
        assert loaded is not None
        assert loaded.id == "run-001"
        assert loaded.status == ValidationStatus.PENDING
        assert len(loaded.processing_steps) == 10
        assert loaded.created_at.tzinfo is not None

    def test_persisted_as_snake_case_json(self, store):
        asyncio.run(store.save_validation(make_record()))
        raw = json.loads(store.validation_path("run-001").read_text(encoding="utf-8"))
        assert raw["status"] == "PENDING"
        assert "processing_steps" in raw
        assert raw["processing_steps"][0]["target_progress"] == 15

    def test_missing_returns_none(self, store):
        assert asyncio.run(store.load_validation("nope")) is None

    def test_no_temp_files_left(self, store):
        asyncio.run(store.save_validation(make_record()))
        leftovers = [p.name for p in store.validations_dir.iterdir() if p.suffix == ".tmp"]
        assert leftovers == []

    @pytest.mark.parametrize("bad_id", ["../etc/passwd", "", "a/b", "has space"])
    def test_invalid_ids_rejected(self, store, bad_id):
        with pytest.raises(ValueError):
            asyncio.run(store.load_validation(bad_id))

    def test_update_merges(self, store):
        asyncio.run(store.save_validation(make_record()))
        updated = asyncio.run(
            store.update_validation("run-001", {"status": ValidationStatus.PROCESSING, "progress": 35})
        )
        assert updated.status == ValidationStatus.PROCESSING
        assert updated.progress == 35
        assert updated.idea.description == "A booking app for mobile dog groomers"

        loaded = asyncio.run(store.load_validation("run-001"))
        assert loaded.progress == 35
        assert loaded.processing_steps[0].status == StepStatus.PENDING

    def test_update_missing_raises(self, store):
        with pytest.raises(StorageError):
            asyncio.run(store.update_validation("ghost", {"progress": 10}))

    def test_update_invalid_raises(self, store):
        asyncio.run(store.save_validation(make_record()))
        with pytest.raises(StorageError):
            asyncio.run(store.update_validation("run-001", {"progress": 150}))

    def test_list_and_delete(self, store):
        asyncio.run(store.save_validation(make_record("run-a")))
        asyncio.run(store.save_validation(make_record("run-b")))

        ids = {r.id for r in asyncio.run(store.list_validations())}
        assert ids == {"run-a", "run-b"}

        assert asyncio.run(store.delete_validation("run-a")) is True
        assert asyncio.run(store.delete_validation("run-a")) is False
        assert [r.id for r in asyncio.run(store.list_validations())] == ["run-b"]


class TestTornReads:
    """Tests for reads racing a writer."""

    def test_empty_document_is_transient(self, tmp_path):
        sleeps = []

        async def record_sleep(seconds):
            sleeps.append(seconds)

        store = RecordStore(tmp_path, read_attempts=3, read_delay_seconds=0.05, sleep=record_sleep)
        path = store.validation_path("run-001")
        path.parent.mkdir(parents=True)
        path.write_text("", encoding="utf-8")

        with pytest.raises(TransientStorageError):
            asyncio.run(store.load_validation("run-001"))
        assert sleeps == [0.05, 0.05]

    def test_truncated_document_is_transient(self, store):
        path = store.validation_path("run-001")
        path.parent.mkdir(parents=True)
        path.write_text('{"id": "run-001", "idea": {', encoding="utf-8")

        with pytest.raises(TransientStorageError):
            asyncio.run(store.load_validation("run-001"))

    def test_recovers_when_writer_finishes(self, tmp_path):
        store_holder = {}

        async def finish_write(seconds):
            await store_holder["store"].save_validation(make_record())

        store = RecordStore(tmp_path, read_attempts=3, sleep=finish_write)
        store_holder["store"] = store
        path = store.validation_path("run-001")
        path.parent.mkdir(parents=True)
        path.write_text("", encoding="utf-8")

        loaded = asyncio.run(store.load_validation("run-001"))
        assert loaded.id == "run-001"

    def test_schema_mismatch_is_storage_error(self, store):
        path = store.validation_path("run-001")
        path.parent.mkdir(parents=True)
        path.write_text('{"id": "run-001"}', encoding="utf-8")

        with pytest.raises(StorageError) as exc_info:
            asyncio.run(store.load_validation("run-001"))
        assert not isinstance(exc_info.value, TransientStorageError)


class TestCache:
    """Tests for the TTL cache."""

    def test_roundtrip_and_expiry(self, tmp_path):
        clock = FakeClock()
        store = RecordStore(tmp_path, clock=clock, sleep=no_sleep)

        asyncio.run(store.save_cache("Discussion Key!", {"posts": [1, 2]}, ttl_seconds=60))
        assert asyncio.run(store.load_cache("Discussion Key!")) == {"posts": [1, 2]}

        clock.now += timedelta(seconds=61)
        assert asyncio.run(store.load_cache("Discussion Key!")) is None
        assert not store.cache_path("Discussion Key!").exists()

    def test_missing_key(self, store):
        assert asyncio.run(store.load_cache("absent")) is None

    def test_cleanup_removes_expired_and_corrupt(self, tmp_path):
        clock = FakeClock()
        store = RecordStore(tmp_path, read_delay_seconds=0, clock=clock, sleep=no_sleep)

        asyncio.run(store.save_cache("short", "a", ttl_seconds=10))
        asyncio.run(store.save_cache("long", "b", ttl_seconds=1000))
        store.cache_path("corrupt").write_text("{not json", encoding="utf-8")

        clock.now += timedelta(seconds=20)
        assert asyncio.run(store.cleanup_cache()) == 2
        assert asyncio.run(store.load_cache("long")) == "b"

    def test_key_filename(self):
        assert cache_key_filename("discussion_Route-aware booking!") == "discussion_route-aware_booking"
        with pytest.raises(ValueError):
            cache_key_filename("!!!")


class TestDebugLog:
    """Tests for per-run debug trace entries."""

    def test_entries_appended_in_order(self, store):
        asyncio.run(store.append_debug_entry("run-001", "keyword_generation", {"keywords": ["a"]}, success=True))
        asyncio.run(store.append_debug_entry("run-001", "discussion_search", {}, success=False, error="boom"))

        entries = asyncio.run(store.load_debug_entries("run-001"))
        assert [e["step"] for e in entries] == ["keyword_generation", "discussion_search"]
        assert entries[0]["data"] == {"keywords": ["a"]}
        assert entries[1]["success"] is False
        assert entries[1]["error"] == "boom"
        assert store.debug_path("run-001").name == "run-001_debug.json"

    def test_missing_log_is_empty(self, store):
        assert asyncio.run(store.load_debug_entries("run-404")) == []

    def test_invalid_id_not_raised(self, store):
        asyncio.run(store.append_debug_entry("bad.id", "keyword_generation", {}, success=True))
        assert not store.debug_dir.exists()


class TestIds:
    """Tests for id generation."""

    def test_generate_id_unique(self):
        ids = {generate_id() for _ in range(50)}
        assert len(ids) == 50
        assert all(len(i) == 12 for i in ids)
