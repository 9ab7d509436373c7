"""
Record Store for Validation Runs

Durable JSON-on-disk persistence of validation records plus a TTL cache.

Design Decisions:
- One JSON document per run under {base_dir}/validations/{id}.json
- One JSON document per cache key under {base_dir}/cache/{key}.json
- One debug log per run under {base_dir}/debug/{id}_debug.json holding the
  keyword and search traces
- Writes go to a uniquely named temp file and are renamed into place, so a
  reader never sees a half-written document
- Reads retry a few times on empty or truncated content (a racing writer)
  and report that distinctly from "does not exist"
- Updates are read-merge-write with no cross-process locking
"""

import asyncio
import json
import re
import uuid
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Awaitable, Callable, Optional

import aiofiles
import aiofiles.os
import structlog
from pydantic import ValidationError

from ivalidate.errors import StorageError, TransientStorageError
from ivalidate.models.validation import ValidationRecord
from ivalidate.storage.serialization import to_jsonable

logger = structlog.get_logger(__name__)

_SAFE_ID_RE = re.compile(r"^[A-Za-z0-9_-]{1,128}$")
_MAX_CACHE_KEY_LENGTH = 100

Clock = Callable[[], datetime]
Sleep = Callable[[float], Awaitable[Any]]


def generate_id() -> str:
    """Generate a unique ID for a validation run."""
    return str(uuid.uuid4())[:12]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _check_id(validation_id: str) -> str:
    if not _SAFE_ID_RE.match(validation_id or ""):
        raise ValueError(f"Invalid validation id: {validation_id!r}")
    return validation_id


def cache_key_filename(key: str) -> str:
    """Reduce an arbitrary cache key to a safe file stem."""
    safe = re.sub(r"\s+", "_", key.strip().lower())
    safe = re.sub(r"[^a-z0-9_-]", "", safe)[:_MAX_CACHE_KEY_LENGTH]
    if not safe:
        raise ValueError(f"Invalid cache key: {key!r}")
    return safe


class RecordStore:
    """Atomic, retry-safe persistence of validation records and cache entries."""

    def __init__(
        self,
        base_dir: str | Path,
        read_attempts: int = 3,
        read_delay_seconds: float = 0.1,
        default_ttl_seconds: int = 3600,
        clock: Optional[Clock] = None,
        sleep: Optional[Sleep] = None,
    ):
        self.base_dir = Path(base_dir)
        self.validations_dir = self.base_dir / "validations"
        self.cache_dir = self.base_dir / "cache"
        self.debug_dir = self.base_dir / "debug"
        self.read_attempts = max(1, read_attempts)
        self.read_delay_seconds = read_delay_seconds
        self.default_ttl_seconds = default_ttl_seconds
        self._clock = clock or utc_now
        self._sleep = sleep or asyncio.sleep

    @classmethod
    def from_settings(cls, settings) -> "RecordStore":
        return cls(
            base_dir=settings.data_dir,
            read_attempts=settings.storage_read_attempts,
            read_delay_seconds=settings.storage_read_delay_seconds,
            default_ttl_seconds=settings.cache_ttl_seconds,
        )

    def validation_path(self, validation_id: str) -> Path:
        return self.validations_dir / f"{_check_id(validation_id)}.json"

    def cache_path(self, key: str) -> Path:
        return self.cache_dir / f"{cache_key_filename(key)}.json"

    # =========================================================================
    # Low-level document I/O
    # =========================================================================

    async def _write_document(self, path: Path, data: Any) -> None:
        """Write JSON to a temp file and atomically rename it into place."""
        payload = json.dumps(to_jsonable(data), indent=2, default=str)
        tmp_path = path.with_name(f".{path.stem}.{uuid.uuid4().hex[:8]}.tmp")

        try:
            await aiofiles.os.makedirs(path.parent, exist_ok=True)
            async with aiofiles.open(tmp_path, "w", encoding="utf-8") as f:
                await f.write(payload)
                await f.flush()
            await aiofiles.os.replace(tmp_path, path)
        except OSError as e:
            try:
                await aiofiles.os.remove(tmp_path)
            except FileNotFoundError:
                pass
            raise StorageError(f"Failed to write {path.name}: {e}") from e

    async def _read_document(self, path: Path) -> Optional[dict]:
        """Read a JSON document, retrying while it looks half-written.

        Returns:
            The parsed document, or None if the file does not exist.

        Raises:
            TransientStorageError: Content stayed empty or invalid for every attempt.
            StorageError: Any other I/O failure.
        """
        last_problem = "unknown"

        for attempt in range(1, self.read_attempts + 1):
            try:
                async with aiofiles.open(path, "r", encoding="utf-8") as f:
                    content = await f.read()
            except FileNotFoundError:
                return None
            except OSError as e:
                raise StorageError(f"Failed to read {path.name}: {e}") from e

            if not content.strip():
                last_problem = "empty document"
            else:
                try:
                    data = json.loads(content)
                except json.JSONDecodeError as e:
                    last_problem = f"invalid JSON: {e}"
                else:
                    if isinstance(data, dict):
                        return data
                    last_problem = "document is not a JSON object"

            logger.debug(
                "record_read_retry",
                file=path.name,
                attempt=attempt,
                problem=last_problem,
            )
            if attempt < self.read_attempts:
                await self._sleep(self.read_delay_seconds)

        logger.warning("record_read_exhausted", file=path.name, attempts=self.read_attempts)
        raise TransientStorageError(
            f"{path.name} unreadable after {self.read_attempts} attempts: {last_problem}"
        )

    async def _remove(self, path: Path) -> bool:
        try:
            await aiofiles.os.remove(path)
            return True
        except FileNotFoundError:
            return False

    # =========================================================================
    # Validation records
    # =========================================================================

    async def save_validation(self, record: ValidationRecord) -> None:
        """Persist the whole record atomically."""
        await self._write_document(self.validation_path(record.id), record)

    async def load_validation(self, validation_id: str) -> Optional[ValidationRecord]:
        """Load a record; None when it does not exist."""
        data = await self._read_document(self.validation_path(validation_id))
        if data is None:
            return None
        try:
            return ValidationRecord.model_validate(data)
        except ValidationError as e:
            raise StorageError(f"Validation {validation_id} has an invalid schema: {e}") from e

    async def update_validation(self, validation_id: str, updates: dict[str, Any]) -> ValidationRecord:
        """Shallow-merge updates into a stored record and write it back.

        Raises:
            StorageError: If the record does not exist or the merge is invalid.
        """
        path = self.validation_path(validation_id)
        current = await self._read_document(path)
        if current is None:
            raise StorageError(f"Validation not found: {validation_id}")

        merged = {**current, **to_jsonable(updates)}
        try:
            record = ValidationRecord.model_validate(merged)
        except ValidationError as e:
            raise StorageError(f"Invalid update for {validation_id}: {e}") from e

        await self._write_document(path, record)
        return record

    async def list_validations(self) -> list[ValidationRecord]:
        """All readable records, newest first."""
        if not self.validations_dir.exists():
            return []

        records = []
        for path in sorted(self.validations_dir.glob("*.json")):
            try:
                data = await self._read_document(path)
                if data is not None:
                    records.append(ValidationRecord.model_validate(data))
            except (StorageError, ValidationError) as e:
                logger.warning("validation_list_skip", file=path.name, error=str(e))

        records.sort(key=lambda r: r.created_at, reverse=True)
        return records

    async def delete_validation(self, validation_id: str) -> bool:
        return await self._remove(self.validation_path(validation_id))

    # =========================================================================
    # TTL cache
    # =========================================================================

    async def save_cache(self, key: str, data: Any, ttl_seconds: Optional[int] = None) -> None:
        """Store a cache entry. Failures are logged, never raised."""
        ttl = self.default_ttl_seconds if ttl_seconds is None else ttl_seconds
        now = self._clock()
        entry = {
            "data": data,
            "created_at": now,
            "expires_at": now + timedelta(seconds=ttl),
            "ttl": ttl,
        }
        try:
            await self._write_document(self.cache_path(key), entry)
        except (StorageError, ValueError) as e:
            logger.warning("cache_save_failed", key=key, error=str(e))

    async def load_cache(self, key: str) -> Any:
        """Cached value if present and unexpired; expired entries are deleted."""
        try:
            path = self.cache_path(key)
            entry = await self._read_document(path)
        except (StorageError, ValueError) as e:
            logger.warning("cache_load_failed", key=key, error=str(e))
            return None

        if entry is None:
            return None

        expires_at = self._parse_expiry(entry)
        if expires_at is None or self._clock() >= expires_at:
            await self._remove(path)
            logger.debug("cache_expired", key=key)
            return None

        return entry.get("data")

    async def cleanup_cache(self) -> int:
        """Delete expired or unreadable cache entries. Returns how many were removed."""
        if not self.cache_dir.exists():
            return 0

        removed = 0
        now = self._clock()
        for path in self.cache_dir.glob("*.json"):
            try:
                entry = await self._read_document(path)
            except StorageError:
                entry = None
            expires_at = self._parse_expiry(entry) if entry else None
            if expires_at is None or now >= expires_at:
                if await self._remove(path):
                    removed += 1

        logger.info("cache_cleanup_complete", removed=removed)
        return removed

    @staticmethod
    def _parse_expiry(entry: dict) -> Optional[datetime]:
        try:
            expires_at = datetime.fromisoformat(str(entry["expires_at"]))
        except (KeyError, ValueError):
            return None
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=timezone.utc)
        return expires_at

    # =========================================================================
    # Debug traces
    # =========================================================================

    def debug_path(self, validation_id: str) -> Path:
        return self.debug_dir / f"{_check_id(validation_id)}_debug.json"

    async def append_debug_entry(
        self,
        validation_id: str,
        step: str,
        data: Any,
        success: bool,
        error: Optional[str] = None,
    ) -> None:
        """Append a trace entry to a run's debug log. Failures are logged, never raised."""
        entry = {
            "validation_id": validation_id,
            "timestamp": self._clock(),
            "step": step,
            "data": data,
            "success": success,
            "error": error,
        }
        try:
            path = self.debug_path(validation_id)
            document = await self._read_document(path) or {"validation_id": validation_id, "entries": []}
            document.setdefault("entries", []).append(entry)
            await self._write_document(path, document)
        except (StorageError, ValueError) as e:
            logger.warning("debug_entry_save_failed", validation_id=validation_id, step=step, error=str(e))
            return

        logger.debug("debug_entry_saved", validation_id=validation_id, step=step)

    async def load_debug_entries(self, validation_id: str) -> list[dict]:
        """Trace entries of a run in the order they were written; empty when none."""
        document = await self._read_document(self.debug_path(validation_id))
        if document is None:
            return []
        entries = document.get("entries")
        return [e for e in entries if isinstance(e, dict)] if isinstance(entries, list) else []
