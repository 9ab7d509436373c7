"""JSON-on-disk persistence for validation runs."""

from .record_store import RecordStore, cache_key_filename, generate_id, utc_now
from .serialization import to_jsonable

__all__ = ["RecordStore", "cache_key_filename", "generate_id", "utc_now", "to_jsonable"]
