"""
FastAPI dependencies for pipeline collaborators.

Tests replace these through ``app.dependency_overrides``.
"""

from functools import lru_cache

from ivalidate.config.settings import get_settings
from ivalidate.llm import GenerativeTextProvider, OllamaTextProvider
from ivalidate.sources import DiscussionSource, RedditDiscussionSource
from ivalidate.storage import RecordStore


@lru_cache
def get_store() -> RecordStore:
    return RecordStore.from_settings(get_settings())


@lru_cache
def get_provider() -> GenerativeTextProvider:
    return OllamaTextProvider()


@lru_cache
def get_source() -> DiscussionSource:
    return RedditDiscussionSource(get_settings())
