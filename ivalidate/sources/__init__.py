"""External discussion sources."""

from .discussion import DiscussionSource, RedditDiscussionSource

__all__ = ["DiscussionSource", "RedditDiscussionSource"]
