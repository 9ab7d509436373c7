"""Discussion source: community search over Reddit's public JSON endpoints."""

import asyncio
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Optional, Protocol, runtime_checkable

import httpx
import structlog

from ivalidate.config.settings import Settings, get_settings
from ivalidate.models.evidence import ProbeResult, RawComment, RawPost

logger = structlog.get_logger(__name__)

Sleep = Callable[[float], Awaitable[Any]]


@runtime_checkable
class DiscussionSource(Protocol):
    """Search communities for posts matching queries. No relevance guarantee."""

    async def search(self, communities: list[str], queries: list[str]) -> list[RawPost]:
        ...


def _parse_post(data: dict, community: str, base_url: str) -> RawPost:
    created = data.get("created_utc")
    permalink = data.get("permalink") or ""
    return RawPost(
        title=data.get("title") or "",
        body=data.get("selftext") or "",
        author=data.get("author") or "anonymous",
        upvotes=int(data.get("ups") or 0),
        community=community,
        permalink=f"{base_url}{permalink}" if permalink else "",
        timestamp_utc=datetime.fromtimestamp(created, tz=timezone.utc) if created else None,
        comment_count=int(data.get("num_comments") or 0),
    )


class RedditDiscussionSource:
    """Sequential (community x query) probes with a courtesy delay between requests."""

    def __init__(
        self,
        settings: Settings | None = None,
        client: httpx.AsyncClient | None = None,
        sleep: Optional[Sleep] = None,
    ):
        self.settings = settings or get_settings()
        self._client = client
        self._sleep = sleep or asyncio.sleep

    @property
    def base_url(self) -> str:
        return self.settings.discussion_base_url.rstrip("/")

    async def search(self, communities: list[str], queries: list[str]) -> list[RawPost]:
        posts, _ = await self.search_with_probes(communities, queries)
        return posts

    async def search_with_probes(
        self,
        communities: list[str],
        queries: list[str],
    ) -> tuple[list[RawPost], list[ProbeResult]]:
        """Run every probe in order and report per-probe outcomes.

        A failing probe is recorded and skipped. Collection stops once
        ``discussion_max_posts`` posts are gathered.
        """
        if self._client is not None:
            return await self._run_probes(self._client, communities, queries)

        async with httpx.AsyncClient(
            headers={"User-Agent": self.settings.discussion_user_agent},
            follow_redirects=True,
        ) as client:
            return await self._run_probes(client, communities, queries)

    async def _run_probes(
        self,
        client: httpx.AsyncClient,
        communities: list[str],
        queries: list[str],
    ) -> tuple[list[RawPost], list[ProbeResult]]:
        max_posts = self.settings.discussion_max_posts
        posts: list[RawPost] = []
        probes: list[ProbeResult] = []
        first = True

        for community in communities:
            for query in queries:
                if len(posts) >= max_posts:
                    break
                if not first:
                    await self._sleep(self.settings.discussion_request_delay_seconds)
                first = False

                try:
                    found = await self._search_community(client, community, query)
                except (httpx.HTTPError, ValueError, KeyError, TypeError) as e:
                    logger.warning(
                        "discussion_probe_failed",
                        community=community,
                        query=query,
                        error=str(e),
                    )
                    probes.append(ProbeResult(community=community, query=query, error=str(e)))
                    continue

                probes.append(ProbeResult(community=community, query=query, posts_found=len(found)))

                for post in found:
                    if (
                        post.comment_count > self.settings.discussion_comment_threshold
                        and len(posts) < self.settings.discussion_comment_fetch_limit
                    ):
                        post.comments = await self._fetch_comments(client, post)
                    posts.append(post)
                    if len(posts) >= max_posts:
                        break

            if len(posts) >= max_posts:
                break

        logger.info(
            "discussion_search_complete",
            communities=len(communities),
            queries=len(queries),
            probes=len(probes),
            failed_probes=sum(1 for p in probes if p.error),
            posts=len(posts),
        )
        return posts, probes

    async def _search_community(self, client: httpx.AsyncClient, community: str, query: str) -> list[RawPost]:
        response = await client.get(
            f"{self.base_url}/r/{community}/search.json",
            params={
                "q": query,
                "sort": "relevance",
                "limit": self.settings.discussion_results_per_query,
                "t": "year",
                "restrict_sr": "on",
            },
            headers={"User-Agent": self.settings.discussion_user_agent},
            timeout=self.settings.discussion_search_timeout_seconds,
        )
        response.raise_for_status()
        children = (response.json().get("data") or {}).get("children") or []
        return [
            _parse_post(child.get("data") or {}, community, self.base_url)
            for child in children
        ]

    async def _fetch_comments(self, client: httpx.AsyncClient, post: RawPost) -> list[RawComment]:
        """Top comments for a post; empty on any failure."""
        if not post.permalink:
            return []
        try:
            response = await client.get(
                f"{post.permalink.rstrip('/')}.json",
                params={"limit": 10},
                headers={"User-Agent": self.settings.discussion_user_agent},
                timeout=self.settings.discussion_comment_timeout_seconds,
            )
            response.raise_for_status()
            listing = response.json()
            children = listing[1]["data"]["children"] if len(listing) > 1 else []
        except (httpx.HTTPError, ValueError, KeyError, IndexError, TypeError) as e:
            logger.debug("discussion_comments_failed", url=post.permalink, error=str(e))
            return []

        comments = []
        for child in children:
            data = child.get("data") or {}
            if child.get("kind") not in (None, "t1") or not data.get("body"):
                continue
            comments.append(RawComment(
                body=data["body"],
                author=data.get("author") or "anonymous",
                upvotes=int(data.get("ups") or 0),
            ))
            if len(comments) >= 5:
                break
        return comments
