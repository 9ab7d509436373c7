"""Unit tests for the research collaborators."""

import asyncio
import json

import pytest

from conftest import (
    COMPETITORS,
    CONTENT_ANALYSIS,
    MARKET_SIZE,
    MOAT,
    REFINE,
    SCALABILITY,
    SCALABILITY_RESPONSE,
    STARTUP_ANALYSIS,
    TARGETING,
    UNIQUENESS,
    FakeProvider,
    FakeSource,
    make_insight,
    make_quote,
)
from ivalidate.errors import ParseError, PreconditionError, ServiceUnavailableError
from ivalidate.models import Recommendation, RiskLevel, RiskType, Sentiment
from ivalidate.research import (
    analyze_discussions,
    analyze_startup,
    build_discussion_insight,
    empty_analysis,
    generate_targeting,
    refine_idea,
    research_competitors,
    research_market_size,
    research_moat,
    research_scalability,
    research_uniqueness,
    search_discussions,
)
from ivalidate.research.base import as_float
from ivalidate.research.content_analyzer import format_posts
from ivalidate.research.discussion_search import discussion_cache_key
from ivalidate.research.summarizer import format_evidence
from ivalidate.storage.record_store import cache_key_filename


class TestTargeting:
    """Tests for keyword and community generation."""

    def test_plan_from_response(self, canned_routes, refined_idea, settings):
        provider = FakeProvider(canned_routes)
        plan = asyncio.run(generate_targeting(refined_idea, provider, settings))

        assert plan.community_names == ["doggrooming", "smallbusiness"]
        assert plan.search_keywords[0] == "grooming no-shows"
        assert len(plan.focus_queries) == 2
        assert len(plan.pain_point_queries) == 2
        assert refined_idea.one_liner in provider.prompts[0]

    def test_duplicate_communities_collapsed(self, refined_idea, settings):
        response = {
            "recommended_communities": ["r/DogGrooming", "doggrooming", {"name": "petbusiness"}],
            "search_keywords": ["a"],
            "focus_queries": ["b"],
        }
        provider = FakeProvider({TARGETING: json.dumps(response)})
        plan = asyncio.run(generate_targeting(refined_idea, provider, settings))
        assert plan.community_names == ["DogGrooming", "petbusiness"]
        assert plan.pain_point_queries == []

    def test_missing_queries_is_fatal(self, refined_idea, settings):
        response = {"recommended_communities": [{"name": "x"}], "search_keywords": ["a"]}
        provider = FakeProvider({TARGETING: json.dumps(response)})
        with pytest.raises(ParseError, match="focus_queries"):
            asyncio.run(generate_targeting(refined_idea, provider, settings))

    def test_empty_lists_are_fatal(self, refined_idea, settings):
        response = {"recommended_communities": [], "search_keywords": ["a"], "focus_queries": ["b"]}
        provider = FakeProvider({TARGETING: json.dumps(response)})
        with pytest.raises(ParseError):
            asyncio.run(generate_targeting(refined_idea, provider, settings))

    def test_garbage_is_fatal(self, refined_idea, settings):
        provider = FakeProvider({TARGETING: "I could not think of any communities."})
        with pytest.raises(ParseError):
            asyncio.run(generate_targeting(refined_idea, provider, settings))

    def test_overload_exhaustion(self, refined_idea, settings, overload):
        provider = FakeProvider({TARGETING: [overload, overload, overload]})
        with pytest.raises(ServiceUnavailableError):
            asyncio.run(generate_targeting(refined_idea, provider, settings))


class TestContentAnalysis:
    """Tests for AI analysis of raw posts."""

    def test_no_posts_skips_provider(self, refined_idea, settings):
        provider = FakeProvider({})
        analysis = asyncio.run(analyze_discussions([], refined_idea, provider, settings))
        assert analysis == empty_analysis()
        assert provider.calls == []

    def test_quotes_extracted(self, canned_routes, raw_posts, refined_idea, settings):
        provider = FakeProvider(canned_routes)
        analysis = asyncio.run(analyze_discussions(raw_posts, refined_idea, provider, settings))

        assert len(analysis.quotes) == 3
        first = analysis.quotes[0]
        assert first.sentiment == Sentiment.FRUSTRATED
        # Missing URL filled from the author's post
        assert first.url == raw_posts[0].permalink
        assert analysis.analysis_confidence == pytest.approx(0.8)
        assert analysis.pain_points == ["No-shows", "Expensive software"]

    def test_prompt_contains_posts(self, canned_routes, raw_posts, refined_idea, settings):
        provider = FakeProvider(canned_routes)
        asyncio.run(analyze_discussions(raw_posts, refined_idea, provider, settings))
        prompt = provider.prompts[0]
        assert "POST 1:" in prompt
        assert "Same here" in prompt

    def test_uncertain_sentiment_caps_confidence(self, raw_posts, refined_idea, settings):
        response = {
            "relevant_quotes": [
                {"text": "maybe annoyed", "sentiment": "frustrated", "sentiment_confidence": 0.3},
                {"text": "hard to say", "sentiment": "angry", "sentiment_confidence": 0.4},
            ],
            "analysis_confidence": 0.95,
        }
        provider = FakeProvider({CONTENT_ANALYSIS: json.dumps(response)})
        analysis = asyncio.run(analyze_discussions(raw_posts, refined_idea, provider, settings))

        assert analysis.analysis_confidence == pytest.approx(0.6)
        assert analysis.quotes[1].sentiment == Sentiment.NEUTRAL
        assert analysis.quotes[1].url == "#"

    def test_unparseable_output_tolerated(self, raw_posts, refined_idea, settings):
        provider = FakeProvider({CONTENT_ANALYSIS: "Sorry, the posts were unreadable."})
        analysis = asyncio.run(analyze_discussions(raw_posts, refined_idea, provider, settings))

        assert analysis.quotes == []
        assert analysis.analysis_confidence == pytest.approx(0.1)
        assert analysis.overall_sentiment == 5.0

    def test_non_finite_numbers_use_defaults(self, raw_posts, refined_idea, settings):
        response = (
            '{"relevant_quotes": [{"text": "I hate this", "upvotes": NaN, "sentiment": "frustrated",'
            ' "relevance_score": Infinity}, {"text": "Same", "upvotes": "1e999"}],'
            ' "overall_sentiment": -Infinity, "total_relevant_posts": NaN}'
        )
        provider = FakeProvider({CONTENT_ANALYSIS: response})
        analysis = asyncio.run(analyze_discussions(raw_posts, refined_idea, provider, settings))

        assert [q.upvotes for q in analysis.quotes] == [0, 0]
        assert analysis.quotes[0].relevance_score == pytest.approx(0.5)
        assert analysis.overall_sentiment == 5.0
        assert analysis.total_relevant_posts == 2

    def test_respects_post_limit(self, canned_routes, raw_posts, refined_idea, settings):
        settings.content_analysis_max_posts = 1
        provider = FakeProvider(canned_routes)
        asyncio.run(analyze_discussions(raw_posts, refined_idea, provider, settings))
        assert "POST 2:" not in provider.prompts[0]

    def test_format_posts_placeholder_url(self, raw_posts):
        raw_posts[1].permalink = ""
        assert "URL: #" in format_posts(raw_posts)


class TestDiscussionInsight:
    """Tests for folding analysis into insight."""

    def test_metrics(self, canned_routes, raw_posts, refined_idea, settings):
        provider = FakeProvider(canned_routes)
        analysis = asyncio.run(analyze_discussions(raw_posts, refined_idea, provider, settings))
        insight = build_discussion_insight(analysis, posts_collected=len(raw_posts))

        metrics = insight.metrics
        assert metrics.total_mentions == 3
        assert metrics.frustrated_users == 1
        assert metrics.neutral_users == 1
        assert metrics.satisfied_users == 1
        assert [q.upvotes for q in metrics.top_quotes] == [24, 12, 3]
        assert insight.engagement_level == pytest.approx(13.0)
        assert insight.sentiment == pytest.approx(16 / 3)
        assert insight.score == 41
        assert insight.posts_collected == 2
        assert insight.posts[0].title.endswith("...")

    def test_empty(self):
        insight = build_discussion_insight(empty_analysis())
        assert insight.metrics.total_mentions == 0
        assert insight.score == 20
        assert insight.sentiment == 5.0
        assert insight.engagement_level == 0.0

    def test_search_uses_plan(self, canned_routes, raw_posts, refined_idea, settings):
        provider = FakeProvider(canned_routes)
        source = FakeSource(raw_posts)
        plan = asyncio.run(generate_targeting(refined_idea, provider, settings))

        insight = asyncio.run(search_discussions(plan, refined_idea, source, provider, settings))

        communities, queries = source.calls[0]
        assert communities == ["doggrooming", "smallbusiness"]
        assert queries == plan.focus_queries + plan.pain_point_queries
        assert insight.metrics.total_mentions == 3
        assert insight.posts_collected == 2

    def test_zero_posts_is_not_an_error(self, canned_routes, refined_idea, settings):
        provider = FakeProvider(canned_routes)
        plan = asyncio.run(generate_targeting(refined_idea, provider, settings))
        insight = asyncio.run(search_discussions(plan, refined_idea, FakeSource([]), provider, settings))

        assert insight.metrics.total_mentions == 0
        assert provider.count(CONTENT_ANALYSIS) == 0

    def test_query_limit(self, canned_routes, raw_posts, refined_idea, settings):
        settings.discussion_max_queries = 3
        provider = FakeProvider(canned_routes)
        source = FakeSource(raw_posts)
        plan = asyncio.run(generate_targeting(refined_idea, provider, settings))
        asyncio.run(search_discussions(plan, refined_idea, source, provider, settings))
        assert len(source.calls[0][1]) == 3

    def test_cached_posts_reused(self, canned_routes, raw_posts, refined_idea, settings, store):
        settings.discussion_cache_ttl_seconds = 3600
        provider = FakeProvider(canned_routes)
        source = FakeSource(raw_posts)
        plan = asyncio.run(generate_targeting(refined_idea, provider, settings))

        first = asyncio.run(search_discussions(plan, refined_idea, source, provider, settings, cache=store))
        second = asyncio.run(search_discussions(plan, refined_idea, source, provider, settings, cache=store))

        assert len(source.calls) == 1
        assert first.metrics.total_mentions == second.metrics.total_mentions
        assert second.posts_collected == 2

    def test_cache_keys_distinct_for_non_ascii_ideas(self, canned_routes, raw_posts, refined_idea, settings, store):
        settings.discussion_cache_ttl_seconds = 3600
        provider = FakeProvider(canned_routes)
        source = FakeSource(raw_posts)
        plan = asyncio.run(generate_targeting(refined_idea, provider, settings))
        first_idea = refined_idea.model_copy(update={"one_liner": "トリマー向けの予約アプリ"})
        second_idea = refined_idea.model_copy(update={"one_liner": "宠物美容预约应用"})

        first_key = cache_key_filename(discussion_cache_key(first_idea))
        second_key = cache_key_filename(discussion_cache_key(second_idea))
        assert first_key != second_key

        asyncio.run(search_discussions(plan, first_idea, source, provider, settings, cache=store))
        asyncio.run(search_discussions(plan, second_idea, source, provider, settings, cache=store))
        assert len(source.calls) == 2

    def test_cache_disabled_by_default(self, canned_routes, raw_posts, refined_idea, settings, store):
        provider = FakeProvider(canned_routes)
        source = FakeSource(raw_posts)
        plan = asyncio.run(generate_targeting(refined_idea, provider, settings))

        asyncio.run(search_discussions(plan, refined_idea, source, provider, settings, cache=store))
        asyncio.run(search_discussions(plan, refined_idea, source, provider, settings, cache=store))
        assert len(source.calls) == 2


class TestDomainResearchers:
    """Tests for the per-domain AI researchers."""

    def test_competitors(self, canned_routes, refined_idea, settings):
        research = asyncio.run(research_competitors(refined_idea, FakeProvider(canned_routes), settings))
        assert [c.name for c in research.competitors] == ["MoeGo", "Gingr"]
        # Recomputed from the list, not trusted from the response
        assert research.total_competitors == 2
        assert research.complaint_count == 3
        assert research.market_gaps == ["Route-aware scheduling"]

    def test_competitors_missing_list(self, refined_idea, settings):
        provider = FakeProvider({COMPETITORS: '{"market_gaps": ["x"]}'})
        with pytest.raises(ParseError):
            asyncio.run(research_competitors(refined_idea, provider, settings))

    def test_market_size(self, canned_routes, refined_idea, settings):
        research = asyncio.run(research_market_size(refined_idea, FakeProvider(canned_routes), settings))
        assert research.total_addressable_market.value == 2_500_000_000
        assert research.serviceable_addressable_market.value == 300_000_000
        assert research.market_growth_rate.annual == 8.5
        assert research.market_segments[0].segment == "Mobile groomers"

    def test_market_size_negative_clamped(self, refined_idea, settings):
        response = {
            "total_addressable_market": {"value": -5},
            "serviceable_addressable_market": "1,000,000",
        }
        provider = FakeProvider({MARKET_SIZE: json.dumps(response)})
        research = asyncio.run(research_market_size(refined_idea, provider, settings))
        assert research.total_addressable_market.value == 0
        assert research.serviceable_addressable_market.value == 1_000_000

    def test_market_size_missing_sam(self, refined_idea, settings):
        provider = FakeProvider({MARKET_SIZE: '{"total_addressable_market": {"value": 10}}'})
        with pytest.raises(ParseError):
            asyncio.run(research_market_size(refined_idea, provider, settings))

    def test_scalability(self, canned_routes, refined_idea, settings):
        research = asyncio.run(research_scalability(refined_idea, FakeProvider(canned_routes), settings))
        assert research.scalability_score == 72
        assert research.business_model.type == "saas"
        assert research.scaling_factors[0].factor == "Self-serve onboarding"

    def test_scalability_score_clamped(self, refined_idea, settings):
        response = dict(SCALABILITY_RESPONSE, scalability_score="150")
        provider = FakeProvider({SCALABILITY: json.dumps(response)})
        research = asyncio.run(research_scalability(refined_idea, provider, settings))
        assert research.scalability_score == 100

    def test_moat(self, canned_routes, refined_idea, settings):
        research = asyncio.run(research_moat(refined_idea, FakeProvider(canned_routes), settings))
        assert research.moat_score == 45
        assert len(research.defensibility_factors) == 2
        assert research.moat_strategy.primary_moat == "Data"

    def test_moat_missing_strategy(self, refined_idea, settings):
        provider = FakeProvider({MOAT: '{"moat_score": 40, "defensibility_factors": []}'})
        with pytest.raises(ParseError):
            asyncio.run(research_moat(refined_idea, provider, settings))

    def test_uniqueness(self, canned_routes, refined_idea, settings):
        research = asyncio.run(research_uniqueness(refined_idea, FakeProvider(canned_routes), settings))
        assert research.uniqueness_score == 68
        assert research.unique_value_proposition.primary_value == "Route-aware booking"
        assert research.competitive_advantages[0].advantage == "Routing"

    def test_uniqueness_garbage(self, refined_idea, settings):
        provider = FakeProvider({UNIQUENESS: "This idea is unique."})
        with pytest.raises(ParseError):
            asyncio.run(research_uniqueness(refined_idea, provider, settings))


class TestStartupAnalysis:
    """Tests for the narrative synthesis."""

    def test_analysis(self, canned_routes, settings):
        insight = make_insight(quotes=[make_quote("So expensive", Sentiment.FRUSTRATED, upvotes=5)])
        provider = FakeProvider(canned_routes)
        analysis = asyncio.run(analyze_startup("Dog grooming app", insight, provider, settings))

        assert analysis.recommendation == Recommendation.BUILD
        assert analysis.confidence == 70
        assert analysis.risks[0].type == RiskType.COMPETITIVE
        assert analysis.risks[0].level == RiskLevel.MEDIUM
        assert len(analysis.opportunities) == 3
        assert analysis.market_size.tam == 2_500_000_000
        assert "So expensive" in provider.prompts[0]

    def test_unknown_values_normalized(self, settings):
        response = {
            "recommendation": "maybe",
            "confidence": 140,
            "risks": [{"type": "ALIENS", "level": "EXTREME", "description": "?"}],
        }
        provider = FakeProvider({STARTUP_ANALYSIS: json.dumps(response)})
        analysis = asyncio.run(analyze_startup("idea", make_insight(), provider, settings))

        assert analysis.recommendation == Recommendation.PASS
        assert analysis.confidence == 100
        assert analysis.risks[0].type == RiskType.MARKET
        assert analysis.risks[0].level == RiskLevel.MEDIUM

    def test_garbage_tolerated(self, settings):
        provider = FakeProvider({STARTUP_ANALYSIS: "I think you should build it!"})
        analysis = asyncio.run(analyze_startup("idea", make_insight(), provider, settings))
        assert analysis.recommendation == Recommendation.PASS
        assert analysis.confidence == 10

    def test_evidence_without_discussions(self):
        assert "No relevant discussions were found" in format_evidence(make_insight())


class TestRefineIdea:
    """Tests for idea refinement."""

    def test_refine(self, canned_routes, settings):
        provider = FakeProvider(canned_routes)
        refined = asyncio.run(refine_idea("booking app for dog groomers", provider, settings))
        assert refined.one_liner == "Route-aware booking for mobile dog groomers"
        assert "booking app for dog groomers" in provider.prompts[0]

    @pytest.mark.parametrize("description", ["", "   ", "x" * 501])
    def test_rejects_bad_input(self, description, settings):
        provider = FakeProvider({})
        with pytest.raises(PreconditionError):
            asyncio.run(refine_idea(description, provider, settings))
        assert provider.calls == []

    def test_missing_field(self, settings):
        provider = FakeProvider({REFINE: '{"one_liner": "x", "target_audience": "y"}'})
        with pytest.raises(ParseError, match="problem"):
            asyncio.run(refine_idea("booking app", provider, settings))

    def test_blank_field(self, settings):
        provider = FakeProvider({REFINE: '{"one_liner": "x", "target_audience": "y", "problem": "  "}'})
        with pytest.raises(ParseError):
            asyncio.run(refine_idea("booking app", provider, settings))


class TestNumberCoercion:
    """Tests for coercing provider numbers."""

    @pytest.mark.parametrize(
        "value,expected",
        [(7, 7.0), ("12.5%", 12.5), ("1,200", 1200.0), (True, -1.0), (None, -1.0), ("many", -1.0)],
    )
    def test_values(self, value, expected):
        assert as_float(value, -1.0) == expected

    @pytest.mark.parametrize("value", [float("nan"), float("inf"), "nan", "-inf", "1e999", 10**400])
    def test_non_finite_falls_back(self, value):
        assert as_float(value, 3.0) == 3.0
