"""Unit tests for the evidence report."""

import pytest

from conftest import make_insight, make_quote
from ivalidate.models import ConfidenceLevel, Sentiment
from ivalidate.models.research import StartupAnalysis
from ivalidate.reports import build_evidence_report, format_evidence_report
from ivalidate.reports.evidence import (
    build_competition_evidence,
    build_social_evidence,
    complaint_themes,
    extract_complaints,
    extract_gaps,
    report_data_quality,
)
from ivalidate.scoring import calculate_validation_score


@pytest.fixture
def quotes():
    return [
        make_quote(
            "I'm so frustrated with my current booking app, it's expensive and broken",
            Sentiment.FRUSTRATED,
            upvotes=24,
            author="jane",
        ),
        make_quote(
            "Anyone know a tool? I wish there was an app that plans mobile routes. Thanks",
            Sentiment.NEUTRAL,
            upvotes=12,
        ),
        make_quote("We use paper and it works", Sentiment.SATISFIED, upvotes=3),
    ]


@pytest.fixture
def insight(quotes):
    return make_insight(quotes=quotes, neutral=1, satisfied=1, engagement=13.0)


class TestSocialEvidence:
    """Tests for the social section."""

    def test_breakdown_and_summary(self, insight):
        social = build_social_evidence(insight)

        assert social.posts_found == 3
        assert social.sentiment_breakdown.frustrated_percent == 33
        assert social.sentiment_breakdown.seeking_solutions == 1
        assert [q.upvotes for q in social.top_quotes] == [24, 12, 3]
        assert social.evidence_summary == [
            "Found 3 posts discussing this problem across multiple communities",
            "1 users actively seeking better solutions",
            "2 highly-upvoted posts (10+ upvotes) validate the problem",
        ]

    def test_quote_url_fallback(self):
        quote = make_quote("text", community="petbusiness")
        quote.url = "#"
        social = build_social_evidence(make_insight(quotes=[quote]))
        assert social.top_quotes[0].url == "https://reddit.com/r/petbusiness"

    def test_no_discussions(self):
        social = build_social_evidence(make_insight())
        assert social.posts_found == 0
        assert social.evidence_summary == [
            "Limited discussion found - may indicate niche market or low awareness"
        ]


class TestCompetitionEvidence:
    """Tests for the competition section."""

    def test_complaints(self, quotes):
        complaints = extract_complaints(quotes)
        assert [c.about for c in complaints] == ["existing solution", "my current booking"]
        assert all(c.author == "jane" for c in complaints)

    def test_complaints_capped(self):
        quotes = [make_quote(f"broken thing number {i}") for i in range(8)]
        assert len(extract_complaints(quotes)) == 5

    def test_gaps_with_opportunities(self, quotes):
        gaps = extract_gaps(quotes, ["Solo plan", "Route add-on", "Third idea"])
        assert gaps == ["an app that plans mobile routes", "Solo plan", "Route add-on"]

    def test_gaps_deduplicated(self):
        quotes = [make_quote("I wish there was a better calendar"), make_quote("wish there was a better calendar!")]
        assert extract_gaps(quotes, []) == ["a better calendar"]

    def test_short_gap_sentences_dropped(self):
        assert extract_gaps([make_quote("wish there was one.")], []) == []

    def test_themes(self, quotes):
        assert complaint_themes(quotes) == ["pricing", "reliability"]

    def test_section(self, insight):
        analysis = StartupAnalysis(opportunities=["Solo plan"])
        competition = build_competition_evidence(insight, analysis)

        assert competition.direct_competitors == 1
        assert len(competition.user_complaints) == 2
        assert competition.identified_gaps == ["an app that plans mobile routes", "Solo plan"]
        assert competition.evidence_summary == [
            "Found 1 direct competitors mentioned in user discussions",
            "2 specific user complaints about existing solutions documented",
            "Identified 2 clear market gaps from user feedback",
            "Main competitor weaknesses: pricing, reliability",
        ]

    def test_no_competitors(self):
        competition = build_competition_evidence(make_insight())
        assert competition.evidence_summary == [
            "Few or no direct competitors mentioned - potential market gap opportunity"
        ]


class TestEvidenceReport:
    """Tests for the assembled report."""

    def test_data_quality(self, insight):
        assert report_data_quality(insight) == 60
        assert report_data_quality(make_insight()) == 25

    def test_report(self, insight):
        score = calculate_validation_score(insight)
        report = build_evidence_report(insight, None, score)

        assert report.overall.data_quality == 60
        assert report.overall.confidence_level == ConfidenceLevel.MEDIUM
        assert report.overall.total_data_points == 3
        assert "1 users complained about existing solutions" in report.overall.key_findings
        assert "1 users actively looking for alternatives" in report.overall.key_findings

    def test_report_without_evidence(self):
        insight = make_insight()
        report = build_evidence_report(insight, None, calculate_validation_score(insight))

        assert report.overall.confidence_level == ConfidenceLevel.LOW
        assert report.overall.key_findings == [
            "Limited evidence found - further validation recommended before proceeding"
        ]

    def test_markdown(self, insight):
        report = build_evidence_report(insight, None, calculate_validation_score(insight))
        text = format_evidence_report(report, "Dog grooming app")

        assert text.startswith("# Validation Report: Evidence-Based Analysis")
        assert "**Idea**: Dog grooming app" in text
        assert "## 1. Social Intelligence" in text
        assert "### Top Quotes" in text
        assert "## 2. Competition Analysis" in text
        assert "### User Complaints" in text
        assert "✓ 1 users complained about existing solutions" in text
        assert "**Total Data Points Analyzed**: 3" in text
