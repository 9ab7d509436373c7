"""Evidence report: the quotes, counts and gaps behind a validation score."""

import re

import structlog

from ivalidate.models.enums import ConfidenceLevel, Sentiment
from ivalidate.models.evidence import DiscussionInsight, EvidenceQuote
from ivalidate.models.report import (
    CompetitionEvidence,
    EvidenceReport,
    OverallEvidence,
    ReportQuote,
    SentimentBreakdown,
    SocialEvidence,
    UserComplaint,
)
from ivalidate.models.research import StartupAnalysis
from ivalidate.models.scoring import ScoreResult
from ivalidate.scoring import format_score_insights, round_half_up

logger = structlog.get_logger(__name__)


# =============================================================================
# Phrase tables
# =============================================================================

SEEKING_PHRASES = ("looking for", "need something", "wish there was", "anyone know", "help me find")

COMPLAINT_KEYWORDS = (
    "disappointed with",
    "problems with",
    "issues with",
    "hate using",
    "terrible experience",
    "doesn't work",
    "unreliable",
    "broken",
    "frustrated with",
    "switch from",
    "alternative to",
)

COMPETITOR_PHRASES = (
    "use ",
    "using ",
    "tried ",
    "switch from",
    "compared to",
    "vs ",
    "better than",
    "alternative to",
    "instead of",
)

GAP_INDICATORS = (
    "wish there was",
    "need something that",
    "if only there was",
    "missing feature",
    "doesn't exist",
    "no good solution",
    "nobody does",
    "gap in the market",
)

COMPLAINT_THEMES = {
    "pricing": ("expensive", "cost", "price", "money"),
    "reliability": ("unreliable", "broken", "doesn't work", "crashes"),
    "complexity": ("complicated", "difficult", "hard to use", "confusing"),
    "features": ("missing", "lack", "doesn't have", "no feature"),
    "speed": ("slow", "takes forever", "long time", "wait"),
}

HIGH_UPVOTES = 10
MAX_REPORT_QUOTES = 3
MAX_COMPLAINTS = 5
MAX_GAPS = 5
MAX_THEMES = 3

_SENTENCE_END_RE = re.compile(r"[.!?\n]")


def _percent(part: int, whole: int) -> int:
    return round_half_up(part * 100 / whole) if whole > 0 else 0


# =============================================================================
# Social evidence
# =============================================================================

def _quote_url(quote: EvidenceQuote) -> str:
    if quote.url.startswith("http"):
        return quote.url
    return f"https://reddit.com/r/{quote.community}"


def build_social_evidence(insight: DiscussionInsight) -> SocialEvidence:
    metrics = insight.metrics
    quotes = metrics.top_quotes
    total = metrics.total_mentions

    seeking = sum(1 for q in quotes if any(p in q.text.lower() for p in SEEKING_PHRASES))
    breakdown = SentimentBreakdown(
        frustrated_percent=_percent(metrics.frustrated_users, total),
        neutral_percent=_percent(metrics.neutral_users, total),
        satisfied_percent=_percent(metrics.satisfied_users, total),
        seeking_solutions=seeking,
    )

    top = sorted(quotes, key=lambda q: q.upvotes, reverse=True)[:MAX_REPORT_QUOTES]
    top_quotes = [
        ReportQuote(
            text=q.text,
            author=q.author,
            community=q.community,
            upvotes=q.upvotes,
            url=_quote_url(q),
            sentiment=q.sentiment,
        )
        for q in top
    ]

    summary = []
    if total > 0:
        summary.append(f"Found {total} posts discussing this problem across multiple communities")
        if breakdown.frustrated_percent > 50:
            summary.append(
                f"{breakdown.frustrated_percent}% of users expressed frustration with current solutions"
            )
        if seeking > 0:
            summary.append(f"{seeking} users actively seeking better solutions")
        highly_upvoted = sum(1 for q in quotes if q.upvotes >= HIGH_UPVOTES)
        if highly_upvoted > 0:
            summary.append(
                f"{highly_upvoted} highly-upvoted posts ({HIGH_UPVOTES}+ upvotes) validate the problem"
            )
    else:
        summary.append("Limited discussion found - may indicate niche market or low awareness")

    return SocialEvidence(
        posts_found=total,
        top_quotes=top_quotes,
        sentiment_breakdown=breakdown,
        evidence_summary=summary,
    )


# =============================================================================
# Competition evidence
# =============================================================================

def extract_complaints(quotes: list[EvidenceQuote]) -> list[UserComplaint]:
    """One complaint per (quote, complaint keyword) hit, first MAX_COMPLAINTS kept."""
    complaints = []
    for quote in quotes:
        lowered = quote.text.lower()
        for keyword in COMPLAINT_KEYWORDS:
            index = lowered.find(keyword)
            if index == -1:
                continue
            following = quote.text[index + len(keyword):].split()[:3]
            complaints.append(UserComplaint(
                complaint=quote.text,
                about=" ".join(following) if following else "existing solution",
                author=quote.author,
                community=quote.community,
            ))
    return complaints[:MAX_COMPLAINTS]


def extract_gaps(quotes: list[EvidenceQuote], opportunities: list[str]) -> list[str]:
    """Gap sentences from quotes plus the top analysis opportunities, deduplicated."""
    gaps = []
    for quote in quotes:
        lowered = quote.text.lower()
        for indicator in GAP_INDICATORS:
            index = lowered.find(indicator)
            if index == -1:
                continue
            sentence = _SENTENCE_END_RE.split(quote.text[index + len(indicator):], maxsplit=1)[0].strip()
            if 10 < len(sentence) < 100:
                gaps.append(sentence)

    gaps.extend(opportunities[:2])
    return list(dict.fromkeys(gaps))[:MAX_GAPS]


def complaint_themes(quotes: list[EvidenceQuote]) -> list[str]:
    """Most common complaint themes, by number of quotes mentioning them."""
    counts = {}
    for theme, keywords in COMPLAINT_THEMES.items():
        count = sum(1 for q in quotes if any(k in q.text.lower() for k in keywords))
        if count > 0:
            counts[theme] = count
    return sorted(counts, key=lambda theme: counts[theme], reverse=True)[:MAX_THEMES]


def build_competition_evidence(
    insight: DiscussionInsight,
    analysis: StartupAnalysis | None = None,
) -> CompetitionEvidence:
    quotes = insight.metrics.top_quotes
    opportunities = analysis.opportunities if analysis else []

    direct = sum(1 for q in quotes if any(p in q.text.lower() for p in COMPETITOR_PHRASES))
    complaints = extract_complaints(quotes)
    gaps = extract_gaps(quotes, opportunities)
    themes = complaint_themes(quotes)

    summary = []
    if direct > 0:
        summary.append(f"Found {direct} direct competitors mentioned in user discussions")
    else:
        summary.append("Few or no direct competitors mentioned - potential market gap opportunity")
    if complaints:
        summary.append(f"{len(complaints)} specific user complaints about existing solutions documented")
    if gaps:
        summary.append(f"Identified {len(gaps)} clear market gaps from user feedback")
    if themes:
        summary.append(f"Main competitor weaknesses: {', '.join(themes[:2])}")

    return CompetitionEvidence(
        direct_competitors=direct,
        user_complaints=complaints,
        identified_gaps=gaps,
        complaint_themes=themes,
        evidence_summary=summary,
    )


# =============================================================================
# Overall
# =============================================================================

def report_data_quality(insight: DiscussionInsight) -> int:
    """Report-level data quality, distinct from the score's confidence."""
    metrics = insight.metrics
    quality = 0
    if metrics.total_mentions > 0:
        quality += 30
    if metrics.total_mentions >= 20:
        quality += 10
    if len(metrics.top_quotes) >= 5:
        quality += 10
    # Market signal is always derived from the discussions themselves
    quality += 25
    if metrics.total_mentions > 50:
        quality += 5
    if insight.engagement_level > 5:
        quality += 5
    return min(quality, 100)


def confidence_level(data_quality: int) -> ConfidenceLevel:
    if data_quality >= 80:
        return ConfidenceLevel.HIGH
    if data_quality >= 60:
        return ConfidenceLevel.MEDIUM
    return ConfidenceLevel.LOW


def build_evidence_report(
    insight: DiscussionInsight,
    analysis: StartupAnalysis | None,
    score: ScoreResult,
) -> EvidenceReport:
    """Assemble the evidence report for a scored run."""
    social = build_social_evidence(insight)
    competition = build_competition_evidence(insight, analysis)
    quality = report_data_quality(insight)

    findings = []
    if insight.metrics.total_mentions > 20:
        findings.append("Strong social proof: 20+ user discussions validate the problem exists")
    frustrated = social.sentiment_breakdown.frustrated_percent
    if frustrated > 60:
        findings.append(f"High frustration level: {frustrated}% of users unsatisfied with current solutions")
    findings.extend(format_score_insights(score))
    if not findings:
        findings.append("Limited evidence found - further validation recommended before proceeding")

    report = EvidenceReport(
        social=social,
        competition=competition,
        overall=OverallEvidence(
            data_quality=quality,
            total_data_points=insight.metrics.total_mentions,
            confidence_level=confidence_level(quality),
            key_findings=findings,
        ),
    )
    logger.info(
        "evidence_report_built",
        data_quality=quality,
        confidence=report.overall.confidence_level.value,
        complaints=len(competition.user_complaints),
        gaps=len(competition.identified_gaps),
    )
    return report


# =============================================================================
# Markdown
# =============================================================================

def format_evidence_report(report: EvidenceReport, idea: str) -> str:
    """Render the report as Markdown."""
    social = report.social
    competition = report.competition
    overall = report.overall
    breakdown = social.sentiment_breakdown

    lines = [
        "# Validation Report: Evidence-Based Analysis",
        "",
        f"**Idea**: {idea}",
        f"**Data Quality**: {overall.data_quality}% ({overall.confidence_level.value} confidence)",
        "",
        "## 1. Social Intelligence",
        "",
        f"**Posts Found**: {social.posts_found}",
        (
            f"**Sentiment**: {breakdown.frustrated_percent}% frustrated, "
            f"{breakdown.neutral_percent}% neutral, {breakdown.satisfied_percent}% satisfied"
        ),
        f"**Seeking Solutions**: {breakdown.seeking_solutions} users",
        "",
    ]
    lines.extend(f"- {item}" for item in social.evidence_summary)

    if social.top_quotes:
        lines.extend(["", "### Top Quotes", ""])
        for quote in social.top_quotes:
            lines.append(f'> "{quote.text}"')
            lines.append(f"> - u/{quote.author} in r/{quote.community} ({quote.upvotes} upvotes)")
            lines.append("")

    lines.extend([
        "",
        "## 2. Competition Analysis",
        "",
        f"**Direct Competitors Mentioned**: {competition.direct_competitors}",
        "",
    ])
    lines.extend(f"- {item}" for item in competition.evidence_summary)

    if competition.user_complaints:
        lines.extend(["", "### User Complaints", ""])
        lines.extend(f'- "{c.complaint}" (about: {c.about})' for c in competition.user_complaints)

    if competition.identified_gaps:
        lines.extend(["", "### Identified Gaps", ""])
        lines.extend(f"- {gap}" for gap in competition.identified_gaps)

    lines.extend(["", "## Key Evidence-Based Findings", ""])
    lines.extend(f"✓ {finding}" for finding in overall.key_findings)
    lines.extend(["", "---", f"**Total Data Points Analyzed**: {overall.total_data_points}", ""])

    return "\n".join(lines)
