"""Models for research step payloads."""

from pydantic import BaseModel, Field

from .enums import Recommendation, RiskLevel, RiskType


# =============================================================================
# Targeting and sentiment
# =============================================================================

class TargetCommunity(BaseModel):
    name: str
    reason: str = ""
    member_count: str = "unknown"
    activity_level: str = "unknown"


class KeywordPlan(BaseModel):
    """Communities and queries for the discussion search."""

    recommended_communities: list[TargetCommunity] = Field(..., min_length=1)
    search_keywords: list[str] = Field(..., min_length=1)
    focus_queries: list[str] = Field(..., min_length=1)
    pain_point_queries: list[str] = Field(default_factory=list)

    @property
    def community_names(self) -> list[str]:
        return [c.name.removeprefix("r/").strip() for c in self.recommended_communities]


class SentimentSummary(BaseModel):
    """Output of the sentiment step."""

    total_mentions: int = 0
    frustrated_users: int = 0
    frustration_percent: int = 0
    has_data: bool = False


# =============================================================================
# Competitors
# =============================================================================

class Competitor(BaseModel):
    name: str
    description: str = ""
    category: str = "direct"
    funding_status: str = "unknown"
    user_complaints: list[str] = Field(default_factory=list)
    strengths: list[str] = Field(default_factory=list)
    weaknesses: list[str] = Field(default_factory=list)
    pricing: str = "unknown"
    market_position: str = "unknown"


class CompetitorResearch(BaseModel):
    competitors: list[Competitor] = Field(default_factory=list)
    market_gaps: list[str] = Field(default_factory=list)
    opportunities: list[str] = Field(default_factory=list)
    competitive_landscape: str = ""
    total_competitors: int = 0

    @property
    def complaint_count(self) -> int:
        return sum(len(c.user_complaints) for c in self.competitors)


# =============================================================================
# Market size
# =============================================================================

class MarketEstimate(BaseModel):
    value: float = Field(0, ge=0)
    currency: str = "USD"
    timeframe: str = ""
    source: str = ""
    description: str = ""


class MarketGrowth(BaseModel):
    annual: float = 0
    trend: str = "stable"
    drivers: list[str] = Field(default_factory=list)


class MarketSegment(BaseModel):
    segment: str
    size: float = 0
    growth_potential: str = "medium"


class MarketSizeResearch(BaseModel):
    total_addressable_market: MarketEstimate
    serviceable_addressable_market: MarketEstimate
    serviceable_obtainable_market: MarketEstimate = Field(default_factory=MarketEstimate)
    market_growth_rate: MarketGrowth = Field(default_factory=MarketGrowth)
    market_segments: list[MarketSegment] = Field(default_factory=list)
    industry_trends: list[str] = Field(default_factory=list)
    market_maturity: str = "unknown"
    key_insights: list[str] = Field(default_factory=list)


# =============================================================================
# Scalability
# =============================================================================

class BusinessModel(BaseModel):
    type: str = "hybrid"
    scalability_rating: str = "medium"
    revenue_model: str = ""
    unit_economics: str = ""


class ScalingFactor(BaseModel):
    factor: str
    category: str = "operations"
    impact: str = "medium"
    scalability: str = "good"
    details: str = ""


class GrowthPotential(BaseModel):
    short_term: str = ""
    long_term: str = ""
    global_potential: bool = False
    market_expansion: list[str] = Field(default_factory=list)


class ScalingChallenge(BaseModel):
    challenge: str
    severity: str = "medium"
    solution: str = ""
    timeframe: str = ""


class RevenueStream(BaseModel):
    stream: str
    scalability: str = "medium"
    implementation: str = ""


class InfrastructureNeeds(BaseModel):
    technology: list[str] = Field(default_factory=list)
    operations: list[str] = Field(default_factory=list)
    team: list[str] = Field(default_factory=list)
    funding: str = ""


class BenchmarkComparison(BaseModel):
    company: str
    similarity: str = ""
    scaling_lessons: str = ""


class ScalabilityResearch(BaseModel):
    scalability_score: int = Field(0, ge=0, le=100)
    business_model: BusinessModel
    scaling_factors: list[ScalingFactor]
    growth_potential: GrowthPotential = Field(default_factory=GrowthPotential)
    scaling_challenges: list[ScalingChallenge] = Field(default_factory=list)
    revenue_streams: list[RevenueStream] = Field(default_factory=list)
    infrastructure_needs: InfrastructureNeeds = Field(default_factory=InfrastructureNeeds)
    benchmark_comparisons: list[BenchmarkComparison] = Field(default_factory=list)


# =============================================================================
# Moat
# =============================================================================

class DefensibilityFactor(BaseModel):
    factor: str
    category: str = "technology"
    strength: str = "medium"
    sustainability: str = "medium-term"
    details: str = ""
    build_time: str = ""


class CompetitiveThreat(BaseModel):
    threat: str
    likelihood: str = "medium"
    impact: str = "medium"
    timeframe: str = ""
    mitigation: str = ""


class BuildBarrier(BaseModel):
    barrier: str
    category: str = "time"
    difficulty: str = "medium"
    timeline: str = ""
    cost: str = ""


class MoatStrategy(BaseModel):
    primary_moat: str = ""
    secondary_moats: list[str] = Field(default_factory=list)
    building_sequence: list[str] = Field(default_factory=list)
    timeline: str = ""
    key_milestones: list[str] = Field(default_factory=list)


class FirstMoverAdvantage(BaseModel):
    advantage: str
    duration: str = "short-term"
    strength: str = ""


class NetworkEffects(BaseModel):
    potential: str = "none"
    type: str = ""
    scaling_factor: str = ""
    critical_mass: str = ""


class SwitchingCosts(BaseModel):
    data_lock: str = "low"
    learning_curve: str = "low"
    integration: str = "low"
    financial_cost: str = "low"


class MoatResearch(BaseModel):
    moat_score: int = Field(0, ge=0, le=100)
    defensibility_factors: list[DefensibilityFactor]
    competitive_threats: list[CompetitiveThreat] = Field(default_factory=list)
    barriers_to_build: list[BuildBarrier] = Field(default_factory=list)
    moat_strategy: MoatStrategy
    first_mover_advantages: list[FirstMoverAdvantage] = Field(default_factory=list)
    network_effects: NetworkEffects = Field(default_factory=NetworkEffects)
    switching_costs: SwitchingCosts = Field(default_factory=SwitchingCosts)


# =============================================================================
# Unique value zone
# =============================================================================

class ValueProposition(BaseModel):
    primary_value: str = ""
    secondary_values: list[str] = Field(default_factory=list)
    target_differentiator: str = ""


class CompetitiveAdvantage(BaseModel):
    advantage: str
    category: str = "user-experience"
    strength: str = "medium"
    evidence: str = ""
    defensibility: str = "medium"


class ValueGap(BaseModel):
    gap: str
    opportunity: str = ""
    market_size: str = "niche"
    timing_advantage: bool = False


class DifferentiationStrategy(BaseModel):
    primary_differentiator: str = ""
    supporting_differentiators: list[str] = Field(default_factory=list)
    positioning_statement: str = ""
    target_weakness: str = ""


class RiskFactor(BaseModel):
    risk: str
    impact: str = "medium"
    mitigation: str = ""


class UniquenessResearch(BaseModel):
    unique_value_proposition: ValueProposition
    competitive_advantages: list[CompetitiveAdvantage]
    market_gaps: list[ValueGap] = Field(default_factory=list)
    differentiation_strategy: DifferentiationStrategy = Field(default_factory=DifferentiationStrategy)
    uniqueness_score: int = Field(0, ge=0, le=100)
    risk_factors: list[RiskFactor] = Field(default_factory=list)


# =============================================================================
# Narrative synthesis
# =============================================================================

class Risk(BaseModel):
    type: RiskType = RiskType.MARKET
    level: RiskLevel = RiskLevel.MEDIUM
    description: str = ""
    mitigation: str = ""


class MarketSizeEstimate(BaseModel):
    tam: float = 0
    sam: float = 0
    som: float = 0


class StartupAnalysis(BaseModel):
    """Narrative synthesis over the collected evidence."""

    recommendation: Recommendation = Recommendation.PASS
    reasoning: str = ""
    next_steps: list[str] = Field(default_factory=list)
    risks: list[Risk] = Field(default_factory=list)
    opportunities: list[str] = Field(default_factory=list)
    market_size: MarketSizeEstimate = Field(default_factory=MarketSizeEstimate)
    confidence: int = Field(50, ge=0, le=100)
